#!/usr/bin/env python3
"""
Example client for the CodeSync session hub.

This example shows how to:
1. Join two users to the same room over Socket.IO
2. Push a code and a language update and watch the other member receive them
3. Run the shared code through the /execute endpoint
"""

import asyncio
import json
import logging
import uuid
from typing import Optional

import requests
import socketio

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class RoomClient:
    def __init__(self, username: str, base_url: str = "http://localhost:5000"):
        self.username = username
        self.base_url = base_url
        self.sio = socketio.AsyncClient()
        self.users = []
        self.code: Optional[str] = None
        self.language: Optional[str] = None
        self._register_handlers()

    def _register_handlers(self):
        @self.sio.on("client-list-update")
        async def on_client_list(data):
            self.users = data["userslist"]
            logger.info(f"[{self.username}] members: {self.users}")

        @self.sio.on("code-sync")
        async def on_code(data):
            self.code = data["code"]
            logger.info(f"[{self.username}] code: {self.code!r}")

        @self.sio.on("language-sync")
        async def on_language(data):
            self.language = data["languageUsed"]
            logger.info(f"[{self.username}] language: {self.language}")

        @self.sio.on("member-joined")
        async def on_joined(data):
            logger.info(f"[{self.username}] {data['username']} joined the room")

        @self.sio.on("member-left")
        async def on_left(data):
            logger.info(f"[{self.username}] {data['username']} left the room")

        @self.sio.on("join-error")
        async def on_join_error(data):
            logger.error(f"[{self.username}] join rejected: {data['message']}")

    async def join(self, room_id: str):
        await self.sio.connect(self.base_url)
        await self.sio.emit("join", {"roomId": room_id, "username": self.username})

    async def update_code(self, room_id: str, code: str):
        self.code = code
        await self.sio.emit("code-update", {"roomId": room_id, "code": code})

    async def update_language(self, room_id: str, language: str):
        self.language = language
        await self.sio.emit("language-update", {"roomId": room_id, "languageUsed": language})

    async def leave(self, room_id: str):
        await self.sio.emit("leave", {"roomId": room_id})
        await self.sio.disconnect()

    def execute(self, language: str, code: str) -> dict:
        """Run code through the server's execution proxy."""
        try:
            response = requests.post(
                f"{self.base_url}/execute",
                json={"language": language, "code": code},
                timeout=30,
            )
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Failed to execute code: {e}")
            return {}


async def main():
    room_id = str(uuid.uuid4())
    alice = RoomClient("alice")
    bob = RoomClient("bob")

    print(f"=== Room {room_id} ===\n")

    print("1. alice and bob join...")
    await alice.join(room_id)
    await asyncio.sleep(0.5)
    await bob.join(room_id)
    await asyncio.sleep(0.5)

    print("2. alice switches to python and writes code...")
    await alice.update_language(room_id, "python")
    await alice.update_code(room_id, "print('hello from alice')")
    await asyncio.sleep(0.5)
    print(f"   bob sees language={bob.language!r} code={bob.code!r}\n")

    print("3. bob runs the shared code...")
    result = bob.execute(bob.language or "python", bob.code or "")
    print(f"   result: {json.dumps(result, indent=2)}\n")

    print("4. both leave...")
    await bob.leave(room_id)
    await asyncio.sleep(0.5)
    await alice.leave(room_id)

    print("=== Example Complete ===")


if __name__ == "__main__":
    asyncio.run(main())
