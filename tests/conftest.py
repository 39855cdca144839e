from __future__ import annotations

import asyncio
import os
from typing import Any

import pytest

os.environ.setdefault("ENVIRONMENT", "test")

from codesync.api.ws.coordinator import SessionCoordinator  # noqa: E402


class FakeTransport:
    """In-memory stand-in for the Socket.IO server.

    Groups keep insertion order. Every delivered message is recorded per
    recipient as ``(connection_id, event, payload)``.
    """

    def __init__(self) -> None:
        self.groups: dict[str, dict[str, None]] = {}
        self.sent: list[tuple[str, str, dict[str, Any]]] = []
        self.member_queries = 0
        self.fail_member_query_at: int | None = None

    async def send(self, connection_id: str, event: str, payload: dict[str, Any]) -> None:
        self.sent.append((connection_id, event, payload))

    async def broadcast(
        self,
        room_id: str,
        event: str,
        payload: dict[str, Any],
        exclude: str | None = None,
    ) -> None:
        for connection_id in list(self.groups.get(room_id, {})):
            if connection_id != exclude:
                self.sent.append((connection_id, event, payload))

    async def enter_group(self, connection_id: str, room_id: str) -> None:
        self.groups.setdefault(room_id, {})[connection_id] = None

    async def leave_group(self, connection_id: str, room_id: str) -> None:
        members = self.groups.get(room_id)
        if members is None:
            return
        members.pop(connection_id, None)
        if not members:
            del self.groups[room_id]

    async def group_members(self, room_id: str) -> list[str]:
        self.member_queries += 1
        if self.fail_member_query_at == self.member_queries:
            raise RuntimeError("group lookup failed")
        # give other handlers a chance to interleave
        await asyncio.sleep(0)
        return list(self.groups.get(room_id, {}))

    def groups_of(self, connection_id: str) -> list[str]:
        return [room_id for room_id, members in self.groups.items() if connection_id in members]

    def drop(self, connection_id: str) -> None:
        """Detach a connection from every group, as the transport does after disconnect."""
        for room_id in self.groups_of(connection_id):
            self.groups[room_id].pop(connection_id, None)
            if not self.groups[room_id]:
                del self.groups[room_id]

    def received(self, connection_id: str, event: str | None = None) -> list[dict[str, Any]]:
        return [
            payload
            for recipient, name, payload in self.sent
            if recipient == connection_id and (event is None or name == event)
        ]

    def events_for(self, connection_id: str) -> list[str]:
        return [name for recipient, name, _ in self.sent if recipient == connection_id]

    def clear(self) -> None:
        self.sent.clear()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def coordinator(transport: FakeTransport) -> SessionCoordinator:
    return SessionCoordinator(transport=transport)
