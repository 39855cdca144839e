import logging
from typing import Any, Dict, List, Optional, Protocol

import socketio

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """
    The operations the session coordinator needs from the realtime transport.
    Group membership lives in the transport and is the source of truth for who is
    in a room.
    """

    async def send(self, connection_id: str, event: str, payload: Dict[str, Any]) -> None: ...

    async def broadcast(
        self,
        room_id: str,
        event: str,
        payload: Dict[str, Any],
        exclude: Optional[str] = None,
    ) -> None: ...

    async def enter_group(self, connection_id: str, room_id: str) -> None: ...

    async def leave_group(self, connection_id: str, room_id: str) -> None: ...

    async def group_members(self, room_id: str) -> List[str]: ...

    def groups_of(self, connection_id: str) -> List[str]: ...


class SocketIOTransport:
    """
    Transport backed by a python-socketio AsyncServer.
    Socket.IO rooms are the broadcast groups; every connection is also placed in a
    private room named after its own sid, which is never reported as a group.
    """

    def __init__(self, sio: socketio.AsyncServer, namespace: str = "/"):
        self.sio = sio
        self.namespace = namespace

    async def send(self, connection_id: str, event: str, payload: Dict[str, Any]) -> None:
        """
        Send an event to a single connection.

        Args:
            connection_id: The sid to send to
            event: Outbound event name
            payload: JSON-serializable mapping
        """
        await self.sio.emit(event, payload, to=connection_id, namespace=self.namespace)

    async def broadcast(
        self,
        room_id: str,
        event: str,
        payload: Dict[str, Any],
        exclude: Optional[str] = None,
    ) -> None:
        """
        Broadcast an event to every connection in a room.

        Args:
            room_id: The room (broadcast group) to send to
            event: Outbound event name
            payload: JSON-serializable mapping
            exclude: Optional sid to skip
        """
        await self.sio.emit(
            event,
            payload,
            room=room_id,
            skip_sid=exclude,
            namespace=self.namespace,
        )

    async def enter_group(self, connection_id: str, room_id: str) -> None:
        await self.sio.enter_room(connection_id, room_id, namespace=self.namespace)
        logger.debug(f"Connection {connection_id} entered group {room_id}")

    async def leave_group(self, connection_id: str, room_id: str) -> None:
        await self.sio.leave_room(connection_id, room_id, namespace=self.namespace)
        logger.debug(f"Connection {connection_id} left group {room_id}")

    async def group_members(self, room_id: str) -> List[str]:
        """
        Get all sids currently subscribed to a room, in the order they entered it.
        """
        return [
            sid
            for sid, _eio_sid in self.sio.manager.get_participants(self.namespace, room_id)
        ]

    def groups_of(self, connection_id: str) -> List[str]:
        """
        Get the rooms a connection belongs to, without its private sid room.
        """
        rooms = self.sio.rooms(connection_id, namespace=self.namespace) or []
        return [room for room in rooms if room != connection_id]
