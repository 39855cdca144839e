from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class Connection:
    connection_id: str
    username: str
    room_id: str


class ConnectionRegistry:
    """
    Maps a live transport connection to the (username, room) pair it joined as.
    All operations are total: looking up or removing an unknown id is not an error.
    """

    def __init__(self):
        self._connections: Dict[str, Connection] = {}

    def register(self, connection_id: str, username: str, room_id: str) -> Connection:
        connection = Connection(connection_id=connection_id, username=username, room_id=room_id)
        self._connections[connection_id] = connection
        return connection

    def lookup(self, connection_id: str) -> Optional[Connection]:
        return self._connections.get(connection_id)

    def unregister(self, connection_id: str) -> Optional[Connection]:
        return self._connections.pop(connection_id, None)

    def __contains__(self, connection_id: str) -> bool:
        return connection_id in self._connections

    def __len__(self) -> int:
        return len(self._connections)
