from typing import List

from .connection_manager import Transport
from .connection_registry import ConnectionRegistry


class MembershipResolver:
    """
    Derives the usernames in a room from the transport's group membership.
    Nothing is cached: every call asks the transport again.
    """

    def __init__(self, transport: Transport, registry: ConnectionRegistry):
        self.transport = transport
        self.registry = registry

    async def list_users(self, room_id: str) -> List[str]:
        """
        Get the usernames of every registered connection subscribed to a room.

        Connections without a registry entry (mid-teardown, or never joined) are
        skipped. Order follows the group's insertion order.
        """
        users = []
        for connection_id in await self.transport.group_members(room_id):
            connection = self.registry.lookup(connection_id)
            if connection is not None:
                users.append(connection.username)
        return users
