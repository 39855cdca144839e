import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional, Set

from codesync.core.exceptions import DuplicateUsernameError, JoinFailedError, SessionError

from .connection.connection_manager import Transport
from .connection.connection_registry import Connection, ConnectionRegistry
from .connection.membership import MembershipResolver
from .connection.room_directory import RoomDirectory
from .events import (
    STANDARD_EVENTS,
    CodeUpdateEvent,
    DisconnectEvent,
    InboundEvent,
    JoinEvent,
    LanguageUpdateEvent,
    LeaveEvent,
    OutboundEvents,
    TypingStartEvent,
    TypingStopEvent,
)

logger = logging.getLogger(__name__)


class RoomLocks:
    """
    One asyncio.Lock per room, created on first use and dropped once no handler
    holds or waits for it.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}
        self._holders: Dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, room_id: str) -> AsyncIterator[None]:
        lock = self._locks.get(room_id)
        if lock is None:
            lock = self._locks[room_id] = asyncio.Lock()
        self._holders[room_id] = self._holders.get(room_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[room_id] -= 1
            if not self._holders[room_id]:
                del self._holders[room_id]
                del self._locks[room_id]

    def __len__(self) -> int:
        return len(self._locks)


class SessionCoordinator:
    """
    Runs the room session protocol: join/leave lifecycle, document updates,
    presence and typing relays.

    Membership is never cached here. It is recomputed from the transport's group
    membership through the MembershipResolver every time it is needed. Every
    handler that touches a room holds that room's lock for its whole run, so
    broadcasts for one room are observed in the order events were accepted.
    """

    def __init__(
        self,
        transport: Transport,
        registry: Optional[ConnectionRegistry] = None,
        directory: Optional[RoomDirectory] = None,
        events: OutboundEvents = STANDARD_EVENTS,
    ):
        self.transport = transport
        self.registry = registry if registry is not None else ConnectionRegistry()
        self.directory = directory if directory is not None else RoomDirectory()
        self.membership = MembershipResolver(transport, self.registry)
        self.events = events
        self.locks = RoomLocks()
        # joins in flight per connection, and connections that disconnected meanwhile
        self._pending_joins: Dict[str, int] = {}
        self._disconnected: Set[str] = set()

    async def dispatch(self, event: InboundEvent) -> None:
        match event:
            case JoinEvent():
                await self._handle_join(event)
            case CodeUpdateEvent():
                await self._handle_code_update(event)
            case LanguageUpdateEvent():
                await self._handle_language_update(event)
            case TypingStartEvent():
                await self._relay_typing(event, self.events.user_typing_start)
            case TypingStopEvent():
                await self._relay_typing(event, self.events.user_typing_stop)
            case LeaveEvent():
                await self._handle_leave(event)
            case DisconnectEvent():
                await self._handle_disconnect(event)
            case _:
                raise TypeError(f"Unsupported event type: {type(event).__name__}")

    # -- join ---------------------------------------------------------------

    async def _handle_join(self, event: JoinEvent) -> None:
        connection_id = event.connection_id
        self._pending_joins[connection_id] = self._pending_joins.get(connection_id, 0) + 1
        try:
            async with self.locks.hold(event.room_id):
                try:
                    await self._attempt_join(event)
                except SessionError as exc:
                    await self.transport.send(
                        connection_id, self.events.join_error, {"message": exc.message}
                    )
        finally:
            self._pending_joins[connection_id] -= 1
            if not self._pending_joins[connection_id]:
                del self._pending_joins[connection_id]
                self._disconnected.discard(connection_id)

    async def _attempt_join(self, event: JoinEvent) -> None:
        """
        Run the join sequence, undoing only what this attempt changed if it fails.

        Raises:
            DuplicateUsernameError: the username is already in the room
            JoinFailedError: any other failure during the sequence
        """
        previous = self.registry.lookup(event.connection_id)
        was_member = event.room_id in self.transport.groups_of(event.connection_id)
        try:
            await self._join(event)
        except DuplicateUsernameError:
            logger.info(
                f"Rejected join of {event.username!r} to room {event.room_id}: name taken"
            )
            raise
        except Exception as exc:
            logger.exception(f"Join of {event.connection_id} to room {event.room_id} failed")
            await self._rollback_join(event, previous, was_member)
            raise JoinFailedError() from exc

    async def _join(self, event: JoinEvent) -> None:
        connection_id, room_id, username = event.connection_id, event.room_id, event.username

        if username in await self.membership.list_users(room_id):
            raise DuplicateUsernameError()

        self.registry.register(connection_id, username, room_id)
        await self.transport.enter_group(connection_id, room_id)

        if connection_id in self._disconnected:
            # the connection went away while this join was waiting
            self.registry.unregister(connection_id)
            await self.transport.leave_group(connection_id, room_id)
            logger.info(f"Dropped join of {username!r} ({connection_id}): already disconnected")
            return

        document = self.directory.get_document(room_id)
        if document is not None:
            if document.has_language():
                await self.transport.send(
                    connection_id, self.events.language_sync, {"languageUsed": document.language}
                )
            if document.has_code():
                await self.transport.send(
                    connection_id, self.events.code_sync, {"code": document.code}
                )

        users = await self.membership.list_users(room_id)
        await self.transport.broadcast(
            room_id, self.events.client_list_update, {"userslist": users}
        )
        await self.transport.broadcast(
            room_id, self.events.member_joined, {"username": username}, exclude=connection_id
        )
        logger.info(f"{username!r} ({connection_id}) joined room {room_id}; members: {len(users)}")

    async def _rollback_join(
        self,
        event: JoinEvent,
        previous: Optional[Connection],
        was_member: bool,
    ) -> None:
        if previous is not None:
            self.registry.register(previous.connection_id, previous.username, previous.room_id)
        else:
            self.registry.unregister(event.connection_id)
        if was_member:
            return
        try:
            await self.transport.leave_group(event.connection_id, event.room_id)
        except Exception as exc:
            logger.warning(f"Could not remove {event.connection_id} from room {event.room_id}: {exc}")

    # -- document updates ---------------------------------------------------

    async def _handle_code_update(self, event: CodeUpdateEvent) -> None:
        async with self.locks.hold(event.room_id):
            self.directory.set_code(event.room_id, event.code)
            await self.transport.broadcast(
                event.room_id,
                self.events.code_sync,
                {"code": event.code},
                exclude=event.connection_id,
            )

    async def _handle_language_update(self, event: LanguageUpdateEvent) -> None:
        async with self.locks.hold(event.room_id):
            self.directory.set_language(event.room_id, event.language)
            await self.transport.broadcast(
                event.room_id,
                self.events.language_sync,
                {"languageUsed": event.language},
                exclude=event.connection_id,
            )

    async def _relay_typing(self, event, outbound: str) -> None:
        async with self.locks.hold(event.room_id):
            await self.transport.broadcast(
                event.room_id, outbound, {"username": event.username}, exclude=event.connection_id
            )

    # -- leave / disconnect -------------------------------------------------

    async def _handle_leave(self, event: LeaveEvent) -> None:
        async with self.locks.hold(event.room_id):
            await self.transport.leave_group(event.connection_id, event.room_id)
            connection = self.registry.unregister(event.connection_id)
            if connection is None:
                return
            await self._announce_departure(event.room_id, connection.username, event.connection_id)

    async def _handle_disconnect(self, event: DisconnectEvent) -> None:
        connection_id = event.connection_id
        if connection_id in self._pending_joins:
            self._disconnected.add(connection_id)
        connection = self.registry.lookup(connection_id)
        if connection is None:
            return

        # the transport still lists the connection in its groups at this point
        for room_id in self.transport.groups_of(connection_id):
            async with self.locks.hold(room_id):
                self.registry.unregister(connection_id)
                await self._announce_departure(room_id, connection.username, connection_id)
        self.registry.unregister(connection_id)

    async def _announce_departure(self, room_id: str, username: str, connection_id: str) -> None:
        await self.transport.broadcast(
            room_id, self.events.member_left, {"username": username}, exclude=connection_id
        )
        users = await self.membership.list_users(room_id)
        await self.transport.broadcast(
            room_id, self.events.client_list_update, {"userslist": users}, exclude=connection_id
        )
        logger.info(f"{username!r} ({connection_id}) left room {room_id}; members: {len(users)}")

        if not users and self.directory.delete_room(room_id):
            logger.info(f"Room {room_id} deleted as it is now empty.")

    # -- introspection ------------------------------------------------------

    async def room_info(self, room_id: str) -> Dict:
        """
        Get information about a room: its members and stored document fields.
        """
        users: List[str] = await self.membership.list_users(room_id)
        document = self.directory.get_document(room_id)
        return {
            "room_id": room_id,
            "users": users,
            "user_count": len(users),
            "language": document.language if document is not None else None,
            "has_code": document.has_code() if document is not None else False,
        }
