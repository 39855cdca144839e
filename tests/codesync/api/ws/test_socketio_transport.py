import asyncio
from unittest.mock import AsyncMock, MagicMock

from codesync.api.ws.connection.connection_manager import SocketIOTransport


def _sio():
    sio = MagicMock()
    sio.emit = AsyncMock()
    sio.enter_room = AsyncMock()
    sio.leave_room = AsyncMock()
    return sio


def test_send_targets_single_sid():
    sio = _sio()
    transport = SocketIOTransport(sio)
    asyncio.run(transport.send("sid-1", "code-sync", {"code": "x"}))
    sio.emit.assert_awaited_once_with("code-sync", {"code": "x"}, to="sid-1", namespace="/")


def test_broadcast_skips_excluded_sid():
    sio = _sio()
    transport = SocketIOTransport(sio, namespace="/rooms")
    asyncio.run(transport.broadcast("r1", "member-left", {"username": "a"}, exclude="sid-1"))
    sio.emit.assert_awaited_once_with(
        "member-left", {"username": "a"}, room="r1", skip_sid="sid-1", namespace="/rooms"
    )


def test_group_enter_and_leave():
    sio = _sio()
    transport = SocketIOTransport(sio)

    async def scenario():
        await transport.enter_group("sid-1", "r1")
        await transport.leave_group("sid-1", "r1")

    asyncio.run(scenario())
    sio.enter_room.assert_awaited_once_with("sid-1", "r1", namespace="/")
    sio.leave_room.assert_awaited_once_with("sid-1", "r1", namespace="/")


def test_group_members_keeps_manager_order():
    sio = _sio()
    sio.manager.get_participants.return_value = iter([("s2", "e2"), ("s1", "e1")])
    transport = SocketIOTransport(sio)

    assert asyncio.run(transport.group_members("r1")) == ["s2", "s1"]
    sio.manager.get_participants.assert_called_once_with("/", "r1")


def test_groups_of_excludes_private_room():
    sio = _sio()
    sio.rooms.return_value = ["sid-1", "r1", "r2"]
    transport = SocketIOTransport(sio)

    assert transport.groups_of("sid-1") == ["r1", "r2"]
