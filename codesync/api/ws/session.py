"""Socket.IO server for collaborative rooms.

Clients connect with `socket.io-client` and drive the room protocol with the
events listed in ``codesync.api.ws.events.INBOUND_EVENTS``. Every inbound event
is parsed into a typed event and handed to ``SessionCoordinator.dispatch``.

The server is mounted next to the FastAPI app in ``codesync.main``.
"""

from __future__ import annotations

import logging
from typing import Any

import socketio

from codesync.api.ws.connection.connection_manager import SocketIOTransport
from codesync.api.ws.coordinator import SessionCoordinator
from codesync.api.ws.events import (
    INBOUND_EVENTS,
    DisconnectEvent,
    get_outbound_events,
    parse_event,
)
from codesync.core.exceptions import InvalidEventError
from codesync.core.settings import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


def create_server() -> socketio.AsyncServer:
    return socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins="*" if "*" in settings.cors_origins else settings.cors_origins,
        ping_interval=settings.ping_interval,
        ping_timeout=settings.ping_timeout,
        logger=False,
        engineio_logger=False,
    )


def _make_handler(coordinator: SessionCoordinator, name: str):
    async def handler(sid: str, data: Any = None):
        try:
            event = parse_event(name, sid, data)
        except InvalidEventError as exc:
            logger.warning(f"Dropped event from {sid}: {exc.message}")
            return
        await coordinator.dispatch(event)

    handler.__name__ = f"on_{name.replace(' ', '_').replace('-', '_')}"
    return handler


def register_handlers(
    sio: socketio.AsyncServer,
    coordinator: SessionCoordinator,
    namespace: str = "/",
) -> None:
    """Bind connect/disconnect and every inbound room event to the coordinator."""

    async def connect(sid: str, environ: dict[str, Any], auth: Any | None = None):
        logger.info(f"A user connected: {sid}")

    async def disconnect(sid: str, reason: Any = None):
        await coordinator.dispatch(DisconnectEvent(connection_id=sid))
        logger.info(f"User disconnected: {sid}")

    sio.on("connect", handler=connect, namespace=namespace)
    sio.on("disconnect", handler=disconnect, namespace=namespace)
    for name in INBOUND_EVENTS:
        sio.on(name, handler=_make_handler(coordinator, name), namespace=namespace)


sio = create_server()

coordinator = SessionCoordinator(
    transport=SocketIOTransport(sio, namespace=settings.socketio_namespace),
    events=get_outbound_events(settings.event_profile),
)

register_handlers(sio, coordinator, namespace=settings.socketio_namespace)
