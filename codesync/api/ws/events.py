"""Inbound event variants and wire names for the room protocol.

Every inbound Socket.IO event is parsed into one of the models in
``InboundEvent`` before it reaches the coordinator. Outbound names come from an
``OutboundEvents`` profile so the same coordinator can speak to the current
client (``standard``) and the first-generation React client (``legacy``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from codesync.core.exceptions import InvalidEventError


class _Inbound(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    connection_id: str


class JoinEvent(_Inbound):
    room_id: str = Field(alias="roomId", min_length=1)
    username: str = Field(min_length=1)


class CodeUpdateEvent(_Inbound):
    room_id: str = Field(alias="roomId", min_length=1)
    code: str


class LanguageUpdateEvent(_Inbound):
    room_id: str = Field(alias="roomId", min_length=1)
    language: str = Field(alias="languageUsed")


class TypingStartEvent(_Inbound):
    room_id: str = Field(alias="roomId", min_length=1)
    username: str


class TypingStopEvent(_Inbound):
    room_id: str = Field(alias="roomId", min_length=1)
    username: str


class LeaveEvent(_Inbound):
    room_id: str = Field(alias="roomId", min_length=1)


class DisconnectEvent(_Inbound):
    """Raised by the transport, never sent by a client."""


InboundEvent = Union[
    JoinEvent,
    CodeUpdateEvent,
    LanguageUpdateEvent,
    TypingStartEvent,
    TypingStopEvent,
    LeaveEvent,
    DisconnectEvent,
]


INBOUND_EVENTS: Dict[str, type] = {
    "join": JoinEvent,
    "code-update": CodeUpdateEvent,
    "language-update": LanguageUpdateEvent,
    "typing-start": TypingStartEvent,
    "typing-stop": TypingStopEvent,
    "leave": LeaveEvent,
    # names used by the first-generation React client
    "when a user joins": JoinEvent,
    "update code": CodeUpdateEvent,
    "update language": LanguageUpdateEvent,
    "leave room": LeaveEvent,
}


def parse_event(name: str, connection_id: str, payload: Any) -> InboundEvent:
    """
    Build the inbound event model for a wire event.

    Args:
        name: The Socket.IO event name
        connection_id: The sid that sent it
        payload: The event payload, expected to be a mapping

    Raises:
        InvalidEventError: unknown event name or malformed payload
    """
    model = INBOUND_EVENTS.get(name)
    if model is None:
        raise InvalidEventError(f"Unknown event: {name!r}")
    if not isinstance(payload, dict):
        raise InvalidEventError(f"Payload of {name!r} must be an object")
    try:
        return model.model_validate({**payload, "connection_id": connection_id})
    except ValidationError as exc:
        raise InvalidEventError(f"Malformed {name!r} payload: {exc.errors()}") from exc


@dataclass(frozen=True)
class OutboundEvents:
    join_error: str
    code_sync: str
    language_sync: str
    client_list_update: str
    member_joined: str
    member_left: str
    user_typing_start: str
    user_typing_stop: str


STANDARD_EVENTS = OutboundEvents(
    join_error="join-error",
    code_sync="code-sync",
    language_sync="language-sync",
    client_list_update="client-list-update",
    member_joined="member-joined",
    member_left="member-left",
    user_typing_start="user-typing-start",
    user_typing_stop="user-typing-stop",
)

LEGACY_EVENTS = OutboundEvents(
    join_error="join error",
    code_sync="on code change",
    language_sync="on language change",
    client_list_update="updating client list",
    member_joined="new member joined",
    member_left="member left",
    user_typing_start="user-typing-start",
    user_typing_stop="user-typing-stop",
)

EVENT_PROFILES: Dict[str, OutboundEvents] = {
    "standard": STANDARD_EVENTS,
    "legacy": LEGACY_EVENTS,
}


def get_outbound_events(profile: str) -> OutboundEvents:
    try:
        return EVENT_PROFILES[profile.lower()]
    except KeyError:
        raise ValueError(f"Unknown event profile: {profile!r}") from None
