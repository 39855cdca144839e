import pytest

from codesync.api.ws.events import (
    LEGACY_EVENTS,
    STANDARD_EVENTS,
    CodeUpdateEvent,
    JoinEvent,
    LanguageUpdateEvent,
    LeaveEvent,
    TypingStartEvent,
    get_outbound_events,
    parse_event,
)
from codesync.core.exceptions import InvalidEventError


def test_parse_join_uses_wire_keys():
    event = parse_event("join", "sid-1", {"roomId": "r1", "username": "alice"})
    assert event == JoinEvent(connection_id="sid-1", room_id="r1", username="alice")


def test_parse_language_update_reads_language_used():
    event = parse_event("language-update", "sid-1", {"roomId": "r1", "languageUsed": "python"})
    assert isinstance(event, LanguageUpdateEvent)
    assert event.language == "python"


def test_legacy_names_are_aliases():
    assert isinstance(parse_event("when a user joins", "s", {"roomId": "r", "username": "u"}), JoinEvent)
    assert isinstance(parse_event("update code", "s", {"roomId": "r", "code": ""}), CodeUpdateEvent)
    assert isinstance(parse_event("leave room", "s", {"roomId": "r"}), LeaveEvent)


def test_unknown_payload_keys_are_ignored():
    event = parse_event("typing-start", "s", {"roomId": "r", "username": "u", "extra": 1})
    assert event == TypingStartEvent(connection_id="s", room_id="r", username="u")


@pytest.mark.parametrize(
    ("name", "payload"),
    [
        ("join", {"roomId": "r"}),
        ("join", {"roomId": "r", "username": ""}),
        ("code-update", {"code": "x"}),
        ("leave", None),
        ("leave", "r"),
        ("shutdown", {"roomId": "r"}),
    ],
)
def test_invalid_events_raise(name, payload):
    with pytest.raises(InvalidEventError):
        parse_event(name, "s", payload)


def test_outbound_profiles():
    assert get_outbound_events("standard") is STANDARD_EVENTS
    assert get_outbound_events("LEGACY") is LEGACY_EVENTS
    assert STANDARD_EVENTS.client_list_update == "client-list-update"
    assert LEGACY_EVENTS.client_list_update == "updating client list"
    with pytest.raises(ValueError):
        get_outbound_events("binary")
