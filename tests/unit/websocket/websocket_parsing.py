"""Unit tests for client frame parsing and validation."""

from __future__ import annotations

import json

import pytest

from tutor_relay.errors import ProtocolError
from tutor_relay.handlers.websocket.parser import CLIENT_MESSAGE_TYPES, parse_client_message


def _raw(payload: dict) -> str:
    return json.dumps(payload)


def _code(raw: str) -> str:
    with pytest.raises(ProtocolError) as excinfo:
        parse_client_message(raw)
    return excinfo.value.error_code


def test_client_vocabulary_is_closed() -> None:
    assert CLIENT_MESSAGE_TYPES == {
        "client.hello",
        "client.ping",
        "client.event",
        "client.text",
        "client.audio.append",
        "client.audio.commit",
        "client.response.create",
        "client.response.cancel",
        "client.item.truncate",
        "client.end_call",
    }


def test_undecodable_frames_are_invalid_messages() -> None:
    assert _code("") == "invalid_message"
    assert _code("{oops") == "invalid_message"
    assert _code("[1, 2]") == "invalid_message"
    assert _code(_raw({"text": "no type"})) == "invalid_message"


def test_unknown_type_is_reported() -> None:
    assert _code(_raw({"type": "client.foo"})) == "unknown_message_type"
    assert _code(_raw({"type": "session.update"})) == "unknown_message_type"


def test_text_is_trimmed_and_required() -> None:
    message = parse_client_message(_raw({"type": "client.text", "text": "  Hola  "}))
    assert message.type == "client.text"
    assert message.data == {"text": "Hola"}
    assert _code(_raw({"type": "client.text", "text": "   "})) == "invalid_payload"
    assert _code(_raw({"type": "client.text", "text": 5})) == "invalid_payload"


def test_audio_append_requires_string_audio() -> None:
    assert parse_client_message(_raw({"type": "client.audio.append", "audio": "UklG"})).data == {"audio": "UklG"}
    assert _code(_raw({"type": "client.audio.append"})) == "invalid_payload"
    assert _code(_raw({"type": "client.audio.append", "audio": ["x"]})) == "invalid_payload"


def test_item_truncate_keeps_only_allowed_fields() -> None:
    message = parse_client_message(
        _raw({"type": "client.item.truncate", "item_id": "item_9", "content_index": 1, "audio_end_ms": 300, "x": 1})
    )
    assert message.data == {"item_id": "item_9", "content_index": 1, "audio_end_ms": 300}
    assert _code(_raw({"type": "client.item.truncate", "item_id": "i", "audio_end_ms": -1})) == "invalid_payload"
    assert _code(_raw({"type": "client.item.truncate", "item_id": "i", "audio_end_ms": True})) == "invalid_payload"


def test_hello_normalizes_scenario_id() -> None:
    assert parse_client_message(_raw({"type": "client.hello", "scenarioId": " a1 "})).data == {"scenarioId": "a1"}
    assert parse_client_message(_raw({"type": "client.hello"})).data == {}
    assert parse_client_message(_raw({"type": "client.hello", "scenarioId": "  "})).data == {}
    assert _code(_raw({"type": "client.hello", "scenarioId": 7})) == "invalid_payload"


def test_event_payload_excludes_type() -> None:
    message = parse_client_message(_raw({"type": "client.event", "a": 1, "b": [2]}))
    assert message.data == {"a": 1, "b": [2]}


def test_control_messages_carry_no_data() -> None:
    message = parse_client_message(_raw({"type": "client.response.create", "response": {"instructions": "x"}}))
    assert message.data == {}
