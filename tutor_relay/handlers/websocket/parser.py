"""Client frame parsing for the relay WebSocket.

Frames are decoded and validated once here; downstream handlers receive a
``ClientMessage`` whose ``data`` already has the fields they need.
"""

from __future__ import annotations

import json
from typing import Any
from dataclasses import field, dataclass
from collections.abc import Callable

from ...errors.protocol import ProtocolError
from ...config.websocket import (
    WS_ERROR_UNKNOWN_TYPE,
    WS_ERROR_INVALID_MESSAGE,
    WS_ERROR_INVALID_PAYLOAD,
)


@dataclass(frozen=True, slots=True)
class ClientMessage:
    type: str
    data: dict[str, Any] = field(default_factory=dict)


def _require_text(data: dict[str, Any], key: str, msg_type: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ProtocolError(WS_ERROR_INVALID_PAYLOAD, f"'{msg_type}' requires a non-empty string '{key}'.")
    return value


def _require_non_negative_int(data: dict[str, Any], key: str, msg_type: str, default: int | None = None) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ProtocolError(WS_ERROR_INVALID_PAYLOAD, f"'{msg_type}' requires a non-negative integer '{key}'.")
    return value


def _hello(data: dict[str, Any]) -> dict[str, Any]:
    scenario_id = data.get("scenarioId")
    if scenario_id is None:
        return {}
    if not isinstance(scenario_id, str):
        raise ProtocolError(WS_ERROR_INVALID_PAYLOAD, "'scenarioId' must be a string.")
    scenario_id = scenario_id.strip()
    return {"scenarioId": scenario_id} if scenario_id else {}


def _event(data: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if key != "type"}


def _text(data: dict[str, Any]) -> dict[str, Any]:
    return {"text": _require_text(data, "text", "client.text").strip()}


def _audio_append(data: dict[str, Any]) -> dict[str, Any]:
    audio = data.get("audio")
    if not isinstance(audio, str) or not audio:
        raise ProtocolError(WS_ERROR_INVALID_PAYLOAD, "'client.audio.append' requires base64 string 'audio'.")
    return {"audio": audio}


def _item_truncate(data: dict[str, Any]) -> dict[str, Any]:
    return {
        "item_id": _require_text(data, "item_id", "client.item.truncate"),
        "content_index": _require_non_negative_int(data, "content_index", "client.item.truncate", default=0),
        "audio_end_ms": _require_non_negative_int(data, "audio_end_ms", "client.item.truncate"),
    }


def _empty(_data: dict[str, Any]) -> dict[str, Any]:
    return {}


_FIELD_VALIDATORS: dict[str, Callable[[dict[str, Any]], dict[str, Any]]] = {
    "client.hello": _hello,
    "client.ping": _empty,
    "client.event": _event,
    "client.text": _text,
    "client.audio.append": _audio_append,
    "client.audio.commit": _empty,
    "client.response.create": _empty,
    "client.response.cancel": _empty,
    "client.item.truncate": _item_truncate,
    "client.end_call": _empty,
}

CLIENT_MESSAGE_TYPES: frozenset[str] = frozenset(_FIELD_VALIDATORS)


def parse_client_message(raw: str) -> ClientMessage:
    """Decode and validate one client text frame.

    Raises:
        ProtocolError: ``invalid_message`` for undecodable frames,
            ``unknown_message_type`` for types outside the vocabulary and
            ``invalid_payload`` for bad fields.
    """
    text = (raw or "").strip()
    if not text:
        raise ProtocolError(WS_ERROR_INVALID_MESSAGE, "Empty message.")

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ProtocolError(WS_ERROR_INVALID_MESSAGE, "Message must be valid JSON.") from exc

    if not isinstance(data, dict):
        raise ProtocolError(WS_ERROR_INVALID_MESSAGE, "Message must be a JSON object.")

    msg_type = data.get("type")
    if not isinstance(msg_type, str) or not msg_type.strip():
        raise ProtocolError(WS_ERROR_INVALID_MESSAGE, "Missing 'type' in message.")

    msg_type = msg_type.strip()
    validator = _FIELD_VALIDATORS.get(msg_type)
    if validator is None:
        raise ProtocolError(WS_ERROR_UNKNOWN_TYPE, f"Message type '{msg_type}' is not supported.")
    return ClientMessage(type=msg_type, data=validator(data))


__all__ = ["CLIENT_MESSAGE_TYPES", "ClientMessage", "parse_client_message"]
