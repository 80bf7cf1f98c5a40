"""Outbound upstream event builders and the allow-list that guards them.

Every event the relay sends upstream is built here. ``validate_outbound`` is
applied by ``UpstreamConnection.send_event`` so nothing outside the
enumerated shapes can reach the realtime backend, whatever the caller does.
In particular the client can never send ``session.update`` or create
conversation items of its own.
"""

from __future__ import annotations

import json
from typing import Any

from ..errors.upstream import DisallowedEventError

# Events a client action may be translated into
CLIENT_FORWARD_ALLOWLIST: frozenset[str] = frozenset(
    {
        "input_audio_buffer.append",
        "input_audio_buffer.commit",
        "response.create",
        "response.cancel",
        "conversation.item.truncate",
    }
)

# Events only the relay itself generates
SERVER_GENERATED_EVENTS: frozenset[str] = frozenset(
    {
        "session.update",
        "conversation.item.create",
        "response.create",
    }
)

OUTBOUND_ALLOWLIST: frozenset[str] = CLIENT_FORWARD_ALLOWLIST | SERVER_GENERATED_EVENTS

# Canonical names for upstream events that changed between API revisions
UPSTREAM_EVENT_ALIASES: dict[str, str] = {
    "response.text.delta": "response.output_text.delta",
    "response.text.done": "response.output_text.done",
    "response.audio.delta": "response.output_audio.delta",
    "response.audio.done": "response.output_audio.done",
    "response.audio_transcript.delta": "response.output_audio_transcript.delta",
    "response.audio_transcript.done": "response.output_audio_transcript.done",
}


def canonical_event_type(event_type: str) -> str:
    return UPSTREAM_EVENT_ALIASES.get(event_type, event_type)


def _is_user_text_item(item: dict[str, Any]) -> bool:
    if item.get("type") != "message" or item.get("role") != "user":
        return False
    content = item.get("content")
    if not isinstance(content, list) or not content:
        return False
    return all(isinstance(part, dict) and part.get("type") == "input_text" for part in content)


def _is_function_output_item(item: dict[str, Any]) -> bool:
    return (
        item.get("type") == "function_call_output"
        and isinstance(item.get("call_id"), str)
        and isinstance(item.get("output"), str)
    )


def validate_outbound(event: Any) -> str:
    """Return the event type when ``event`` may be sent upstream.

    Raises:
        DisallowedEventError: If the type or the item shape is not allowed.
    """
    if not isinstance(event, dict):
        raise DisallowedEventError(type(event).__name__)
    event_type = event.get("type")
    if not isinstance(event_type, str) or event_type not in OUTBOUND_ALLOWLIST:
        raise DisallowedEventError(str(event_type))
    if event_type == "conversation.item.create":
        item = event.get("item")
        if not isinstance(item, dict) or not (_is_user_text_item(item) or _is_function_output_item(item)):
            raise DisallowedEventError("conversation.item.create")
    return event_type


# ---------------------------------------------------------------------------
# Client-forwarded events
# ---------------------------------------------------------------------------


def audio_append(audio: str) -> dict[str, Any]:
    return {"type": "input_audio_buffer.append", "audio": audio}


def audio_commit() -> dict[str, Any]:
    return {"type": "input_audio_buffer.commit"}


def response_create(instructions: str | None = None) -> dict[str, Any]:
    if instructions:
        return {"type": "response.create", "response": {"instructions": instructions}}
    return {"type": "response.create"}


def response_cancel() -> dict[str, Any]:
    return {"type": "response.cancel"}


def item_truncate(item_id: str, content_index: int, audio_end_ms: int) -> dict[str, Any]:
    return {
        "type": "conversation.item.truncate",
        "item_id": item_id,
        "content_index": content_index,
        "audio_end_ms": audio_end_ms,
    }


# ---------------------------------------------------------------------------
# Server-generated events
# ---------------------------------------------------------------------------


def user_text_item(text: str) -> dict[str, Any]:
    return {
        "type": "conversation.item.create",
        "item": {
            "type": "message",
            "role": "user",
            "content": [{"type": "input_text", "text": text}],
        },
    }


def function_call_output(call_id: str, output: dict[str, Any]) -> dict[str, Any]:
    return {
        "type": "conversation.item.create",
        "item": {
            "type": "function_call_output",
            "call_id": call_id,
            "output": json.dumps(output, ensure_ascii=False),
        },
    }


def session_update(session: dict[str, Any]) -> dict[str, Any]:
    return {"type": "session.update", "session": session}


__all__ = [
    "CLIENT_FORWARD_ALLOWLIST",
    "SERVER_GENERATED_EVENTS",
    "OUTBOUND_ALLOWLIST",
    "UPSTREAM_EVENT_ALIASES",
    "canonical_event_type",
    "validate_outbound",
    "audio_append",
    "audio_commit",
    "response_create",
    "response_cancel",
    "item_truncate",
    "user_text_item",
    "function_call_output",
    "session_update",
]
