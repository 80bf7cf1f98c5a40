"""Upstream event dispatch.

Upstream frames are decoded here, their type is canonicalised (legacy and
current event names map to one handler) and the handler translates them into
client events, transcript entries and tool calls.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any
from collections.abc import Callable, Awaitable

from ..logging import log_context
from ..tools.executor import tool_error, run_tool_safe
from ..upstream import events
from ..upstream.events import canonical_event_type
from ..config.websocket import WS_ERROR_UPSTREAM
from .tool_calls import PendingToolCall

if TYPE_CHECKING:
    from .session import RealtimeSession

logger = logging.getLogger(__name__)

UpstreamHandler = Callable[["RealtimeSession", dict[str, Any]], Awaitable[None]]

_TEXT_STREAM = "text"
_TRANSCRIPT_STREAM = "transcript"


def _response_id(event: dict[str, Any]) -> str:
    value = event.get("response_id")
    if not isinstance(value, str):
        response = event.get("response")
        value = response.get("id") if isinstance(response, dict) else None
    return value if isinstance(value, str) else ""


def _error_message(event: dict[str, Any], default: str) -> str:
    error = event.get("error")
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"]
    return default


# ----------------------------------------------------------------------
# Text and transcript streams
# ----------------------------------------------------------------------


def _text_delta(stream: str) -> UpstreamHandler:
    async def handler(session: RealtimeSession, event: dict[str, Any]) -> None:
        delta = event.get("delta")
        if not isinstance(delta, str) or not delta:
            return
        response_id = _response_id(event)
        session.accumulator.append(response_id, stream, delta)
        await session.send_client(
            {"type": "server.text.delta", "role": "ai", "delta": delta, "responseId": response_id or None}
        )

    return handler


def _text_done(stream: str, field_name: str) -> UpstreamHandler:
    async def handler(session: RealtimeSession, event: dict[str, Any]) -> None:
        response_id = _response_id(event)
        text = session.accumulator.finish(response_id, stream, event.get(field_name))
        if not text:
            return
        session.append_transcript("ai", text)
        await session.send_client(
            {"type": "server.text.completed", "role": "ai", "text": text, "responseId": response_id or None}
        )

    return handler


# ----------------------------------------------------------------------
# Response lifecycle
# ----------------------------------------------------------------------


async def handle_response_created(session: RealtimeSession, _event: dict[str, Any]) -> None:
    session.accumulator.clear()
    await session.count_response(from_client=False)


async def handle_response_done(session: RealtimeSession, event: dict[str, Any]) -> None:
    response = event.get("response")
    status = response.get("status") if isinstance(response, dict) else None
    session.accumulator.clear_response(_response_id(event))
    await session.send_client({"type": "server.response.done", "status": status})


async def handle_audio_delta(session: RealtimeSession, event: dict[str, Any]) -> None:
    delta = event.get("delta")
    if not isinstance(delta, str) or not delta:
        return
    if await session.send_client({"type": "server.audio.delta", "audio": delta}):
        session.bump("audio_chunks_out")


async def handle_audio_done(session: RealtimeSession, _event: dict[str, Any]) -> None:
    await session.send_client({"type": "server.audio.done"})


async def handle_transcription_completed(session: RealtimeSession, event: dict[str, Any]) -> None:
    transcript = event.get("transcript")
    if not isinstance(transcript, str) or not transcript.strip():
        return
    session.append_transcript("user", transcript)
    await session.send_client(
        {"type": "server.transcription.completed", "role": "user", "text": transcript.strip()}
    )


async def handle_transcription_failed(session: RealtimeSession, event: dict[str, Any]) -> None:
    await session.send_error(WS_ERROR_UPSTREAM, _error_message(event, "Audio transcription failed."))


async def handle_speech_started(session: RealtimeSession, _event: dict[str, Any]) -> None:
    await session.send_client({"type": "server.user_speech_started"})


async def handle_speech_stopped(session: RealtimeSession, _event: dict[str, Any]) -> None:
    await session.send_client({"type": "server.user_speech_stopped"})


async def handle_upstream_error(session: RealtimeSession, event: dict[str, Any]) -> None:
    message = _error_message(event, "Upstream reported an error.")
    logger.warning("upstream error event: %s", message)
    # A rejected response.create gets no response.created echo
    session.release_client_create()
    await session.send_error(WS_ERROR_UPSTREAM, message)


async def handle_ignored(_session: RealtimeSession, _event: dict[str, Any]) -> None:
    return None


# ----------------------------------------------------------------------
# Tool calls
# ----------------------------------------------------------------------


async def handle_function_call_delta(session: RealtimeSession, event: dict[str, Any]) -> None:
    call_id = event.get("call_id")
    delta = event.get("delta")
    if not isinstance(call_id, str) or not call_id:
        logger.warning("function_call_arguments.delta without call_id; dropped")
        return
    name = event.get("name") if isinstance(event.get("name"), str) else None
    session.tool_calls.on_delta(call_id, delta if isinstance(delta, str) else "", name)


async def handle_function_call_done(session: RealtimeSession, event: dict[str, Any]) -> None:
    call_id = event.get("call_id")
    if not isinstance(call_id, str) or not call_id:
        logger.warning("function_call_arguments.done without call_id; dropped")
        return
    name = event.get("name") if isinstance(event.get("name"), str) else None
    pending = session.tool_calls.claim(call_id, name, event.get("arguments"))
    if pending is not None:
        await run_tool_call(session, pending)


async def handle_output_item_done(session: RealtimeSession, event: dict[str, Any]) -> None:
    item = event.get("item")
    if not isinstance(item, dict) or item.get("type") != "function_call":
        return
    call_id = item.get("call_id")
    if not isinstance(call_id, str) or not call_id or session.tool_calls.seen(call_id):
        return
    name = item.get("name") if isinstance(item.get("name"), str) else None
    pending = session.tool_calls.claim(call_id, name, item.get("arguments"))
    if pending is not None:
        await run_tool_call(session, pending)


async def run_tool_call(session: RealtimeSession, pending: PendingToolCall) -> None:
    """Execute one claimed tool call and feed the result back to both sides."""
    name = pending.name or "unknown"
    with log_context(call_id=pending.call_id):
        try:
            if pending.name:
                result = await run_tool_safe(session.tool_executor, pending.name, pending.args, session.tool_context())
            else:
                logger.warning("tool call %s has no name", pending.call_id)
                result = tool_error("Tool call is missing a name.")

            if await session.send_upstream(events.function_call_output(pending.call_id, result)):
                await session.send_upstream(events.response_create())
            await session.record_tool_result(name, result)
            await session.send_client(
                {"type": "server.tool_result", "name": name, "callId": pending.call_id, "result": result}
            )
            logger.info("tool_runner: done name=%s ok=%s", name, result.get("ok"))
        finally:
            session.tool_calls.complete(pending.call_id)


UPSTREAM_HANDLERS: dict[str, UpstreamHandler] = {
    "response.output_text.delta": _text_delta(_TEXT_STREAM),
    "response.output_text.done": _text_done(_TEXT_STREAM, "text"),
    "response.output_audio_transcript.delta": _text_delta(_TRANSCRIPT_STREAM),
    "response.output_audio_transcript.done": _text_done(_TRANSCRIPT_STREAM, "transcript"),
    "response.created": handle_response_created,
    "response.done": handle_response_done,
    "response.output_audio.delta": handle_audio_delta,
    "response.output_audio.done": handle_audio_done,
    "conversation.item.input_audio_transcription.completed": handle_transcription_completed,
    "conversation.item.input_audio_transcription.failed": handle_transcription_failed,
    "input_audio_buffer.speech_started": handle_speech_started,
    "input_audio_buffer.speech_stopped": handle_speech_stopped,
    "error": handle_upstream_error,
    "response.function_call_arguments.delta": handle_function_call_delta,
    "response.function_call_arguments.done": handle_function_call_done,
    "response.output_item.done": handle_output_item_done,
    "session.created": handle_ignored,
    "session.updated": handle_ignored,
}


def decode_upstream_frame(raw: str | bytes) -> dict[str, Any] | None:
    """Decode one upstream frame; binary or malformed frames yield None."""
    if isinstance(raw, (bytes, bytearray)):
        logger.debug("ignoring binary upstream frame (%d bytes)", len(raw))
        return None
    try:
        event = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("ignoring non-JSON upstream frame (%d chars)", len(raw))
        return None
    if not isinstance(event, dict) or not isinstance(event.get("type"), str):
        logger.warning("ignoring upstream frame without a type")
        return None
    return event


async def dispatch_upstream_frame(session: RealtimeSession, raw: str | bytes) -> None:
    """Route one raw upstream frame to its handler."""
    event = decode_upstream_frame(raw)
    if event is None:
        return
    if session.settings.log_upstream_events:
        await session.send_client({"type": "debug.openai", "event": event})

    handler = UPSTREAM_HANDLERS.get(canonical_event_type(event["type"]))
    if handler is None:
        return
    await handler(session, event)


__all__ = ["UPSTREAM_HANDLERS", "decode_upstream_frame", "dispatch_upstream_frame", "run_tool_call"]
