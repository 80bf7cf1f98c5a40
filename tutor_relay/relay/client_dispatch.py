"""Client message dispatch.

Each handler receives the session actor and a validated ``ClientMessage``.
Anything that reaches upstream goes through ``session.send_upstream`` so the
outbound allow-list is always applied.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from collections.abc import Callable, Awaitable

from ..state.session import UpstreamStatus
from ..upstream import events
from ..config.websocket import WS_ERROR_UPSTREAM_NOT_READY
from ..handlers.websocket.parser import ClientMessage
from .finalize import finalize_call

if TYPE_CHECKING:
    from .session import RealtimeSession

logger = logging.getLogger(__name__)

ClientHandler = Callable[["RealtimeSession", ClientMessage], Awaitable[None]]


async def _require_upstream(session: RealtimeSession) -> bool:
    if session.upstream_ready:
        return True
    await session.send_error(WS_ERROR_UPSTREAM_NOT_READY, "Upstream is not connected.")
    return False


async def handle_hello(session: RealtimeSession, message: ClientMessage) -> None:
    if not session.state.hello_seen:
        scenario_id = message.data.get("scenarioId")
        if scenario_id and not await session.select_scenario(scenario_id):
            return
        session.state.hello_seen = True

    status = session.upstream_status
    if status is UpstreamStatus.NOT_STARTED:
        session.start_upstream()
    elif status is not UpstreamStatus.CONNECTING:
        await session.send_hello()


async def handle_ping(session: RealtimeSession, _message: ClientMessage) -> None:
    await session.send_client({"type": "server.pong"})


async def handle_event(session: RealtimeSession, message: ClientMessage) -> None:
    await session.send_client({"type": "server.echo", "payload": message.data})


async def handle_text(session: RealtimeSession, message: ClientMessage) -> None:
    if not await _require_upstream(session):
        return
    text = message.data["text"]
    if not await session.send_upstream(events.user_text_item(text)):
        return
    session.append_transcript("user", text)
    await session.send_upstream(events.response_create())


async def handle_audio_append(session: RealtimeSession, message: ClientMessage) -> None:
    if await session.send_upstream(events.audio_append(message.data["audio"])):
        session.bump("audio_chunks_in")


async def handle_audio_commit(session: RealtimeSession, _message: ClientMessage) -> None:
    await session.send_upstream(events.audio_commit())


async def handle_response_create(session: RealtimeSession, _message: ClientMessage) -> None:
    if not await _require_upstream(session):
        return
    if not await session.count_response(from_client=True):
        return
    if not await session.send_upstream(events.response_create()):
        session.release_client_create()


async def handle_response_cancel(session: RealtimeSession, _message: ClientMessage) -> None:
    await session.send_upstream(events.response_cancel())


async def handle_item_truncate(session: RealtimeSession, message: ClientMessage) -> None:
    data = message.data
    await session.send_upstream(
        events.item_truncate(data["item_id"], data["content_index"], data["audio_end_ms"])
    )


async def handle_end_call(session: RealtimeSession, _message: ClientMessage) -> None:
    logger.info("client requested end_call")
    await finalize_call(session)


CLIENT_HANDLERS: dict[str, ClientHandler] = {
    "client.hello": handle_hello,
    "client.ping": handle_ping,
    "client.event": handle_event,
    "client.text": handle_text,
    "client.audio.append": handle_audio_append,
    "client.audio.commit": handle_audio_commit,
    "client.response.create": handle_response_create,
    "client.response.cancel": handle_response_cancel,
    "client.item.truncate": handle_item_truncate,
    "client.end_call": handle_end_call,
}


async def dispatch_client_message(session: RealtimeSession, message: ClientMessage) -> None:
    """Route a parsed client message to its handler."""
    handler = CLIENT_HANDLERS[message.type]
    await handler(session, message)


__all__ = ["CLIENT_HANDLERS", "dispatch_client_message"]
