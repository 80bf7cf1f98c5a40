"""Per-session relay actor.

A ``RealtimeSession`` owns one accepted client socket and at most one upstream
socket. Everything that can change session state arrives as an ``InboxItem``
on a single bounded queue:

    client reader    -> client_text / client_binary / client_closed / client_error
    upstream reader  -> upstream_frame / upstream_closed
    connect task     -> upstream_ready / upstream_failed
    watchdog         -> guardrail_tick
    registry         -> shutdown

``run`` consumes the inbox one item at a time, so no two handlers of the same
session ever interleave. Dispatch of individual message types lives in
``client_dispatch`` and ``upstream_dispatch``; end-of-call finalize lives in
``finalize``. This module provides the state and the primitives they share.

Phases:
    IDLE -> AWAITING_UPSTREAM (client accepted)
         -> ACTIVE            (upstream handshake sent)
         -> TERMINATING       (end_call, guardrail trip, socket close/error)
         -> CLOSED            (sockets closed, timers cancelled, record persisted)
"""

from __future__ import annotations

import time
import asyncio
import logging
from typing import Any
from dataclasses import dataclass
from collections.abc import Callable, Awaitable

from fastapi import WebSocket

from ..logging import log_context
from ..scenarios import Scenario, ScenarioRegistry
from ..storage.base import SessionStore
from ..errors.protocol import ProtocolError
from ..telemetry.sentry import capture_error
from ..telemetry.instruments import get_metrics
from ..tools.context import ToolContext
from ..tools.executor import ToolExecutor
from ..upstream.events import response_create
from ..upstream.connection import UpstreamConnection
from ..upstream.connector import connect_upstream
from ..upstream.session_config import build_session_update
from ..errors.upstream import DisallowedEventError, UpstreamUnavailableError
from ..handlers.websocket.parser import parse_client_message
from ..handlers.websocket.errors import build_error_payload
from ..handlers.websocket.disconnects import disconnect_code, is_expected_disconnect
from ..handlers.websocket.helpers import safe_close, safe_send_json
from ..state.session import (
    SessionPhase,
    SessionState,
    SessionStats,
    UpstreamStatus,
    SessionProgress,
    ToolResultEntry,
    TerminationReason,
    utc_now_iso,
)
from ..config.limits import (
    GUARDRAIL_TICK_S,
    SESSION_INBOX_MAX,
    MAX_SESSION_SECONDS,
    TRANSCRIPT_MAX_ENTRIES,
    MAX_RESPONSES_PER_SESSION,
    STATS_PERSIST_EVERY_TICKS,
)
from ..config.upstream import UPSTREAM_LOG_EVENTS, UPSTREAM_CONNECT_ON_ACCEPT
from ..config.websocket import (
    WS_ERROR_INTERNAL,
    WS_ERROR_UPSTREAM,
    WS_CLOSE_NORMAL_CODE,
    WS_ERROR_BINARY_FRAME,
    WS_CLOSE_GUARDRAIL_CODE,
    WS_ERROR_UNKNOWN_SCENARIO,
    WS_ERROR_SCENARIO_LOCKED,
    WS_ERROR_UPSTREAM_NOT_READY,
    WS_CLOSE_INTERNAL_ERROR_CODE,
)
from .tool_calls import ToolCallAggregator
from .client_dispatch import dispatch_client_message
from .upstream_dispatch import dispatch_upstream_frame
from .transcript import TranscriptLog, ResponseAccumulator
from .guardrails import GuardrailWatchdog, duration_exceeded, responses_exceeded

logger = logging.getLogger(__name__)

UpstreamConnector = Callable[[], Awaitable[UpstreamConnection]]

# Inbox item kinds
CLIENT_TEXT = "client_text"
CLIENT_BINARY = "client_binary"
CLIENT_CLOSED = "client_closed"
CLIENT_ERROR = "client_error"
UPSTREAM_FRAME = "upstream_frame"
UPSTREAM_READY = "upstream_ready"
UPSTREAM_FAILED = "upstream_failed"
UPSTREAM_CLOSED = "upstream_closed"
GUARDRAIL_TICK = "guardrail_tick"
SHUTDOWN = "shutdown"

_TERMINATION_MESSAGES: dict[TerminationReason, str] = {
    TerminationReason.TIME_LIMIT: "Session time limit reached.",
    TerminationReason.RESPONSE_LIMIT: "Session response limit reached.",
    TerminationReason.UPSTREAM_CLOSED: "Upstream connection closed.",
    TerminationReason.SERVER_SHUTDOWN: "Server is shutting down.",
}

_CLIENT_CLOSE_CODES: dict[TerminationReason, int] = {
    TerminationReason.TIME_LIMIT: WS_CLOSE_GUARDRAIL_CODE,
    TerminationReason.RESPONSE_LIMIT: WS_CLOSE_GUARDRAIL_CODE,
    TerminationReason.UPSTREAM_CLOSED: WS_CLOSE_INTERNAL_ERROR_CODE,
}

_LATE_UPSTREAM_REASON = "session_closed"


@dataclass(frozen=True, slots=True)
class InboxItem:
    kind: str
    payload: Any = None


@dataclass(frozen=True, slots=True)
class RelaySettings:
    """Per-session tunables; defaults come from ``tutor_relay.config``."""

    max_session_s: float = MAX_SESSION_SECONDS
    max_responses: int = MAX_RESPONSES_PER_SESSION
    tick_s: float = GUARDRAIL_TICK_S
    stats_persist_every_ticks: int = STATS_PERSIST_EVERY_TICKS
    connect_on_accept: bool = UPSTREAM_CONNECT_ON_ACCEPT
    log_upstream_events: bool = UPSTREAM_LOG_EVENTS
    inbox_max: int = SESSION_INBOX_MAX
    transcript_max: int = TRANSCRIPT_MAX_ENTRIES


@dataclass(slots=True)
class _Timing:
    started_monotonic: float = 0.0
    ticks: int = 0
    configured_scenario_id: str | None = None


class RealtimeSession:
    """Single-owner actor bridging one client socket to the upstream backend."""

    def __init__(
        self,
        ws: WebSocket,
        *,
        session_key: str,
        store: SessionStore,
        scenarios: ScenarioRegistry,
        tool_executor: ToolExecutor,
        scenario_id: str | None = None,
        scenario_locked: bool = False,
        connector: UpstreamConnector | None = None,
        settings: RelaySettings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ws = ws
        self.state = SessionState(session_id=session_key, scenario_id=scenario_id)
        self.store = store
        self.scenarios = scenarios
        self.tool_executor = tool_executor
        self.settings = settings or RelaySettings()
        self._connector: UpstreamConnector = connector or connect_upstream
        self._clock = clock

        self.phase = SessionPhase.IDLE
        self.upstream_status = UpstreamStatus.NOT_STARTED
        self.upstream: UpstreamConnection | None = None
        self.termination_reason: TerminationReason | None = None

        self.stats = SessionStats()
        self.transcript = TranscriptLog(self.settings.transcript_max)
        self.accumulator = ResponseAccumulator()
        self.tool_calls = ToolCallAggregator()
        self.tool_results: list[ToolResultEntry] = []
        self.pending_client_creates = 0
        self.scenario_locked = scenario_locked and scenario_id is not None

        self.inbox: asyncio.Queue[InboxItem] = asyncio.Queue(maxsize=max(1, self.settings.inbox_max))
        self.watchdog = GuardrailWatchdog(self._post_tick, self.settings.tick_s)

        self._scenario: Scenario | None = None
        self._timing = _Timing()
        self._client_open = True
        self._tasks: set[asyncio.Task] = set()
        self._item_handlers: dict[str, Callable[[Any], Awaitable[None]]] = {
            CLIENT_TEXT: self._on_client_text,
            CLIENT_BINARY: self._on_client_binary,
            CLIENT_CLOSED: self._on_client_closed,
            CLIENT_ERROR: self._on_client_error,
            UPSTREAM_FRAME: self._on_upstream_frame,
            UPSTREAM_READY: self._on_upstream_ready,
            UPSTREAM_FAILED: self._on_upstream_failed,
            UPSTREAM_CLOSED: self._on_upstream_closed,
            GUARDRAIL_TICK: self._on_guardrail_tick,
            SHUTDOWN: self._on_shutdown,
        }

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def session_key(self) -> str:
        return self.state.session_id

    @property
    def closed(self) -> bool:
        return self.phase is SessionPhase.CLOSED

    @property
    def terminating(self) -> bool:
        return self.phase in (SessionPhase.TERMINATING, SessionPhase.CLOSED)

    async def run(self) -> None:
        """Serve the session until it reaches CLOSED."""
        with log_context(session_id=self.session_key, scenario_id=self.state.scenario_id or "-"):
            try:
                await self._start()
                while self.phase is not SessionPhase.CLOSED:
                    item = await self.inbox.get()
                    await self._handle_item(item)
            finally:
                await self._cleanup()

    async def request_shutdown(self) -> None:
        """Ask the actor to terminate (used on server shutdown)."""
        if not self.terminating:
            await self._post(SHUTDOWN)

    async def _start(self) -> None:
        self._timing.started_monotonic = self._clock()
        await self._hydrate()
        await self._persist(
            {
                "sessionKey": self.session_key,
                "scenarioId": self.state.scenario_id,
                "startedAt": utc_now_iso(),
                "endedAt": None,
                "terminationReason": None,
                "stats": self.stats.to_dict(),
            }
        )
        self.phase = SessionPhase.AWAITING_UPSTREAM
        metrics = get_metrics()
        metrics.sessions_started_total.add(1)
        metrics.active_sessions.add(1)
        logger.info("relay: session started scenario=%s", self.state.scenario_id)

        self._spawn(self._read_client())
        self.watchdog.start()
        if self.settings.connect_on_accept:
            self.start_upstream()

    async def _hydrate(self) -> None:
        stored_results = await self.store.get("toolResults") or []
        self.tool_results = [ToolResultEntry.from_dict(entry) for entry in stored_results if isinstance(entry, dict)]
        if self.tool_results:
            logger.info("relay: hydrated %d persisted tool result(s)", len(self.tool_results))
        if not self.state.scenario_id:
            stored_scenario = await self.store.get("scenarioId")
            if isinstance(stored_scenario, str) and stored_scenario:
                self.state.scenario_id = stored_scenario

    async def _cleanup(self) -> None:
        tasks = [task for task in self._tasks if not task.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        await self.watchdog.stop()
        await self._drain_inbox()
        if self.upstream is not None:
            await self.upstream.close()
        if self.phase is not SessionPhase.CLOSED:
            # Cancelled before a normal termination; keep accounting balanced
            self._record_end_metrics()
            self.phase = SessionPhase.CLOSED

    async def _drain_inbox(self) -> None:
        """Discard items left after CLOSED, closing any late upstream connection."""
        while not self.inbox.empty():
            item = self.inbox.get_nowait()
            if item.kind == UPSTREAM_READY:
                logger.info("relay: closing upstream connection that arrived after close")
                await item.payload.close(WS_CLOSE_NORMAL_CODE, _LATE_UPSTREAM_REASON)

    def _spawn(self, coro: Awaitable[None]) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _post(self, kind: str, payload: Any = None) -> None:
        await self.inbox.put(InboxItem(kind, payload))

    async def _post_tick(self) -> None:
        await self._post(GUARDRAIL_TICK)

    # ------------------------------------------------------------------
    # Producers
    # ------------------------------------------------------------------

    async def _read_client(self) -> None:
        try:
            while True:
                message = await self.ws.receive()
                if message.get("type") == "websocket.disconnect":
                    await self._post(CLIENT_CLOSED, message.get("code"))
                    return
                text = message.get("text")
                if text is not None:
                    await self._post(CLIENT_TEXT, text)
                elif message.get("bytes") is not None:
                    await self._post(CLIENT_BINARY, message["bytes"])
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if is_expected_disconnect(exc):
                await self._post(CLIENT_CLOSED, disconnect_code(exc))
                return
            logger.exception("relay: client reader failed")
            await self._post(CLIENT_ERROR, exc)

    async def _read_upstream(self, conn: UpstreamConnection) -> None:
        try:
            async for raw in conn.messages():
                await self._post(UPSTREAM_FRAME, raw)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if not is_expected_disconnect(exc):
                logger.exception("relay: upstream reader failed")
            await self._post(UPSTREAM_CLOSED, (conn, exc))
            return
        await self._post(UPSTREAM_CLOSED, (conn, None))

    async def _connect_upstream(self) -> None:
        try:
            conn = await self._connector()
        except asyncio.CancelledError:
            raise
        except UpstreamUnavailableError as exc:
            await self._post(UPSTREAM_FAILED, exc)
            return
        except Exception as exc:
            logger.exception("relay: unexpected upstream connect failure")
            capture_error(exc, session_id=self.session_key)
            await self._post(UPSTREAM_FAILED, UpstreamUnavailableError(str(exc) or type(exc).__name__))
            return
        if self.terminating:
            logger.info("relay: upstream connected after termination began; closing it")
            await conn.close(WS_CLOSE_NORMAL_CODE, _LATE_UPSTREAM_REASON)
            return
        await self._post(UPSTREAM_READY, conn)

    def start_upstream(self) -> bool:
        """Begin connecting upstream in the background. Returns False if already started."""
        if self.upstream_status is not UpstreamStatus.NOT_STARTED:
            return False
        self.upstream_status = UpstreamStatus.CONNECTING
        self._spawn(self._connect_upstream())
        return True

    # ------------------------------------------------------------------
    # Inbox handlers
    # ------------------------------------------------------------------

    async def _handle_item(self, item: InboxItem) -> None:
        if self.terminating:
            if item.kind == UPSTREAM_READY:
                await item.payload.close(WS_CLOSE_NORMAL_CODE, _LATE_UPSTREAM_REASON)
            return
        handler = self._item_handlers[item.kind]
        try:
            await handler(item.payload)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.exception("relay: unhandled error processing %s", item.kind)
            capture_error(exc, session_id=self.session_key, extra={"inbox_kind": item.kind})
            if self.terminating:
                await self._abort_termination()
                return
            await self.send_error(WS_ERROR_INTERNAL, "Internal error while processing message.")

    async def _abort_termination(self) -> None:
        """Force CLOSED after termination failed part-way; later items are never handled."""
        if self.closed:
            return
        logger.warning(
            "relay: termination failed reason=%s; forcing close",
            self.termination_reason.value if self.termination_reason else None,
        )
        await self.close_upstream(WS_CLOSE_INTERNAL_ERROR_CODE, WS_ERROR_INTERNAL)
        await self.close_client(WS_CLOSE_INTERNAL_ERROR_CODE, WS_ERROR_INTERNAL)
        await self.finish()

    async def _on_client_text(self, raw: str) -> None:
        try:
            message = parse_client_message(raw)
        except ProtocolError as exc:
            get_metrics().protocol_errors_total.add(1, {"code": exc.error_code})
            logger.info("WS recv: rejected frame code=%s", exc.error_code)
            await self.send_error(exc.error_code, exc.message)
            return
        await dispatch_client_message(self, message)

    async def _on_client_binary(self, _payload: bytes) -> None:
        get_metrics().protocol_errors_total.add(1, {"code": WS_ERROR_BINARY_FRAME})
        await self.send_error(WS_ERROR_BINARY_FRAME, "Binary messages not supported.")

    async def _on_client_closed(self, code: int | None) -> None:
        logger.info("relay: client disconnected code=%s", code)
        self._client_open = False
        await self.terminate(TerminationReason.CLIENT_CLOSED)

    async def _on_client_error(self, _exc: BaseException) -> None:
        self._client_open = False
        await self.terminate(TerminationReason.CLIENT_ERROR)

    async def _on_upstream_frame(self, raw: str | bytes) -> None:
        await dispatch_upstream_frame(self, raw)

    async def _on_upstream_ready(self, conn: UpstreamConnection) -> None:
        self.upstream = conn
        self.upstream_status = UpstreamStatus.READY
        self.phase = SessionPhase.ACTIVE
        self._spawn(self._read_upstream(conn))
        logger.info("relay: upstream ready")

        await self.configure_upstream()
        scenario = self.load_scenario()
        if scenario is not None and scenario.kickoff.enabled:
            await self.send_upstream(response_create(scenario.kickoff.prompt))
        await self.send_hello()

    async def _on_upstream_failed(self, exc: UpstreamUnavailableError) -> None:
        self.upstream_status = UpstreamStatus.FAILED
        logger.warning("relay: upstream unavailable: %s", exc.message)
        await self.send_error(WS_ERROR_UPSTREAM, exc.message)
        await self.send_hello()

    async def _on_upstream_closed(self, payload: tuple[UpstreamConnection, BaseException | None]) -> None:
        conn, exc = payload
        if conn is not self.upstream:
            return
        self.upstream_status = UpstreamStatus.CLOSED
        if exc is not None and not is_expected_disconnect(exc):
            capture_error(exc, session_id=self.session_key)
        logger.info("relay: upstream closed cleanly=%s", conn.closed_cleanly)
        await self.terminate(TerminationReason.UPSTREAM_CLOSED)

    async def _on_guardrail_tick(self, _payload: Any) -> None:
        self._timing.ticks += 1
        elapsed = self._clock() - self._timing.started_monotonic
        if duration_exceeded(elapsed, self.settings.max_session_s):
            logger.info("relay: time limit reached after %.1fs", elapsed)
            get_metrics().guardrail_trips_total.add(1, {"reason": TerminationReason.TIME_LIMIT.value})
            await self.terminate(TerminationReason.TIME_LIMIT)
            return
        every = self.settings.stats_persist_every_ticks
        if every > 0 and self._timing.ticks % every == 0:
            await self._persist({"stats": self.stats.to_dict()})

    async def _on_shutdown(self, _payload: Any) -> None:
        await self.terminate(TerminationReason.SERVER_SHUTDOWN)

    # ------------------------------------------------------------------
    # Primitives shared by the dispatch tables and finalize
    # ------------------------------------------------------------------

    @property
    def upstream_ready(self) -> bool:
        return (
            self.upstream_status is UpstreamStatus.READY
            and self.upstream is not None
            and not self.upstream.closed
        )

    async def send_client(self, payload: dict[str, Any]) -> bool:
        if not self._client_open:
            return False
        sent = await safe_send_json(self.ws, payload)
        if not sent:
            self._client_open = False
        return sent

    async def send_error(self, code: str, message: str, extra: dict[str, Any] | None = None) -> bool:
        return await self.send_client(build_error_payload(code, message, extra=extra))

    async def send_upstream(self, event: dict[str, Any]) -> bool:
        """Send an event upstream, reporting failures to the client."""
        if not self.upstream_ready or self.upstream is None:
            await self.send_error(WS_ERROR_UPSTREAM_NOT_READY, "Upstream is not connected.")
            return False
        try:
            await self.upstream.send_event(event)
        except DisallowedEventError as exc:
            logger.error("relay: refused outbound upstream event %s", exc.event_type)
            await self.send_error(WS_ERROR_INTERNAL, "Event refused by relay policy.")
            return False
        except UpstreamUnavailableError as exc:
            logger.warning("relay: upstream send failed: %s", exc.message)
            await self.send_error(WS_ERROR_UPSTREAM, exc.message)
            return False
        return True

    async def send_hello(self) -> None:
        await self.send_client(
            {
                "type": "server.hello",
                "sessionId": self.session_key,
                "scenarioId": self.state.scenario_id,
                "upstream": self.upstream_ready,
            }
        )

    def load_scenario(self) -> Scenario | None:
        """Return the scenario for the current scenario id, loading it on first use."""
        scenario_id = self.state.scenario_id
        if not scenario_id:
            return None
        if self._scenario is None or self._scenario.id != scenario_id:
            self._scenario = self.scenarios.find_scenario(scenario_id)
            if self._scenario is None:
                logger.warning("relay: scenario %s not found; using defaults", scenario_id)
        return self._scenario

    async def select_scenario(self, scenario_id: str) -> bool:
        """Switch the session to ``scenario_id``; False (with a client error) if unknown or locked."""
        if scenario_id == self.state.scenario_id:
            return True
        if self.scenario_locked:
            logger.warning("relay: refused scenario switch to %s", scenario_id)
            await self.send_error(
                WS_ERROR_SCENARIO_LOCKED,
                f"Session token is bound to scenario '{self.state.scenario_id}'.",
            )
            return False
        if self.scenarios.find_scenario(scenario_id) is None:
            await self.send_error(WS_ERROR_UNKNOWN_SCENARIO, f"Unknown scenario '{scenario_id}'.")
            return False
        self.state.scenario_id = scenario_id
        self._scenario = None
        await self._persist({"scenarioId": scenario_id})
        if self.upstream_ready and self._timing.configured_scenario_id != scenario_id:
            await self.configure_upstream()
        return True

    async def configure_upstream(self) -> bool:
        scenario = self.load_scenario()
        if not await self.send_upstream(build_session_update(scenario)):
            return False
        self._timing.configured_scenario_id = self.state.scenario_id
        return True

    def bump(self, name: str, amount: int = 1) -> int:
        return self.stats.bump(name, amount)

    def append_transcript(self, role: str, text: str) -> None:
        self.transcript.append(role, text)

    async def count_response(self, *, from_client: bool) -> bool:
        """Count one response and enforce the response cap.

        A ``response.created`` that echoes a client ``response.create`` already
        counted is consumed without counting again.

        Returns:
            False if the cap tripped and the session is terminating.
        """
        if not from_client and self.pending_client_creates > 0:
            self.pending_client_creates -= 1
            return True
        count = self.bump("responses_created")
        if from_client:
            self.pending_client_creates += 1
        if responses_exceeded(count, self.settings.max_responses):
            logger.info("relay: response limit reached count=%d", count)
            get_metrics().guardrail_trips_total.add(1, {"reason": TerminationReason.RESPONSE_LIMIT.value})
            await self.terminate(TerminationReason.RESPONSE_LIMIT)
            return False
        return True

    def release_client_create(self) -> None:
        """Forget one client ``response.create`` that will get no ``response.created``."""
        if self.pending_client_creates > 0:
            self.pending_client_creates -= 1

    def tool_context(self) -> ToolContext:
        return ToolContext(
            session_id=self.session_key,
            scenario_id=self.state.scenario_id,
            scenario=self.load_scenario(),
            transcript=self.transcript.entries(),
        )

    def has_tool_result(self, name: str) -> bool:
        return any(entry.name == name for entry in self.tool_results)

    def latest_tool_result(self, name: str) -> ToolResultEntry | None:
        for entry in reversed(self.tool_results):
            if entry.name == name:
                return entry
        return None

    async def record_tool_result(self, name: str, result: dict[str, Any]) -> ToolResultEntry:
        entry = ToolResultEntry(name=name, result=result)
        self.tool_results.append(entry)
        self.bump("tool_calls")
        await self._persist(
            {
                "toolResults": [item.to_dict() for item in self.tool_results],
                "stats": self.stats.to_dict(),
            }
        )
        return entry

    # ------------------------------------------------------------------
    # Termination
    # ------------------------------------------------------------------

    def begin_termination(self, reason: TerminationReason) -> bool:
        """Enter TERMINATING; False when termination is already under way."""
        if self.terminating:
            return False
        self.phase = SessionPhase.TERMINATING
        self.termination_reason = reason
        return True

    async def terminate(self, reason: TerminationReason) -> None:
        """Controlled shutdown of both sockets. Idempotent."""
        if not self.begin_termination(reason):
            return
        logger.info("relay: terminating reason=%s", reason.value)
        if self._client_open:
            await self.send_error(reason.value, _TERMINATION_MESSAGES.get(reason, "Session ended."))
            await self.send_client({"type": "server.call_ended", "reason": reason.value})
        await self.close_upstream(WS_CLOSE_NORMAL_CODE, reason.value)
        await self.close_client(_CLIENT_CLOSE_CODES.get(reason, WS_CLOSE_NORMAL_CODE), reason.value)
        await self.persist_final()
        await self.finish()

    async def close_upstream(self, code: int, reason: str) -> None:
        if self.upstream is not None:
            await self.upstream.close(code=code, reason=reason)
        if self.upstream_status in (UpstreamStatus.READY, UpstreamStatus.CONNECTING):
            self.upstream_status = UpstreamStatus.CLOSED

    async def close_client(self, code: int, reason: str) -> None:
        self._client_open = False
        await safe_close(self.ws, code, reason)

    async def persist_final(self, progress: SessionProgress | None = None) -> None:
        values: dict[str, Any] = {
            "terminationReason": self.termination_reason.value if self.termination_reason else None,
            "endedAt": utc_now_iso(),
            "transcript": self.transcript.to_list(),
            "stats": self.stats.to_dict(),
        }
        if progress is not None:
            values["progress"] = progress.to_dict()
        await self._persist(values)

    async def finish(self) -> None:
        await self.watchdog.stop()
        self._record_end_metrics()
        self.phase = SessionPhase.CLOSED
        logger.info(
            "relay: session closed reason=%s responses=%d tool_calls=%d",
            self.termination_reason.value if self.termination_reason else None,
            self.stats.responses_created,
            self.stats.tool_calls,
        )

    def _record_end_metrics(self) -> None:
        metrics = get_metrics()
        reason = self.termination_reason.value if self.termination_reason else "cancelled"
        metrics.sessions_ended_total.add(1, {"reason": reason})
        metrics.active_sessions.add(-1)
        metrics.session_duration.record(max(0.0, self._clock() - self._timing.started_monotonic))

    async def _persist(self, values: dict[str, Any]) -> None:
        try:
            await self.store.put_many(values)
        except Exception as exc:  # noqa: BLE001
            logger.exception("relay: failed to persist %s", ", ".join(sorted(values)))
            capture_error(exc, session_id=self.session_key)

    @property
    def client_open(self) -> bool:
        return self._client_open


__all__ = ["RealtimeSession", "RelaySettings", "InboxItem", "UpstreamConnector"]
