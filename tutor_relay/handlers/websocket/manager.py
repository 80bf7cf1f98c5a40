"""WebSocket entry point for relay sessions.

Admission happens here, before any session state exists:

1. Origin policy (``origin_rejected``, 1008)
2. Signed session token, when enforced (``authentication_failed``, 1008)
3. Scenario id from the query or token must exist (``unknown_scenario``, 1008)
4. Concurrency cap (``server_at_capacity``, 1013)
5. One live session per key (``session_in_use``, 1013)

Rejected upgrades are accepted just long enough to deliver a
``server.error`` so browsers see a reason rather than a bare close code.
Admitted connections are handed to a ``RealtimeSession`` actor which owns the
socket until it closes.

Query parameters:
    session     Session key (a fresh one is generated when absent)
    scenarioId  Scenario to run
    token       Signed session token from ``POST /api/sessions``
"""

from __future__ import annotations

import uuid
import logging
from typing import TYPE_CHECKING

from fastapi import WebSocket

from ...errors.auth import TokenError
from ...relay.session import RealtimeSession
from ...telemetry.sentry import capture_error
from ...telemetry.instruments import get_metrics
from ...config.websocket import (
    WS_CLOSE_BUSY_CODE,
    WS_ERROR_INTERNAL,
    WS_ERROR_AT_CAPACITY,
    WS_ERROR_AUTH_FAILED,
    WS_ERROR_SESSION_IN_USE,
    WS_ERROR_ORIGIN_REJECTED,
    WS_ERROR_UNKNOWN_SCENARIO,
    WS_CLOSE_UNAUTHORIZED_CODE,
    WS_CLOSE_INTERNAL_ERROR_CODE,
)
from .auth import check_websocket_origin, authenticate_session_token
from .errors import send_error, reject_connection
from .helpers import safe_close

if TYPE_CHECKING:
    from ...runtime.dependencies import RuntimeDeps

logger = logging.getLogger(__name__)


def _query_value(ws: WebSocket, name: str) -> str | None:
    value = ws.query_params.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


async def _reject(ws: WebSocket, *, code: str, message: str, close_code: int, extra: dict | None = None) -> None:
    get_metrics().connections_rejected_total.add(1, {"reason": code})
    logger.info("WS reject: code=%s", code)
    await reject_connection(ws, code=code, message=message, close_code=close_code, extra=extra)


async def _resolve_scenario_id(
    ws: WebSocket,
    runtime_deps: RuntimeDeps,
    session_key: str,
) -> tuple[bool, str | None, bool]:
    """Run the origin, token and scenario checks.

    Returns:
        ``(admitted, scenario_id, locked)``. ``locked`` is True when a verified
        token fixed the scenario. When not admitted the socket has already
        been rejected.
    """
    if not await check_websocket_origin(ws):
        await _reject(
            ws,
            code=WS_ERROR_ORIGIN_REJECTED,
            message="Origin not allowed.",
            close_code=WS_CLOSE_UNAUTHORIZED_CODE,
        )
        return False, None, False

    scenario_id = _query_value(ws, "scenarioId")
    try:
        payload = authenticate_session_token(
            _query_value(ws, "token"),
            session_key,
            secret=runtime_deps.signing_secret,
            require=runtime_deps.require_token,
        )
    except TokenError as exc:
        logger.warning("WS token rejected: reason=%s", exc.reason)
        await _reject(
            ws,
            code=WS_ERROR_AUTH_FAILED,
            message=f"Invalid session token ({exc.reason}).",
            close_code=WS_CLOSE_UNAUTHORIZED_CODE,
        )
        return False, None, False

    if payload is not None:
        if scenario_id is None:
            scenario_id = payload.scenario_id
        elif scenario_id != payload.scenario_id:
            await _reject(
                ws,
                code=WS_ERROR_AUTH_FAILED,
                message="Session token was issued for a different scenario.",
                close_code=WS_CLOSE_UNAUTHORIZED_CODE,
            )
            return False, None, False

    if scenario_id is not None and runtime_deps.scenarios.find_scenario(scenario_id) is None:
        await _reject(
            ws,
            code=WS_ERROR_UNKNOWN_SCENARIO,
            message=f"Unknown scenario '{scenario_id}'.",
            close_code=WS_CLOSE_UNAUTHORIZED_CODE,
        )
        return False, None, False
    return True, scenario_id, payload is not None


async def handle_websocket_connection(ws: WebSocket, runtime_deps: RuntimeDeps) -> None:
    """Admit a client socket and serve it with a relay session actor."""
    session_key = _query_value(ws, "session") or uuid.uuid4().hex
    admitted, scenario_id, scenario_locked = await _resolve_scenario_id(ws, runtime_deps, session_key)
    if not admitted:
        return

    connections = runtime_deps.connections
    if not await connections.connect(ws):
        capacity = connections.get_capacity_info()
        await _reject(
            ws,
            code=WS_ERROR_AT_CAPACITY,
            message=(
                "Server is at capacity. "
                f"Active connections: {capacity['active']}/{capacity['max']}. "
                "Please try again later."
            ),
            close_code=WS_CLOSE_BUSY_CODE,
            extra={"capacity": capacity},
        )
        return

    session: RealtimeSession | None = None
    registered = False
    accepted = False
    try:
        store = await runtime_deps.store_backend.open(session_key)
        session = RealtimeSession(
            ws,
            session_key=session_key,
            store=store,
            scenarios=runtime_deps.scenarios,
            tool_executor=runtime_deps.tool_executor,
            scenario_id=scenario_id,
            scenario_locked=scenario_locked,
            connector=runtime_deps.connector,
            settings=runtime_deps.relay_settings,
        )
        registered = await runtime_deps.sessions.register(session)
        if not registered:
            await _reject(
                ws,
                code=WS_ERROR_SESSION_IN_USE,
                message="Session key already has a live connection.",
                close_code=WS_CLOSE_BUSY_CODE,
            )
            return

        await ws.accept()
        accepted = True
        logger.info(
            "WebSocket connection accepted session=%s scenario=%s active=%s",
            session_key,
            scenario_id,
            connections.get_connection_count(),
        )
        await session.run()
    except Exception as exc:  # noqa: BLE001
        logger.exception("WebSocket session failed session=%s", session_key)
        capture_error(exc, session_id=session_key)
        if accepted:
            await send_error(ws, code=WS_ERROR_INTERNAL, message="Internal server error.")
        await safe_close(ws, WS_CLOSE_INTERNAL_ERROR_CODE, WS_ERROR_INTERNAL)
    finally:
        if session is not None and registered:
            await runtime_deps.sessions.unregister(session)
        await connections.disconnect(ws)
        logger.info("WebSocket connection closed. Active: %s", connections.get_connection_count())


__all__ = ["handle_websocket_connection"]
