"""Shared response helpers for WebSocket error handling.

All client-facing errors use one JSON shape:

    {
        "type": "server.error",
        "code": "unknown_message_type",   # Machine-readable code
        "message": "Human-readable description",
        ...extra fields
    }

Common codes:
    - invalid_message: Malformed JSON, non-object frame or missing type
    - unknown_message_type: Type outside the client vocabulary
    - invalid_payload: Known type with a bad or missing field
    - binary_not_supported: Binary frame received
    - upstream_not_ready: Upstream-dependent action before the handshake
    - upstream_error: Error reported by the realtime backend
    - time_limit / response_limit: Guardrail termination
    - authentication_failed / origin_rejected: Rejected upgrade
    - server_at_capacity / session_in_use: Admission failures
    - internal_error: Unexpected server error
"""

from __future__ import annotations

from typing import Any

from fastapi import WebSocket

from .helpers import safe_send_json


def build_error_payload(
    code: str,
    message: str,
    *,
    extra: dict[str, Any] | None = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "type": "server.error",
        "code": code,
        "message": message,
    }
    if extra:
        payload.update(extra)
    return payload


async def send_error(
    ws: WebSocket,
    *,
    code: str,
    message: str,
    extra: dict[str, Any] | None = None,
) -> bool:
    """Send a structured error event to the client.

    Returns:
        True if sent, False if the client had already gone away.
    """
    return await safe_send_json(ws, build_error_payload(code, message, extra=extra))


async def reject_connection(
    ws: WebSocket,
    *,
    code: str,
    message: str,
    close_code: int,
    extra: dict[str, Any] | None = None,
) -> None:
    """Accept briefly to deliver an error event, then close.

    The client receives a meaningful error rather than a bare close code.
    """
    await ws.accept()
    await send_error(ws, code=code, message=message, extra=extra)
    await ws.close(code=close_code, reason=code)


__all__ = ["build_error_payload", "send_error", "reject_connection"]
