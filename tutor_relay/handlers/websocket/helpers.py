"""Safe send/close helpers for the client socket."""

from __future__ import annotations

import json
import logging
import contextlib
from typing import Any

from fastapi import WebSocket

from .disconnects import is_expected_disconnect

logger = logging.getLogger(__name__)


async def safe_send_text(ws: WebSocket, text: str) -> bool:
    """Send text to the client, returning False if the socket is gone."""
    try:
        await ws.send_text(text)
    except Exception as exc:
        if not is_expected_disconnect(exc):
            raise
        logger.info("WebSocket disconnected while sending %s bytes", len(text))
        return False
    return True


async def safe_send_json(ws: WebSocket, payload: dict[str, Any]) -> bool:
    """Send a JSON payload, tolerating client disconnects."""
    return await safe_send_text(ws, json.dumps(payload, ensure_ascii=False))


async def safe_close(ws: WebSocket, code: int, reason: str = "") -> None:
    """Close the client socket, ignoring errors from an already-closed transport."""
    with contextlib.suppress(Exception):
        await ws.close(code=code, reason=reason)


__all__ = ["safe_send_text", "safe_send_json", "safe_close"]
