"""Classify socket exceptions raised by normal teardown.

Both sockets of a relay session end through exceptions as often as through
close frames: Starlette raises on the client side, websockets and anyio on the
upstream side. These are session endings, not failures, and are neither
logged as errors nor reported.
"""

from __future__ import annotations

from fastapi import WebSocketDisconnect
from websockets.exceptions import ConnectionClosed
from anyio import EndOfStream, BrokenResourceError, ClosedResourceError

_RUNTIME_DISCONNECT_ERRORS: tuple[type[BaseException], ...] = (
    ConnectionResetError,
    BrokenPipeError,
    EOFError,
    BrokenResourceError,
    ClosedResourceError,
    EndOfStream,
)

_RUNTIME_DISCONNECT_MESSAGES = (
    "websocket is not connected",
    "cannot call receive once a disconnect message has been received",
    "unexpected asgi message 'websocket.send', after sending 'websocket.close'",
    "cannot call \"send\" once a close message has been sent",
)


def is_expected_disconnect(exc: BaseException) -> bool:
    """Return True when the exception represents normal transport teardown."""
    if isinstance(exc, (WebSocketDisconnect, ConnectionClosed)):
        return True
    if isinstance(exc, _RUNTIME_DISCONNECT_ERRORS):
        return True
    if isinstance(exc, RuntimeError):
        message = str(exc).strip().lower()
        return any(fragment in message for fragment in _RUNTIME_DISCONNECT_MESSAGES)
    return False


def disconnect_code(exc: BaseException) -> int | None:
    """Close code carried by a disconnect exception, if any."""
    if isinstance(exc, WebSocketDisconnect):
        return exc.code
    if isinstance(exc, ConnectionClosed) and exc.rcvd is not None:
        return exc.rcvd.code
    return None


__all__ = ["is_expected_disconnect", "disconnect_code"]
