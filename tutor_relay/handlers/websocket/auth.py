"""Upgrade-time checks for the relay WebSocket: origin policy and session tokens."""

from __future__ import annotations

import logging

from fastapi import WebSocket

from ...errors.auth import TokenError
from ...auth.tokens import TokenPayload, verify_token
from ...config.cors import ALLOWED_ORIGINS, ALLOW_ANY_ORIGIN
from ...config.secrets import REQUIRE_SESSION_TOKEN, SESSION_SIGNING_SECRET

logger = logging.getLogger(__name__)


def is_origin_allowed(
    origin: str | None,
    *,
    allowed: tuple[str, ...] | None = None,
    allow_any: bool | None = None,
) -> bool:
    """Return True when a browser ``Origin`` may open the socket.

    Requests without an Origin header (non-browser clients) are allowed, as is
    any origin when no allow-list is configured.
    """
    any_origin = ALLOW_ANY_ORIGIN if allow_any is None else allow_any
    if any_origin or not origin:
        return True
    allow_list = ALLOWED_ORIGINS if allowed is None else allowed
    if not allow_list:
        return True
    return origin in allow_list


def token_required(*, secret: str | None = None, require: bool | None = None) -> bool:
    signing_secret = SESSION_SIGNING_SECRET if secret is None else secret
    required = REQUIRE_SESSION_TOKEN if require is None else require
    return bool(signing_secret) and required


def authenticate_session_token(
    token: str | None,
    session_key: str,
    *,
    secret: str | None = None,
    require: bool | None = None,
) -> TokenPayload | None:
    """Validate the session token when tokens are enforced.

    Returns:
        The verified payload, or None when tokens are not enforced.

    Raises:
        TokenError: When a required token is missing or invalid.
    """
    signing_secret = SESSION_SIGNING_SECRET if secret is None else secret
    if not token_required(secret=signing_secret, require=require):
        return None
    if not token:
        raise TokenError("missing", "Session token required")
    return verify_token(token, signing_secret, session_key=session_key)


async def check_websocket_origin(websocket: WebSocket) -> bool:
    origin = websocket.headers.get("origin")
    if is_origin_allowed(origin):
        return True
    logger.warning("WebSocket origin rejected: %s", origin)
    return False


__all__ = [
    "is_origin_allowed",
    "token_required",
    "authenticate_session_token",
    "check_websocket_origin",
]
