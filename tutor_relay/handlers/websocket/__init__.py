"""Client WebSocket boundary: frame parsing, upgrade checks and error replies.

The connection entry point lives in ``manager`` and is imported directly by
the server so the relay core can depend on this package without a cycle.
"""

from .auth import (
    token_required,
    is_origin_allowed,
    check_websocket_origin,
    authenticate_session_token,
)
from .errors import send_error, reject_connection, build_error_payload
from .parser import CLIENT_MESSAGE_TYPES, ClientMessage, parse_client_message
from .disconnects import disconnect_code, is_expected_disconnect

__all__ = [
    "token_required",
    "is_origin_allowed",
    "check_websocket_origin",
    "authenticate_session_token",
    "send_error",
    "reject_connection",
    "build_error_payload",
    "CLIENT_MESSAGE_TYPES",
    "ClientMessage",
    "parse_client_message",
    "is_expected_disconnect",
    "disconnect_code",
]
