"""WebSocket-specific runtime configuration values.

Close Codes (RFC 6455):
    1000: Normal closure (call ended, client request)
    1008: Policy violation (auth failure, origin rejected)
    1011: Internal error
    1013: Try again later (server at capacity, session key in use)
    4000+: Application-defined (guardrail termination)

Environment Variables:
    All values can be overridden.
"""

from __future__ import annotations

import os

# ============================================================================
# WebSocket Close Codes
# ============================================================================

WS_CLOSE_NORMAL_CODE = int(os.getenv("WS_CLOSE_NORMAL_CODE", "1000"))
WS_CLOSE_UNAUTHORIZED_CODE = int(os.getenv("WS_CLOSE_UNAUTHORIZED_CODE", "1008"))  # Policy violation
WS_CLOSE_INTERNAL_ERROR_CODE = int(os.getenv("WS_CLOSE_INTERNAL_ERROR_CODE", "1011"))
WS_CLOSE_BUSY_CODE = int(os.getenv("WS_CLOSE_BUSY_CODE", "1013"))  # Try again later
WS_CLOSE_GUARDRAIL_CODE = int(os.getenv("WS_CLOSE_GUARDRAIL_CODE", "4000"))  # Application-defined

WS_CLOSE_CALL_ENDED_REASON = os.getenv("WS_CLOSE_CALL_ENDED_REASON", "call_ended")

# ============================================================================
# Client error codes (server.error "code" field)
# ============================================================================

WS_ERROR_INVALID_MESSAGE = "invalid_message"
WS_ERROR_UNKNOWN_TYPE = "unknown_message_type"
WS_ERROR_INVALID_PAYLOAD = "invalid_payload"
WS_ERROR_BINARY_FRAME = "binary_not_supported"
WS_ERROR_UPSTREAM_NOT_READY = "upstream_not_ready"
WS_ERROR_UPSTREAM = "upstream_error"
WS_ERROR_AUTH_FAILED = "authentication_failed"
WS_ERROR_ORIGIN_REJECTED = "origin_rejected"
WS_ERROR_AT_CAPACITY = "server_at_capacity"
WS_ERROR_SESSION_IN_USE = "session_in_use"
WS_ERROR_UNKNOWN_SCENARIO = "unknown_scenario"
WS_ERROR_SCENARIO_LOCKED = "scenario_locked"
WS_ERROR_INTERNAL = "internal_error"

__all__ = [
    "WS_CLOSE_NORMAL_CODE",
    "WS_CLOSE_UNAUTHORIZED_CODE",
    "WS_CLOSE_INTERNAL_ERROR_CODE",
    "WS_CLOSE_BUSY_CODE",
    "WS_CLOSE_GUARDRAIL_CODE",
    "WS_CLOSE_CALL_ENDED_REASON",
    "WS_ERROR_INVALID_MESSAGE",
    "WS_ERROR_UNKNOWN_TYPE",
    "WS_ERROR_INVALID_PAYLOAD",
    "WS_ERROR_BINARY_FRAME",
    "WS_ERROR_UPSTREAM_NOT_READY",
    "WS_ERROR_UPSTREAM",
    "WS_ERROR_AUTH_FAILED",
    "WS_ERROR_ORIGIN_REJECTED",
    "WS_ERROR_AT_CAPACITY",
    "WS_ERROR_SESSION_IN_USE",
    "WS_ERROR_UNKNOWN_SCENARIO",
    "WS_ERROR_SCENARIO_LOCKED",
    "WS_ERROR_INTERNAL",
]
