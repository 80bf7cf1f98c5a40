"""Aggregator of configuration modules.

This module re-exports the config API from smaller modules:
- limits: guardrails, transcript bounds, concurrency
- upstream: realtime backend endpoint and session handshake defaults
- tools: tool names and executor timeout
- secrets: session token signing
- storage: session store backend
- scenarios: scenario content directory
- cors: origin policy
- websocket: close codes and client error codes

Logging and telemetry settings are imported from their own modules.
"""

from .limits import (
    MAX_SESSION_SECONDS,
    MAX_RESPONSES_PER_SESSION,
    GUARDRAIL_TICK_S,
    STATS_PERSIST_EVERY_TICKS,
    TRANSCRIPT_MAX_ENTRIES,
    SESSION_INBOX_MAX,
    MAX_CONCURRENT_CONNECTIONS,
    WS_HANDSHAKE_ACQUIRE_TIMEOUT_S,
)
from .upstream import (
    OPENAI_API_KEY,
    OPENAI_REALTIME_MODEL,
    OPENAI_REALTIME_URL,
    UPSTREAM_CONNECT_TIMEOUT_S,
    UPSTREAM_CONNECT_ON_ACCEPT,
    UPSTREAM_LOG_EVENTS,
)
from .tools import (
    GRADE_TOOL_NAME,
    QUIZ_TOOL_NAME,
    TOOL_TIMEOUT_S,
)
from .secrets import (
    SESSION_SIGNING_SECRET,
    REQUIRE_SESSION_TOKEN,
    SESSION_TOKEN_TTL_S,
)
from .storage import SESSION_STORE_BACKEND, SESSION_STORE_DIR
from .scenarios import SCENARIOS_DIR
from .cors import ALLOW_ANY_ORIGIN, ALLOWED_ORIGINS
from .websocket import (
    WS_CLOSE_NORMAL_CODE,
    WS_CLOSE_UNAUTHORIZED_CODE,
    WS_CLOSE_BUSY_CODE,
    WS_CLOSE_GUARDRAIL_CODE,
)


__all__ = [
    # limits
    "MAX_SESSION_SECONDS",
    "MAX_RESPONSES_PER_SESSION",
    "GUARDRAIL_TICK_S",
    "STATS_PERSIST_EVERY_TICKS",
    "TRANSCRIPT_MAX_ENTRIES",
    "SESSION_INBOX_MAX",
    "MAX_CONCURRENT_CONNECTIONS",
    "WS_HANDSHAKE_ACQUIRE_TIMEOUT_S",
    # upstream
    "OPENAI_API_KEY",
    "OPENAI_REALTIME_MODEL",
    "OPENAI_REALTIME_URL",
    "UPSTREAM_CONNECT_TIMEOUT_S",
    "UPSTREAM_CONNECT_ON_ACCEPT",
    "UPSTREAM_LOG_EVENTS",
    # tools
    "GRADE_TOOL_NAME",
    "QUIZ_TOOL_NAME",
    "TOOL_TIMEOUT_S",
    # secrets
    "SESSION_SIGNING_SECRET",
    "REQUIRE_SESSION_TOKEN",
    "SESSION_TOKEN_TTL_S",
    # storage
    "SESSION_STORE_BACKEND",
    "SESSION_STORE_DIR",
    # scenarios
    "SCENARIOS_DIR",
    # cors
    "ALLOW_ANY_ORIGIN",
    "ALLOWED_ORIGINS",
    # websocket
    "WS_CLOSE_NORMAL_CODE",
    "WS_CLOSE_UNAUTHORIZED_CODE",
    "WS_CLOSE_BUSY_CODE",
    "WS_CLOSE_GUARDRAIL_CODE",
]
