"""Upstream realtime backend: connection, handshake and outbound events."""

from .connection import UpstreamConnection
from .connector import connect_upstream, build_upstream_url, build_upstream_headers
from .session_config import build_session_config, build_session_update
from .events import (
    OUTBOUND_ALLOWLIST,
    SERVER_GENERATED_EVENTS,
    UPSTREAM_EVENT_ALIASES,
    CLIENT_FORWARD_ALLOWLIST,
    validate_outbound,
    canonical_event_type,
)

__all__ = [
    "UpstreamConnection",
    "connect_upstream",
    "build_upstream_url",
    "build_upstream_headers",
    "build_session_config",
    "build_session_update",
    "CLIENT_FORWARD_ALLOWLIST",
    "SERVER_GENERATED_EVENTS",
    "OUTBOUND_ALLOWLIST",
    "UPSTREAM_EVENT_ALIASES",
    "validate_outbound",
    "canonical_event_type",
]
