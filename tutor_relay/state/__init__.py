"""Centralized state dataclasses for the relay.

Re-exports the per-session state definitions so callers have a single
import point for state types.
"""

from .session import (
    STAT_FIELDS,
    SessionPhase,
    SessionState,
    SessionStats,
    UpstreamStatus,
    TerminationReason,
    ToolCallBuffer,
    SessionProgress,
    TranscriptEntry,
    ToolResultEntry,
    utc_now_iso,
)

__all__ = [
    "STAT_FIELDS",
    "SessionPhase",
    "SessionProgress",
    "SessionState",
    "SessionStats",
    "ToolCallBuffer",
    "ToolResultEntry",
    "TranscriptEntry",
    "TerminationReason",
    "UpstreamStatus",
    "utc_now_iso",
]
