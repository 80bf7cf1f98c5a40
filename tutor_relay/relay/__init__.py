"""Relay core: one actor per client session bridging to the realtime backend.

session.py:
    RealtimeSession actor, its inbox and the shared primitives.

client_dispatch.py / upstream_dispatch.py:
    Per-type handler tables for each direction.

tool_calls.py:
    Streamed function-call argument aggregation (one execution per call_id).

guardrails.py:
    Duration watchdog and response cap predicates.

finalize.py:
    End-of-call grading/quiz synthesis and close-out.

transcript.py:
    Response text accumulation and the bounded transcript excerpt.
"""

from .session import InboxItem, RelaySettings, RealtimeSession
from .finalize import finalize_call
from .tool_calls import PendingToolCall, ToolCallAggregator, parse_tool_arguments
from .guardrails import GuardrailWatchdog, duration_exceeded, responses_exceeded
from .transcript import TranscriptLog, ResponseAccumulator

__all__ = [
    "InboxItem",
    "RelaySettings",
    "RealtimeSession",
    "finalize_call",
    "PendingToolCall",
    "ToolCallAggregator",
    "parse_tool_arguments",
    "GuardrailWatchdog",
    "duration_exceeded",
    "responses_exceeded",
    "TranscriptLog",
    "ResponseAccumulator",
]
