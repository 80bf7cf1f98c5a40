"""Session-scoped dataclasses owned by one relay actor.

SessionState:
    Identity of the session: the routing key and the scenario chosen by the
    client (query string or first ``client.hello``).

ToolCallBuffer:
    Streamed function-call arguments for a single ``call_id``. Created on the
    first argument delta and consumed on the terminal event.

ToolResultEntry / TranscriptEntry:
    Append-only log records persisted under ``toolResults`` / ``transcript``.

SessionProgress:
    Written once when the call ends through ``client.end_call``.

SessionStats:
    Monotonic counters. Every increment goes through ``bump``.

All timestamps are ISO-8601 UTC strings so the persisted record is JSON
friendly without further conversion.
"""

from __future__ import annotations

import enum
from typing import Any
from datetime import datetime, timezone
from dataclasses import field, dataclass


def utc_now_iso() -> str:
    """Return the current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class SessionPhase(str, enum.Enum):
    """Lifecycle phases of a relay session."""

    IDLE = "idle"
    AWAITING_UPSTREAM = "awaiting_upstream"
    ACTIVE = "active"
    TERMINATING = "terminating"
    CLOSED = "closed"


class TerminationReason(str, enum.Enum):
    """Why a session left the ACTIVE phase."""

    TIME_LIMIT = "time_limit"
    RESPONSE_LIMIT = "response_limit"
    END_CALL = "end_call"
    CLIENT_CLOSED = "client_closed"
    CLIENT_ERROR = "client_error"
    UPSTREAM_CLOSED = "upstream_closed"
    SERVER_SHUTDOWN = "server_shutdown"


class UpstreamStatus(str, enum.Enum):
    """Observable state of the upstream socket from the client's point of view."""

    NOT_STARTED = "not_started"
    CONNECTING = "connecting"
    READY = "ready"
    FAILED = "failed"
    CLOSED = "closed"


@dataclass
class SessionState:
    """Routing identity of a session.

    Attributes:
        session_id: Session key the client connected with.
        scenario_id: Scenario selected for the call, if any.
        hello_seen: Whether the first ``client.hello`` has been processed.
    """

    session_id: str
    scenario_id: str | None = None
    hello_seen: bool = False


@dataclass
class ToolCallBuffer:
    """Accumulated argument text for one streamed function call."""

    name: str | None = None
    args_text: str = ""

    def append(self, delta: str, name: str | None = None) -> None:
        self.args_text += delta
        if name:
            self.name = name


@dataclass(frozen=True, slots=True)
class ToolResultEntry:
    name: str
    result: dict[str, Any]
    at: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "result": self.result, "at": self.at}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ToolResultEntry:
        result = data.get("result")
        return cls(
            name=str(data.get("name") or ""),
            result=result if isinstance(result, dict) else {},
            at=str(data.get("at") or utc_now_iso()),
        )


@dataclass(frozen=True, slots=True)
class TranscriptEntry:
    role: str  # "user" | "ai"
    text: str
    at: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> dict[str, Any]:
        return {"role": self.role, "text": self.text, "at": self.at}


@dataclass(slots=True)
class SessionProgress:
    """Completion record written by end-of-call finalize."""

    completed: bool = False
    completion_score: float | None = None
    completed_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "completed": self.completed,
            "completionScore": self.completion_score,
            "completedAt": self.completed_at,
        }


STAT_FIELDS: tuple[str, ...] = (
    "audio_chunks_in",
    "audio_chunks_out",
    "tool_calls",
    "responses_created",
)


@dataclass(slots=True)
class SessionStats:
    """Monotonic per-session counters."""

    audio_chunks_in: int = 0
    audio_chunks_out: int = 0
    tool_calls: int = 0
    responses_created: int = 0

    def bump(self, name: str, amount: int = 1) -> int:
        """Increment counter ``name`` and return its new value.

        Raises:
            KeyError: If ``name`` is not a known counter.
            ValueError: If ``amount`` is negative.
        """
        if name not in STAT_FIELDS:
            raise KeyError(f"Unknown session stat '{name}'")
        if amount < 0:
            raise ValueError("Session stats are monotonic")
        value = getattr(self, name) + amount
        setattr(self, name, value)
        return value

    def to_dict(self) -> dict[str, int]:
        return {
            "audioChunksIn": self.audio_chunks_in,
            "audioChunksOut": self.audio_chunks_out,
            "toolCalls": self.tool_calls,
            "responsesCreated": self.responses_created,
        }


__all__ = [
    "utc_now_iso",
    "SessionPhase",
    "UpstreamStatus",
    "TerminationReason",
    "SessionState",
    "ToolCallBuffer",
    "ToolResultEntry",
    "TranscriptEntry",
    "SessionProgress",
    "SessionStats",
    "STAT_FIELDS",
]
