"""Context handed to tool handlers alongside their parsed arguments."""

from __future__ import annotations

from dataclasses import field, dataclass

from ..scenarios.types import Scenario
from ..state.session import TranscriptEntry


@dataclass(frozen=True, slots=True)
class ToolContext:
    """Read-only view of the calling session.

    Attributes:
        session_id: Session key of the calling relay.
        scenario_id: Scenario selected for the session, if any.
        scenario: Loaded scenario, when available.
        transcript: Snapshot of the bounded transcript excerpt.
    """

    session_id: str
    scenario_id: str | None = None
    scenario: Scenario | None = None
    transcript: tuple[TranscriptEntry, ...] = field(default_factory=tuple)

    def user_lines(self) -> list[str]:
        return [entry.text for entry in self.transcript if entry.role == "user"]


__all__ = ["ToolContext"]
