"""Read-only summary documents built from persisted session records."""

from __future__ import annotations

from typing import Any

from .base import SessionStoreBackend
from ..config.tools import GRADE_TOOL_NAME, QUIZ_TOOL_NAME


def latest_tool_result(tool_results: list[dict[str, Any]], name: str) -> dict[str, Any] | None:
    """Return the result of the last entry named ``name`` (last write wins)."""
    for entry in reversed(tool_results):
        if isinstance(entry, dict) and entry.get("name") == name:
            result = entry.get("result")
            return result if isinstance(result, dict) else None
    return None


def build_summary(record: dict[str, Any]) -> dict[str, Any]:
    """Shape a persisted record into the summary document."""
    tool_results = [entry for entry in record.get("toolResults") or [] if isinstance(entry, dict)]
    return {
        "sessionKey": record.get("sessionKey"),
        "scenarioId": record.get("scenarioId"),
        "startedAt": record.get("startedAt"),
        "endedAt": record.get("endedAt"),
        "terminationReason": record.get("terminationReason"),
        "stats": record.get("stats") or {},
        "toolResults": tool_results,
        "transcript": record.get("transcript") or [],
        "progress": record.get("progress"),
        "grade": latest_tool_result(tool_results, GRADE_TOOL_NAME),
        "quiz": latest_tool_result(tool_results, QUIZ_TOOL_NAME),
    }


async def load_summary(backend: SessionStoreBackend, session_key: str) -> dict[str, Any] | None:
    """Return the summary for ``session_key`` or None when nothing was persisted."""
    record = await backend.load(session_key)
    if record is None:
        return None
    return build_summary(record)


__all__ = ["latest_tool_result", "build_summary", "load_summary"]
