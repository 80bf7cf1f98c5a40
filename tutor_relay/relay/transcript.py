"""Streamed response accumulation and the bounded transcript excerpt."""

from __future__ import annotations

from typing import Any
from collections import deque

from ..config.limits import TRANSCRIPT_MAX_ENTRIES
from ..state.session import TranscriptEntry


class TranscriptLog:
    """Append-only transcript that keeps only the most recent entries."""

    def __init__(self, max_entries: int | None = None) -> None:
        limit = TRANSCRIPT_MAX_ENTRIES if max_entries is None else max_entries
        self._entries: deque[TranscriptEntry] = deque(maxlen=max(1, limit))

    def append(self, role: str, text: str) -> TranscriptEntry | None:
        text = text.strip()
        if not text:
            return None
        entry = TranscriptEntry(role=role, text=text)
        self._entries.append(entry)
        return entry

    def entries(self) -> tuple[TranscriptEntry, ...]:
        return tuple(self._entries)

    def to_list(self) -> list[dict[str, Any]]:
        return [entry.to_dict() for entry in self._entries]

    def __len__(self) -> int:
        return len(self._entries)


class ResponseAccumulator:
    """Concatenates streamed deltas per ``(response_id, stream)``."""

    def __init__(self) -> None:
        self._parts: dict[tuple[str, str], list[str]] = {}

    def append(self, response_id: str, stream: str, delta: str) -> None:
        self._parts.setdefault((response_id, stream), []).append(delta)

    def text(self, response_id: str, stream: str) -> str:
        return "".join(self._parts.get((response_id, stream), ()))

    def finish(self, response_id: str, stream: str, final_text: Any = None) -> str:
        """Return the completed text and reset that accumulator.

        The event's own full text wins over the accumulated deltas.
        """
        accumulated = "".join(self._parts.pop((response_id, stream), ()))
        if isinstance(final_text, str) and final_text:
            return final_text
        return accumulated

    def clear_response(self, response_id: str) -> None:
        for key in [key for key in self._parts if key[0] == response_id]:
            del self._parts[key]

    def clear(self) -> None:
        self._parts.clear()

    def __len__(self) -> int:
        return len(self._parts)


__all__ = ["TranscriptLog", "ResponseAccumulator"]
