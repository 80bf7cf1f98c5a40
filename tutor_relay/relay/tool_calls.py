"""Aggregation of streamed function-call arguments.

Both detection paths (``response.function_call_arguments.done`` and a
``function_call`` item in ``response.output_item.done``) go through ``claim``,
which admits each ``call_id`` at most once for the lifetime of the session.
"""

from __future__ import annotations

import json
import logging
from typing import Any
from dataclasses import dataclass

from ..state.session import ToolCallBuffer

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PendingToolCall:
    call_id: str
    name: str | None
    args: dict[str, Any]


def parse_tool_arguments(text: Any) -> dict[str, Any]:
    """Parse argument JSON; anything that is not a JSON object becomes ``{}``."""
    if isinstance(text, dict):
        return text
    if not isinstance(text, str) or not text.strip():
        return {}
    try:
        value = json.loads(text)
    except json.JSONDecodeError:
        logger.warning("tool call arguments are not valid JSON (%d chars)", len(text))
        return {}
    return value if isinstance(value, dict) else {}


class ToolCallAggregator:
    def __init__(self) -> None:
        self._buffers: dict[str, ToolCallBuffer] = {}
        self._dispatched: set[str] = set()
        self._in_flight: set[str] = set()

    def on_delta(self, call_id: str, delta: str, name: str | None = None) -> None:
        if call_id in self._dispatched:
            return
        self._buffers.setdefault(call_id, ToolCallBuffer()).append(delta, name)

    def seen(self, call_id: str) -> bool:
        return call_id in self._dispatched

    def in_flight(self, call_id: str) -> bool:
        return call_id in self._in_flight

    def buffered(self, call_id: str) -> ToolCallBuffer | None:
        return self._buffers.get(call_id)

    def claim(self, call_id: str, name: str | None, arguments: Any = None) -> PendingToolCall | None:
        """Admit ``call_id`` for execution, or return None if it was already claimed."""
        if call_id in self._dispatched or call_id in self._in_flight:
            logger.info("tool call %s already dispatched; ignoring", call_id)
            return None
        self._dispatched.add(call_id)
        self._in_flight.add(call_id)

        buffer = self._buffers.pop(call_id, None)
        if buffer is not None:
            args = parse_tool_arguments(buffer.args_text)
            resolved_name = name or buffer.name
        else:
            args = parse_tool_arguments(arguments)
            resolved_name = name
        return PendingToolCall(call_id=call_id, name=resolved_name or None, args=args)

    def complete(self, call_id: str) -> None:
        self._in_flight.discard(call_id)

    @property
    def pending_buffers(self) -> int:
        return len(self._buffers)


__all__ = ["PendingToolCall", "ToolCallAggregator", "parse_tool_arguments"]
