"""Name-to-handler registry implementing the tool executor contract."""

from __future__ import annotations

import logging
from typing import Any
from collections.abc import Callable, Awaitable

from .grade import grade_lesson
from .quiz import trigger_quiz
from .context import ToolContext
from ..errors.tool import ToolExecutionError
from ..config.tools import GRADE_TOOL_NAME, QUIZ_TOOL_NAME

logger = logging.getLogger(__name__)

ToolHandler = Callable[[dict[str, Any], ToolContext], Awaitable[dict[str, Any]]]


class ToolRegistry:
    """Dispatches tool calls by name.

    Instances are callable with ``(name, args, context)`` so a registry can be
    handed to the relay anywhere a tool executor is expected.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, ToolHandler] = {}

    def register(self, name: str, handler: ToolHandler) -> None:
        if name in self._handlers:
            logger.warning("tool registry: replacing handler for %s", name)
        self._handlers[name] = handler

    def names(self) -> list[str]:
        return sorted(self._handlers)

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    async def __call__(self, name: str, args: dict[str, Any], context: ToolContext) -> dict[str, Any]:
        handler = self._handlers.get(name)
        if handler is None:
            raise ToolExecutionError(name, f"Unknown tool: {name}")
        return await handler(args, context)


def build_default_registry() -> ToolRegistry:
    registry = ToolRegistry()
    registry.register(GRADE_TOOL_NAME, grade_lesson)
    registry.register(QUIZ_TOOL_NAME, trigger_quiz)
    return registry


__all__ = ["ToolHandler", "ToolRegistry", "build_default_registry"]
