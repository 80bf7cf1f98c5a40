"""Tool handlers and the executor boundary used by the relay."""

from .context import ToolContext
from .quiz import QUESTION_BANK, trigger_quiz
from .grade import grade_lesson, score_transcript
from .executor import ToolExecutor, tool_error, run_tool_safe
from .registry import ToolHandler, ToolRegistry, build_default_registry

__all__ = [
    "ToolContext",
    "ToolExecutor",
    "ToolHandler",
    "ToolRegistry",
    "build_default_registry",
    "run_tool_safe",
    "tool_error",
    "grade_lesson",
    "score_transcript",
    "trigger_quiz",
    "QUESTION_BANK",
]
