"""Tool executor configuration."""

import os


GRADE_TOOL_NAME = os.getenv("GRADE_TOOL_NAME", "grade_lesson")
QUIZ_TOOL_NAME = os.getenv("QUIZ_TOOL_NAME", "trigger_quiz")

# Hard timeout for a single tool execution in seconds
TOOL_TIMEOUT_S = float(os.getenv("TOOL_TIMEOUT_S", "10"))

DEFAULT_QUIZ_QUESTIONS = int(os.getenv("DEFAULT_QUIZ_QUESTIONS", "3"))

__all__ = [
    "GRADE_TOOL_NAME",
    "QUIZ_TOOL_NAME",
    "TOOL_TIMEOUT_S",
    "DEFAULT_QUIZ_QUESTIONS",
]
