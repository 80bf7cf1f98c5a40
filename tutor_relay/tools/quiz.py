"""Static multiple-choice quiz generator."""

from __future__ import annotations

import logging
from typing import Any

from .context import ToolContext
from ..config.tools import DEFAULT_QUIZ_QUESTIONS

logger = logging.getLogger(__name__)

QUESTION_BANK: tuple[dict[str, Any], ...] = (
    {
        "question": "¿Cómo se dice 'coffee' en español?",
        "options": ["café", "leche", "agua", "jugo"],
        "answer": "café",
    },
    {
        "question": "¿Cuál es el artículo correcto? ___ mesa",
        "options": ["el", "la", "los", "las"],
        "answer": "la",
    },
    {
        "question": "¿Qué significa 'por favor'?",
        "options": ["thank you", "please", "sorry", "goodbye"],
        "answer": "please",
    },
    {
        "question": "Completa: Yo ___ estudiante.",
        "options": ["es", "soy", "eres", "son"],
        "answer": "soy",
    },
    {
        "question": "¿Cómo se dice 'good morning'?",
        "options": ["buenas noches", "buenas tardes", "buenos días", "hola"],
        "answer": "buenos días",
    },
)


def _question_count(raw: Any) -> int:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        count = DEFAULT_QUIZ_QUESTIONS
    else:
        count = int(raw)
    return max(1, min(count, len(QUESTION_BANK)))


async def trigger_quiz(args: dict[str, Any], context: ToolContext) -> dict[str, Any]:
    topic = args.get("topic")
    if not isinstance(topic, str) or not topic.strip():
        topic = context.scenario.title if context.scenario else "vocabulary review"

    count = _question_count(args.get("num_questions"))
    questions = [dict(question) for question in QUESTION_BANK[:count]]
    logger.info("trigger_quiz: session_id=%s topic=%s questions=%d", context.session_id, topic, count)
    return {
        "ok": True,
        "quiz": {
            "title": f"Quiz: {topic}",
            "questions": questions,
        },
    }


__all__ = ["QUESTION_BANK", "trigger_quiz"]
