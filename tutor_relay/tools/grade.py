"""Placeholder lesson grader.

Scores the transcript excerpt against the scenario's target phrases and
vocabulary. The heuristic is intentionally shallow: it only has to produce a
stable, plausible grade in the 70-100 range for the end-of-call summary.
"""

from __future__ import annotations

import re
import logging
from typing import Any

from .context import ToolContext

logger = logging.getLogger(__name__)

BASE_SCORE = 70
MAX_SCORE = 100
PARTICIPATION_POINTS = 3
PARTICIPATION_CAP = 15
PHRASE_POINTS = 5
PHRASE_CAP = 15

DEFAULT_TIPS = (
    "Try using more connectors like 'porque' and 'pero'.",
    "Practice verb conjugation in the present tense.",
    "Great pronunciation, keep it up!",
)

_NON_WORD_RE = re.compile(r"[^\w\s]+", re.UNICODE)


def _normalize(text: str) -> str:
    return " ".join(_NON_WORD_RE.sub(" ", text.lower()).split())


def _candidate_terms(context: ToolContext) -> list[tuple[str, str | None]]:
    scenario = context.scenario
    if scenario is None:
        return []
    terms: list[tuple[str, str | None]] = []
    for phrase in scenario.target_phrases:
        terms.append((phrase, None))
    for entry in scenario.vocab:
        term = entry.get("term")
        if isinstance(term, str) and term:
            translation = entry.get("translation")
            terms.append((term, translation if isinstance(translation, str) else None))
    return terms


def score_transcript(context: ToolContext) -> tuple[int, list[str]]:
    """Return ``(score, unused_terms)`` for the session transcript."""
    user_lines = context.user_lines()
    spoken = f" {_normalize(' '.join(user_lines))} "

    hits = 0
    unused: list[str] = []
    for term, translation in _candidate_terms(context):
        needle = _normalize(term)
        if needle and f" {needle} " in spoken:
            hits += 1
        elif needle:
            unused.append(f"{term} ({translation})" if translation else term)

    participation = min(PARTICIPATION_CAP, PARTICIPATION_POINTS * len(user_lines))
    phrase_score = min(PHRASE_CAP, PHRASE_POINTS * hits)
    return min(MAX_SCORE, BASE_SCORE + participation + phrase_score), unused


async def grade_lesson(args: dict[str, Any], context: ToolContext) -> dict[str, Any]:
    topic = args.get("topic")
    if not isinstance(topic, str) or not topic.strip():
        topic = context.scenario.title if context.scenario else "general conversation"

    score, unused = score_transcript(context)
    tips = [f"Try using '{term}' next time." for term in unused[:3]] or list(DEFAULT_TIPS)
    logger.info("grade_lesson: session_id=%s topic=%s score=%s", context.session_id, topic, score)
    return {
        "ok": True,
        "score": score,
        "summary": (
            f'The student demonstrated good effort on "{topic}". '
            "Vocabulary usage was appropriate for the level."
        ),
        "tips": tips,
    }


__all__ = ["grade_lesson", "score_transcript"]
