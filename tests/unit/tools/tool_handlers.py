"""Unit tests for the built-in grade and quiz tools."""

from __future__ import annotations

import asyncio

from tutor_relay.tools.quiz import QUESTION_BANK, trigger_quiz
from tutor_relay.tools.grade import BASE_SCORE, DEFAULT_TIPS, grade_lesson, score_transcript
from tutor_relay.tools.context import ToolContext
from tutor_relay.state.session import TranscriptEntry
from tutor_relay.scenarios.registry import ScenarioRegistry


def _context(*lines: tuple[str, str]) -> ToolContext:
    scenario = ScenarioRegistry().get_scenario("a1-ordering-coffee")
    return ToolContext(
        session_id="sess-1",
        scenario_id=scenario.id,
        scenario=scenario,
        transcript=tuple(TranscriptEntry(role=role, text=text) for role, text in lines),
    )


def test_empty_transcript_gets_base_score() -> None:
    score, unused = score_transcript(ToolContext(session_id="s"))
    assert score == BASE_SCORE
    assert unused == []


def test_score_counts_participation_and_target_phrases() -> None:
    context = _context(
        ("ai", "¡Hola! ¿Qué desea?"),
        ("user", "Quisiera un café con leche, por favor."),
    )
    score, unused = score_transcript(context)

    assert score == BASE_SCORE + 3 + 5
    assert "¿Cuánto cuesta?" in unused
    assert "el cruasán (croissant)" in unused
    assert not any(term.startswith("Quisiera") for term in unused)


def test_score_is_capped_at_one_hundred() -> None:
    lines = [("user", "Quisiera un café con leche, por favor. ¿Cuánto cuesta? el café la leche el cruasán")] * 10
    score, unused = score_transcript(_context(*lines))
    assert score == 100
    assert unused == []


def test_grade_lesson_result_shape() -> None:
    async def _run() -> None:
        result = await grade_lesson({"topic": "coffee"}, _context(("user", "Hola")))
        assert result["ok"] is True
        assert 70 <= result["score"] <= 100
        assert '"coffee"' in result["summary"]
        assert len(result["tips"]) == 3
        assert result["tips"][0].startswith("Try using")

    asyncio.run(_run())


def test_grade_lesson_without_scenario_uses_default_tips() -> None:
    async def _run() -> None:
        result = await grade_lesson({}, ToolContext(session_id="s"))
        assert result["tips"] == list(DEFAULT_TIPS)
        assert "general conversation" in result["summary"]

    asyncio.run(_run())


def test_quiz_question_count_is_clamped() -> None:
    async def _run() -> None:
        context = ToolContext(session_id="s")
        assert len((await trigger_quiz({"num_questions": 2}, context))["quiz"]["questions"]) == 2
        assert len((await trigger_quiz({"num_questions": 0}, context))["quiz"]["questions"]) == 1
        assert len((await trigger_quiz({"num_questions": 99}, context))["quiz"]["questions"]) == len(QUESTION_BANK)
        assert len((await trigger_quiz({"num_questions": "x"}, context))["quiz"]["questions"]) == 3

    asyncio.run(_run())


def test_quiz_title_uses_topic_or_scenario() -> None:
    async def _run() -> None:
        assert (await trigger_quiz({"topic": "Café"}, ToolContext(session_id="s")))["quiz"]["title"] == "Quiz: Café"
        assert (await trigger_quiz({}, _context()))["quiz"]["title"] == "Quiz: Ordering Coffee"
        assert (await trigger_quiz({}, ToolContext(session_id="s")))["quiz"]["title"] == "Quiz: vocabulary review"

    asyncio.run(_run())
