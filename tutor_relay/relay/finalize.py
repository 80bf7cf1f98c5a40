"""End-of-call finalize: synthesize missing grade/quiz results and close out.

Runs inside the session actor, so it never interleaves with tool-call
aggregation. Synthesis checks existing tool results first, which keeps at
most one synthesized grade and one synthesized quiz per session key, also
across reconnects (results are hydrated on start).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..config.tools import GRADE_TOOL_NAME, QUIZ_TOOL_NAME
from ..config.websocket import WS_CLOSE_NORMAL_CODE, WS_CLOSE_CALL_ENDED_REASON
from ..state.session import SessionProgress, TerminationReason, utc_now_iso
from ..tools.executor import run_tool_safe
from ..scenarios.types import Scenario

if TYPE_CHECKING:
    from .session import RealtimeSession

logger = logging.getLogger(__name__)

DEFAULT_TOPIC = "general conversation"


def lesson_topic(scenario: Scenario | None, scenario_id: str | None) -> str:
    if scenario is not None and scenario.title:
        return scenario.title
    return scenario_id or DEFAULT_TOPIC


def completion_score(grade: dict[str, Any] | None) -> float | None:
    """Numeric score of a grade result, or None."""
    if not grade:
        return None
    score = grade.get("score")
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        return None
    return score


async def _synthesize(session: RealtimeSession, name: str, args: dict[str, Any]) -> None:
    logger.info("finalize: synthesizing %s", name)
    result = await run_tool_safe(session.tool_executor, name, args, session.tool_context())
    await session.record_tool_result(name, result)


async def finalize_call(session: RealtimeSession) -> None:
    """Run the end_call protocol. A second call is a no-op."""
    if not session.begin_termination(TerminationReason.END_CALL):
        return

    scenario = session.load_scenario()
    topic = lesson_topic(scenario, session.state.scenario_id)

    if not session.has_tool_result(GRADE_TOOL_NAME):
        await _synthesize(session, GRADE_TOOL_NAME, {"topic": topic})

    auto_quiz = scenario.auto_quiz if scenario is not None else None
    if (
        auto_quiz is not None
        and auto_quiz.enabled
        and auto_quiz.when == "end_call"
        and not session.has_tool_result(QUIZ_TOOL_NAME)
    ):
        args: dict[str, Any] = {"topic": topic}
        if auto_quiz.num_questions is not None:
            args["num_questions"] = auto_quiz.num_questions
        await _synthesize(session, QUIZ_TOOL_NAME, args)

    grade = session.latest_tool_result(GRADE_TOOL_NAME)
    progress = SessionProgress(
        completed=True,
        completion_score=completion_score(grade.result if grade is not None else None),
        completed_at=utc_now_iso(),
    )
    await session.persist_final(progress)

    await session.close_upstream(WS_CLOSE_NORMAL_CODE, WS_CLOSE_CALL_ENDED_REASON)
    await session.send_client({"type": "server.call_ended", "reason": TerminationReason.END_CALL.value})
    await session.close_client(WS_CLOSE_NORMAL_CODE, WS_CLOSE_CALL_ENDED_REASON)
    await session.finish()


__all__ = ["finalize_call", "completion_score", "lesson_topic"]
