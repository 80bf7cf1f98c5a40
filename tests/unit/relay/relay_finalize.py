"""Unit tests for the end-of-call finalize protocol."""

from __future__ import annotations

import asyncio

from tutor_relay.relay.session import UPSTREAM_READY, InboxItem
from tutor_relay.relay.finalize import finalize_call, lesson_topic, completion_score
from tutor_relay.errors.upstream import UpstreamUnavailableError
from tutor_relay.storage.memory import MemoryStoreBackend
from tutor_relay.upstream.connection import UpstreamConnection

from tests.helpers.fakes import FakeConnector, FakeUpstreamSocket, RecordingToolExecutor
from tests.helpers.relay import TAXI_SCENARIO, build_harness

_GRADE = {"ok": True, "score": 88, "summary": "Good", "tips": []}
_QUIZ = {"ok": True, "quiz": {"title": "Quiz: Taxi Ride in Bogotá", "questions": []}}


def test_completion_score_only_accepts_numbers() -> None:
    assert completion_score({"score": 91}) == 91
    assert completion_score({"score": 72.5}) == 72.5
    assert completion_score({"score": "91"}) is None
    assert completion_score({"score": True}) is None
    assert completion_score(None) is None


def test_lesson_topic_prefers_scenario_title() -> None:
    assert lesson_topic(None, "a1-x") == "a1-x"
    assert lesson_topic(None, None) == "general conversation"


def test_end_call_synthesizes_grade_and_quiz_then_closes() -> None:
    async def _run() -> None:
        executor = RecordingToolExecutor({"grade_lesson": _GRADE, "trigger_quiz": _QUIZ})
        h = await build_harness(scenario_id=TAXI_SCENARIO, executor=executor)
        h.start()
        await h.wait_ready()

        h.client.send_from_client({"type": "client.end_call"})
        await h.wait_closed()

        assert executor.calls == [
            ("grade_lesson", {"topic": "Taxi Ride in Bogotá"}),
            ("trigger_quiz", {"topic": "Taxi Ride in Bogotá", "num_questions": 3}),
        ]
        assert h.client.of_type("server.call_ended") == [{"type": "server.call_ended", "reason": "end_call"}]
        assert h.client.close_calls == [(1000, "call_ended")]
        assert h.upstream.close_calls == [(1000, "call_ended")]
        assert not h.client.of_type("server.error")

        record = await h.record()
        assert record["terminationReason"] == "end_call"
        assert record["endedAt"]
        assert [entry["name"] for entry in record["toolResults"]] == ["grade_lesson", "trigger_quiz"]
        assert record["progress"]["completed"] is True
        assert record["progress"]["completionScore"] == 88
        assert record["progress"]["completedAt"]
        assert record["stats"]["toolCalls"] == 2

    asyncio.run(_run())


def test_end_call_does_not_regrade_when_model_already_graded() -> None:
    async def _run() -> None:
        executor = RecordingToolExecutor({"grade_lesson": _GRADE, "trigger_quiz": _QUIZ})
        h = await build_harness(scenario_id=TAXI_SCENARIO, executor=executor)
        h.start()
        await h.wait_ready()

        h.upstream.push(
            {
                "type": "response.function_call_arguments.done",
                "call_id": "call_g",
                "name": "grade_lesson",
                "arguments": '{"topic": "taxi"}',
            }
        )
        await h.wait_for(lambda: bool(h.client.of_type("server.tool_result")))
        h.client.send_from_client({"type": "client.end_call"})
        await h.wait_closed()

        names = [name for name, _ in executor.calls]
        assert names.count("grade_lesson") == 1
        assert names.count("trigger_quiz") == 1

    asyncio.run(_run())


def test_end_call_without_auto_quiz_only_grades() -> None:
    async def _run() -> None:
        h = await build_harness()
        h.start()
        await h.wait_ready()

        h.client.send_from_client({"type": "client.end_call"})
        await h.wait_closed()

        assert h.executor.calls == [("grade_lesson", {"topic": "Ordering Coffee"})]
        record = await h.record()
        assert record["progress"]["completionScore"] is None

    asyncio.run(_run())


def test_persisted_grade_is_hydrated_and_not_synthesized_again() -> None:
    async def _run() -> None:
        backend = MemoryStoreBackend()
        store = await backend.open("sess-1")
        await store.put(
            "toolResults",
            [{"name": "grade_lesson", "result": {"ok": True, "score": 75}, "at": "2025-01-01T00:00:00.000Z"}],
        )
        executor = RecordingToolExecutor()
        h = await build_harness(backend=backend, executor=executor)
        h.start()
        await h.wait_ready()

        h.client.send_from_client({"type": "client.end_call"})
        await h.wait_closed()

        assert executor.calls == []
        record = await h.record()
        assert record["progress"]["completionScore"] == 75
        assert len(record["toolResults"]) == 1

    asyncio.run(_run())


def test_second_finalize_is_a_no_op() -> None:
    async def _run() -> None:
        h = await build_harness()
        h.start()
        await h.wait_ready()

        h.client.send_from_client({"type": "client.end_call"})
        await h.wait_closed()
        calls_before = list(h.executor.calls)

        await finalize_call(h.session)

        assert h.executor.calls == calls_before
        assert len(h.client.of_type("server.call_ended")) == 1

    asyncio.run(_run())


def test_end_call_works_while_upstream_unavailable() -> None:
    async def _run() -> None:
        h = await build_harness(connector=FakeConnector(error=UpstreamUnavailableError("down")))
        h.start()
        await h.wait_ready()

        h.client.send_from_client({"type": "client.end_call"})
        await h.wait_closed()

        assert h.executor.calls == [("grade_lesson", {"topic": "Ordering Coffee"})]
        assert (await h.record())["terminationReason"] == "end_call"
        assert h.client.close_calls == [(1000, "call_ended")]

    asyncio.run(_run())


class _GatedConnector(FakeConnector):
    """Connector that only returns once ``gate`` is set."""

    def __init__(self) -> None:
        super().__init__()
        self.gate = asyncio.Event()

    async def __call__(self) -> UpstreamConnection:
        await self.gate.wait()
        return await super().__call__()


class _GateReleasingExecutor(RecordingToolExecutor):
    """Lets the pending upstream connect finish while grading is in progress."""

    def __init__(self, gate: asyncio.Event) -> None:
        super().__init__({"grade_lesson": _GRADE})
        self.gate = gate

    async def __call__(self, name, args, context):
        self.gate.set()
        for _ in range(5):
            await asyncio.sleep(0)
        return await super().__call__(name, args, context)


class _LateReadyExecutor(RecordingToolExecutor):
    """Queues an upstream-ready item behind the running finalize."""

    def __init__(self, socket: FakeUpstreamSocket) -> None:
        super().__init__({"grade_lesson": _GRADE})
        self.socket = socket
        self.inbox = None

    async def __call__(self, name, args, context):
        self.inbox.put_nowait(InboxItem(UPSTREAM_READY, UpstreamConnection(self.socket)))
        return await super().__call__(name, args, context)


def test_upstream_connected_during_finalize_is_closed() -> None:
    async def _run() -> None:
        connector = _GatedConnector()
        h = await build_harness(connector=connector, executor=_GateReleasingExecutor(connector.gate))
        h.start()

        h.client.send_from_client({"type": "client.end_call"})
        await h.wait_closed()

        assert connector.calls == 1
        assert h.session.closed
        assert h.session.upstream is None
        assert h.upstream.close_calls == [(1000, "session_closed")]
        assert (await h.record())["terminationReason"] == "end_call"

    asyncio.run(_run())


def test_upstream_ready_left_in_inbox_is_closed_on_cleanup() -> None:
    async def _run() -> None:
        late_socket = FakeUpstreamSocket()
        executor = _LateReadyExecutor(late_socket)
        h = await build_harness(
            connector=FakeConnector(error=UpstreamUnavailableError("down")),
            executor=executor,
        )
        executor.inbox = h.session.inbox
        h.start()
        await h.wait_ready()

        h.client.send_from_client({"type": "client.end_call"})
        await h.wait_closed()

        assert h.session.upstream is None
        assert late_socket.close_calls == [(1000, "session_closed")]
        assert h.session.inbox.empty()

    asyncio.run(_run())


def test_failure_during_finalize_still_closes_session() -> None:
    async def _run() -> None:
        h = await build_harness()
        h.start()
        await h.wait_ready()

        async def _failing_persist(progress=None) -> None:
            raise RuntimeError("store unavailable")

        h.session.persist_final = _failing_persist
        h.client.send_from_client({"type": "client.end_call"})
        await h.wait_closed()

        assert h.session.closed
        assert h.client.close_calls == [(1011, "internal_error")]
        assert h.upstream.close_calls == [(1011, "internal_error")]

    asyncio.run(_run())
