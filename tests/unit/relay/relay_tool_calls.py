"""Unit tests for streamed tool-call aggregation and execution."""

from __future__ import annotations

import json
import asyncio
from typing import Any

from tutor_relay.relay.tool_calls import ToolCallAggregator, parse_tool_arguments

from tests.helpers.relay import build_harness


def test_parse_tool_arguments_falls_back_to_empty_object() -> None:
    assert parse_tool_arguments('{"topic": "coffee"}') == {"topic": "coffee"}
    assert parse_tool_arguments("{bad json") == {}
    assert parse_tool_arguments("[1, 2]") == {}
    assert parse_tool_arguments("") == {}
    assert parse_tool_arguments(None) == {}
    assert parse_tool_arguments({"already": "parsed"}) == {"already": "parsed"}


def test_aggregator_claims_each_call_once() -> None:
    aggregator = ToolCallAggregator()
    aggregator.on_delta("c1", '{"to', name="grade_lesson")
    aggregator.on_delta("c1", 'pic":"coffee"}')

    first = aggregator.claim("c1", None)
    assert first is not None
    assert first.name == "grade_lesson"
    assert first.args == {"topic": "coffee"}
    assert aggregator.in_flight("c1")

    assert aggregator.claim("c1", "grade_lesson", '{"topic": "again"}') is None
    aggregator.complete("c1")
    assert not aggregator.in_flight("c1")
    assert aggregator.claim("c1", "grade_lesson") is None
    assert aggregator.seen("c1")


def test_aggregator_uses_event_arguments_when_nothing_buffered() -> None:
    aggregator = ToolCallAggregator()
    pending = aggregator.claim("c2", "trigger_quiz", '{"num_questions": 2}')
    assert pending is not None
    assert pending.args == {"num_questions": 2}
    assert aggregator.pending_buffers == 0


def test_late_deltas_after_claim_are_ignored() -> None:
    aggregator = ToolCallAggregator()
    aggregator.claim("c3", "grade_lesson", "{}")
    aggregator.on_delta("c3", '{"late": true}')
    assert aggregator.buffered("c3") is None


def test_split_arguments_execute_once_and_feed_result_back() -> None:
    async def _run() -> None:
        h = await build_harness()
        h.start()
        await h.wait_ready()

        h.upstream.push({"type": "response.function_call_arguments.delta", "call_id": "call_1", "delta": '{"to'})
        h.upstream.push({"type": "response.function_call_arguments.delta", "call_id": "call_1", "delta": 'pic":"coffee"}'})
        h.upstream.push({"type": "response.function_call_arguments.done", "call_id": "call_1", "name": "grade_lesson"})
        await h.wait_for(lambda: bool(h.client.of_type("server.tool_result")))

        assert h.executor.calls == [("grade_lesson", {"topic": "coffee"})]

        output, follow_up = h.upstream.sent[-2], h.upstream.sent[-1]
        assert output["type"] == "conversation.item.create"
        assert output["item"]["type"] == "function_call_output"
        assert output["item"]["call_id"] == "call_1"
        assert json.loads(output["item"]["output"]) == {"ok": True, "tool": "grade_lesson"}
        assert follow_up == {"type": "response.create"}

        tool_result = h.client.of_type("server.tool_result")[0]
        assert tool_result == {
            "type": "server.tool_result",
            "name": "grade_lesson",
            "callId": "call_1",
            "result": {"ok": True, "tool": "grade_lesson"},
        }

        record = await h.record()
        assert [entry["name"] for entry in record["toolResults"]] == ["grade_lesson"]
        assert record["stats"]["toolCalls"] == 1
        await h.stop()

    asyncio.run(_run())


def test_duplicate_completion_events_run_the_tool_once() -> None:
    async def _run() -> None:
        h = await build_harness()
        h.start()
        await h.wait_ready()

        h.upstream.push(
            {"type": "response.function_call_arguments.done", "call_id": "call_2", "name": "grade_lesson", "arguments": "{}"}
        )
        h.upstream.push(
            {"type": "response.function_call_arguments.done", "call_id": "call_2", "name": "grade_lesson", "arguments": "{}"}
        )
        h.upstream.push(
            {
                "type": "response.output_item.done",
                "item": {"type": "function_call", "call_id": "call_2", "name": "grade_lesson", "arguments": "{}"},
            }
        )
        await h.wait_for(lambda: bool(h.client.of_type("server.tool_result")))
        await asyncio.sleep(0.05)

        assert len(h.executor.calls) == 1
        assert len(h.client.of_type("server.tool_result")) == 1
        assert len(h.upstream.of_type("conversation.item.create")) == 1
        await h.stop()

    asyncio.run(_run())


def test_output_item_done_alone_triggers_execution() -> None:
    async def _run() -> None:
        h = await build_harness()
        h.start()
        await h.wait_ready()

        h.upstream.push(
            {
                "type": "response.output_item.done",
                "item": {
                    "type": "function_call",
                    "call_id": "call_3",
                    "name": "trigger_quiz",
                    "arguments": '{"num_questions": 2}',
                },
            }
        )
        await h.wait_for(lambda: bool(h.client.of_type("server.tool_result")))

        assert h.executor.calls == [("trigger_quiz", {"num_questions": 2})]
        await h.stop()

    asyncio.run(_run())


def test_invalid_arguments_and_failing_tool_become_error_results() -> None:
    class _FailingExecutor:
        def __init__(self) -> None:
            self.calls: list[tuple[str, dict[str, Any]]] = []

        async def __call__(self, name: str, args: dict[str, Any], context: Any) -> dict[str, Any]:
            self.calls.append((name, args))
            raise RuntimeError("grader offline")

    async def _run() -> None:
        h = await build_harness(executor=_FailingExecutor())
        h.start()
        await h.wait_ready()

        h.upstream.push({"type": "response.function_call_arguments.delta", "call_id": "call_4", "delta": "{oops"})
        h.upstream.push({"type": "response.function_call_arguments.done", "call_id": "call_4", "name": "grade_lesson"})
        await h.wait_for(lambda: bool(h.client.of_type("server.tool_result")))

        assert h.executor.calls == [("grade_lesson", {})]
        result = h.client.of_type("server.tool_result")[0]["result"]
        assert result["ok"] is False
        assert "grader offline" in result["error"]
        assert not h.session.tool_calls.in_flight("call_4")
        assert not h.session.terminating
        await h.stop()

    asyncio.run(_run())


def test_tool_call_without_name_reports_error_result() -> None:
    async def _run() -> None:
        h = await build_harness()
        h.start()
        await h.wait_ready()

        h.upstream.push({"type": "response.function_call_arguments.done", "call_id": "call_5", "arguments": "{}"})
        await h.wait_for(lambda: bool(h.client.of_type("server.tool_result")))

        assert h.executor.calls == []
        tool_result = h.client.of_type("server.tool_result")[0]
        assert tool_result["name"] == "unknown"
        assert tool_result["result"]["ok"] is False
        await h.stop()

    asyncio.run(_run())
