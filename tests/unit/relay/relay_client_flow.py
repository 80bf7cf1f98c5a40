"""Unit tests for client message handling inside the relay actor."""

from __future__ import annotations

import asyncio

from tutor_relay.errors.upstream import UpstreamUnavailableError
from tutor_relay.state.session import SessionPhase

from tests.helpers.fakes import FakeConnector
from tests.helpers.relay import TAXI_SCENARIO, build_harness, quiet_settings


def test_handshake_sends_session_update_then_hello() -> None:
    async def _run() -> None:
        h = await build_harness()
        h.start()
        await h.wait_ready()

        assert h.upstream.types() == ["session.update"]
        session = h.upstream.sent[0]["session"]
        assert "María" in session["instructions"]
        assert session["input_audio_format"] == "pcm16"
        assert [tool["name"] for tool in session["tools"]] == ["grade_lesson"]

        hello = h.client.of_type("server.hello")[0]
        assert hello == {
            "type": "server.hello",
            "sessionId": "sess-1",
            "scenarioId": "a1-ordering-coffee",
            "upstream": True,
        }
        assert h.session.phase is SessionPhase.ACTIVE
        await h.stop()

    asyncio.run(_run())


def test_kickoff_response_follows_handshake_when_enabled() -> None:
    async def _run() -> None:
        h = await build_harness(scenario_id=TAXI_SCENARIO)
        h.start()
        await h.wait_ready()

        assert h.upstream.types() == ["session.update", "response.create"]
        kickoff = h.upstream.sent[1]
        assert "Carlos" in kickoff["response"]["instructions"]
        await h.stop()

    asyncio.run(_run())


def test_text_message_creates_item_then_response_and_streams_reply() -> None:
    async def _run() -> None:
        h = await build_harness()
        h.start()
        await h.wait_ready()

        h.client.send_from_client({"type": "client.text", "text": "Hola"})
        await h.wait_for(lambda: len(h.upstream.sent) >= 3)

        assert h.upstream.types()[1:] == ["conversation.item.create", "response.create"]
        item = h.upstream.sent[1]["item"]
        assert item["role"] == "user"
        assert item["content"] == [{"type": "input_text", "text": "Hola"}]

        h.upstream.push({"type": "response.output_text.delta", "response_id": "r1", "delta": "¡Ho"})
        h.upstream.push({"type": "response.output_text.delta", "response_id": "r1", "delta": "la!"})
        h.upstream.push({"type": "response.output_text.done", "response_id": "r1"})
        await h.wait_for(lambda: bool(h.client.of_type("server.text.completed")))

        deltas = [message["delta"] for message in h.client.of_type("server.text.delta")]
        assert deltas == ["¡Ho", "la!"]
        completed = h.client.of_type("server.text.completed")[0]
        assert completed["role"] == "ai"
        assert completed["text"] == "¡Hola!"
        assert [(entry.role, entry.text) for entry in h.session.transcript.entries()] == [
            ("user", "Hola"),
            ("ai", "¡Hola!"),
        ]
        await h.stop()

    asyncio.run(_run())


def test_unknown_type_is_rejected_without_upstream_or_storage_side_effects() -> None:
    async def _run() -> None:
        h = await build_harness()
        h.start()
        await h.wait_ready()
        before = await h.record()

        h.client.send_from_client({"type": "client.foo"})
        await h.wait_for(lambda: bool(h.client.of_type("server.error")))

        error = h.client.of_type("server.error")[0]
        assert error["code"] == "unknown_message_type"
        assert h.upstream.types() == ["session.update"]
        assert await h.record() == before
        assert not h.session.terminating

        h.client.send_from_client({"type": "client.ping"})
        await h.wait_for(lambda: bool(h.client.of_type("server.pong")))
        await h.stop()

    asyncio.run(_run())


def test_malformed_and_binary_frames_get_errors_and_connection_stays_open() -> None:
    async def _run() -> None:
        h = await build_harness()
        h.start()
        await h.wait_ready()

        h.client.send_raw_from_client("{not json")
        h.client.send_bytes_from_client(b"\x00\x01")
        h.client.send_from_client({"type": "client.text", "text": "   "})
        await h.wait_for(lambda: len(h.client.of_type("server.error")) == 3)

        codes = [message["code"] for message in h.client.of_type("server.error")]
        assert codes == ["invalid_message", "binary_not_supported", "invalid_payload"]
        assert h.upstream.types() == ["session.update"]
        assert h.session.phase is SessionPhase.ACTIVE
        await h.stop()

    asyncio.run(_run())


def test_event_is_echoed_and_never_forwarded() -> None:
    async def _run() -> None:
        h = await build_harness()
        h.start()
        await h.wait_ready()

        h.client.send_from_client({"type": "client.event", "event": {"type": "session.update", "session": {}}})
        await h.wait_for(lambda: bool(h.client.of_type("server.echo")))

        echo = h.client.of_type("server.echo")[0]
        assert echo["payload"] == {"event": {"type": "session.update", "session": {}}}
        assert h.upstream.types() == ["session.update"]
        await h.stop()

    asyncio.run(_run())


def test_audio_append_forwards_and_counts_chunks() -> None:
    async def _run() -> None:
        h = await build_harness()
        h.start()
        await h.wait_ready()

        h.client.send_from_client({"type": "client.audio.append", "audio": "AAAA"})
        h.client.send_from_client({"type": "client.audio.append", "audio": "BBBB"})
        h.client.send_from_client({"type": "client.audio.commit"})
        h.client.send_from_client(
            {"type": "client.item.truncate", "item_id": "item_1", "audio_end_ms": 1200, "extra": "dropped"}
        )
        await h.wait_for(lambda: len(h.upstream.sent) >= 5)

        assert h.upstream.types()[1:] == [
            "input_audio_buffer.append",
            "input_audio_buffer.append",
            "input_audio_buffer.commit",
            "conversation.item.truncate",
        ]
        assert h.upstream.sent[4] == {
            "type": "conversation.item.truncate",
            "item_id": "item_1",
            "content_index": 0,
            "audio_end_ms": 1200,
        }
        assert h.session.stats.audio_chunks_in == 2
        await h.stop()

    asyncio.run(_run())


def test_upstream_failure_gives_error_then_degraded_hello() -> None:
    async def _run() -> None:
        connector = FakeConnector(error=UpstreamUnavailableError("Upstream connection failed: 401", status=401))
        h = await build_harness(connector=connector)
        h.start()
        await h.wait_ready()

        assert h.client.types()[:2] == ["server.error", "server.hello"]
        assert h.client.sent[0]["code"] == "upstream_error"
        assert h.client.of_type("server.hello")[0]["upstream"] is False

        h.client.send_from_client({"type": "client.text", "text": "Hola"})
        await h.wait_for(lambda: len(h.client.of_type("server.error")) == 2)
        assert h.client.of_type("server.error")[1]["code"] == "upstream_not_ready"
        assert not h.session.terminating
        assert connector.calls == 1
        await h.stop()

    asyncio.run(_run())


def test_hello_starts_upstream_when_not_connecting_on_accept() -> None:
    async def _run() -> None:
        h = await build_harness(scenario_id=None, settings=quiet_settings(connect_on_accept=False))
        h.start()
        await asyncio.sleep(0.02)
        assert h.connector.calls == 0

        h.client.send_from_client({"type": "client.hello", "scenarioId": "  a1-ordering-coffee  "})
        await h.wait_ready()

        assert h.connector.calls == 1
        assert h.session.state.scenario_id == "a1-ordering-coffee"
        assert h.client.of_type("server.hello")[0]["scenarioId"] == "a1-ordering-coffee"
        assert (await h.record())["scenarioId"] == "a1-ordering-coffee"

        h.client.send_from_client({"type": "client.hello", "scenarioId": "a1-taxi-bogota"})
        await h.wait_for(lambda: len(h.client.of_type("server.hello")) == 2)
        assert h.session.state.scenario_id == "a1-ordering-coffee"
        await h.stop()

    asyncio.run(_run())


def test_hello_with_unknown_scenario_is_rejected() -> None:
    async def _run() -> None:
        h = await build_harness(scenario_id=None, settings=quiet_settings(connect_on_accept=False))
        h.start()

        h.client.send_from_client({"type": "client.hello", "scenarioId": "does-not-exist"})
        await h.wait_for(lambda: bool(h.client.of_type("server.error")))

        assert h.client.of_type("server.error")[0]["code"] == "unknown_scenario"
        assert h.session.state.scenario_id is None
        assert h.connector.calls == 0
        await h.stop()

    asyncio.run(_run())


def test_client_disconnect_terminates_and_persists() -> None:
    async def _run() -> None:
        h = await build_harness()
        h.start()
        await h.wait_ready()

        h.client.disconnect_from_client()
        await h.wait_closed()

        record = await h.record()
        assert record["terminationReason"] == "client_closed"
        assert record["endedAt"]
        assert h.upstream.close_calls == [(1000, "client_closed")]

    asyncio.run(_run())
