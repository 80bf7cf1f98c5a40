"""Integration-style tests for the HTTP routes and the /ws endpoint."""

from __future__ import annotations

import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

from tutor_relay.server import create_app

from tests.helpers.runtime import build_runtime


def _client(**runtime_kwargs) -> TestClient:
    deps = build_runtime(**runtime_kwargs)

    async def _factory():
        return deps

    return TestClient(create_app(_factory))


def test_health_routes() -> None:
    with _client() as client:
        assert client.get("/").json() == {"status": "ok", "service": "tutor-realtime-relay"}
        assert client.get("/api/health").json() == {"ok": True}
        health = client.get("/healthz").json()
        assert health["status"] == "ok"
        assert health["capacity"]["active"] == 0
        assert health["capacity"]["sessions"] == 0
        assert client.get("/favicon.ico").status_code == 204


def test_scenario_index() -> None:
    with _client() as client:
        ids = [item["id"] for item in client.get("/api/scenarios").json()["scenarios"]]
        assert ids == ["a1-ordering-coffee", "a1-taxi-bogota"]


def test_session_tokens_require_a_secret() -> None:
    with _client() as client:
        response = client.post("/api/sessions", json={"scenarioId": "a1-ordering-coffee"})
        assert response.status_code == 503


def test_session_token_minting() -> None:
    with _client(signing_secret="s", require_token=True) as client:
        response = client.post("/api/sessions", json={"scenarioId": "a1-ordering-coffee", "sessionKey": "k1"})
        assert response.status_code == 200
        body = response.json()
        assert body["sessionKey"] == "k1"
        assert body["scenarioId"] == "a1-ordering-coffee"
        assert body["token"].count(".") == 2
        assert isinstance(body["expiresAt"], int)

        assert client.post("/api/sessions", json={"scenarioId": "nope"}).status_code == 404
        assert client.post("/api/sessions", json={}).status_code == 422
        generated = client.post("/api/sessions", json={"scenarioId": "a1-taxi-bogota"}).json()
        assert generated["sessionKey"]


def test_unknown_session_summary_is_404() -> None:
    with _client() as client:
        assert client.get("/api/sessions/missing/summary").status_code == 404


def test_websocket_call_then_summary() -> None:
    with _client() as client:
        with client.websocket_connect("/ws?session=k1&scenarioId=a1-ordering-coffee") as ws:
            hello = ws.receive_json()
            assert hello == {
                "type": "server.hello",
                "sessionId": "k1",
                "scenarioId": "a1-ordering-coffee",
                "upstream": True,
            }
            ws.send_json({"type": "client.ping"})
            assert ws.receive_json() == {"type": "server.pong"}

            ws.send_json({"type": "client.end_call"})
            assert ws.receive_json() == {"type": "server.call_ended", "reason": "end_call"}
            with pytest.raises(WebSocketDisconnect) as excinfo:
                ws.receive_json()
            assert excinfo.value.code == 1000

        summary = client.get("/api/sessions/k1/summary").json()
        assert summary["sessionKey"] == "k1"
        assert summary["scenarioId"] == "a1-ordering-coffee"
        assert summary["terminationReason"] == "end_call"
        assert summary["grade"]["ok"] is True
        assert summary["quiz"] is None
        assert summary["progress"]["completionScore"] == summary["grade"]["score"]


def test_websocket_with_unknown_scenario_is_closed_with_policy_code() -> None:
    with _client() as client:
        with client.websocket_connect("/ws?scenarioId=nope") as ws:
            assert ws.receive_json()["code"] == "unknown_scenario"
            with pytest.raises(WebSocketDisconnect) as excinfo:
                ws.receive_json()
            assert excinfo.value.code == 1008


def test_websocket_origin_policy(monkeypatch) -> None:
    monkeypatch.setattr("tutor_relay.handlers.websocket.auth.ALLOWED_ORIGINS", ("https://app.example",))
    with _client() as client:
        with client.websocket_connect("/ws", headers={"origin": "https://evil.example"}) as ws:
            assert ws.receive_json()["code"] == "origin_rejected"
            with pytest.raises(WebSocketDisconnect) as excinfo:
                ws.receive_json()
            assert excinfo.value.code == 1008
