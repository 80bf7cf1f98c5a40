"""Unit tests for exception classification."""

from __future__ import annotations

from tutor_relay.errors import (
    TokenError,
    ProtocolError,
    ToolExecutionError,
    DisallowedEventError,
    ScenarioNotFoundError,
    UpstreamUnavailableError,
    ScenarioValidationError,
    classify_error,
)


def test_relay_errors_have_labels() -> None:
    assert classify_error(ProtocolError("invalid_message", "bad")) == "protocol"
    assert classify_error(DisallowedEventError("session.update")) == "disallowed_event"
    assert classify_error(UpstreamUnavailableError()) == "upstream_unavailable"
    assert classify_error(ToolExecutionError("grade_lesson", "boom")) == "tool"
    assert classify_error(TokenError("expired", "Token expired")) == "auth"
    assert classify_error(ScenarioNotFoundError("x")) == "scenario_not_found"
    assert classify_error(ScenarioValidationError("x")) == "scenario_invalid"


def test_builtin_errors_fall_back() -> None:
    assert classify_error(TimeoutError()) == "timeout"
    assert classify_error(ConnectionResetError()) == "connection"
    assert classify_error(KeyError("x")) == "unknown"


def test_error_attributes() -> None:
    error = UpstreamUnavailableError("Upstream connection failed: 401", status=401)
    assert error.status == 401
    assert DisallowedEventError("session.update").event_type == "session.update"
    assert ProtocolError("invalid_payload", "nope").error_code == "invalid_payload"
