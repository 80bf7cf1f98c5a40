"""Unit tests for per-session log fields."""

from __future__ import annotations

import logging

import pytest

from tutor_relay.logging import (
    UNSET,
    log_context,
    set_log_context,
    reset_log_context,
    current_log_context,
    install_log_context,
)


def test_log_context_binds_and_restores_fields() -> None:
    assert current_log_context() == {"session_id": UNSET, "scenario_id": UNSET, "call_id": UNSET}

    with log_context(session_id="s1", scenario_id="a1-taxi-bogota"):
        with log_context(call_id="call_1", scenario_id=None):
            assert current_log_context() == {
                "session_id": "s1",
                "scenario_id": "a1-taxi-bogota",
                "call_id": "call_1",
            }
        assert current_log_context()["call_id"] == UNSET

    assert current_log_context()["session_id"] == UNSET


def test_unknown_field_is_rejected() -> None:
    with pytest.raises(TypeError):
        set_log_context(user_id="u1")


def test_installed_factory_stamps_records_once() -> None:
    previous = logging.getLogRecordFactory()
    try:
        install_log_context()
        installed = logging.getLogRecordFactory()
        install_log_context()
        assert logging.getLogRecordFactory() is installed

        tokens = set_log_context(session_id="s2")
        try:
            record = logging.getLogger("tutor_relay.test").makeRecord(
                "tutor_relay.test", logging.INFO, __file__, 1, "hello", None, None
            )
        finally:
            reset_log_context(tokens)
        assert record.session_id == "s2"
        assert record.call_id == UNSET
    finally:
        logging.setLogRecordFactory(previous)
