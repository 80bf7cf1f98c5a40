"""Sentry reporting for relay failures.

Only unexpected errors are reported: client and upstream disconnects are
normal session endings and are dropped in ``before_send``. Reports are
tagged with the session, scenario and tool-call ids from the log context
and throttled per error category so a flapping upstream cannot flood the
project.
"""

from __future__ import annotations

import time
import logging
from typing import Any

import sentry_sdk

from ..errors.classify import classify_error
from ..logging import current_log_context
from ..handlers.websocket.disconnects import is_expected_disconnect
from ..config.telemetry import (
    SENTRY_DSN,
    SENTRY_RELEASE,
    SENTRY_ENVIRONMENT,
    SENTRY_SAMPLE_RATE,
    SENTRY_RATE_LIMIT_S,
    SENTRY_TAG_CALL_ID,
    SENTRY_TAG_CATEGORY,
    SENTRY_TAG_SESSION_ID,
    SENTRY_TAG_SCENARIO_ID,
)

logger = logging.getLogger(__name__)

_last_reported: dict[tuple[str, str], float] = {}
_initialized: bool = False


def drop_expected_disconnects(event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any] | None:
    """``before_send`` hook: discard events raised by normal socket teardown."""
    exc_info = hint.get("exc_info")
    if exc_info and is_expected_disconnect(exc_info[1]):
        return None
    return event


def init_sentry() -> None:
    """Initialize the Sentry SDK. Idempotent."""
    global _initialized  # noqa: PLW0603
    if _initialized:
        return

    options: dict[str, Any] = {
        "dsn": SENTRY_DSN,
        "environment": SENTRY_ENVIRONMENT,
        "sample_rate": SENTRY_SAMPLE_RATE,
        "traces_sample_rate": 0.0,
        "before_send": drop_expected_disconnects,
    }
    if SENTRY_RELEASE:
        options["release"] = SENTRY_RELEASE

    sentry_sdk.init(**options)
    _initialized = True
    logger.info("Sentry initialized: environment=%s", SENTRY_ENVIRONMENT)


def shutdown_sentry() -> None:
    """Flush pending events. Idempotent."""
    global _initialized  # noqa: PLW0603
    if not _initialized:
        return
    sentry_sdk.flush(timeout=2.0)
    _initialized = False


def should_report(error: BaseException, *, now: float | None = None) -> bool:
    """Throttle: one report per (category, class) every ``SENTRY_RATE_LIMIT_S``."""
    key = (classify_error(error), type(error).__qualname__)
    current = time.monotonic() if now is None else now
    last = _last_reported.get(key)
    if last is not None and current - last < SENTRY_RATE_LIMIT_S:
        return False
    _last_reported[key] = current
    return True


def capture_error(
    error: BaseException,
    *,
    session_id: str | None = None,
    extra: dict[str, Any] | None = None,
) -> None:
    """Report an unexpected relay error. No-op until ``init_sentry`` ran."""
    if not _initialized or is_expected_disconnect(error) or not should_report(error):
        return

    fields = current_log_context()
    with sentry_sdk.new_scope() as scope:
        scope.set_tag(SENTRY_TAG_CATEGORY, classify_error(error))
        scope.set_tag(SENTRY_TAG_SESSION_ID, session_id or fields["session_id"])
        scope.set_tag(SENTRY_TAG_SCENARIO_ID, fields["scenario_id"])
        scope.set_tag(SENTRY_TAG_CALL_ID, fields["call_id"])
        for key, value in (extra or {}).items():
            scope.set_extra(key, value)
        sentry_sdk.capture_exception(error)


__all__ = [
    "init_sentry",
    "shutdown_sentry",
    "capture_error",
    "should_report",
    "drop_expected_disconnects",
]
