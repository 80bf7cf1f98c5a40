"""Per-session log fields carried through asyncio tasks.

The relay runs many sessions on one loop; every record is stamped with the
session, scenario and tool-call id of the task that emitted it. Sentry reads
the same fields to tag reports.
"""

from __future__ import annotations

import logging
import contextlib
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import Token, ContextVar

UNSET = "-"
LOG_FIELDS: tuple[str, ...] = ("session_id", "scenario_id", "call_id")

_FIELD_VARS: dict[str, ContextVar[str]] = {name: ContextVar(name, default=UNSET) for name in LOG_FIELDS}

ContextTokens = list[tuple[ContextVar[str], Token[str]]]


def current_log_context() -> dict[str, str]:
    """Snapshot of the fields visible to the running task."""
    return {name: var.get() for name, var in _FIELD_VARS.items()}


def set_log_context(**fields: str | None) -> ContextTokens:
    """Bind the given fields; None leaves a field untouched.

    Raises:
        TypeError: for a name outside ``LOG_FIELDS``.
    """
    unknown = sorted(set(fields) - set(LOG_FIELDS))
    if unknown:
        raise TypeError(f"unknown log context field(s): {', '.join(unknown)}")
    tokens: ContextTokens = []
    for name, value in fields.items():
        if value is None:
            continue
        var = _FIELD_VARS[name]
        tokens.append((var, var.set(value)))
    return tokens


def reset_log_context(tokens: ContextTokens) -> None:
    for var, token in reversed(tokens):
        var.reset(token)


@contextmanager
def log_context(**fields: str | None) -> Iterator[None]:
    """Bind fields for the duration of a block (a session run, a tool call)."""
    tokens = set_log_context(**fields)
    try:
        yield
    finally:
        reset_log_context(tokens)


def _stamp(record: logging.LogRecord) -> logging.LogRecord:
    for name, var in _FIELD_VARS.items():
        setattr(record, name, var.get())
    return record


def install_log_context() -> None:
    """Wrap the LogRecord factory so the format string can use the fields. Idempotent."""
    current = logging.getLogRecordFactory()
    if getattr(current, "_tutor_relay_fields", False):
        return

    def record_factory(*args, **kwargs):
        return _stamp(current(*args, **kwargs))

    record_factory._tutor_relay_fields = True  # type: ignore[attr-defined]
    logging.setLogRecordFactory(record_factory)


def configure_logging() -> None:
    """Initialize root logging configuration once per process."""
    from ..config.logging import APP_LOG_LEVEL, APP_LOG_FORMAT, APP_LOG_DATEFMT, QUIET_LOGGERS  # noqa: PLC0415

    install_log_context()
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(level=APP_LOG_LEVEL, format=APP_LOG_FORMAT, datefmt=APP_LOG_DATEFMT)
    else:
        root_logger.setLevel(APP_LOG_LEVEL)
        for handler in root_logger.handlers:
            with contextlib.suppress(Exception):
                handler.setLevel(APP_LOG_LEVEL)
                handler.setFormatter(logging.Formatter(APP_LOG_FORMAT, datefmt=APP_LOG_DATEFMT))

    logging.getLogger("tutor_relay").setLevel(APP_LOG_LEVEL)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


__all__ = [
    "LOG_FIELDS",
    "UNSET",
    "current_log_context",
    "install_log_context",
    "log_context",
    "reset_log_context",
    "set_log_context",
    "configure_logging",
]
