"""Exception classification helpers for metrics and telemetry labels."""

from __future__ import annotations

from .auth import TokenError
from .tool import ToolExecutionError
from .protocol import ProtocolError
from .scenario import ScenarioNotFoundError, ScenarioValidationError
from .upstream import DisallowedEventError, UpstreamUnavailableError

ERROR_CATEGORIES: tuple[tuple[type[BaseException], str], ...] = (
    (ProtocolError, "protocol"),
    (DisallowedEventError, "disallowed_event"),
    (UpstreamUnavailableError, "upstream_unavailable"),
    (ToolExecutionError, "tool"),
    (TokenError, "auth"),
    (ScenarioNotFoundError, "scenario_not_found"),
    (ScenarioValidationError, "scenario_invalid"),
    (TimeoutError, "timeout"),
    (ConnectionError, "connection"),
)


def classify_error(exc: BaseException) -> str:
    """Map an exception to a metric-friendly category label."""

    for cls, label in ERROR_CATEGORIES:
        if isinstance(exc, cls):
            return label
    return "unknown"


__all__ = ["ERROR_CATEGORIES", "classify_error"]
