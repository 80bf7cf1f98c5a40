"""Telemetry: OTel metrics and Sentry error capture."""

from .sentry import capture_error
from .setup import init_telemetry, shutdown_telemetry
from .instruments import get_metrics, initialize_metrics

__all__ = [
    "init_telemetry",
    "shutdown_telemetry",
    "capture_error",
    "get_metrics",
    "initialize_metrics",
]
