"""Start and stop the telemetry backends around the app lifespan."""

from __future__ import annotations

import logging

from .otel import init_otel, shutdown_otel
from .sentry import init_sentry, shutdown_sentry
from .instruments import initialize_metrics
from ..config.telemetry import SENTRY_DSN, OTEL_EXPORTER_OTLP_ENDPOINT

logger = logging.getLogger(__name__)


def init_telemetry() -> dict[str, bool]:
    """Enable whichever backends are configured.

    Returns:
        ``{"metrics": ..., "sentry": ...}`` telling which backends are live.
        Without an OTLP endpoint the instruments stay on the no-op meter.
    """
    enabled = {"metrics": bool(OTEL_EXPORTER_OTLP_ENDPOINT), "sentry": bool(SENTRY_DSN)}
    if enabled["metrics"]:
        init_otel()
        initialize_metrics()
    if enabled["sentry"]:
        init_sentry()
    logger.info("telemetry: metrics=%s sentry=%s", enabled["metrics"], enabled["sentry"])
    return enabled


def shutdown_telemetry() -> None:
    """Flush pending reports. Safe to call when nothing was enabled."""
    shutdown_sentry()
    shutdown_otel()


__all__ = ["init_telemetry", "shutdown_telemetry"]
