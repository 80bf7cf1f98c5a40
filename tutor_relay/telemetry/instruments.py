"""Typed accessors for the relay's OTel metric instruments."""

from __future__ import annotations

import logging
from opentelemetry import metrics
from ..config.telemetry import (
    OTEL_SERVICE_NAME,
    METRIC_TOOL_LATENCY,
    METRIC_ACTIVE_SESSIONS,
    METRIC_TOOL_CALLS_TOTAL,
    METRIC_SESSION_DURATION,
    METRIC_SESSIONS_ENDED_TOTAL,
    METRIC_GUARDRAIL_TRIPS_TOTAL,
    METRIC_PROTOCOL_ERRORS_TOTAL,
    METRIC_SESSIONS_STARTED_TOTAL,
    METRIC_UPSTREAM_FAILURES_TOTAL,
    METRIC_UPSTREAM_CONNECT_LATENCY,
    METRIC_CONNECTIONS_REJECTED_TOTAL,
)

logger = logging.getLogger(__name__)


def _histogram(meter: metrics.Meter, spec: tuple[str, str, str]) -> metrics.Histogram:
    name, unit, desc = spec
    return meter.create_histogram(name, unit=unit, description=desc)


def _counter(meter: metrics.Meter, spec: tuple[str, str, str]) -> metrics.Counter:
    name, unit, desc = spec
    return meter.create_counter(name, unit=unit, description=desc)


def _updown(meter: metrics.Meter, spec: tuple[str, str, str]) -> metrics.UpDownCounter:
    name, unit, desc = spec
    return meter.create_up_down_counter(name, unit=unit, description=desc)


class MetricInstruments:
    """Holds all OTel metric instruments created from config specs."""

    __slots__ = (
        "session_duration",
        "upstream_connect_latency",
        "tool_latency",
        "sessions_started_total",
        "sessions_ended_total",
        "upstream_failures_total",
        "tool_calls_total",
        "guardrail_trips_total",
        "protocol_errors_total",
        "connections_rejected_total",
        "active_sessions",
    )

    def __init__(self, meter: metrics.Meter) -> None:
        # Histograms
        self.session_duration = _histogram(meter, METRIC_SESSION_DURATION)
        self.upstream_connect_latency = _histogram(meter, METRIC_UPSTREAM_CONNECT_LATENCY)
        self.tool_latency = _histogram(meter, METRIC_TOOL_LATENCY)
        # Counters
        self.sessions_started_total = _counter(meter, METRIC_SESSIONS_STARTED_TOTAL)
        self.sessions_ended_total = _counter(meter, METRIC_SESSIONS_ENDED_TOTAL)
        self.upstream_failures_total = _counter(meter, METRIC_UPSTREAM_FAILURES_TOTAL)
        self.tool_calls_total = _counter(meter, METRIC_TOOL_CALLS_TOTAL)
        self.guardrail_trips_total = _counter(meter, METRIC_GUARDRAIL_TRIPS_TOTAL)
        self.protocol_errors_total = _counter(meter, METRIC_PROTOCOL_ERRORS_TOTAL)
        self.connections_rejected_total = _counter(meter, METRIC_CONNECTIONS_REJECTED_TOTAL)
        # UpDown counters
        self.active_sessions = _updown(meter, METRIC_ACTIVE_SESSIONS)


_metrics: MetricInstruments | None = None


def get_metrics() -> MetricInstruments:
    """Return the global MetricInstruments (no-op meter if OTel not initialized)."""
    global _metrics  # noqa: PLW0603
    if _metrics is None:
        meter = metrics.get_meter(OTEL_SERVICE_NAME)
        _metrics = MetricInstruments(meter)
    return _metrics


def initialize_metrics() -> None:
    """Create MetricInstruments from the global meter."""
    global _metrics  # noqa: PLW0603
    meter = metrics.get_meter(OTEL_SERVICE_NAME)
    _metrics = MetricInstruments(meter)
    logger.info("Telemetry metrics initialized")


__all__ = ["MetricInstruments", "get_metrics", "initialize_metrics"]
