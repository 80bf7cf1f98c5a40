"""Telemetry configuration: env vars, metric specs, Sentry constants."""

import os

# ---------------------------------------------------------------------------
# Sentry
# ---------------------------------------------------------------------------
SENTRY_DSN: str = os.getenv("SENTRY_DSN", "")
SENTRY_ENVIRONMENT: str = os.getenv("SENTRY_ENVIRONMENT", "production")
SENTRY_RELEASE: str = os.getenv("SENTRY_RELEASE", "")
SENTRY_SAMPLE_RATE: float = float(os.getenv("SENTRY_SAMPLE_RATE", "1.0"))

# ---------------------------------------------------------------------------
# OTLP export
# ---------------------------------------------------------------------------
OTEL_EXPORTER_OTLP_ENDPOINT: str = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "")
OTEL_EXPORTER_OTLP_TOKEN: str = os.getenv("OTEL_EXPORTER_OTLP_TOKEN", "")
OTEL_ENVIRONMENT: str = os.getenv("OTEL_ENVIRONMENT", "production")
OTEL_SERVICE_NAME: str = os.getenv("OTEL_SERVICE_NAME", "tutor-realtime-relay")
OTEL_METRICS_EXPORT_INTERVAL_MS: int = int(os.getenv("OTEL_METRICS_EXPORT_INTERVAL_MS", "15000"))

# ---------------------------------------------------------------------------
# Metric spec tuples: (name, unit, description)
# ---------------------------------------------------------------------------

# Histograms
METRIC_SESSION_DURATION = ("relay.session_duration", "s", "Client session duration")
METRIC_UPSTREAM_CONNECT_LATENCY = ("relay.upstream_connect_latency", "s", "Upstream handshake time")
METRIC_TOOL_LATENCY = ("relay.tool_latency", "s", "Tool executor latency")

# Counters
METRIC_SESSIONS_STARTED_TOTAL = ("relay.sessions_started_total", "{session}", "Accepted client sessions")
METRIC_SESSIONS_ENDED_TOTAL = ("relay.sessions_ended_total", "{session}", "Terminated sessions by reason")
METRIC_UPSTREAM_FAILURES_TOTAL = ("relay.upstream_failures_total", "{connection}", "Upstream connect failures")
METRIC_TOOL_CALLS_TOTAL = ("relay.tool_calls_total", "{call}", "Tool executions by tool and outcome")
METRIC_GUARDRAIL_TRIPS_TOTAL = ("relay.guardrail_trips_total", "{trip}", "Guardrail terminations")
METRIC_PROTOCOL_ERRORS_TOTAL = ("relay.protocol_errors_total", "{error}", "Rejected client frames")
METRIC_CONNECTIONS_REJECTED_TOTAL = (
    "relay.connections_rejected_total",
    "{connection}",
    "Connections rejected at the boundary",
)

# UpDown counters
METRIC_ACTIVE_SESSIONS = ("relay.active_sessions", "{session}", "Currently open relay sessions")

# ---------------------------------------------------------------------------
# Sentry constants
# ---------------------------------------------------------------------------
SENTRY_RATE_LIMIT_S: float = 10.0
SENTRY_TAG_SESSION_ID = "session_id"
SENTRY_TAG_SCENARIO_ID = "scenario_id"
SENTRY_TAG_CALL_ID = "call_id"
SENTRY_TAG_CATEGORY = "error_category"


__all__ = [
    "SENTRY_DSN",
    "SENTRY_ENVIRONMENT",
    "SENTRY_RELEASE",
    "SENTRY_SAMPLE_RATE",
    "OTEL_EXPORTER_OTLP_ENDPOINT",
    "OTEL_EXPORTER_OTLP_TOKEN",
    "OTEL_ENVIRONMENT",
    "OTEL_SERVICE_NAME",
    "OTEL_METRICS_EXPORT_INTERVAL_MS",
    "METRIC_SESSION_DURATION",
    "METRIC_UPSTREAM_CONNECT_LATENCY",
    "METRIC_TOOL_LATENCY",
    "METRIC_SESSIONS_STARTED_TOTAL",
    "METRIC_SESSIONS_ENDED_TOTAL",
    "METRIC_UPSTREAM_FAILURES_TOTAL",
    "METRIC_TOOL_CALLS_TOTAL",
    "METRIC_GUARDRAIL_TRIPS_TOTAL",
    "METRIC_PROTOCOL_ERRORS_TOTAL",
    "METRIC_CONNECTIONS_REJECTED_TOTAL",
    "METRIC_ACTIVE_SESSIONS",
    "SENTRY_RATE_LIMIT_S",
    "SENTRY_TAG_SESSION_ID",
    "SENTRY_TAG_SCENARIO_ID",
    "SENTRY_TAG_CALL_ID",
    "SENTRY_TAG_CATEGORY",
]
