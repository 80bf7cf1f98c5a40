"""MeterProvider setup for OTLP/HTTP metric export."""

from __future__ import annotations

import socket
import logging
import uuid as _uuid

from opentelemetry import metrics
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter

from ..config.telemetry import (
    OTEL_ENVIRONMENT,
    OTEL_SERVICE_NAME,
    OTEL_EXPORTER_OTLP_TOKEN,
    OTEL_EXPORTER_OTLP_ENDPOINT,
    OTEL_METRICS_EXPORT_INTERVAL_MS,
)

logger = logging.getLogger(__name__)

_meter_provider: MeterProvider | None = None


def _build_resource() -> Resource:
    return Resource.create(
        {
            "service.name": OTEL_SERVICE_NAME,
            "deployment.environment": OTEL_ENVIRONMENT,
            "host.name": socket.gethostname(),
            "service.instance.id": _uuid.uuid4().hex[:12],
        }
    )


def _export_headers() -> dict[str, str]:
    if not OTEL_EXPORTER_OTLP_TOKEN:
        return {}
    return {"Authorization": f"Bearer {OTEL_EXPORTER_OTLP_TOKEN}"}


def init_otel() -> None:
    """Create and register the global MeterProvider. Idempotent."""
    global _meter_provider  # noqa: PLW0603
    if _meter_provider is not None:
        return

    endpoint = OTEL_EXPORTER_OTLP_ENDPOINT.rstrip("/") + "/v1/metrics"
    metric_exporter = OTLPMetricExporter(endpoint=endpoint, headers=_export_headers())
    reader = PeriodicExportingMetricReader(
        metric_exporter,
        export_interval_millis=OTEL_METRICS_EXPORT_INTERVAL_MS,
    )
    mp = MeterProvider(resource=_build_resource(), metric_readers=[reader])
    metrics.set_meter_provider(mp)
    _meter_provider = mp

    logger.info("OTel initialized: metrics=%s", endpoint)


def shutdown_otel() -> None:
    """Flush and shutdown the provider. Idempotent."""
    global _meter_provider  # noqa: PLW0603
    if _meter_provider is not None:
        _meter_provider.force_flush()
        _meter_provider.shutdown()
        _meter_provider = None


__all__ = ["init_otel", "shutdown_otel"]
