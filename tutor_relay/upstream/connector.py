"""Upstream connection establishment."""

from __future__ import annotations

import time
import asyncio
import logging
from urllib.parse import quote

from websockets.asyncio.client import connect
from websockets.exceptions import InvalidStatus, WebSocketException

from .connection import UpstreamConnection
from ..telemetry.instruments import get_metrics
from ..errors.upstream import UpstreamUnavailableError
from ..config.upstream import (
    OPENAI_API_KEY,
    OPENAI_BETA_HEADER,
    OPENAI_REALTIME_URL,
    OPENAI_REALTIME_MODEL,
    UPSTREAM_CONNECT_TIMEOUT_S,
    UPSTREAM_MAX_MESSAGE_BYTES,
)

logger = logging.getLogger(__name__)


def build_upstream_url(url: str | None = None, model: str | None = None) -> str:
    base = url or OPENAI_REALTIME_URL
    separator = "&" if "?" in base else "?"
    return f"{base}{separator}model={quote(model or OPENAI_REALTIME_MODEL, safe='')}"


def build_upstream_headers(api_key: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {api_key}",
        "OpenAI-Beta": OPENAI_BETA_HEADER,
    }


async def connect_upstream(
    *,
    api_key: str | None = None,
    url: str | None = None,
    model: str | None = None,
    timeout_s: float | None = None,
) -> UpstreamConnection:
    """Open the upstream realtime socket.

    Raises:
        UpstreamUnavailableError: On missing credentials, handshake rejection,
            network failure or timeout.
    """
    key = OPENAI_API_KEY if api_key is None else api_key
    if not key:
        raise UpstreamUnavailableError("OPENAI_API_KEY is not configured")

    target = build_upstream_url(url, model)
    timeout = UPSTREAM_CONNECT_TIMEOUT_S if timeout_s is None else timeout_s
    metrics = get_metrics()
    t0 = time.perf_counter()
    logger.info("upstream: connecting to %s", target)

    try:
        ws = await asyncio.wait_for(
            connect(
                target,
                additional_headers=build_upstream_headers(key),
                max_size=UPSTREAM_MAX_MESSAGE_BYTES,
                open_timeout=None,
            ),
            timeout=timeout,
        )
    except asyncio.TimeoutError as exc:
        metrics.upstream_failures_total.add(1, {"reason": "timeout"})
        raise UpstreamUnavailableError(f"Upstream connection timed out after {timeout:g}s") from exc
    except InvalidStatus as exc:
        status = exc.response.status_code
        metrics.upstream_failures_total.add(1, {"reason": "rejected"})
        raise UpstreamUnavailableError(f"Upstream connection failed: {status}", status=status) from exc
    except (OSError, WebSocketException) as exc:
        metrics.upstream_failures_total.add(1, {"reason": "connect_error"})
        raise UpstreamUnavailableError(f"Failed to connect to upstream: {exc}") from exc

    dt = time.perf_counter() - t0
    metrics.upstream_connect_latency.record(dt)
    logger.info("upstream: connected in %.1f ms", dt * 1000.0)
    return UpstreamConnection(ws)


__all__ = ["build_upstream_url", "build_upstream_headers", "connect_upstream"]
