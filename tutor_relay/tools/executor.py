"""Tool executor boundary.

``run_tool_safe`` is the only way the relay invokes a tool. It bounds the
call with ``TOOL_TIMEOUT_S`` and converts every failure into an
``{"ok": False, "error": ...}`` result so nothing propagates into the actor.
"""

from __future__ import annotations

import time
import asyncio
import logging
from typing import Any, Protocol

from .context import ToolContext
from ..errors.tool import ToolExecutionError
from ..config.tools import TOOL_TIMEOUT_S
from ..telemetry.sentry import capture_error
from ..telemetry.instruments import get_metrics

logger = logging.getLogger(__name__)


class ToolExecutor(Protocol):
    async def __call__(self, name: str, args: dict[str, Any], context: ToolContext) -> dict[str, Any]: ...


def tool_error(message: str) -> dict[str, Any]:
    return {"ok": False, "error": message}


async def run_tool_safe(
    executor: ToolExecutor,
    name: str,
    args: dict[str, Any],
    context: ToolContext,
    *,
    timeout_s: float | None = None,
) -> dict[str, Any]:
    """Invoke ``executor`` and normalise the outcome into a result dict."""
    timeout = TOOL_TIMEOUT_S if timeout_s is None else timeout_s
    t0 = time.perf_counter()
    outcome = "ok"
    try:
        result = await asyncio.wait_for(executor(name, args, context), timeout=timeout)
        if not isinstance(result, dict):
            outcome = "invalid_result"
            result = tool_error(f'Tool "{name}" returned a non-object result')
        elif result.get("ok") is False:
            outcome = "error"
    except asyncio.TimeoutError:
        outcome = "timeout"
        logger.warning("tool_runner: timeout session_id=%s tool=%s after %.1fs", context.session_id, name, timeout)
        result = tool_error(f'Tool "{name}" timed out after {timeout:g}s')
    except ToolExecutionError as exc:
        outcome = "error"
        logger.info("tool_runner: failed session_id=%s tool=%s error=%s", context.session_id, name, exc.message)
        result = tool_error(exc.message)
    except Exception as exc:  # noqa: BLE001
        outcome = "exception"
        logger.exception("tool_runner: unexpected error session_id=%s tool=%s", context.session_id, name)
        capture_error(exc, session_id=context.session_id, extra={"tool": name})
        result = tool_error(f'Tool "{name}" failed: {exc}')

    dt = time.perf_counter() - t0
    metrics = get_metrics()
    metrics.tool_calls_total.add(1, {"tool": name, "outcome": outcome})
    metrics.tool_latency.record(dt, {"tool": name})
    logger.info(
        "tool_runner: done session_id=%s tool=%s outcome=%s ms=%.1f",
        context.session_id,
        name,
        outcome,
        dt * 1000.0,
    )
    return result


__all__ = ["ToolExecutor", "run_tool_safe", "tool_error"]
