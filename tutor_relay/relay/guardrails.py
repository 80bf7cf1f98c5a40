"""Session guardrails: the duration watchdog and the response cap.

The watchdog does not terminate anything itself. On every tick it invokes a
callback (the relay posts a tick into its inbox), so guardrail decisions are
made by the actor in order with everything else.
"""

from __future__ import annotations

import asyncio
import logging
import contextlib
from collections.abc import Callable, Awaitable

from ..config.limits import GUARDRAIL_TICK_S

logger = logging.getLogger(__name__)


def duration_exceeded(elapsed_s: float, max_session_s: float) -> bool:
    """Return True when ``elapsed_s`` reaches the cap (0 disables the cap)."""
    return max_session_s > 0 and elapsed_s >= max_session_s


def responses_exceeded(responses_created: int, max_responses: int) -> bool:
    """Return True when more responses were created than allowed (0 disables)."""
    return max_responses > 0 and responses_created > max_responses


class GuardrailWatchdog:
    """Periodic ticker driving the duration guardrail.

    Attributes:
        ticks: Number of ticks delivered so far.
    """

    def __init__(
        self,
        on_tick: Callable[[], Awaitable[None]],
        tick_s: float | None = None,
    ) -> None:
        self._on_tick = on_tick
        self._tick_s = float(tick_s or GUARDRAIL_TICK_S)
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task | None = None
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        """Start the watchdog task (idempotent)."""
        if self._task is None:
            self._task = asyncio.create_task(self._watchdog_loop())
        return self._task

    async def stop(self) -> None:
        """Stop the watchdog task and wait for it to finish."""
        self._stop_event.set()
        if self._task is None:
            return
        task, self._task = self._task, None
        if task is asyncio.current_task():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _watchdog_loop(self) -> None:
        while not self._stop_event.is_set():
            await asyncio.sleep(self._tick_s)
            if self._stop_event.is_set():
                break
            self.ticks += 1
            try:
                await self._on_tick()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("guardrail watchdog tick failed")


__all__ = ["GuardrailWatchdog", "duration_exceeded", "responses_exceeded"]
