"""Builders for driving a RealtimeSession against in-memory fakes."""

from __future__ import annotations

import asyncio
from typing import Any
from dataclasses import field, dataclass
from collections.abc import Callable

from tutor_relay.relay.session import RelaySettings, RealtimeSession
from tutor_relay.scenarios.registry import ScenarioRegistry
from tutor_relay.storage.memory import MemoryStoreBackend

from .fakes import FakeConnector, FakeClientWebSocket, RecordingToolExecutor

COFFEE_SCENARIO = "a1-ordering-coffee"
TAXI_SCENARIO = "a1-taxi-bogota"


def quiet_settings(**overrides: Any) -> RelaySettings:
    """Settings with guardrails off and a watchdog that never fires on its own."""
    values: dict[str, Any] = {
        "max_session_s": 0,
        "max_responses": 0,
        "tick_s": 3600.0,
        "stats_persist_every_ticks": 0,
        "connect_on_accept": True,
        "log_upstream_events": False,
        "inbox_max": 256,
        "transcript_max": 50,
    }
    values.update(overrides)
    return RelaySettings(**values)


@dataclass
class RelayHarness:
    session: RealtimeSession
    client: FakeClientWebSocket
    connector: FakeConnector
    executor: Any
    backend: MemoryStoreBackend
    task: asyncio.Task | None = None
    now: list[float] = field(default_factory=lambda: [0.0])

    @property
    def upstream(self):
        return self.connector.socket

    def start(self) -> None:
        self.task = asyncio.ensure_future(self.session.run())

    async def wait_for(self, predicate: Callable[[], bool], timeout: float = 2.0) -> None:
        deadline = asyncio.get_running_loop().time() + timeout
        while not predicate():
            if asyncio.get_running_loop().time() > deadline:
                raise AssertionError("condition not reached in time")
            await asyncio.sleep(0.002)

    async def wait_ready(self) -> None:
        await self.wait_for(lambda: bool(self.client.of_type("server.hello")))

    async def wait_closed(self, timeout: float = 2.0) -> None:
        assert self.task is not None
        await asyncio.wait_for(self.task, timeout=timeout)

    async def stop(self) -> None:
        if self.task is None or self.task.done():
            return
        self.task.cancel()
        await asyncio.gather(self.task, return_exceptions=True)

    async def record(self) -> dict[str, Any]:
        return await self.backend.load(self.session.session_key) or {}


async def build_harness(
    *,
    session_key: str = "sess-1",
    scenario_id: str | None = COFFEE_SCENARIO,
    settings: RelaySettings | None = None,
    executor: Any = None,
    connector: FakeConnector | None = None,
    backend: MemoryStoreBackend | None = None,
    client: FakeClientWebSocket | None = None,
) -> RelayHarness:
    backend = backend or MemoryStoreBackend()
    connector = connector or FakeConnector()
    executor = executor or RecordingToolExecutor()
    client = client or FakeClientWebSocket()
    now = [0.0]
    session = RealtimeSession(
        client,
        session_key=session_key,
        store=await backend.open(session_key),
        scenarios=ScenarioRegistry(),
        tool_executor=executor,
        scenario_id=scenario_id,
        connector=connector,
        settings=settings or quiet_settings(),
        clock=lambda: now[0],
    )
    return RelayHarness(
        session=session,
        client=client,
        connector=connector,
        executor=executor,
        backend=backend,
        now=now,
    )


__all__ = [
    "COFFEE_SCENARIO",
    "TAXI_SCENARIO",
    "RelayHarness",
    "build_harness",
    "quiet_settings",
]
