"""RuntimeDeps builders wired to in-memory fakes."""

from __future__ import annotations

from typing import Any

from tutor_relay.runtime import RuntimeDeps
from tutor_relay.tools.registry import build_default_registry
from tutor_relay.storage.memory import MemoryStoreBackend
from tutor_relay.handlers.sessions import SessionRegistry
from tutor_relay.scenarios.registry import ScenarioRegistry
from tutor_relay.handlers.connections import ConnectionHandler

from .fakes import FakeConnector
from .relay import quiet_settings


def build_runtime(
    *,
    max_connections: int = 4,
    signing_secret: str = "",
    require_token: bool = False,
    connector: FakeConnector | None = None,
    tool_executor: Any = None,
) -> RuntimeDeps:
    return RuntimeDeps(
        connections=ConnectionHandler(max_connections=max_connections, acquire_timeout=0.01),
        sessions=SessionRegistry(),
        store_backend=MemoryStoreBackend(),
        scenarios=ScenarioRegistry(),
        tool_executor=tool_executor or build_default_registry(),
        signing_secret=signing_secret,
        require_token=require_token,
        connector=connector or FakeConnector(),
        relay_settings=quiet_settings(),
    )


__all__ = ["build_runtime"]
