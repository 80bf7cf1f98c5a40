"""Runtime dependency container.

All long-lived services (admission control, live session registry, session
store, scenario content, tool executor) are assembled at startup and passed
explicitly to request handlers instead of living in module-level singletons.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tutor_relay.tools.executor import ToolExecutor
    from tutor_relay.scenarios.registry import ScenarioRegistry
    from tutor_relay.storage.base import SessionStoreBackend
    from tutor_relay.handlers.sessions import SessionRegistry
    from tutor_relay.handlers.connections import ConnectionHandler
    from tutor_relay.relay.session import RelaySettings, UpstreamConnector

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RuntimeDeps:
    """Process-wide runtime services initialized during startup."""

    connections: ConnectionHandler
    sessions: SessionRegistry
    store_backend: SessionStoreBackend
    scenarios: ScenarioRegistry
    tool_executor: ToolExecutor
    signing_secret: str = ""
    require_token: bool = False
    connector: UpstreamConnector | None = None
    relay_settings: RelaySettings | None = None

    def capacity_info(self) -> dict[str, object]:
        info: dict[str, object] = dict(self.connections.get_capacity_info())
        info["sessions"] = self.sessions.active_count()
        return info

    async def shutdown(self) -> None:
        """Terminate live sessions so their final state is persisted."""
        await self.sessions.shutdown()
        logger.info("runtime shutdown: %d session(s) still registered", self.sessions.active_count())


__all__ = ["RuntimeDeps"]
