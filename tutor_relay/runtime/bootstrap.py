"""Runtime dependency bootstrap.

Builds every configured runtime service eagerly at startup. Scenario content
is loaded here as well so a broken scenario directory is reported before the
first client connects.
"""

from __future__ import annotations

import asyncio
import logging

from tutor_relay.tools.registry import build_default_registry
from tutor_relay.storage.factory import create_store_backend
from tutor_relay.scenarios.registry import ScenarioRegistry
from tutor_relay.handlers.sessions import SessionRegistry
from tutor_relay.handlers.connections import ConnectionHandler
from tutor_relay.config.upstream import OPENAI_API_KEY
from tutor_relay.config.secrets import REQUIRE_SESSION_TOKEN, SESSION_SIGNING_SECRET

from .dependencies import RuntimeDeps

logger = logging.getLogger(__name__)


async def _build_scenarios() -> ScenarioRegistry:
    registry = ScenarioRegistry()
    scenarios = await asyncio.to_thread(registry.list_scenarios)
    logger.info("bootstrap: loaded %d scenario(s)", len(scenarios))
    return registry


async def build_runtime_deps() -> RuntimeDeps:
    """Build runtime dependencies from configuration."""
    scenarios = await _build_scenarios()
    store_backend = create_store_backend()

    if not OPENAI_API_KEY:
        logger.warning("bootstrap: OPENAI_API_KEY is not set; sessions will run degraded")
    if REQUIRE_SESSION_TOKEN and not SESSION_SIGNING_SECRET:
        logger.warning("bootstrap: REQUIRE_SESSION_TOKEN is on but SESSION_SIGNING_SECRET is empty; tokens not enforced")

    return RuntimeDeps(
        connections=ConnectionHandler(),
        sessions=SessionRegistry(),
        store_backend=store_backend,
        scenarios=scenarios,
        tool_executor=build_default_registry(),
        signing_secret=SESSION_SIGNING_SECRET,
        require_token=REQUIRE_SESSION_TOKEN,
    )


__all__ = ["build_runtime_deps"]
