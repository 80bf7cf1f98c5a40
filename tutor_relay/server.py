"""FastAPI server for the realtime tutor relay.

Endpoints:

- ``GET /``, ``/healthz``, ``/api/health``: liveness for load balancers
- ``GET /api/scenarios``: scenario index ``{scenarios: [{id, level, title}]}``
- ``POST /api/sessions``: mint a signed session token for a scenario
- ``GET /api/sessions/{session_key}/summary``: persisted session summary
- ``WS /ws``: the relay itself (see ``handlers.websocket.manager``)

Server lifecycle:
    1. On startup: initialize telemetry, build runtime dependencies
       (scenario content, session store, tool executor, admission control)
    2. Accept relay sessions on /ws
    3. On shutdown: terminate live sessions so their final state is
       persisted, then flush telemetry

Example:
    $ uvicorn tutor_relay.server:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import uuid
import logging
from typing import Any
from contextlib import asynccontextmanager
from collections.abc import Callable, Awaitable

from pydantic import Field, BaseModel, ConfigDict
from fastapi import FastAPI, Request, WebSocket, HTTPException
from fastapi.responses import ORJSONResponse
from fastapi.middleware.cors import CORSMiddleware

from .logging import configure_logging
from .telemetry import init_telemetry, shutdown_telemetry
from .auth.tokens import mint_session_token
from .runtime import RuntimeDeps, build_runtime_deps
from .storage.summary import load_summary
from .config.cors import ALLOWED_ORIGINS, ALLOW_ANY_ORIGIN
from .config.secrets import SESSION_TOKEN_TTL_S
from .handlers.websocket.manager import handle_websocket_connection

logger = logging.getLogger(__name__)

RuntimeDepsFactory = Callable[[], Awaitable[RuntimeDeps]]


class CreateSessionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    scenario_id: str = Field(alias="scenarioId", min_length=1)
    session_key: str | None = Field(default=None, alias="sessionKey")


def _runtime_deps(request: Request) -> RuntimeDeps:
    return request.app.state.runtime_deps


def _cors_origins() -> list[str]:
    if ALLOW_ANY_ORIGIN:
        return ["*"]
    return list(ALLOWED_ORIGINS)


def create_app(runtime_deps_factory: RuntimeDepsFactory | None = None) -> FastAPI:
    """Build the relay application.

    Args:
        runtime_deps_factory: Async builder for the runtime services.
            Defaults to ``build_runtime_deps`` (configuration from env).
    """
    factory = runtime_deps_factory or build_runtime_deps

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_telemetry()
        app.state.runtime_deps = await factory()
        logger.info("startup: relay ready")
        try:
            yield
        finally:
            await app.state.runtime_deps.shutdown()
            shutdown_telemetry()
            logger.info("shutdown: relay stopped")

    app = FastAPI(default_response_class=ORJSONResponse, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root():
        """Root endpoint for load balancer health checks."""
        return {"status": "ok", "service": "tutor-realtime-relay"}

    @app.get("/healthz")
    async def healthz(request: Request):
        """Health check endpoint (no authentication required)."""
        return {"status": "ok", "capacity": _runtime_deps(request).capacity_info()}

    @app.get("/api/health")
    async def api_health():
        return {"ok": True}

    @app.get("/favicon.ico", status_code=204)
    async def favicon():
        """Suppress favicon requests from browsers/probes."""
        return None

    @app.get("/api/scenarios")
    async def list_scenarios(request: Request):
        return _runtime_deps(request).scenarios.index()

    @app.post("/api/sessions")
    async def create_session(body: CreateSessionRequest, request: Request) -> dict[str, Any]:
        """Mint a signed session token binding a session key to a scenario."""
        deps = _runtime_deps(request)
        if not deps.signing_secret:
            raise HTTPException(status_code=503, detail="Session tokens are not configured")
        if deps.scenarios.find_scenario(body.scenario_id) is None:
            raise HTTPException(status_code=404, detail=f"Unknown scenario '{body.scenario_id}'")

        session_key = body.session_key or uuid.uuid4().hex
        token, payload = mint_session_token(
            session_key,
            body.scenario_id,
            deps.signing_secret,
            ttl_s=SESSION_TOKEN_TTL_S,
        )
        logger.info("minted session token session=%s scenario=%s", session_key, body.scenario_id)
        return {
            "sessionKey": session_key,
            "scenarioId": body.scenario_id,
            "token": token,
            "expiresAt": payload.exp,
        }

    @app.get("/api/sessions/{session_key}/summary")
    async def session_summary(session_key: str, request: Request):
        summary = await load_summary(_runtime_deps(request).store_backend, session_key)
        if summary is None:
            raise HTTPException(status_code=404, detail="Unknown session")
        return summary

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """Relay endpoint: one realtime tutor session per connection."""
        await handle_websocket_connection(websocket, websocket.app.state.runtime_deps)

    return app


configure_logging()

app = create_app()


__all__ = ["app", "create_app", "CreateSessionRequest"]
