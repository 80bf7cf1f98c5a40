"""Admission control for client WebSocket connections.

A semaphore bounds how many client sockets the relay serves at once
(``MAX_CONCURRENT_CONNECTIONS``). Admission waits at most
``WS_HANDSHAKE_ACQUIRE_TIMEOUT_S`` for a slot; past that the upgrade is
rejected with ``server_at_capacity`` instead of queueing the client.

Example:
    handler = ConnectionHandler(max_connections=100)

    if not await handler.connect(ws):
        ...  # reject with 1013
    try:
        ...
    finally:
        await handler.disconnect(ws)
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import WebSocket

from ..config.limits import MAX_CONCURRENT_CONNECTIONS, WS_HANDSHAKE_ACQUIRE_TIMEOUT_S

logger = logging.getLogger(__name__)


class ConnectionHandler:
    """Tracks admitted client sockets and enforces the concurrency cap.

    Attributes:
        max_connections: Maximum allowed concurrent client sockets.
        acquire_timeout: Max seconds to wait for a free slot.
        active_connections: Sockets currently holding a slot.
    """

    def __init__(
        self,
        max_connections: int | None = None,
        acquire_timeout: float = WS_HANDSHAKE_ACQUIRE_TIMEOUT_S,
    ) -> None:
        if max_connections is None:
            max_connections = MAX_CONCURRENT_CONNECTIONS
        if max_connections < 1:
            raise ValueError("max_connections must be at least 1")
        self.max_connections = max_connections
        self.acquire_timeout = acquire_timeout
        self.active_connections: set[WebSocket] = set()
        self._lock = asyncio.Lock()
        self._semaphore = asyncio.Semaphore(max_connections)

    async def connect(self, websocket: WebSocket) -> bool:
        """Reserve a slot for ``websocket``.

        Returns:
            True if admitted, False if the server stayed at capacity for the
            whole acquire window.
        """
        try:
            await asyncio.wait_for(self._semaphore.acquire(), timeout=self.acquire_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "Connection rejected: at capacity (%s/%s)",
                len(self.active_connections),
                self.max_connections,
            )
            return False

        async with self._lock:
            self.active_connections.add(websocket)
            logger.info("Connection admitted: %s/%s active", len(self.active_connections), self.max_connections)
        return True

    async def disconnect(self, websocket: WebSocket) -> None:
        """Release the slot held by ``websocket``; unknown sockets are ignored."""
        async with self._lock:
            if websocket not in self.active_connections:
                return
            self.active_connections.remove(websocket)
            logger.info("Connection released: %s/%s active", len(self.active_connections), self.max_connections)
        self._semaphore.release()

    def get_connection_count(self) -> int:
        return len(self.active_connections)

    def get_capacity_info(self) -> dict[str, Any]:
        active = len(self.active_connections)
        return {
            "active": active,
            "max": self.max_connections,
            "available": self.max_connections - active,
            "at_capacity": active >= self.max_connections,
        }


__all__ = ["ConnectionHandler"]
