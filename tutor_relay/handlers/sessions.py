"""Registry of live relay sessions keyed by session key.

At most one live actor may own a session key; a second connection with the
same key is refused while the first is open. The registry also fans out the
shutdown request when the server stops.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..relay.session import RealtimeSession

logger = logging.getLogger(__name__)


class SessionRegistry:
    def __init__(self) -> None:
        self._sessions: dict[str, RealtimeSession] = {}
        self._lock = asyncio.Lock()

    async def register(self, session: RealtimeSession) -> bool:
        """Register ``session`` under its key; False if the key is already live."""
        async with self._lock:
            if session.session_key in self._sessions:
                logger.warning("session key already in use: %s", session.session_key)
                return False
            self._sessions[session.session_key] = session
            return True

    async def unregister(self, session: RealtimeSession) -> None:
        async with self._lock:
            if self._sessions.get(session.session_key) is session:
                del self._sessions[session.session_key]

    def get(self, session_key: str) -> RealtimeSession | None:
        return self._sessions.get(session_key)

    def active_count(self) -> int:
        return len(self._sessions)

    async def shutdown(self) -> None:
        """Ask every live session to terminate with ``server_shutdown``."""
        async with self._lock:
            sessions = list(self._sessions.values())
        if sessions:
            logger.info("requesting shutdown of %d live session(s)", len(sessions))
        for session in sessions:
            await session.request_shutdown()


__all__ = ["SessionRegistry"]
