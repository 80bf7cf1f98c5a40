"""Wrapper around the upstream realtime WebSocket.

All sends go through ``send_event`` which enforces the outbound allow-list.
"""

from __future__ import annotations

import json
import logging
import contextlib
from typing import Any
from collections.abc import AsyncIterator

from websockets.exceptions import ConnectionClosed, ConnectionClosedOK

from .events import validate_outbound
from ..config.websocket import WS_CLOSE_NORMAL_CODE
from ..errors.upstream import UpstreamUnavailableError

logger = logging.getLogger(__name__)


class UpstreamConnection:
    """One upstream socket owned by exactly one relay session.

    Attributes:
        closed_cleanly: True once the peer closed with a normal close frame.
    """

    def __init__(self, ws: Any) -> None:
        self._ws = ws
        self._closed = False
        self.closed_cleanly = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send_event(self, event: dict[str, Any]) -> None:
        """Serialize and send an allow-listed event.

        Raises:
            DisallowedEventError: If the event is outside the allow-list.
            UpstreamUnavailableError: If the socket is closed.
        """
        event_type = validate_outbound(event)
        if self._closed:
            raise UpstreamUnavailableError("Upstream connection is closed")
        try:
            await self._ws.send(json.dumps(event, ensure_ascii=False))
        except ConnectionClosed as exc:
            self._closed = True
            raise UpstreamUnavailableError(f"Upstream closed while sending {event_type}") from exc

    async def messages(self) -> AsyncIterator[str | bytes]:
        """Yield inbound frames until the socket closes.

        A clean close ends the iteration normally; an abnormal close raises
        ``ConnectionClosed``.
        """
        try:
            async for message in self._ws:
                yield message
        except ConnectionClosedOK:
            self.closed_cleanly = True
        else:
            self.closed_cleanly = True
        finally:
            self._closed = True

    async def close(self, code: int = WS_CLOSE_NORMAL_CODE, reason: str = "") -> None:
        """Close the socket. Idempotent."""
        if self._closed:
            return
        self._closed = True
        with contextlib.suppress(Exception):
            await self._ws.close(code=code, reason=reason)


__all__ = ["UpstreamConnection"]
