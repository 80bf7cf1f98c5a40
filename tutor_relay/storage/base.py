"""Session store contracts.

A ``SessionStoreBackend`` holds the records of every session; ``open`` hands
the owning relay a ``SessionStore`` scoped to one session key. Only that relay
writes through it. The summary endpoint reads through ``load``.
"""

from __future__ import annotations

import abc
from typing import Any
from collections.abc import Mapping


class SessionStore(abc.ABC):
    """Durable key-value record for exactly one session key."""

    def __init__(self, session_key: str) -> None:
        self.session_key = session_key

    @abc.abstractmethod
    async def get(self, key: str, default: Any = None) -> Any:
        """Return the persisted value for ``key``."""

    async def put(self, key: str, value: Any) -> None:
        await self.put_many({key: value})

    @abc.abstractmethod
    async def put_many(self, values: Mapping[str, Any]) -> None:
        """Persist several keys in one write."""

    @abc.abstractmethod
    async def snapshot(self) -> dict[str, Any]:
        """Return a copy of the full persisted record."""


class SessionStoreBackend(abc.ABC):
    """Factory and read side for per-session stores."""

    @abc.abstractmethod
    async def open(self, session_key: str) -> SessionStore:
        """Return the store for ``session_key``, loading any prior record."""

    @abc.abstractmethod
    async def load(self, session_key: str) -> dict[str, Any] | None:
        """Return the persisted record for ``session_key`` or None when unknown."""


__all__ = ["SessionStore", "SessionStoreBackend"]
