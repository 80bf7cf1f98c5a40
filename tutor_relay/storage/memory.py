"""In-process session store backend (tests and single-node development)."""

from __future__ import annotations

import copy
from typing import Any
from collections.abc import Mapping

from .base import SessionStore, SessionStoreBackend


class MemorySessionStore(SessionStore):
    def __init__(self, session_key: str, record: dict[str, Any]) -> None:
        super().__init__(session_key)
        self._record = record

    async def get(self, key: str, default: Any = None) -> Any:
        return copy.deepcopy(self._record.get(key, default))

    async def put_many(self, values: Mapping[str, Any]) -> None:
        for key, value in values.items():
            self._record[key] = copy.deepcopy(value)

    async def snapshot(self) -> dict[str, Any]:
        return copy.deepcopy(self._record)


class MemoryStoreBackend(SessionStoreBackend):
    """Keeps every session record in a dict keyed by session key."""

    def __init__(self) -> None:
        self._records: dict[str, dict[str, Any]] = {}

    async def open(self, session_key: str) -> MemorySessionStore:
        record = self._records.setdefault(session_key, {})
        return MemorySessionStore(session_key, record)

    async def load(self, session_key: str) -> dict[str, Any] | None:
        record = self._records.get(session_key)
        if not record:
            return None
        return copy.deepcopy(record)

    def keys(self) -> list[str]:
        return list(self._records)


__all__ = ["MemorySessionStore", "MemoryStoreBackend"]
