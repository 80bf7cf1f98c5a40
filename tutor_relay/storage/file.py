"""JSON-file session store backend.

One document per session key under ``SESSION_STORE_DIR``. Every write
replaces the whole document atomically, off the event loop.
"""

from __future__ import annotations

import copy
import asyncio
import logging
from typing import Any
from pathlib import Path
from collections.abc import Mapping

from .base import SessionStore, SessionStoreBackend
from .io import read_json_file, record_filename, write_json_file

logger = logging.getLogger(__name__)


class FileSessionStore(SessionStore):
    def __init__(self, session_key: str, path: Path, record: dict[str, Any]) -> None:
        super().__init__(session_key)
        self.path = path
        self._record = record

    async def get(self, key: str, default: Any = None) -> Any:
        return copy.deepcopy(self._record.get(key, default))

    async def put_many(self, values: Mapping[str, Any]) -> None:
        for key, value in values.items():
            self._record[key] = copy.deepcopy(value)
        document = copy.deepcopy(self._record)
        ok = await asyncio.to_thread(write_json_file, self.path, document)
        if not ok:
            logger.warning("session record not persisted: key=%s path=%s", self.session_key, self.path)

    async def snapshot(self) -> dict[str, Any]:
        return copy.deepcopy(self._record)


class FileStoreBackend(SessionStoreBackend):
    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def _path_for(self, session_key: str) -> Path:
        return self.directory / record_filename(session_key)

    async def _read(self, path: Path) -> dict[str, Any] | None:
        data = await asyncio.to_thread(read_json_file, path)
        return data if isinstance(data, dict) else None

    async def open(self, session_key: str) -> FileSessionStore:
        path = self._path_for(session_key)
        record = await self._read(path) or {}
        return FileSessionStore(session_key, path, record)

    async def load(self, session_key: str) -> dict[str, Any] | None:
        record = await self._read(self._path_for(session_key))
        return record or None


__all__ = ["FileSessionStore", "FileStoreBackend"]
