"""Session store backend selection."""

from __future__ import annotations

import logging
from pathlib import Path

from .file import FileStoreBackend
from .base import SessionStoreBackend
from .memory import MemoryStoreBackend
from ..config.storage import SESSION_STORE_DIR, SESSION_STORE_BACKEND

logger = logging.getLogger(__name__)


def create_store_backend(
    backend: str | None = None,
    directory: str | Path | None = None,
) -> SessionStoreBackend:
    """Build the configured store backend.

    Raises:
        ValueError: If ``backend`` names an unknown backend.
    """
    kind = (backend or SESSION_STORE_BACKEND).strip().lower()
    if kind == "memory":
        logger.info("session store: in-memory")
        return MemoryStoreBackend()
    if kind == "file":
        target = Path(directory or SESSION_STORE_DIR)
        logger.info("session store: json files under %s", target)
        return FileStoreBackend(target)
    raise ValueError(f"Unknown SESSION_STORE_BACKEND '{kind}' (expected 'file' or 'memory')")


__all__ = ["create_store_backend"]
