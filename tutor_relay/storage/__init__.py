"""Durable per-session records and the summary read model."""

from .base import SessionStore, SessionStoreBackend
from .file import FileSessionStore, FileStoreBackend
from .memory import MemorySessionStore, MemoryStoreBackend
from .factory import create_store_backend
from .summary import build_summary, load_summary, latest_tool_result

__all__ = [
    "SessionStore",
    "SessionStoreBackend",
    "FileSessionStore",
    "FileStoreBackend",
    "MemorySessionStore",
    "MemoryStoreBackend",
    "create_store_backend",
    "build_summary",
    "load_summary",
    "latest_tool_result",
]
