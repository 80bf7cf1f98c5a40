"""Session store configuration."""

import os


# "file" persists one JSON document per session key; "memory" is process-local
SESSION_STORE_BACKEND = (os.getenv("SESSION_STORE_BACKEND", "file") or "file").lower()
SESSION_STORE_DIR = os.getenv("SESSION_STORE_DIR", ".sessions")

__all__ = [
    "SESSION_STORE_BACKEND",
    "SESSION_STORE_DIR",
]
