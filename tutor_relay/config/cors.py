"""Origin policy for the HTTP API and the WebSocket upgrade."""

import os


ALLOW_ANY_ORIGIN = os.getenv("ALLOW_ANY_ORIGIN", "0") == "1"
ALLOWED_ORIGINS: tuple[str, ...] = tuple(
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "").split(",")
    if origin.strip()
)

__all__ = [
    "ALLOW_ANY_ORIGIN",
    "ALLOWED_ORIGINS",
]
