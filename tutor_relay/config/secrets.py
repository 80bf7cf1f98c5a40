"""Secrets and auth-boundary configuration."""

import os


# HMAC key for signed session tokens; empty disables minting and verification
SESSION_SIGNING_SECRET = os.getenv("SESSION_SIGNING_SECRET", "")

# When on (and a secret is configured) /ws rejects connections without a valid token
REQUIRE_SESSION_TOKEN = os.getenv("REQUIRE_SESSION_TOKEN", "0") == "1"

SESSION_TOKEN_TTL_S = int(os.getenv("SESSION_TOKEN_TTL_S", "3600"))

__all__ = [
    "SESSION_SIGNING_SECRET",
    "REQUIRE_SESSION_TOKEN",
    "SESSION_TOKEN_TTL_S",
]
