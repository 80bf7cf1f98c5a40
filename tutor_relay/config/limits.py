"""Session guardrails, buffering and concurrency limits configuration."""

import os


# Guardrails: a value of 0 disables the corresponding limit
MAX_SESSION_SECONDS = float(os.getenv("MAX_SESSION_SECONDS", "900"))  # 15 minutes
MAX_RESPONSES_PER_SESSION = int(os.getenv("MAX_RESPONSES_PER_SESSION", "200"))

# Watchdog cadence for the duration guardrail (and periodic stats persistence)
GUARDRAIL_TICK_S = float(os.getenv("GUARDRAIL_TICK_S", "5"))
STATS_PERSIST_EVERY_TICKS = int(os.getenv("STATS_PERSIST_EVERY_TICKS", "6"))  # ~30s at default tick

# Transcript excerpt kept for grading context and the summary endpoint
TRANSCRIPT_MAX_ENTRIES = int(os.getenv("TRANSCRIPT_MAX_ENTRIES", "50"))

# Per-session actor inbox; socket readers block when it is full
SESSION_INBOX_MAX = int(os.getenv("SESSION_INBOX_MAX", "256"))

# Maximum concurrent WebSocket connections across all sessions
MAX_CONCURRENT_CONNECTIONS = int(os.getenv("MAX_CONCURRENT_CONNECTIONS", "100"))
WS_HANDSHAKE_ACQUIRE_TIMEOUT_S = float(os.getenv("WS_HANDSHAKE_ACQUIRE_TIMEOUT_S", "0.5"))

__all__ = [
    "MAX_SESSION_SECONDS",
    "MAX_RESPONSES_PER_SESSION",
    "GUARDRAIL_TICK_S",
    "STATS_PERSIST_EVERY_TICKS",
    "TRANSCRIPT_MAX_ENTRIES",
    "SESSION_INBOX_MAX",
    "MAX_CONCURRENT_CONNECTIONS",
    "WS_HANDSHAKE_ACQUIRE_TIMEOUT_S",
]
