"""Upstream realtime backend configuration.

The relay speaks the OpenAI Realtime WebSocket protocol. The model and URL can
be pointed at any compatible backend.
"""

import os


OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
OPENAI_REALTIME_MODEL = os.getenv("OPENAI_REALTIME_MODEL", "gpt-realtime-mini-2025-12-15")
OPENAI_REALTIME_URL = os.getenv("OPENAI_REALTIME_URL", "wss://api.openai.com/v1/realtime")
OPENAI_BETA_HEADER = os.getenv("OPENAI_BETA_HEADER", "realtime=v1")

# Bounded handshake window; the client gets a degraded server.hello after this
UPSTREAM_CONNECT_TIMEOUT_S = float(os.getenv("UPSTREAM_CONNECT_TIMEOUT_S", "10"))
UPSTREAM_CONNECT_ON_ACCEPT = os.getenv("UPSTREAM_CONNECT_ON_ACCEPT", "1") == "1"
UPSTREAM_MAX_MESSAGE_BYTES = int(os.getenv("UPSTREAM_MAX_MESSAGE_BYTES", str(16 * 1024 * 1024)))

# Mirror every upstream event to the client as debug.openai
UPSTREAM_LOG_EVENTS = os.getenv("UPSTREAM_LOG_EVENTS", "0") == "1"

# Session handshake defaults (scenario session_overrides win)
DEFAULT_VOICE = os.getenv("DEFAULT_VOICE", "alloy")
DEFAULT_TEMPERATURE = float(os.getenv("DEFAULT_TEMPERATURE", "0.7"))
DEFAULT_INSTRUCTIONS = os.getenv("DEFAULT_INSTRUCTIONS", "You are a helpful assistant.")
AUDIO_FORMAT = os.getenv("AUDIO_FORMAT", "pcm16")
TRANSCRIPTION_MODEL = os.getenv("TRANSCRIPTION_MODEL", "whisper-1")

# Server-side voice activity detection
VAD_THRESHOLD = float(os.getenv("VAD_THRESHOLD", "0.5"))
VAD_PREFIX_PADDING_MS = int(os.getenv("VAD_PREFIX_PADDING_MS", "300"))
VAD_SILENCE_DURATION_MS = int(os.getenv("VAD_SILENCE_DURATION_MS", "200"))

__all__ = [
    "OPENAI_API_KEY",
    "OPENAI_REALTIME_MODEL",
    "OPENAI_REALTIME_URL",
    "OPENAI_BETA_HEADER",
    "UPSTREAM_CONNECT_TIMEOUT_S",
    "UPSTREAM_CONNECT_ON_ACCEPT",
    "UPSTREAM_MAX_MESSAGE_BYTES",
    "UPSTREAM_LOG_EVENTS",
    "DEFAULT_VOICE",
    "DEFAULT_TEMPERATURE",
    "DEFAULT_INSTRUCTIONS",
    "AUDIO_FORMAT",
    "TRANSCRIPTION_MODEL",
    "VAD_THRESHOLD",
    "VAD_PREFIX_PADDING_MS",
    "VAD_SILENCE_DURATION_MS",
]
