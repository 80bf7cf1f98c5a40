"""Build the ``session.update`` handshake from a scenario."""

from __future__ import annotations

from typing import Any

from .events import session_update
from ..scenarios.types import Scenario
from ..scenarios.rules import compose_instructions
from ..config.upstream import (
    AUDIO_FORMAT,
    DEFAULT_VOICE,
    VAD_THRESHOLD,
    DEFAULT_TEMPERATURE,
    TRANSCRIPTION_MODEL,
    DEFAULT_INSTRUCTIONS,
    VAD_PREFIX_PADDING_MS,
    VAD_SILENCE_DURATION_MS,
)

_EMPTY_PARAMETERS: dict[str, Any] = {"type": "object", "properties": {}}


def _tool_definition(tool: dict[str, Any]) -> dict[str, Any]:
    definition: dict[str, Any] = {"type": "function", "name": tool["name"]}
    description = tool.get("description")
    if isinstance(description, str) and description:
        definition["description"] = description
    parameters = tool.get("parameters")
    definition["parameters"] = parameters if isinstance(parameters, dict) else dict(_EMPTY_PARAMETERS)
    return definition


def build_session_config(scenario: Scenario | None) -> dict[str, Any]:
    """Return the ``session`` object for the handshake."""
    overrides = scenario.session_overrides if scenario else None
    voice = (overrides.voice if overrides else None) or DEFAULT_VOICE
    temperature = overrides.temperature if overrides and overrides.temperature is not None else DEFAULT_TEMPERATURE
    tools = [_tool_definition(tool) for tool in scenario.tools] if scenario else []

    return {
        "instructions": compose_instructions(scenario.system_prompt if scenario else DEFAULT_INSTRUCTIONS),
        "modalities": ["text", "audio"],
        "voice": voice,
        "input_audio_format": AUDIO_FORMAT,
        "output_audio_format": AUDIO_FORMAT,
        "input_audio_transcription": {"model": TRANSCRIPTION_MODEL},
        "turn_detection": {
            "type": "server_vad",
            "threshold": VAD_THRESHOLD,
            "prefix_padding_ms": VAD_PREFIX_PADDING_MS,
            "silence_duration_ms": VAD_SILENCE_DURATION_MS,
        },
        "tools": tools,
        "tool_choice": "auto",
        "temperature": temperature,
    }


def build_session_update(scenario: Scenario | None) -> dict[str, Any]:
    return session_update(build_session_config(scenario))


__all__ = ["build_session_config", "build_session_update"]
