"""Scenario content: JSON lesson documents, registry and tutor rules."""

from .registry import ScenarioRegistry
from .rules import GLOBAL_TUTOR_RULES, compose_instructions
from .types import (
    Scenario,
    Character,
    KickoffConfig,
    AutoQuizConfig,
    ScenarioSummary,
    SessionOverrides,
)

__all__ = [
    "GLOBAL_TUTOR_RULES",
    "compose_instructions",
    "ScenarioRegistry",
    "Scenario",
    "ScenarioSummary",
    "Character",
    "SessionOverrides",
    "AutoQuizConfig",
    "KickoffConfig",
]
