"""Scenario dataclasses parsed from JSON scenario documents.

Only the fields the relay acts on are validated; pedagogical content
(objectives, phrases, vocab, rubric) is carried through untouched.
"""

from __future__ import annotations

from typing import Any
from dataclasses import field, dataclass

from ..errors.scenario import ScenarioValidationError

AUTO_QUIZ_WHEN = ("end_call", "tool_trigger")


def _str_field(data: dict[str, Any], key: str, *, required: bool = False) -> str | None:
    value = data.get(key)
    if value is None:
        if required:
            raise ScenarioValidationError(f"Scenario field '{key}' is required")
        return None
    if not isinstance(value, str) or (required and not value.strip()):
        raise ScenarioValidationError(f"Scenario field '{key}' must be a non-empty string")
    return value


def _list_field(data: dict[str, Any], key: str) -> list[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ScenarioValidationError(f"Scenario field '{key}' must be a list")
    return list(value)


@dataclass(frozen=True, slots=True)
class Character:
    name: str
    role: str


@dataclass(frozen=True, slots=True)
class SessionOverrides:
    voice: str | None = None
    temperature: float | None = None


@dataclass(frozen=True, slots=True)
class AutoQuizConfig:
    enabled: bool = False
    when: str = "end_call"
    num_questions: int | None = None


@dataclass(frozen=True, slots=True)
class KickoffConfig:
    enabled: bool = False
    prompt: str = ""
    max_turns: int | None = None
    style: str | None = None


@dataclass(frozen=True, slots=True)
class ScenarioSummary:
    id: str
    level: str
    title: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "level": self.level, "title": self.title}


@dataclass(frozen=True)
class Scenario:
    """One role-play lesson: persona, prompt, tools and end-of-call behaviour."""

    id: str
    level: str
    title: str
    system_prompt: str
    character: Character | None = None
    tools: list[dict[str, Any]] = field(default_factory=list)
    session_overrides: SessionOverrides = field(default_factory=SessionOverrides)
    learning_objectives: list[str] = field(default_factory=list)
    target_phrases: list[str] = field(default_factory=list)
    vocab: list[dict[str, Any]] = field(default_factory=list)
    grading_rubric: dict[str, Any] | None = None
    auto_quiz: AutoQuizConfig = field(default_factory=AutoQuizConfig)
    kickoff: KickoffConfig = field(default_factory=KickoffConfig)

    @property
    def summary(self) -> ScenarioSummary:
        return ScenarioSummary(id=self.id, level=self.level, title=self.title)

    @classmethod
    def from_dict(cls, data: Any) -> Scenario:
        """Build a Scenario from a decoded JSON document.

        Raises:
            ScenarioValidationError: If a required field is missing or mistyped.
        """
        if not isinstance(data, dict):
            raise ScenarioValidationError("Scenario document must be a JSON object")

        scenario_id = _str_field(data, "id", required=True)
        title = _str_field(data, "title", required=True)
        system_prompt = _str_field(data, "system_prompt", required=True)
        level = _str_field(data, "level") or ""

        tools = _list_field(data, "tools")
        for tool in tools:
            if not isinstance(tool, dict) or not isinstance(tool.get("name"), str):
                raise ScenarioValidationError(f"Scenario '{scenario_id}' has a tool without a name")

        return cls(
            id=scenario_id,
            level=level,
            title=title,
            system_prompt=system_prompt,
            character=_parse_character(data.get("character")),
            tools=tools,
            session_overrides=_parse_overrides(data.get("session_overrides")),
            learning_objectives=[str(item) for item in _list_field(data, "learning_objectives")],
            target_phrases=[str(item) for item in _list_field(data, "target_phrases")],
            vocab=[item for item in _list_field(data, "vocab") if isinstance(item, dict)],
            grading_rubric=data.get("grading_rubric") if isinstance(data.get("grading_rubric"), dict) else None,
            auto_quiz=_parse_auto_quiz(data.get("auto_quiz")),
            kickoff=_parse_kickoff(data.get("kickoff")),
        )


def _parse_character(raw: Any) -> Character | None:
    if not isinstance(raw, dict):
        return None
    return Character(name=str(raw.get("name") or ""), role=str(raw.get("role") or ""))


def _parse_overrides(raw: Any) -> SessionOverrides:
    if not isinstance(raw, dict):
        return SessionOverrides()
    voice = raw.get("voice")
    temperature = raw.get("temperature")
    if isinstance(temperature, bool) or not isinstance(temperature, (int, float)):
        temperature = None
    return SessionOverrides(
        voice=voice if isinstance(voice, str) and voice else None,
        temperature=float(temperature) if temperature is not None else None,
    )


def _parse_auto_quiz(raw: Any) -> AutoQuizConfig:
    if not isinstance(raw, dict):
        return AutoQuizConfig()
    when = raw.get("when", "end_call")
    if when not in AUTO_QUIZ_WHEN:
        raise ScenarioValidationError(f"auto_quiz.when must be one of {AUTO_QUIZ_WHEN}")
    num_questions = raw.get("num_questions")
    return AutoQuizConfig(
        enabled=bool(raw.get("enabled")),
        when=when,
        num_questions=num_questions if isinstance(num_questions, int) and num_questions > 0 else None,
    )


def _parse_kickoff(raw: Any) -> KickoffConfig:
    if not isinstance(raw, dict):
        return KickoffConfig()
    prompt = raw.get("prompt")
    max_turns = raw.get("max_turns")
    style = raw.get("style")
    return KickoffConfig(
        enabled=bool(raw.get("enabled")) and isinstance(prompt, str) and bool(prompt.strip()),
        prompt=prompt if isinstance(prompt, str) else "",
        max_turns=max_turns if isinstance(max_turns, int) else None,
        style=style if isinstance(style, str) else None,
    )


__all__ = [
    "AUTO_QUIZ_WHEN",
    "AutoQuizConfig",
    "Character",
    "KickoffConfig",
    "Scenario",
    "ScenarioSummary",
    "SessionOverrides",
]
