"""Scenario content exceptions."""


class ScenarioNotFoundError(LookupError):
    """Raised when a scenario id is not present in the registry."""

    def __init__(self, scenario_id: str) -> None:
        super().__init__(f"Scenario not found: {scenario_id}")
        self.scenario_id = scenario_id


class ScenarioValidationError(ValueError):
    """Raised when a scenario document is missing required fields."""


__all__ = ["ScenarioNotFoundError", "ScenarioValidationError"]
