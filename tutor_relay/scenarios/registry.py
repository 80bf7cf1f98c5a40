"""Scenario registry backed by a directory of JSON documents.

Documents are read once on first use. Files that fail to parse or validate
are logged and skipped so one bad lesson does not take the index down.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from .types import Scenario, ScenarioSummary
from ..config.scenarios import SCENARIOS_DIR
from ..errors.scenario import ScenarioNotFoundError, ScenarioValidationError

logger = logging.getLogger(__name__)


class ScenarioRegistry:
    """Loads scenarios from ``directory`` and serves them by id."""

    def __init__(self, directory: str | Path | None = None) -> None:
        self.directory = Path(directory) if directory is not None else SCENARIOS_DIR
        self._scenarios: dict[str, Scenario] | None = None

    def _load(self) -> dict[str, Scenario]:
        if self._scenarios is not None:
            return self._scenarios

        scenarios: dict[str, Scenario] = {}
        if not self.directory.is_dir():
            logger.warning("scenario directory missing: %s", self.directory)
        else:
            for path in sorted(self.directory.glob("*.json")):
                try:
                    with path.open(encoding="utf-8") as fh:
                        scenario = Scenario.from_dict(json.load(fh))
                except (OSError, json.JSONDecodeError, ScenarioValidationError) as exc:
                    logger.warning("skipping scenario file %s: %s", path.name, exc)
                    continue
                if scenario.id in scenarios:
                    logger.warning("duplicate scenario id %s in %s; keeping first", scenario.id, path.name)
                    continue
                scenarios[scenario.id] = scenario

        logger.info("scenario registry loaded %d scenario(s) from %s", len(scenarios), self.directory)
        self._scenarios = scenarios
        return scenarios

    def list_scenarios(self) -> list[ScenarioSummary]:
        return [scenario.summary for scenario in self._load().values()]

    def get_scenario(self, scenario_id: str) -> Scenario:
        """Return the scenario for ``scenario_id``.

        Raises:
            ScenarioNotFoundError: If no scenario has that id.
        """
        scenario = self._load().get(scenario_id)
        if scenario is None:
            raise ScenarioNotFoundError(scenario_id)
        return scenario

    def find_scenario(self, scenario_id: str | None) -> Scenario | None:
        if not scenario_id:
            return None
        return self._load().get(scenario_id)

    def index(self) -> dict[str, list[dict[str, str]]]:
        return {"scenarios": [summary.to_dict() for summary in self.list_scenarios()]}


__all__ = ["ScenarioRegistry"]
