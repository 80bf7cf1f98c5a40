"""Scenario content location."""

import os
from pathlib import Path


_DEFAULT_SCENARIOS_DIR = Path(__file__).resolve().parent.parent / "scenarios" / "data"

SCENARIOS_DIR = Path(os.getenv("SCENARIOS_DIR", str(_DEFAULT_SCENARIOS_DIR)))

__all__ = ["SCENARIOS_DIR"]
