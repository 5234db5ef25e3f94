"""Tunable constants for the evolutionary loop.

:class:`EvolutionSettings` groups every number the generation loop relies on
so experiments can change them without touching the algorithm. Settings can
be persisted to a small JSON file; the default location lives in the user's
home directory and may be overridden with the ``MELODY_TREE_SETTINGS_FILE``
environment variable.

Example
-------
>>> settings = EvolutionSettings(max_population=50)
>>> EvolutionSettings.from_dict(settings.to_dict()) == settings
True
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional

__all__ = [
    "EvolutionSettings",
    "DEFAULT_SETTINGS_FILE",
    "load_settings",
    "save_settings",
]

logger = logging.getLogger(__name__)

env_path = os.environ.get("MELODY_TREE_SETTINGS_FILE")
if env_path:
    DEFAULT_SETTINGS_FILE = Path(env_path).expanduser()
else:
    DEFAULT_SETTINGS_FILE = Path.home() / ".melody_tree_settings.json"


_INT_FIELDS = ("pre_evolve_rounds", "rounds_per_generation", "max_population", "final_size", "pitch_offset")
_REAL_FIELDS = ("prune_start", "prune_step", "final_prune_step", "selection_floor", "duration_offset")


@dataclass(frozen=True)
class EvolutionSettings:
    """Loop, selection and mutation parameters."""

    pre_evolve_rounds: int = 4
    rounds_per_generation: int = 4
    max_population: int = 200
    prune_start: float = 10.0
    prune_step: float = 1.0
    final_size: int = 2
    final_prune_step: float = 0.01
    selection_floor: float = 0.10
    pitch_offset: int = 2
    duration_offset: float = 0.10

    def __post_init__(self) -> None:
        for name in _INT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
        for name in _REAL_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{name} must be a number, got {value!r}")
        if self.pre_evolve_rounds < 0 or self.rounds_per_generation < 0:
            raise ValueError("round counts must be non-negative")
        if self.final_size < 1:
            raise ValueError("final_size must be at least 1")
        if self.max_population < self.final_size:
            raise ValueError("max_population must not be smaller than final_size")
        if self.prune_step <= 0 or self.final_prune_step <= 0:
            raise ValueError("prune steps must be positive")
        if not 0.0 <= self.selection_floor <= 1.0:
            raise ValueError("selection_floor must lie between 0 and 1")
        if self.pitch_offset < 0 or self.duration_offset < 0:
            raise ValueError("mutation offsets must be non-negative")

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "EvolutionSettings":
        """Build settings from ``data``, rejecting unknown keys."""

        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")
        return cls(**data)


def load_settings(path: Optional[Path] = None) -> EvolutionSettings:
    """Load settings from ``path`` or return the defaults.

    Missing or unreadable files fall back to the defaults so a broken file
    never prevents a run. Files that parse but contain invalid values raise
    ``ValueError`` because silently ignoring them would hide a typo.
    """

    path = Path(path) if path is not None else DEFAULT_SETTINGS_FILE
    if not path.is_file():
        return EvolutionSettings()
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Could not load settings from %s: %s", path, exc)
        return EvolutionSettings()
    if not isinstance(data, dict):
        raise ValueError("settings file must contain a JSON object")
    return EvolutionSettings.from_dict(data)


def save_settings(settings: EvolutionSettings, path: Optional[Path] = None) -> None:
    """Write ``settings`` to ``path`` as JSON, logging any ``OSError``."""

    path = Path(path) if path is not None else DEFAULT_SETTINGS_FILE
    try:
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(settings.to_dict(), fh, indent=2)
    except OSError as exc:
        logger.error("Could not save settings: %s", exc)
