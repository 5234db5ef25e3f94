"""Population statistics for generation reports.

The helpers here condense the fitness scores of a set of nodes into a small
summary so progress can be logged and compared between generations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import numpy as np

from .motif_node import MotifNode

__all__ = ["FitnessSummary", "summarize_fitness"]


@dataclass(frozen=True)
class FitnessSummary:
    count: int
    mean: float
    std: float
    minimum: float
    maximum: float

    def __str__(self) -> str:
        return (
            f"n={self.count} mean={self.mean:.2f} std={self.std:.2f} "
            f"min={self.minimum:.2f} max={self.maximum:.2f}"
        )


def summarize_fitness(nodes: Iterable[MotifNode]) -> FitnessSummary:
    """Return count, mean, standard deviation and extremes of ``nodes``.

    Raises
    ------
    ValueError
        If ``nodes`` is empty.
    """

    scores = np.array([n.fitness_score for n in nodes], dtype=float)
    if scores.size == 0:
        raise ValueError("at least one node is required")
    return FitnessSummary(
        count=int(scores.size),
        mean=float(np.mean(scores)),
        std=float(np.std(scores)),
        minimum=float(np.min(scores)),
        maximum=float(np.max(scores)),
    )
