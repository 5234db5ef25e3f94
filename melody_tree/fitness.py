"""Fitness model for motifs.

The score rewards notes that sit inside the C major scale, consonant leaps
between neighbouring notes and pitches inside a comfortable register. Each
individual reward or penalty has a random magnitude so the score is noisy:
scoring the same motif twice usually gives different results. The raw
harmonic score is rescaled from ``[-100, 100]`` to ``[0, 100]``.

Example
-------
>>> import random
>>> from melody_tree.note import DEFAULT_MOTIF
>>> 0.0 <= compute_fitness(DEFAULT_MOTIF, random.Random(1)) <= 100.0
True

Design Notes
------------
- Rescaled values are clamped to ``[0, 100]``. Long motifs can push the raw
  score past ``±100`` and an unbounded score would break the selection
  probability, which assumes a percentage.
- All entropy comes from the ``rng`` argument so callers can inject a seeded
  :class:`random.Random` for reproducible runs.
"""

from __future__ import annotations

import random
from typing import Iterable, Optional

from .note import Note, clamp

__all__ = [
    "MAJOR_SCALE",
    "CONSONANT_INTERVALS",
    "DISSONANT_INTERVALS",
    "ACCEPTABLE_RANGE",
    "EXTREME_RANGE",
    "harmonic_score",
    "compute_fitness",
]

# Pitch classes of the diatonic major scale built on C.
MAJOR_SCALE = frozenset({0, 2, 4, 5, 7, 9, 11})
# Major third, perfect fourth and perfect fifth.
CONSONANT_INTERVALS = frozenset({4, 5, 7})
# Minor second, tritone and minor seventh.
DISSONANT_INTERVALS = frozenset({1, 6, 10})

ACCEPTABLE_RANGE = (48, 84)
EXTREME_RANGE = (36, 96)

# Upper bounds (inclusive) of the random reward/penalty magnitudes.
_STEP_MAGNITUDE = 9
_RANGE_PENALTY = 4
_EXTREME_PENALTY = 9

WORST_SCORE = -100.0
BEST_SCORE = 100.0


def _outside(pitch: int, bounds) -> bool:
    low, high = bounds
    return pitch < low or pitch > high


def harmonic_score(motif: Iterable[Note], rng: Optional[random.Random] = None) -> float:
    """Return the raw, unscaled harmonic score of ``motif``.

    Parameters
    ----------
    motif:
        Notes to evaluate. May be empty, which scores ``0.0``.
    rng:
        Random source used for every reward and penalty magnitude. Defaults
        to the module level :mod:`random` generator.

    Returns
    -------
    float
        Sum of all rewards minus all penalties.
    """

    rng = rng or random
    notes = list(motif)
    score = 0.0

    for note in notes:
        if note.pitch % 12 in MAJOR_SCALE:
            score += rng.randint(0, _STEP_MAGNITUDE)
        else:
            score -= rng.randint(0, _STEP_MAGNITUDE)

    for prev, cur in zip(notes, notes[1:]):
        interval = abs(cur.pitch - prev.pitch) % 12
        if interval in DISSONANT_INTERVALS:
            score -= rng.randint(0, _STEP_MAGNITUDE)
        elif interval in CONSONANT_INTERVALS:
            score += rng.randint(0, _STEP_MAGNITUDE)

    for note in notes:
        if _outside(note.pitch, ACCEPTABLE_RANGE):
            score -= rng.randint(0, _RANGE_PENALTY)
        if _outside(note.pitch, EXTREME_RANGE):
            score -= rng.randint(0, _EXTREME_PENALTY)

    return score


def compute_fitness(motif: Iterable[Note], rng: Optional[random.Random] = None) -> float:
    """Return the fitness of ``motif`` as a score out of 100."""

    raw = harmonic_score(motif, rng)
    scaled = (raw - WORST_SCORE) / (BEST_SCORE - WORST_SCORE) * 100.0
    return clamp(scaled, 0.0, 100.0)
