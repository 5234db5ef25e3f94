"""Unit tests for the fitness model."""

import importlib
import random
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

fitness = importlib.import_module("melody_tree.fitness")
Note = importlib.import_module("melody_tree.note").Note


class MaxRandom:
    """Random stand-in that always returns the upper bound of ``randint``."""

    def __init__(self):
        self.calls = []

    def randint(self, a, b):
        self.calls.append((a, b))
        return b


def test_in_scale_notes_are_rewarded():
    """C, E and G are in the scale and a major third/minor third apart."""
    rng = MaxRandom()
    # 60 -> 64 is a major third (reward), 64 -> 67 a minor third (neutral).
    motif = [Note(60, 0.2), Note(64, 0.2), Note(67, 0.2)]
    assert fitness.harmonic_score(motif, rng) == 9 * 3 + 9


def test_out_of_scale_and_dissonant_notes_are_penalised():
    rng = MaxRandom()
    # 61 and 67 are a tritone apart; 61 is outside the scale.
    motif = [Note(61, 0.2), Note(67, 0.2)]
    assert fitness.harmonic_score(motif, rng) == -9 + 9 - 9


def test_interval_uses_absolute_difference_modulo_octave():
    rng = MaxRandom()
    # 72 -> 55 is 17 semitones, a perfect fourth above the octave.
    motif = [Note(72, 0.2), Note(55, 0.2)]
    assert fitness.harmonic_score(motif, rng) == 9 + 9 + 9


def test_range_penalties_stack_for_extreme_pitches():
    rng = MaxRandom()
    high = [Note(100, 0.2)]  # pitch class 4, in scale
    assert fitness.harmonic_score(high, rng) == 9 - 4 - 9
    medium = [Note(88, 0.2)]  # outside acceptable, inside extreme
    assert fitness.harmonic_score(medium, MaxRandom()) == 9 - 4


def test_empty_motif_scores_midpoint():
    assert fitness.harmonic_score([], MaxRandom()) == 0.0
    assert fitness.compute_fitness([], MaxRandom()) == 50.0


def test_compute_fitness_rescales_raw_score():
    rng = MaxRandom()
    motif = [Note(60, 0.2), Note(64, 0.2), Note(67, 0.2)]
    assert fitness.compute_fitness(motif, rng) == pytest.approx((36 + 100) / 200 * 100)


def test_compute_fitness_clamps_long_motifs():
    """Long in-scale motifs exceed the nominal raw range but stay <= 100."""
    motif = [Note(60, 0.2), Note(64, 0.2)] * 20
    assert fitness.compute_fitness(motif, MaxRandom()) == 100.0
    low = [Note(61, 0.2), Note(62, 0.2)] * 20
    assert fitness.compute_fitness(low, MaxRandom()) >= 0.0


def test_compute_fitness_is_bounded_with_real_randomness():
    rng = random.Random(3)
    for _ in range(200):
        motif = [Note(rng.randint(0, 127), 0.2) for _ in range(rng.randint(0, 12))]
        assert 0.0 <= fitness.compute_fitness(motif, rng) <= 100.0


def test_same_seed_reproduces_score():
    motif = [Note(50, 0.1), Note(78, 0.7), Note(84, 0.7)]
    assert fitness.compute_fitness(motif, random.Random(5)) == fitness.compute_fitness(
        motif, random.Random(5)
    )
