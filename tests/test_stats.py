"""Tests for the fitness summary helper."""

import importlib
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

stats = importlib.import_module("melody_tree.stats")
MotifNode = importlib.import_module("melody_tree.motif_node").MotifNode


def test_summarize_fitness_values():
    nodes = [MotifNode([], score) for score in (10.0, 20.0, 30.0)]
    summary = stats.summarize_fitness(nodes)
    assert summary.count == 3
    assert summary.mean == pytest.approx(20.0)
    assert summary.std == pytest.approx((200 / 3) ** 0.5)
    assert (summary.minimum, summary.maximum) == (10.0, 30.0)
    assert "mean=20.00" in str(summary)


def test_summarize_fitness_accepts_generators():
    summary = stats.summarize_fitness(MotifNode([], 5.0) for _ in range(4))
    assert summary.count == 4


def test_summarize_fitness_rejects_empty_input():
    with pytest.raises(ValueError):
        stats.summarize_fitness([])
