"""Melody Tree library.

This package evolves short musical phrases ("motifs") with a tree-shaped
genetic algorithm. A :class:`MusicalTree` starts from a single seed motif,
repeatedly lets fit nodes reproduce mutated children, prunes weak nodes
between generations and finally reads a melody off the surviving tree.

Underlying Algorithm
--------------------
Every node carries a fitness score out of 100 computed by
:func:`compute_fitness`. Selection visits every node and picks it with
probability ``max(fitness / 100, 0.1)``. Each picked motif is mutated by
nudging pitches a couple of semitones and durations by up to a tenth of a
beat; the result becomes a new child of the picked node. Pruning removes
nodes below a fitness threshold, promoting a removed node's last child into
its place so no branch is ever lost.

Typical usage::

    from melody_tree import MusicalTree

    tree = MusicalTree(seed=1)
    tree.run_evolution(5)
    melody = tree.generate_melody()

Features include:
- Immutable :class:`Note` values and motif parsing helpers.
- Noisy harmonic fitness model with injectable random source.
- Cycle-safe :class:`MotifNode` with consistent parent/child links.
- JSON settings file for loop and mutation parameters.
- Command line interface (``melody-tree`` / ``python -m melody_tree``).
"""

__version__ = "0.1.0"

from .note import Note, DEFAULT_MOTIF, format_motif, parse_motif  # noqa: F401
from .fitness import compute_fitness, harmonic_score  # noqa: F401
from .motif_node import (  # noqa: F401
    MotifNode,
    TreeInvariantError,
    count_nodes,
    copy_subtree,
    iter_preorder,
    is_descendant,
    validate_subtree,
)
from .settings import EvolutionSettings, load_settings, save_settings  # noqa: F401
from .stats import FitnessSummary, summarize_fitness  # noqa: F401
from .musical_tree import GenerationReport, MusicalTree  # noqa: F401
from .cli import main, run_cli  # noqa: F401

__all__ = [
    "Note",
    "DEFAULT_MOTIF",
    "format_motif",
    "parse_motif",
    "compute_fitness",
    "harmonic_score",
    "MotifNode",
    "TreeInvariantError",
    "count_nodes",
    "copy_subtree",
    "iter_preorder",
    "is_descendant",
    "validate_subtree",
    "EvolutionSettings",
    "load_settings",
    "save_settings",
    "FitnessSummary",
    "summarize_fitness",
    "GenerationReport",
    "MusicalTree",
    "main",
    "run_cli",
]
