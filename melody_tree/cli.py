"""Command line interface for Melody Tree.

The ``run_cli`` function parses arguments, evolves a :class:`MusicalTree` and
prints the resulting melody to standard output. Progress lines are written
through :mod:`logging` so they can be silenced independently of the melody.

Example
-------
Running ``python -m melody_tree --generations 3 --seed 7`` evolves the
default seed motif for three generations and prints the surviving melody as
``pitch-duration`` tokens. ``--json`` prints a JSON list of
``{"pitch": ..., "duration": ...}`` objects instead.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .musical_tree import MusicalTree
from .note import format_motif, parse_motif
from .settings import load_settings
from .stats import summarize_fitness

__all__ = ["build_parser", "run_cli", "main"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="melody-tree",
        description="Evolve a tree of motifs and print the resulting melody.",
    )
    parser.add_argument("--generations", type=int, default=1, help="Number of generations to run (default: 1).")
    parser.add_argument(
        "--motif",
        type=str,
        help="Seed motif as comma-separated pitch:duration pairs (e.g. 60:0.25,64:0.5).",
    )
    parser.add_argument("--seed", type=int, help="Random seed for reproducible output")
    parser.add_argument("--verbose", action="store_true", help="Log selection, mutation and pruning details")
    parser.add_argument("--settings-file", type=str, help="Path to a JSON file with evolution settings")
    parser.add_argument("--json", action="store_true", help="Print the melody as JSON")
    parser.add_argument("--stats", action="store_true", help="Print a fitness summary of the final tree")
    return parser


def run_cli(argv: Optional[List[str]] = None) -> None:
    """Parse ``argv`` (defaults to ``sys.argv[1:]``) and run an evolution.

    Invalid arguments, motifs or settings are logged and terminate the
    process with exit code ``1``.
    """

    args = build_parser().parse_args(argv)

    if args.generations < 0:
        logging.error("Number of generations must be non-negative.")
        sys.exit(1)

    motif = None
    if args.motif:
        try:
            motif = parse_motif(args.motif)
        except ValueError as exc:
            logging.error("Invalid motif: %s", exc)
            sys.exit(1)

    try:
        if args.settings_file:
            settings = load_settings(Path(args.settings_file).expanduser())
        else:
            settings = load_settings()
    except (TypeError, ValueError) as exc:
        logging.error("Invalid settings: %s", exc)
        sys.exit(1)

    tree = MusicalTree(motif, verbose=args.verbose, settings=settings, seed=args.seed)
    tree.run_evolution(args.generations)
    melody = tree.generate_melody()

    if args.json:
        print(json.dumps([{"pitch": n.pitch, "duration": n.duration} for n in melody]))
    else:
        print(format_motif(melody))
    if args.stats:
        print(f"nodes: {tree.size} fitness: {summarize_fitness(tree.nodes())}")
    logging.info("Evolution complete.")


def main() -> None:
    """Console entry point."""

    verbose = "--verbose" in sys.argv[1:]
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )
    run_cli()
