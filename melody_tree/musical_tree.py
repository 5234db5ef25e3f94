"""Evolutionary tree of motifs.

:class:`MusicalTree` owns a root :class:`~melody_tree.motif_node.MotifNode`
and grows it with a small genetic algorithm. Every round selects nodes with a
probability proportional to their fitness, mutates each selected motif and
hangs the result underneath as a new child. Between generations weak nodes are
pruned until the population fits the configured budget. A melody is read off
the surviving tree by preorder traversal.

Algorithm Pseudocode
--------------------
::

    repeat pre_evolve_rounds:
        for node in select_candidates():
            node.attach_child(MotifNode(mutate(node.motif)))
    threshold = prune_start
    for generation in range(num_generations):
        repeat rounds_per_generation:
            grow as above
        threshold = prune_start
        while size > max_population:
            prune(root, threshold); threshold += prune_step
    while size > final_size:
        prune(root, threshold); threshold += final_prune_step

Design Notes
------------
- All randomness is drawn from ``self.rng`` in a fixed order (selection draw
  per node, then two draws per note while mutating, then the child's fitness
  draws), so a seeded generator reproduces a run exactly.
- ``size`` is recounted after every growth batch and prune pass rather than
  trusted from incremental bookkeeping.
- Pruning walks the tree with an explicit stack so deep trees do not hit the
  interpreter's recursion limit.
"""

from __future__ import annotations

import copy
import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .fitness import compute_fitness
from .motif_node import (
    MotifNode,
    Scorer,
    TreeInvariantError,
    count_nodes,
    copy_subtree,
    iter_preorder,
    validate_subtree,
)
from .note import (
    DEFAULT_MOTIF,
    MAX_DURATION,
    MAX_PITCH,
    MIN_DURATION,
    MIN_PITCH,
    Motif,
    Note,
    clamp,
    format_motif,
)
from .settings import EvolutionSettings
from .stats import FitnessSummary, summarize_fitness

__all__ = ["MusicalTree", "GenerationReport"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationReport:
    """Outcome of a single generation.

    ``threshold`` is the cutoff of the last prune pass run in the
    generation, or ``None`` when the population already fit the budget.
    """

    generation: int
    grown_size: int
    pruned_size: int
    threshold: Optional[float]
    fitness: FitnessSummary


class MusicalTree:
    """Tree of motifs evolved by selection, mutation and pruning.

    Parameters
    ----------
    motif:
        Seed motif for the root node. :data:`melody_tree.note.DEFAULT_MOTIF`
        is used when ``None``.
    verbose:
        Emit progress lines at ``INFO`` instead of ``DEBUG``.
    settings:
        Loop parameters; defaults to :class:`EvolutionSettings`.
    rng:
        Random source shared by scoring, selection and mutation. Takes
        precedence over ``seed``.
    seed:
        Seed for a private :class:`random.Random` when ``rng`` is omitted.
    scorer:
        Fitness function applied to every new motif.
    """

    def __init__(
        self,
        motif: Optional[Sequence[Note]] = None,
        *,
        verbose: bool = False,
        settings: Optional[EvolutionSettings] = None,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        scorer: Scorer = compute_fitness,
    ) -> None:
        self.verbose = verbose
        self.settings = settings or EvolutionSettings()
        self.rng = rng if rng is not None else random.Random(seed)
        self.scorer = scorer
        seed_motif = DEFAULT_MOTIF if motif is None else motif
        self._root = self._new_node(seed_motif)
        self._size = 1

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def root(self) -> MotifNode:
        return self._root

    @property
    def size(self) -> int:
        return self._size

    def get_root(self) -> MotifNode:
        return self._root

    def get_size(self) -> int:
        return self._size

    def __len__(self) -> int:
        return self._size

    def __repr__(self) -> str:
        return f"MusicalTree(size={self._size}, root={self._root!r})"

    def nodes(self) -> List[MotifNode]:
        """Return every node in preorder."""
        return list(iter_preorder(self._root))

    def validate(self) -> int:
        """Check structural invariants and that ``size`` matches the tree.

        Raises :class:`~melody_tree.motif_node.TreeInvariantError` on failure
        and returns the node count otherwise.
        """

        counted = validate_subtree(self._root)
        if counted != self._size:
            raise TreeInvariantError(f"size is {self._size} but the tree holds {counted} nodes")
        return counted

    # ------------------------------------------------------------------
    # Copying
    # ------------------------------------------------------------------
    def copy(self) -> "MusicalTree":
        """Return an independent deep copy of this tree.

        Fitness scores and structure are copied; no node is shared. The copy
        receives its own random source starting from the current state.
        """

        clone = MusicalTree.__new__(MusicalTree)
        clone.verbose = self.verbose
        clone.settings = self.settings
        clone.rng = copy.deepcopy(self.rng)
        clone.scorer = self.scorer
        clone._root = copy_subtree(self._root)
        clone._size = count_nodes(clone._root)
        return clone

    def __copy__(self) -> "MusicalTree":
        return self.copy()

    def __deepcopy__(self, memo) -> "MusicalTree":
        return self.copy()

    # ------------------------------------------------------------------
    # Genetic operators
    # ------------------------------------------------------------------
    def _progress_level(self) -> int:
        return logging.INFO if self.verbose else logging.DEBUG

    def _say(self, msg: str, *args) -> None:
        logger.log(self._progress_level(), msg, *args)

    def _chatty(self) -> bool:
        """Whether progress lines would actually be emitted."""
        return logger.isEnabledFor(self._progress_level())

    def _new_node(self, motif: Sequence[Note]) -> MotifNode:
        return MotifNode(motif, rng=self.rng, scorer=self.scorer)

    def select_candidates(self) -> List[MotifNode]:
        """Return the nodes chosen to reproduce this round, in preorder.

        Every node is visited and receives exactly one random draw, whether
        or not it is selected.
        """

        floor = self.settings.selection_floor
        chatty = self._chatty()
        selected: List[MotifNode] = []
        if chatty:
            self._say("SelectNodes:")
        for node in iter_preorder(self._root):
            probability = max(node.fitness_score / 100.0, floor)
            draw = self.rng.random()
            chosen = draw < probability
            if chatty:
                self._say("node: %s", format_motif(node.motif))
                self._say("  Fitness_Score: %.2f", node.fitness_score)
                self._say("  Selection Prob: %.4f draw: %.4f", probability, draw)
                self._say("  Selected" if chosen else "  Not Selected")
            if chosen:
                selected.append(node)
        return selected

    def mutate(self, motif: Sequence[Note]) -> Motif:
        """Return a perturbed copy of ``motif``; the input is left unchanged."""

        pitch_offset = self.settings.pitch_offset
        # Durations move in hundredths of a beat.
        duration_steps = int(round(self.settings.duration_offset * 100))
        mutated = []
        for note in motif:
            pitch = note.pitch + self.rng.randint(-pitch_offset, pitch_offset)
            duration = note.duration + self.rng.randint(-duration_steps, duration_steps) / 100.0
            mutated.append(
                Note(
                    int(clamp(pitch, MIN_PITCH, MAX_PITCH)),
                    clamp(duration, MIN_DURATION, MAX_DURATION),
                )
            )
        return tuple(mutated)

    def _evolve_round(self) -> int:
        """Run one select/mutate/attach round and return the children added."""

        self._say("EVOLVE")
        selected = self.select_candidates()
        chatty = self._chatty()
        for parent in selected:
            mutated = self.mutate(parent.motif)
            if chatty:
                self._say("Reproduce: %s", format_motif(parent.motif))
                self._say(" Child: %s", format_motif(mutated))
            parent.attach_child(self._new_node(mutated))
            self._size += 1
        return len(selected)

    def _reconcile_size(self) -> int:
        self._size = count_nodes(self._root)
        return self._size

    # ------------------------------------------------------------------
    # Pruning
    # ------------------------------------------------------------------
    def _prune_node(self, node: MotifNode, threshold: float) -> int:
        """Remove ``node`` if it scores below ``threshold``; return 0 or 1."""

        if node.fitness_score >= threshold:
            return 0

        children = list(node.children)
        parent = node.parent
        if children:
            survivor = children[-1]
            node.detach_child(survivor)
            for child in children[:-1]:
                survivor.attach_child(child)
            if parent is not None:
                parent.attach_child(survivor)
                parent.detach_child(node)
            else:
                survivor.clear_parent()
                self._root = survivor
        elif parent is not None:
            parent.detach_child(node)
        else:
            # Lone root: the tree must never become empty.
            return 0

        node.discard()
        self._size -= 1
        return 1

    def prune(self, node: Optional[MotifNode] = None, threshold: float = 10.0) -> int:
        """Remove every node under ``node`` scoring below ``threshold``.

        Children are handled before their parent. A pruned node's last child
        takes its place and adopts its siblings, so no subtree is lost. A
        root without children is never removed.

        Parameters
        ----------
        node:
            Subtree to prune; the whole tree when ``None``.
        threshold:
            Nodes with ``fitness_score < threshold`` are removed.

        Returns
        -------
        int
            Number of nodes removed.

        Raises
        ------
        ValueError
            If ``node`` is not part of this tree.
        """

        start = self._root if node is None else node
        top = start
        while top.parent is not None:
            top = top.parent
        if top is not self._root:
            raise ValueError("Cannot prune a node that does not belong to this tree")

        removed = 0
        # Frames are [node, children snapshot, next child index].
        stack = [[start, None, 0]]
        while stack:
            frame = stack[-1]
            current = frame[0]
            if frame[1] is None:
                if current.parent is None and not current.children:
                    stack.pop()
                    continue
                frame[1] = current.children
            if frame[2] < len(frame[1]):
                child = frame[1][frame[2]]
                frame[2] += 1
                stack.append([child, None, 0])
                continue
            stack.pop()
            removed += self._prune_node(current, threshold)
        return removed

    # ------------------------------------------------------------------
    # Generation loop
    # ------------------------------------------------------------------
    def run_evolution(self, num_generations: int) -> List[GenerationReport]:
        """Grow and prune the tree for ``num_generations`` generations.

        A pre-evolution phase first grows the seed without pruning. Each
        generation then grows the tree and prunes it back to
        ``settings.max_population`` with an escalating threshold. A final
        prune shrinks the tree to ``settings.final_size`` nodes.

        Raises
        ------
        ValueError
            If ``num_generations`` is not a non-negative integer.
        """

        if isinstance(num_generations, bool) or not isinstance(num_generations, int):
            raise ValueError("num_generations must be an integer")
        if num_generations < 0:
            raise ValueError("num_generations must be non-negative")

        cfg = self.settings
        for _ in range(cfg.pre_evolve_rounds):
            self._evolve_round()
        self._reconcile_size()

        reports: List[GenerationReport] = []
        threshold = cfg.prune_start
        for generation in range(num_generations):
            self._say("GEN %d size: %d", generation, self._size)
            for _ in range(cfg.rounds_per_generation):
                self._evolve_round()
            grown = self._reconcile_size()

            self._say("PRUNE")
            self._say("  size: %d", self._size)
            threshold = cfg.prune_start
            applied = None
            while self._size > cfg.max_population:
                self.prune(self._root, threshold)
                self._reconcile_size()
                self._say("  prune cutoff: %.2f", threshold)
                self._say("  size: %d", self._size)
                applied = threshold
                threshold += cfg.prune_step

            report = GenerationReport(
                generation=generation,
                grown_size=grown,
                pruned_size=self._size,
                threshold=applied,
                fitness=summarize_fitness(iter_preorder(self._root)),
            )
            if self.verbose:
                logger.info("generation %d: %s", generation, report.fitness)
            reports.append(report)

        self._say("Final Prune %d", self._size)
        while self._size > cfg.final_size:
            self.prune(self._root, threshold)
            self._reconcile_size()
            threshold += cfg.final_prune_step
        self._say("Final size: %d", self._size)
        return reports

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------
    def generate_melody(self) -> List[Note]:
        """Concatenate every motif in preorder, root first."""

        melody: List[Note] = []
        for node in iter_preorder(self._root):
            melody.extend(node.motif)
        return melody
