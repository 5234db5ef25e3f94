"""Tree node holding a single motif.

Each :class:`MotifNode` owns its children and keeps a plain back-reference
to its parent. All structural changes go through :meth:`attach_child`,
:meth:`replace_child` and :meth:`detach_child` so the two directions of the
link never drift apart. Cycles are rejected when a child is inserted rather
than being left to the caller's discipline.

Ownership rules
---------------
- A node is owned by exactly one parent, or by the tree when it is the root.
- Detaching transfers no ownership. Whoever detaches a node must attach it
  elsewhere or call :meth:`MotifNode.discard`.
- :meth:`discard` refuses to destroy a node that is still attached.

The module level helpers (:func:`count_nodes`, :func:`copy_subtree`,
:func:`iter_preorder`, :func:`validate_subtree`) operate on whole subtrees and
are shared by :class:`melody_tree.musical_tree.MusicalTree`.
"""

from __future__ import annotations

import random
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from .fitness import compute_fitness
from .note import Motif, Note, as_motif

__all__ = [
    "MotifNode",
    "TreeInvariantError",
    "count_nodes",
    "copy_subtree",
    "iter_preorder",
    "is_descendant",
    "validate_subtree",
]

Scorer = Callable[[Sequence[Note], Optional[random.Random]], float]


class TreeInvariantError(RuntimeError):
    """Raised when a subtree fails structural validation."""


class MotifNode:
    """Node in the evolutionary tree.

    Parameters
    ----------
    motif:
        Notes carried by this node. Stored as a tuple and never modified.
    fitness:
        Precomputed score. When ``None`` the score is computed immediately
        with ``scorer``.
    rng:
        Random source forwarded to ``scorer``.
    scorer:
        Fitness function, :func:`melody_tree.fitness.compute_fitness` by
        default.
    """

    __slots__ = ("_motif", "_fitness", "_parent", "_children", "_discarded")

    def __init__(
        self,
        motif: Sequence[Note] = (),
        fitness: Optional[float] = None,
        *,
        rng: Optional[random.Random] = None,
        scorer: Scorer = compute_fitness,
    ) -> None:
        self._motif: Motif = as_motif(motif)
        self._fitness = float(fitness) if fitness is not None else float(scorer(self._motif, rng))
        self._parent: Optional[MotifNode] = None
        self._children: List[MotifNode] = []
        self._discarded = False

    def __repr__(self) -> str:
        return f"MotifNode(notes={len(self._motif)}, fitness={self._fitness:.2f}, children={len(self._children)})"

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def motif(self) -> Motif:
        """Notes held by this node; an empty tuple when there are none."""
        return self._motif

    @property
    def fitness_score(self) -> float:
        return self._fitness

    @fitness_score.setter
    def fitness_score(self, value: float) -> None:
        self._fitness = float(value)

    @property
    def parent(self) -> Optional["MotifNode"]:
        return self._parent

    @property
    def children(self) -> Tuple["MotifNode", ...]:
        """Snapshot of the current children in insertion order."""
        return tuple(self._children)

    @property
    def is_root(self) -> bool:
        return self._parent is None

    @property
    def depth(self) -> int:
        """Number of parent links between this node and the root."""

        depth = 0
        node = self._parent
        while node is not None:
            depth += 1
            node = node._parent
        return depth

    # ------------------------------------------------------------------
    # Structural mutation
    # ------------------------------------------------------------------
    def _check_no_cycle(self, candidate: "MotifNode") -> None:
        ancestor: Optional[MotifNode] = self
        while ancestor is not None:
            if ancestor is candidate:
                raise ValueError("Adding this child would create a cycle in the tree")
            ancestor = ancestor._parent

    def attach_child(self, new_child: "MotifNode") -> None:
        """Append ``new_child`` and point its parent at this node.

        Raises
        ------
        ValueError
            If ``new_child`` is ``None``, already a child of this node, or is
            this node or one of its ancestors.
        """

        if new_child is None:
            raise ValueError("Child node cannot be None")
        if any(child is new_child for child in self._children):
            raise ValueError("Child node is already added to this parent")
        self._check_no_cycle(new_child)

        # A node can only have one owner at a time.
        if new_child._parent is not None:
            new_child._parent.detach_child(new_child)
        self._children.append(new_child)
        new_child._parent = self

    def replace_child(self, new_child: "MotifNode", old_child: "MotifNode") -> bool:
        """Swap ``old_child`` for ``new_child`` at the same position.

        Returns ``True`` when ``old_child`` was found and replaced, ``False``
        when it is not a child of this node.
        """

        if new_child is None or old_child is None:
            raise ValueError("Child nodes cannot be None")

        for index, child in enumerate(self._children):
            if child is old_child:
                break
        else:
            return False

        if new_child is old_child:
            return True
        if any(child is new_child for child in self._children):
            raise ValueError("Child node is already added to this parent")
        self._check_no_cycle(new_child)

        if new_child._parent is not None:
            new_child._parent.detach_child(new_child)
        self._children[index] = new_child
        new_child._parent = self
        old_child._parent = None
        return True

    def detach_child(self, child: "MotifNode") -> bool:
        """Remove ``child`` from this node, returning whether it was present."""

        if child is None:
            raise ValueError("Node cannot be None")

        for index, existing in enumerate(self._children):
            if existing is child:
                del self._children[index]
                child._parent = None
                return True
        return False

    def clear_parent(self) -> None:
        """Forget the parent reference; used when promoting a node to root."""
        self._parent = None

    def discard(self) -> None:
        """Destroy this node and its entire owned subtree.

        The node must already be detached. After the call every node of the
        subtree has no parent and no children.
        """

        if self._parent is not None and any(c is self for c in self._parent._children):
            raise ValueError("Cannot discard a node that is still attached to its parent")

        stack = [self]
        while stack:
            node = stack.pop()
            stack.extend(node._children)
            node._children = []
            node._parent = None
            node._discarded = True

    @property
    def discarded(self) -> bool:
        return self._discarded


# ----------------------------------------------------------------------
# Subtree helpers
# ----------------------------------------------------------------------
def iter_preorder(node: Optional[MotifNode]) -> Iterator[MotifNode]:
    """Yield ``node`` followed by each child subtree in child order."""

    if node is None:
        return
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        # Reverse so the first child is visited first.
        stack.extend(reversed(current._children))


def count_nodes(node: Optional[MotifNode]) -> int:
    """Return the number of nodes reachable from ``node``."""

    return sum(1 for _ in iter_preorder(node))


def copy_subtree(node: Optional[MotifNode]) -> Optional[MotifNode]:
    """Deep copy ``node`` and its descendants, preserving fitness scores."""

    if node is None:
        return None
    clone = MotifNode(node.motif, node.fitness_score)
    pending = [(node, clone)]
    while pending:
        source, target = pending.pop()
        for child in source._children:
            child_clone = MotifNode(child.motif, child.fitness_score)
            target.attach_child(child_clone)
            pending.append((child, child_clone))
    return clone


def is_descendant(node: MotifNode, candidate: MotifNode) -> bool:
    """Return ``True`` if ``candidate`` lies strictly below ``node``."""

    ancestor = candidate._parent
    while ancestor is not None:
        if ancestor is node:
            return True
        ancestor = ancestor._parent
    return False


def validate_subtree(root: MotifNode) -> int:
    """Check the structural invariants of the subtree under ``root``.

    Verifies that ``root`` has no parent, that every child points back at its
    parent, that no node appears twice and that no node was discarded while
    still reachable.

    Returns
    -------
    int
        Number of nodes in the subtree.

    Raises
    ------
    TreeInvariantError
        On the first violation found.
    """

    if root is None:
        raise TreeInvariantError("tree has no root")
    if root._parent is not None:
        raise TreeInvariantError("root node must not have a parent")

    seen = set()
    stack = [root]
    while stack:
        node = stack.pop()
        if id(node) in seen:
            raise TreeInvariantError(f"{node!r} is reachable more than once")
        seen.add(id(node))
        if node._discarded:
            raise TreeInvariantError(f"{node!r} was discarded but is still reachable")
        for child in node._children:
            if child._parent is not node:
                raise TreeInvariantError(f"{child!r} does not point back to its parent")
            stack.append(child)
    return len(seen)
