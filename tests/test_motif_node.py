"""Tests for ``MotifNode`` structural operations and subtree helpers."""

import importlib
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

node_mod = importlib.import_module("melody_tree.motif_node")
Note = importlib.import_module("melody_tree.note").Note
MotifNode = node_mod.MotifNode


def make(fitness=50.0, pitch=60):
    """Return a node with a fixed fitness so no randomness is involved."""
    return MotifNode([Note(pitch, 0.25)], fitness)


def test_constructor_uses_scorer_when_no_fitness_given():
    seen = []

    def scorer(motif, rng):
        seen.append((motif, rng))
        return 42

    node = MotifNode([Note(60, 0.2)], rng="sentinel", scorer=scorer)
    assert node.fitness_score == 42.0
    assert seen == [((Note(60, 0.2),), "sentinel")]


def test_empty_motif_is_valid():
    node = MotifNode([], 10.0)
    assert node.motif == ()
    assert node.children == ()
    assert node.parent is None


def test_attach_sets_back_reference():
    parent, child = make(), make()
    parent.attach_child(child)
    assert parent.children == (child,)
    assert child.parent is parent
    assert child.depth == 1
    assert not child.is_root


def test_attach_rejects_none_duplicate_and_self():
    parent, child = make(), make()
    parent.attach_child(child)
    with pytest.raises(ValueError):
        parent.attach_child(None)
    with pytest.raises(ValueError):
        parent.attach_child(child)
    with pytest.raises(ValueError):
        parent.attach_child(parent)
    assert parent.children == (child,)


def test_attach_rejects_ancestor_cycle():
    """Attaching an ancestor underneath a descendant must fail."""
    a, b, c = make(), make(), make()
    a.attach_child(b)
    b.attach_child(c)
    with pytest.raises(ValueError, match="cycle"):
        c.attach_child(a)
    with pytest.raises(ValueError, match="cycle"):
        c.attach_child(b)
    assert a.parent is None
    assert c.children == ()


def test_attach_moves_node_from_previous_parent():
    old, new, child = make(), make(), make()
    old.attach_child(child)
    new.attach_child(child)
    assert old.children == ()
    assert new.children == (child,)
    assert child.parent is new


def test_replace_child_swaps_in_place():
    parent = make()
    first, second, third = make(), make(), make()
    parent.attach_child(first)
    parent.attach_child(second)
    replacement = make()

    assert parent.replace_child(replacement, first) is True
    assert parent.children == (replacement, second)
    assert replacement.parent is parent
    assert first.parent is None

    assert parent.replace_child(third, first) is False
    assert third.parent is None


def test_replace_child_rejects_none():
    parent, child = make(), make()
    parent.attach_child(child)
    with pytest.raises(ValueError):
        parent.replace_child(None, child)
    with pytest.raises(ValueError):
        parent.replace_child(child, None)


def test_replace_child_rejects_cycle():
    root, child = make(), make()
    root.attach_child(child)
    grandchild = make()
    child.attach_child(grandchild)
    with pytest.raises(ValueError):
        child.replace_child(root, grandchild)


def test_detach_child_reports_outcome():
    parent, child, stranger = make(), make(), make()
    parent.attach_child(child)
    assert parent.detach_child(stranger) is False
    assert parent.detach_child(child) is True
    assert child.parent is None
    assert parent.children == ()
    with pytest.raises(ValueError):
        parent.detach_child(None)


def test_clear_parent_only_touches_child_side():
    parent, child = make(), make()
    parent.attach_child(child)
    child.clear_parent()
    assert child.parent is None


def test_discard_requires_detached_node():
    parent, child, grandchild = make(), make(), make()
    parent.attach_child(child)
    child.attach_child(grandchild)
    with pytest.raises(ValueError):
        child.discard()

    parent.detach_child(child)
    child.discard()
    assert child.discarded and grandchild.discarded
    assert child.children == ()
    assert grandchild.parent is None


def test_iter_preorder_and_count():
    root, a, b, a1, a2 = make(pitch=1), make(pitch=2), make(pitch=3), make(pitch=4), make(pitch=5)
    root.attach_child(a)
    root.attach_child(b)
    a.attach_child(a1)
    a.attach_child(a2)
    assert [n.motif[0].pitch for n in node_mod.iter_preorder(root)] == [1, 2, 4, 5, 3]
    assert node_mod.count_nodes(root) == 5
    assert node_mod.count_nodes(None) == 0
    assert node_mod.is_descendant(root, a2)
    assert not node_mod.is_descendant(a, b)
    assert not node_mod.is_descendant(a, a)


def test_copy_subtree_shares_no_nodes():
    root, child, grandchild = make(11.0), make(22.0), make(33.0)
    root.attach_child(child)
    child.attach_child(grandchild)

    clone = node_mod.copy_subtree(root)
    originals = list(node_mod.iter_preorder(root))
    copies = list(node_mod.iter_preorder(clone))
    assert [n.fitness_score for n in copies] == [11.0, 22.0, 33.0]
    assert [n.motif for n in copies] == [n.motif for n in originals]
    assert not {id(n) for n in copies} & {id(n) for n in originals}
    assert node_mod.validate_subtree(clone) == 3


def test_validate_subtree_detects_broken_links():
    root, child = make(), make()
    root.attach_child(child)
    assert node_mod.validate_subtree(root) == 2

    child.clear_parent()
    with pytest.raises(node_mod.TreeInvariantError):
        node_mod.validate_subtree(root)

    with pytest.raises(node_mod.TreeInvariantError):
        node_mod.validate_subtree(child_with_parent())


def child_with_parent():
    parent, child = make(), make()
    parent.attach_child(child)
    return child
