"""Tests for ThreeWayMerger.

Covers:
- Non-overlapping field updates and update conflicts (branch B wins)
- One-sided insertions, deletions and moves from either branch
- Delete-versus-change conflicts (deletion wins)
- Move conflicts (branch A's placement wins)
- Identical and differing insertions made by both branches
- Determinism, change origins and the drained conflict queues
"""

from __future__ import annotations

from typing import Any

import pytest

from process_tree_diff import (
    ConflictType,
    MergeConflict,
    MergeNode,
    ThreeWayMerger,
    delta_tree,
    merge,
    to_dict,
)
from process_tree_diff.algorithm.config import DiffConfig
from process_tree_diff.merge import ConflictSets
from process_tree_diff.merge.merger import _MergeRun
from process_tree_diff.tree.builder import TreeBuilder
from process_tree_diff.tree.nodes import Node, Update

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _call(endpoint: str, **attributes: str) -> dict[str, Any]:
    return {"label": "call", "attributes": {"endpoint": endpoint, **attributes}}


def _tree(*children: dict[str, Any], **attributes: str) -> Node:
    return TreeBuilder().build(
        {"label": "description", "attributes": attributes, "children": list(children)}
    )


def _merged(node: Node) -> MergeNode:
    assert isinstance(node, MergeNode)
    return node


def _endpoints(node: Node) -> list[str | None]:
    return [child.attributes.get("endpoint") for child in node.children]


# ---------------------------------------------------------------------------
# Updates
# ---------------------------------------------------------------------------


class TestUpdates:
    def test_disjoint_fields_are_combined(self) -> None:
        base = _tree(_call("x", a="1", b="2"))
        result = merge(
            base,
            _tree(_call("x", a="9", b="2")),
            _tree(_call("x", a="1", b="8")),
        )
        call = _merged(result.tree.children[0])
        assert call.attributes == {"endpoint": "x", "a": "9", "b": "8"}
        assert result.conflicts == []
        assert call.confidence.is_confident()

    def test_conflicting_values_take_branch_b(self) -> None:
        base = _tree(_call("x", a="1", b="2"))
        result = merge(
            base,
            _tree(_call("x", a="9", b="2")),
            _tree(_call("x", a="7", b="2")),
        )
        call = _merged(result.tree.children[0])
        assert call.attributes["a"] == "7"
        assert result.conflicts == [
            MergeConflict(
                conflict_type=ConflictType.UPDATE,
                label="call",
                base_node=1,
                winner=2,
                field="a",
                value="7",
            )
        ]
        assert call.updates["a"] == Update("1", "7", origin=2)
        assert not call.confidence.content_confident

    def test_equal_values_are_not_a_conflict(self) -> None:
        base = _tree(_call("x", a="1"))
        result = merge(base, _tree(_call("x", a="5")), _tree(_call("x", a="5")))
        assert result.conflicts == []
        assert result.tree.children[0].attributes["a"] == "5"

    def test_update_from_b_only(self) -> None:
        base = _tree(_call("x", a="1"))
        result = merge(base, _tree(_call("x", a="1")), _tree(_call("x", a="3")))
        call = _merged(result.tree.children[0])
        assert call.attributes["a"] == "3"
        assert call.change_origin == 2
        assert call.updates == {"a": Update("1", "3", origin=2)}

    def test_root_update_from_b(self) -> None:
        base = _tree({"label": "stop"})
        result = merge(base, base.copy(), _tree({"label": "stop"}, mark="6"))
        root = _merged(result.tree)
        assert root.attributes == {"mark": "6"}
        assert root.change_origin == 2
        assert result.conflicts == []

    def test_root_update_from_a(self) -> None:
        base = _tree({"label": "stop"})
        result = merge(base, _tree({"label": "stop"}, mark="5"), base.copy())
        assert result.tree.attributes == {"mark": "5"}
        assert _merged(result.tree).change_origin == 1

    def test_conflicting_root_updates_take_branch_b(self) -> None:
        base = _tree({"label": "stop"})
        result = merge(
            base,
            _tree({"label": "stop"}, mark="5"),
            _tree({"label": "stop"}, mark="6"),
        )
        assert result.tree.attributes == {"mark": "6"}
        assert result.conflicts == [
            MergeConflict(
                conflict_type=ConflictType.UPDATE,
                label="description",
                base_node=0,
                winner=2,
                field="mark",
                value="6",
            )
        ]

    def test_repeated_runs_agree(self) -> None:
        base = _tree(_call("x", a="1"), {"label": "stop"})
        tree_a = _tree(_call("x", a="9"), {"label": "stop"}, {"label": "escape"})
        tree_b = _tree({"label": "stop"}, _call("x", a="7"))
        first = merge(base, tree_a, tree_b)
        for _ in range(3):
            again = merge(base, tree_a, tree_b)
            assert to_dict(again.tree) == to_dict(first.tree)
            assert again.conflicts == first.conflicts


# ---------------------------------------------------------------------------
# Structure
# ---------------------------------------------------------------------------


class TestOneSidedChanges:
    def test_insertion_from_a(self) -> None:
        base = _tree(_call("alpha"))
        result = merge(
            base,
            _tree(_call("alpha"), {"label": "stop"}),
            _tree(_call("alpha")),
        )
        assert [child.label for child in result.tree.children] == ["call", "stop"]
        stop = _merged(result.tree.children[1])
        assert stop.is_insertion()
        assert stop.change_origin == 1

    def test_insertion_from_b(self) -> None:
        base = _tree(_call("alpha"))
        result = merge(
            base,
            _tree(_call("alpha")),
            _tree(_call("alpha"), {"label": "stop"}),
        )
        assert [child.label for child in result.tree.children] == ["call", "stop"]
        stop = _merged(result.tree.children[1])
        assert stop.is_insertion()
        assert stop.change_origin == 2
        assert stop.base_node is None

    def test_deletion_from_b(self) -> None:
        base = _tree(_call("alpha"), _call("beta"))
        result = merge(base, base.copy(), _tree(_call("alpha")))
        assert _endpoints(result.tree) == ["alpha"]
        assert result.conflicts == []

    def test_move_from_b(self) -> None:
        base = _tree(_call("alpha"), _call("beta"), {"label": "stop"})
        tree_b = _tree(_call("beta"), _call("alpha"), {"label": "stop"})
        result = merge(base, base.copy(), tree_b)
        labels = [child.label for child in result.tree.children]
        assert labels == ["call", "call", "stop"]
        assert _endpoints(result.tree) == ["beta", "alpha", None]
        beta = _merged(result.tree.children[0])
        assert beta.is_move()
        assert beta.change_origin == 2

    def test_unchanged_nodes_have_no_origin(self) -> None:
        base = _tree(_call("alpha"), {"label": "stop"})
        result = merge(
            base,
            _tree(_call("alpha"), {"label": "stop"}, {"label": "escape"}),
            base.copy(),
        )
        assert _merged(result.tree).change_origin == 0
        assert _merged(result.tree.children[0]).change_origin == 0
        assert _merged(result.tree.children[2]).change_origin == 1


class TestConflicts:
    def test_deletion_beats_change(self) -> None:
        base = _tree(_call("alpha"), _call("beta", a="1"))
        tree_a = _tree(_call("alpha"))
        tree_b = _tree(_call("alpha"), _call("beta", a="2"))
        result = merge(base, tree_a, tree_b)
        assert _endpoints(result.tree) == ["alpha"]
        assert result.conflicts == [
            MergeConflict(
                conflict_type=ConflictType.DELETE,
                label="call",
                base_node=2,
                winner=None,
            )
        ]

    def test_unchanged_deleted_subtree_is_no_conflict(self) -> None:
        base = _tree(_call("alpha"), _call("beta", a="1"))
        result = merge(
            base,
            _tree(_call("alpha"), _call("beta", a="1")),
            _tree(_call("alpha")),
        )
        assert _endpoints(result.tree) == ["alpha"]
        assert result.conflicts == []

    def test_move_conflict_keeps_a_placement(self) -> None:
        base = _tree(
            {"label": "loop", "children": [_call("alpha"), _call("beta")]},
            {"label": "critical", "children": [_call("gamma")]},
        )
        tree_a = _tree(
            {"label": "loop", "children": [_call("alpha")]},
            {"label": "critical", "children": [_call("gamma"), _call("beta")]},
        )
        tree_b = _tree(
            {"label": "loop", "children": [_call("alpha")]},
            {"label": "critical", "children": [_call("gamma")]},
            _call("beta"),
        )
        result = merge(base, tree_a, tree_b)

        loop, critical = result.tree.children
        assert _endpoints(loop) == ["alpha"]
        assert _endpoints(critical) == ["gamma", "beta"]
        assert len(result.tree.children) == 2
        beta = _merged(critical.children[1])
        assert not beta.confidence.parent_confident
        assert result.conflicts == [
            MergeConflict(
                conflict_type=ConflictType.MOVE, label="call", base_node=3, winner=1
            )
        ]

    def test_identical_insertions_are_merged(self) -> None:
        base = _tree(_call("alpha"))
        branch = _tree(_call("alpha"), {"label": "stop"})
        result = merge(base, branch, _tree(_call("alpha"), {"label": "stop"}))
        assert [child.label for child in result.tree.children] == ["call", "stop"]
        assert result.conflicts == []

    def test_differing_insertions_are_an_update_conflict(self) -> None:
        base = _tree(_call("alpha"))
        tree_a = _tree(_call("alpha"), {"label": "manipulate", "text": "data.x = 1"})
        tree_b = _tree(_call("alpha"), {"label": "manipulate", "text": "data.x = 2"})
        result = merge(base, tree_a, tree_b)
        assert [child.label for child in result.tree.children] == ["call", "manipulate"]
        assert result.tree.children[1].text == "data.x = 2"
        (conflict,) = result.conflicts
        assert conflict.conflict_type == ConflictType.UPDATE
        assert conflict.base_node is None
        assert conflict.field == "text"
        assert conflict.winner == 2

    def test_queues_are_drained(self) -> None:
        base = _tree(_call("x", a="1"), _call("beta", a="1"))
        result = merge(
            base,
            _tree(_call("x", a="2")),
            _tree(_call("x", a="3"), _call("beta", a="4")),
        )
        assert result.pending.is_empty()
        assert len(result.pending) == 0
        assert {conflict.conflict_type for conflict in result.conflicts} == {
            ConflictType.UPDATE,
            ConflictType.DELETE,
        }


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


class TestMerger:
    def test_delta_trees_are_not_mutated(self) -> None:
        base = _tree(_call("x", a="1"), {"label": "stop"})
        delta_a = delta_tree(base, _tree(_call("x", a="9")))
        delta_b = delta_tree(base, _tree({"label": "stop"}, _call("x", a="7")))
        before = (to_dict(delta_a), to_dict(delta_b))
        ThreeWayMerger().merge_delta_trees(delta_a, delta_b)
        assert (to_dict(delta_a), to_dict(delta_b)) == before

    def test_result_tree_is_merge_nodes(self) -> None:
        base = _tree(_call("alpha"), {"label": "stop"})
        result = ThreeWayMerger().merge(base, base.copy(), base.copy())
        assert all(isinstance(node, MergeNode) for node in result.tree.pre_order())
        assert to_dict(result.tree) == to_dict(base)
        assert result.conflicts == []
        assert result.computation_time_ms >= 0.0

    def test_unplaceable_node_stays_attached(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        base = _tree(_call("alpha"), _call("beta"))
        run = _MergeRun(
            delta_tree(base, base.copy()), delta_tree(base, base.copy()), DiffConfig()
        )
        run._match()
        # A parent with no counterpart in branch B
        unmatched_parent = MergeNode("loop")
        run.tree_a.append_child(unmatched_parent)
        reference = MergeNode("stop")
        unmatched_parent.append_child(reference)
        beta = run.tree_b.children[1]
        assert isinstance(beta, MergeNode)

        with caplog.at_level("WARNING", logger="process_tree_diff"):
            placed = run._insert_correctly(beta, reference)

        assert not placed
        assert beta.parent is run.tree_b
        assert beta.child_index == 1
        assert _endpoints(run.tree_b) == ["alpha", "beta"]
        assert "change dropped" in caplog.text

    def test_detached_node_has_no_anchor(self) -> None:
        base = _tree(_call("alpha"))
        run = _MergeRun(
            delta_tree(base, base.copy()), delta_tree(base, base.copy()), DiffConfig()
        )
        with pytest.raises(ValueError, match="detached"):
            run._left_anchor(MergeNode("stop"))

    def test_conflicts_are_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        base = _tree(_call("x", a="1"))
        with caplog.at_level("WARNING", logger="process_tree_diff"):
            merge(base, _tree(_call("x", a="9")), _tree(_call("x", a="7")))
        assert "update conflict" in caplog.text


class TestConflictSets:
    def test_empty(self) -> None:
        sets = ConflictSets()
        assert sets.is_empty()
        assert len(sets) == 0

    def test_counts_all_queues(self) -> None:
        sets = ConflictSets()
        node = MergeNode("call")
        sets.deletions.append(node)
        sets.updates.append((node, MergeNode("call")))
        assert not sets.is_empty()
        assert len(sets) == 2
