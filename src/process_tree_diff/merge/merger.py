"""ThreeWayMerger: combine two delta trees of a common base into one tree.

Branch A is the tree both branches are merged into.  The merge runs in
fixed phases:

1. Match the two delta trees: nodes sharing a ``base_node`` id are paired,
   then content inserted on both sides is paired structurally.
2. Tag every changed node with its branch (``change_origin`` 1 or 2).
3. Remove subtrees the other branch deleted.  When the subtree was changed
   in this branch, a delete conflict is queued; deletion wins.
4. Detect move and update conflicts on nodes changed by both branches.
5. Replay the one-sided changes of A onto B, then of B onto A: moves,
   updates and insertions.
6. Resolve the queued conflicts and lower the confidence of affected
   nodes.

The delta trees passed in are never mutated.
"""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from itertools import pairwise
from typing import cast

from process_tree_diff.algorithm.config import DiffConfig
from process_tree_diff.differ import TreeDiffer
from process_tree_diff.matching.bucketed import BucketedMatcher
from process_tree_diff.matching.matching import Matching
from process_tree_diff.merge.conflicts import ConflictSets, ConflictType, MergeConflict
from process_tree_diff.result import MergeResult
from process_tree_diff.tree.labels import TEXT_KEY
from process_tree_diff.tree.nodes import ChangeType, DeltaNode, MergeNode, Node

__all__ = ["ThreeWayMerger"]

logger = logging.getLogger(__name__)

BRANCH_A = 1
BRANCH_B = 2


class ThreeWayMerger:
    """Merges two branches derived from one base tree.

    Example::

        merger = ThreeWayMerger()
        result = merger.merge(base, tree_a, tree_b)
        result.tree          # merged MergeNode tree
        result.conflicts     # conflicts resolved along the way
    """

    def __init__(self, config: DiffConfig | None = None) -> None:
        self._config: DiffConfig = config if config is not None else DiffConfig()

    def merge(self, base: Node, tree_a: Node, tree_b: Node) -> MergeResult:
        """Diff both branches against ``base`` and merge the delta trees."""
        start = time.perf_counter()
        differ = TreeDiffer(self._config)
        delta_a = differ.delta_tree(base, tree_a)
        delta_b = differ.delta_tree(base, tree_b)
        result = self.merge_delta_trees(delta_a, delta_b)
        return replace(
            result, computation_time_ms=(time.perf_counter() - start) * 1000.0
        )

    def merge_delta_trees(self, delta_a: DeltaNode, delta_b: DeltaNode) -> MergeResult:
        """Merge two standard delta trees built against the same base tree.

        Returns:
            A ``MergeResult`` whose tree is derived from ``delta_a``.
        """
        start = time.perf_counter()
        run = _MergeRun(delta_a, delta_b, self._config)
        tree = run.run()
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        logger.debug(
            "Merged %d nodes with %d resolved conflicts in %.2f ms",
            tree.size(),
            len(run.resolved),
            elapsed_ms,
        )
        return MergeResult(
            tree=tree,
            conflicts=run.resolved,
            pending=run.pending,
            computation_time_ms=elapsed_ms,
        )


class _MergeRun:
    """State of one merge.  In the matching, A is the old side and B the new."""

    def __init__(
        self, delta_a: DeltaNode, delta_b: DeltaNode, config: DiffConfig
    ) -> None:
        self.tree_a = MergeNode.from_node(delta_a)
        self.tree_b = MergeNode.from_node(delta_b)
        self.config = config
        self.matching = Matching()
        self.pending = ConflictSets()
        self.resolved: list[MergeConflict] = []

    def run(self) -> MergeNode:
        self._match()
        _tag_origin(self.tree_a, BRANCH_A)
        _tag_origin(self.tree_b, BRANCH_B)

        self._apply_deletions(self.tree_a)
        self._apply_deletions(self.tree_b)
        self._resolve_deletions()

        self._find_conflicts()
        self._apply_changes(self.tree_a)
        self._apply_changes(self.tree_b)

        self._resolve_moves()
        self._resolve_updates()
        self._mark_order_conflicts()
        return self.tree_a

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def _match(self) -> None:
        by_id = {
            node.base_node: node
            for node in _merge_nodes(self.tree_a)
            if node.base_node is not None
        }
        seeded = Matching()
        for node in _merge_nodes(self.tree_b):
            if node.base_node is None:
                continue
            partner = by_id.get(node.base_node)
            if partner is not None:
                seeded.match_new(node, partner)

        matcher = BucketedMatcher(self.config, match_context=False)
        structural = matcher.match(self.tree_a, self.tree_b, seeded)
        for node_b, node_a in structural.pairs():
            if not (isinstance(node_a, MergeNode) and isinstance(node_b, MergeNode)):
                continue
            same_base = (
                node_a.base_node is not None and node_a.base_node == node_b.base_node
            )
            both_inserted = node_a.base_node is None and node_b.base_node is None
            if same_base or both_inserted:
                self.matching.match_new(node_b, node_a)

    def _other(self, node: MergeNode) -> MergeNode | None:
        return cast(MergeNode | None, self.matching.get_other(node))

    # ------------------------------------------------------------------
    # Deletions
    # ------------------------------------------------------------------

    def _apply_deletions(self, tree: MergeNode) -> None:
        for node in _merge_nodes(tree)[1:]:
            if node.root() is not tree:
                continue
            if self.matching.has_any(node) or node.is_insertion():
                continue
            if any(not changed.is_nil() for changed in _merge_nodes(node)):
                self.pending.deletions.append(node)
            node.remove_from_parent()

    def _resolve_deletions(self) -> None:
        while self.pending.deletions:
            node = self.pending.deletions.pop(0)
            self._record(
                MergeConflict(
                    conflict_type=ConflictType.DELETE,
                    label=node.label,
                    base_node=node.base_node,
                    winner=None,
                )
            )

    # ------------------------------------------------------------------
    # Conflict detection
    # ------------------------------------------------------------------

    def _find_conflicts(self) -> None:
        for node in _merge_nodes(self.tree_a):
            other = self._other(node)
            if other is None:
                continue
            if node.is_move() and other.is_move():
                if not self._same_placement(node, other):
                    self.pending.moves.append((node, other))
            if node.is_update() and other.is_update():
                self.pending.updates.append((node, other))
            if node.is_insertion() and other.is_insertion():
                if not self._same_placement(node, other):
                    self.pending.moves.append((node, other))
                if not node.content_equals(other):
                    self.pending.updates.append((node, other))

    def _same_placement(self, node: MergeNode, other: MergeNode) -> bool:
        parent, other_parent = node.parent, other.parent
        if parent is None or other_parent is None:
            return parent is other_parent
        if self.matching.get_other(parent) is not other_parent:
            return False
        anchor, other_anchor = self._left_anchor(node), self._left_anchor(other)
        if anchor is None or other_anchor is None:
            return anchor is other_anchor
        return self.matching.get_other(anchor) is other_anchor

    def _left_anchor(self, node: Node) -> Node | None:
        """Nearest preceding sibling that has a partner in the other branch."""
        parent = _parent_of(node)
        for sibling in reversed(parent.children[: node.child_index]):
            if self.matching.has_any(sibling):
                return sibling
        return None

    # ------------------------------------------------------------------
    # One-sided changes
    # ------------------------------------------------------------------

    def _apply_changes(self, tree: MergeNode) -> None:
        for node in _merge_nodes(tree):
            if node.root() is not tree:
                continue
            other = self._other(node)
            if other is None:
                if node.is_insertion():
                    self._copy_insertion(node, tree)
                continue
            if node.is_update() and not (other.is_update() or other.is_insertion()):
                other.label = node.label
                other.attributes = dict(node.attributes)
                other.text = node.text
                other.updates = dict(node.updates)
                if other.change_origin == 0:
                    other.change_origin = node.change_origin
            if node is tree:
                continue
            if node.is_move() and not (other.is_move() or other.is_insertion()):
                if self._insert_correctly(other, node):
                    other.change_type = ChangeType.MOVE_TO
                    other.change_origin = node.change_origin

    def _copy_insertion(self, node: MergeNode, tree: MergeNode) -> None:
        copy = node.copy(include_children=False)
        copy.placeholders = []
        if not self._insert_correctly(copy, node):
            return
        if tree is self.tree_a:
            self.matching.match_new(copy, node)
        else:
            self.matching.match_new(node, copy)

    def _insert_correctly(self, node: MergeNode, reference: MergeNode) -> bool:
        """Place ``node`` in the other branch where ``reference`` sits in its own.

        The parent is the partner of ``reference``'s parent; the slot follows
        the partner of the nearest left sibling that has one under that
        parent, else it is the first slot.  ``node`` is detached from its
        current parent only once the target parent is known.
        """
        reference_parent = _parent_of(reference)
        parent = self.matching.get_other(reference_parent)
        if parent is None:
            logger.warning(
                "No counterpart for the parent of %s; change dropped", reference.label
            )
            return False
        node.remove_from_parent()
        index = 0
        for sibling in reversed(reference_parent.children[: reference.child_index]):
            partner = self.matching.get_other(sibling)
            if partner is not None and partner.parent is parent:
                index = partner.child_index + 1
                break
        parent.insert_child(index, node)
        return True

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def _resolve_moves(self) -> None:
        while self.pending.moves:
            node_a, node_b = self.pending.moves.pop(0)
            if node_a.root() is not self.tree_a or node_b.parent is None:
                continue
            same_parent = self.matching.get_other(node_a.parent) is node_b.parent
            self._insert_correctly(node_b, node_a)
            for node in (node_a, node_b):
                if same_parent:
                    node.confidence.position_confident = False
                else:
                    node.confidence.parent_confident = False
            self._record(
                MergeConflict(
                    conflict_type=ConflictType.MOVE,
                    label=node_a.label,
                    base_node=node_a.base_node,
                    winner=BRANCH_A,
                )
            )

    def _resolve_updates(self) -> None:
        while self.pending.updates:
            node_a, node_b = self.pending.updates.pop(0)
            names = dict.fromkeys(
                [
                    *node_a.updates,
                    *node_b.updates,
                    *node_a.attributes,
                    *node_b.attributes,
                ]
            )
            names[TEXT_KEY] = None
            for name in names:
                value_a, value_b = _field(node_a, name), _field(node_b, name)
                if value_a == value_b:
                    continue
                update_a, update_b = node_a.updates.get(name), node_b.updates.get(name)
                if update_a is not None and update_b is None:
                    _set_field(node_b, name, value_a)
                    node_b.updates[name] = update_a
                elif update_b is not None and update_a is None:
                    _set_field(node_a, name, value_b)
                    node_a.updates[name] = update_b
                else:
                    _set_field(node_a, name, value_b)
                    if update_b is not None:
                        node_a.updates[name] = update_b
                    node_a.confidence.content_confident = False
                    node_b.confidence.content_confident = False
                    self._record(
                        MergeConflict(
                            conflict_type=ConflictType.UPDATE,
                            label=node_a.label,
                            base_node=node_a.base_node,
                            winner=BRANCH_B,
                            field=name,
                            value=value_b,
                        )
                    )

    def _mark_order_conflicts(self) -> None:
        """Adjacent siblings placed by different branches have uncertain order."""
        for node in _merge_nodes(self.tree_a):
            placed = [
                child
                for child in node.children
                if isinstance(child, MergeNode)
                and (child.is_move() or child.is_insertion())
            ]
            for left, right in pairwise(placed):
                if right.child_index != left.child_index + 1:
                    continue
                if 0 in (left.change_origin, right.change_origin):
                    continue
                if left.change_origin != right.change_origin:
                    left.confidence.position_confident = False
                    right.confidence.position_confident = False

    def _record(self, conflict: MergeConflict) -> None:
        logger.warning(
            "Resolved %s conflict on %s (base node %s) in favour of %s",
            conflict.conflict_type,
            conflict.label,
            conflict.base_node,
            "deletion" if conflict.winner is None else f"branch {conflict.winner}",
        )
        self.resolved.append(conflict)


def _merge_nodes(root: Node) -> list[MergeNode]:
    return [node for node in root.pre_order() if isinstance(node, MergeNode)]


def _parent_of(node: Node) -> Node:
    parent = node.parent
    if parent is None:
        msg = f"{node.label!r} node is detached from its tree"
        raise ValueError(msg)
    return parent


def _tag_origin(tree: MergeNode, origin: int) -> None:
    for node in _merge_nodes(tree):
        if node.is_nil():
            continue
        node.change_origin = origin
        node.updates = {
            name: replace(update, origin=origin)
            for name, update in node.updates.items()
        }


def _field(node: Node, name: str) -> str | None:
    if name == TEXT_KEY:
        return node.text
    return node.attributes.get(name)


def _set_field(node: Node, name: str, value: str | None) -> None:
    if name == TEXT_KEY:
        node.text = value
    elif value is None:
        node.attributes.pop(name, None)
    else:
        node.attributes[name] = value
