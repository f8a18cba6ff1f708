"""EditScriptGenerator: derive an edit script from a matching.

The generator replays the diff on a private copy of the old tree, so every
recorded path is valid at the moment its operation applies:

1. Walk the new tree in pre-order.
   - An unmatched node is inserted as a subtree (its matched descendants
     are left out; they arrive later by moves).  Only the topmost
     unmatched node of a new subtree produces an operation.
   - A matched node whose partner hangs under the wrong parent is moved
     next to the partner of its left sibling.
   - A matched node whose content differs is updated.
2. Old nodes left without a partner are deleted, topmost first, in
   post-order.
3. Children of every node are aligned to the new order by moves within the
   same parent.

The caller's trees and matching are never mutated.
"""

from __future__ import annotations

import logging

from process_tree_diff.diff.edit_script import EditScript
from process_tree_diff.matching.matching import Matching
from process_tree_diff.tree.nodes import Node

__all__ = ["EditScriptGenerator"]

logger = logging.getLogger(__name__)


class EditScriptGenerator:
    """Turns ``(old tree, new tree, matching)`` into an ``EditScript``."""

    def generate(
        self, old_tree: Node, new_tree: Node, matching: Matching
    ) -> EditScript:
        """Derive the edit script transforming ``old_tree`` into ``new_tree``.

        Args:
            old_tree: Root of the old tree.
            new_tree: Root of the new tree.
            matching: Matching between the two trees.  Pairs whose old node
                is not part of ``old_tree`` are ignored.

        Returns:
            The edit script, in application order.
        """
        work = old_tree.copy()
        work_matching = self._translate(old_tree, work, matching)
        if not work_matching.are_matched(work, new_tree):
            work_matching.match_new(new_tree, work)

        script = EditScript()
        if not new_tree.content_equals(work):
            script.update(work, new_tree)

        for new_node in new_tree.pre_order()[1:]:
            partner = work_matching.get_new(new_node)
            if partner is None:
                self._insert(new_node, work_matching, script)
                continue
            if work_matching.get_new(_parent(new_node)) is not partner.parent:
                self._move(new_node, partner, work_matching, script)
            if not new_node.content_equals(partner):
                script.update(partner, new_node)

        self._delete_unmatched(work, work_matching, script)
        self._align_children(work, work_matching, script)

        logger.debug(
            "Edit script: %d insertions, %d deletions, %d moves, %d updates",
            script.insertions,
            script.deletions,
            script.moves,
            script.updates,
        )
        return script

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    @staticmethod
    def _translate(old_tree: Node, work: Node, matching: Matching) -> Matching:
        """Re-express ``matching`` against the working copy of the old tree."""
        counterpart = dict(zip(old_tree.pre_order(), work.pre_order(), strict=True))
        translated = Matching()
        for new_node, old_node in matching.pairs():
            work_node = counterpart.get(old_node)
            if work_node is not None:
                translated.match_new(new_node, work_node)
        return translated

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def _insert(self, new_node: Node, matching: Matching, script: EditScript) -> None:
        copy = new_node.copy()
        self._keep_unmatched(copy, new_node, matching)
        parent = _partner_of_parent(new_node, matching)
        parent.insert_child(self._target_index(new_node, matching), copy)
        script.insert(copy)

    def _keep_unmatched(self, copy: Node, new_node: Node, matching: Matching) -> None:
        """Match ``copy`` to ``new_node`` and drop copied children that are matched."""
        matching.match_new(new_node, copy)
        for copied_child, new_child in list(
            zip(copy.children, new_node.children, strict=True)
        ):
            if matching.has_new(new_child):
                copied_child.remove_from_parent()
            else:
                self._keep_unmatched(copied_child, new_child, matching)

    def _move(
        self,
        new_node: Node,
        partner: Node,
        matching: Matching,
        script: EditScript,
    ) -> None:
        old_path = partner.path
        partner.remove_from_parent()
        parent = _partner_of_parent(new_node, matching)
        parent.insert_child(self._target_index(new_node, matching), partner)
        script.move(old_path, partner.path)

    @staticmethod
    def _target_index(new_node: Node, matching: Matching) -> int:
        """Slot right after the partner of ``new_node``'s left sibling."""
        if new_node.child_index == 0:
            return 0
        left_sibling = _parent(new_node).children[new_node.child_index - 1]
        left_partner = matching.get_new(left_sibling)
        if left_partner is None:
            return 0
        return left_partner.child_index + 1

    def _delete_unmatched(
        self, work: Node, matching: Matching, script: EditScript
    ) -> None:
        for node in work.post_order():
            parent = node.parent
            if parent is None or matching.has_old(node):
                continue
            if matching.has_old(parent):
                script.delete(node)
                node.remove_from_parent()

    def _align_children(
        self, work: Node, matching: Matching, script: EditScript
    ) -> None:
        for node in work.pre_order():
            new_node = matching.get_old(node)
            if new_node is None:
                continue
            for index, new_child in enumerate(new_node.children):
                partner = matching.get_new(new_child)
                if partner is None or partner.child_index == index:
                    continue
                old_path = partner.path
                partner.change_child_index(index)
                script.move(old_path, partner.path)


def _parent(node: Node) -> Node:
    parent = node.parent
    if parent is None:
        msg = f"{node.label!r} node has no parent"
        raise ValueError(msg)
    return parent


def _partner_of_parent(new_node: Node, matching: Matching) -> Node:
    """Working-tree counterpart of ``new_node``'s parent, matched by pre-order."""
    parent = matching.get_new(_parent(new_node))
    if parent is None:
        msg = f"parent of {new_node.label!r} has no counterpart in the working tree"
        raise ValueError(msg)
    return parent
