"""DeltaTreeBuilder: apply an edit script to a copy of a tree, annotating it.

The *standard* delta tree is the live result of the script.  Every node
carries its change type and field-level updates, and detached content is
kept as placeholders:

- deleted subtrees are marked ``DELETION`` and parked in their former
  parent's placeholder list;
- moved nodes are marked ``MOVE_TO`` and leave a ``MOVE_FROM`` snapshot at
  their old position, both sharing a ``move_id``.

The *extended* delta tree additionally reinserts every placeholder at its
recorded position, except move origins nested under a moved node (that
content is already shown at the new location).

When an operation addresses a position inside a moved subtree, structural
changes (insertions, deletions, moves out) are mirrored onto the subtree's
``MOVE_FROM`` snapshot while the snapshot still has the addressed position,
so later paths keep resolving against both.

The input tree is never mutated.  ``base_node`` of every copied node is
its pre-order index in the input tree.
"""

from __future__ import annotations

import logging
from itertools import count
from typing import cast

from process_tree_diff.diff.edit_script import EditOperation, EditScript, EditType
from process_tree_diff.errors import EditScriptError
from process_tree_diff.tree.labels import TEXT_KEY
from process_tree_diff.tree.nodes import ChangeType, DeltaNode, Node, Update

__all__ = ["DeltaTreeBuilder", "apply_update", "resolve_placeholders"]

logger = logging.getLogger(__name__)


class DeltaTreeBuilder:
    """Builds standard and extended delta trees from a tree and an edit script.

    Example::

        builder = DeltaTreeBuilder()
        delta = builder.delta_tree(old_tree, script)
        extended = builder.extended_delta_tree(old_tree, script)
    """

    def delta_tree(self, tree: Node, script: EditScript) -> DeltaNode:
        """Apply ``script`` to a ``DeltaNode`` copy of ``tree``.

        Raises:
            EditScriptError: If an operation addresses a position the tree
                does not have at that step.
        """
        return _ScriptApplication(tree).run(script)

    def extended_delta_tree(self, tree: Node, script: EditScript) -> DeltaNode:
        """Like ``delta_tree`` with placeholders reinserted for display."""
        root = self.delta_tree(tree, script)
        resolve_placeholders(root)
        return root


def resolve_placeholders(root: DeltaNode) -> None:
    """Reinsert placeholders of the whole tree at their recorded positions."""
    reinserted = _resolve(root, root.is_move())
    logger.debug("Reinserted %d placeholders", reinserted)


def _resolve(node: DeltaNode, inside_move: bool) -> int:
    total = 0
    for child in list(node.children):
        if isinstance(child, DeltaNode):
            total += _resolve(child, inside_move or child.is_move())
    pending, node.placeholders = node.placeholders, []
    inserted = 0
    for placeholder in pending:
        total += _resolve(placeholder, inside_move)
        if inside_move and placeholder.is_move_from():
            continue
        index = min(placeholder.child_index + inserted, len(node.children))
        node.insert_child(index, placeholder)
        inserted += 1
    return total + inserted


def _indices(path: str | None) -> list[int]:
    if path is None:
        raise EditScriptError()
    if path == "":
        return []
    try:
        indices = [int(segment) for segment in path.split("/")]
    except ValueError:
        raise EditScriptError() from None
    if any(index < 0 for index in indices):
        raise EditScriptError()
    return indices


class _ScriptApplication:
    """State of one script application: the copy, move snapshots, move ids."""

    def __init__(self, tree: Node) -> None:
        self._root = DeltaNode.from_node(tree)
        for index, node in enumerate(self._root.pre_order()):
            if isinstance(node, DeltaNode):
                node.base_node = index
        self._snapshots: dict[DeltaNode, DeltaNode] = {}
        self._move_ids = count()

    def run(self, script: EditScript) -> DeltaNode:
        for operation in script:
            edit_type = operation.edit_type
            if edit_type in (EditType.INSERTION, EditType.SUBTREE_INSERTION):
                self._insert(operation)
            elif edit_type == EditType.MOVE:
                self._move(operation)
            elif edit_type == EditType.UPDATE:
                self._update(operation)
            else:
                self._delete(operation)
        logger.debug(
            "Applied %d operations, %d moves recorded",
            len(script),
            len(self._snapshots),
        )
        return self._root

    # ------------------------------------------------------------------
    # Path resolution
    # ------------------------------------------------------------------

    def _walk(self, indices: list[int]) -> tuple[DeltaNode, DeltaNode | None]:
        """Resolve ``indices`` to a live node and its move snapshot, if any."""
        node = self._root
        snapshot: DeltaNode | None = self._snapshots.get(node)
        for index in indices:
            if index >= len(node.children):
                raise EditScriptError()
            node = cast(DeltaNode, node.children[index])
            if snapshot is not None:
                mirrored = (
                    snapshot.children[index] if index < len(snapshot.children) else None
                )
                snapshot = mirrored if isinstance(mirrored, DeltaNode) else None
            if node in self._snapshots:
                snapshot = self._snapshots[node]
        return node, snapshot

    def _target(self, path: str | None) -> tuple[DeltaNode, int, DeltaNode | None]:
        """Parent, child index and parent snapshot addressed by an insertion path."""
        indices = _indices(path)
        if not indices:
            raise EditScriptError()
        parent, snapshot = self._walk(indices[:-1])
        index = indices[-1]
        if index > len(parent.children):
            raise EditScriptError()
        return parent, index, snapshot

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def _insert(self, operation: EditOperation) -> None:
        if operation.new_content is None:
            raise EditScriptError()
        parent, index, snapshot = self._target(operation.new_path)
        node = DeltaNode.from_node(operation.new_content)
        for inserted in node.pre_order():
            if isinstance(inserted, DeltaNode):
                inserted.change_type = ChangeType.INSERTION
                inserted.base_node = None
        parent.insert_child(index, node)
        if snapshot is not None and index <= len(snapshot.children):
            snapshot.insert_child(index, node.copy())

    def _move(self, operation: EditOperation) -> None:
        node, snapshot = self._walk(_indices(operation.old_path))
        if node is self._root:
            raise EditScriptError()

        if node in self._snapshots or node.is_insertion():
            # Already annotated: relocate without a second origin
            node.remove_from_parent()
        else:
            move_id = next(self._move_ids)
            if snapshot is not None and snapshot.parent is not None:
                placeholder = snapshot
                snapshot.detach_leaving(snapshot)
                node.remove_from_parent()
            else:
                placeholder = node.copy()
                node.detach_leaving(placeholder)
            placeholder.change_type = ChangeType.MOVE_FROM
            placeholder.move_id = move_id
            node.change_type = ChangeType.MOVE_TO
            node.move_id = move_id
            self._snapshots[node] = placeholder

        parent, index, _ = self._target(operation.new_path)
        parent.insert_child(index, node)

    def _update(self, operation: EditOperation) -> None:
        if operation.new_content is None:
            raise EditScriptError()
        node, _ = self._walk(_indices(operation.old_path))
        apply_update(node, operation.new_content)

    def _delete(self, operation: EditOperation) -> None:
        node, snapshot = self._walk(_indices(operation.old_path))
        if node is self._root:
            raise EditScriptError()
        node.mark_subtree(ChangeType.DELETION)
        node.detach_leaving(node)
        if snapshot is not None and snapshot.parent is not None:
            snapshot.mark_subtree(ChangeType.DELETION)
            snapshot.detach_leaving(snapshot)


def apply_update(node: DeltaNode, content: Node) -> None:
    """Give ``node`` the label, attributes and text of ``content``, recording updates.

    Repeated updates of one field keep the original old value; a field
    changed back to its original value loses its update record.
    """
    node.label = content.label
    for name in dict.fromkeys([*node.attributes, *content.attributes]):
        _record(node, name, node.attributes.get(name), content.attributes.get(name))
    _record(node, TEXT_KEY, node.text, content.text)
    node.attributes = dict(content.attributes)
    node.text = content.text


def _record(node: DeltaNode, name: str, old: str | None, new: str | None) -> None:
    if old == new:
        return
    previous = node.updates.get(name)
    original = previous.old_value if previous is not None else old
    if original == new:
        del node.updates[name]
    else:
        node.updates[name] = Update(original, new)
