"""Public API functions for process-tree-diff.

This module provides the user-facing functions: match, diff, delta_tree,
patch and merge.  Each call creates fresh differs, comparators and
matchers to guarantee zero global state between calls.
"""

from __future__ import annotations

from process_tree_diff.algorithm.config import DiffConfig
from process_tree_diff.diff.edit_script import EditScript
from process_tree_diff.differ import TreeDiffer
from process_tree_diff.matching.matching import Matching
from process_tree_diff.merge.merger import ThreeWayMerger
from process_tree_diff.patch.delta_tree import DeltaTreeBuilder
from process_tree_diff.result import DiffResult, MergeResult
from process_tree_diff.tree.nodes import DeltaNode, Node

__all__ = ["delta_tree", "diff", "match", "merge", "patch"]


def match(
    old_tree: Node,
    new_tree: Node,
    config: DiffConfig | None = None,
) -> Matching:
    """Return the node correspondence between two trees.

    Args:
        old_tree: Root of the old tree.
        new_tree: Root of the new tree.
        config:   Thresholds and matching mode.  Defaults to ``DiffConfig()``.

    Returns:
        A ``Matching`` in which the two roots are always matched.
    """
    return TreeDiffer(config).match(old_tree, new_tree)


def diff(
    old_tree: Node,
    new_tree: Node,
    config: DiffConfig | None = None,
) -> DiffResult:
    """Diff two trees and return the edit script with its matching.

    Args:
        old_tree: Root of the old tree.
        new_tree: Root of the new tree.
        config:   Thresholds and matching mode.  Defaults to ``DiffConfig()``.

    Returns:
        A ``DiffResult``.  Applying ``edit_script`` to ``old_tree`` yields a
        tree equal to ``new_tree``.
    """
    return TreeDiffer(config).diff(old_tree, new_tree)


def delta_tree(
    old_tree: Node,
    new_tree: Node,
    extended: bool = False,
    config: DiffConfig | None = None,
) -> DeltaNode:
    """Return the annotated copy of ``old_tree`` transformed into ``new_tree``.

    Args:
        old_tree: Root of the old tree.
        new_tree: Root of the new tree.
        extended: Reinsert deleted content and move origins for display.
        config:   Thresholds and matching mode.  Defaults to ``DiffConfig()``.
    """
    return TreeDiffer(config).delta_tree(old_tree, new_tree, extended=extended)


def patch(tree: Node, script: EditScript, extended: bool = False) -> DeltaNode:
    """Apply ``script`` to a copy of ``tree``.

    Raises:
        EditScriptError: If the script addresses positions ``tree`` lacks.
    """
    builder = DeltaTreeBuilder()
    if extended:
        return builder.extended_delta_tree(tree, script)
    return builder.delta_tree(tree, script)


def merge(
    base: Node,
    tree_a: Node,
    tree_b: Node,
    config: DiffConfig | None = None,
) -> MergeResult:
    """Three-way merge of two branches of ``base``.

    Conflicts are resolved by policy: branch A's placement wins move
    conflicts, deletion wins delete conflicts and branch B's value wins
    update conflicts.  Every resolved conflict is listed in the result.

    Args:
        base:   The common ancestor tree.
        tree_a: First branch; the merged tree is built from it.
        tree_b: Second branch.
        config: Thresholds and matching mode.  Defaults to ``DiffConfig()``.
    """
    return ThreeWayMerger(config).merge(base, tree_a, tree_b)
