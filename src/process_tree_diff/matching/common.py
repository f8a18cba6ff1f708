"""Building blocks shared by the matching strategies."""

from __future__ import annotations

from process_tree_diff.matching.matching import Matching
from process_tree_diff.protocols import Comparator
from process_tree_diff.tree.nodes import Node

__all__ = [
    "common_descendants",
    "leaf_cost",
    "match_by_context",
    "match_roots",
    "propagate_properties",
    "subtree_equals",
]


def subtree_equals(node: Node, other: Node) -> bool:
    """True when both subtrees have equal content and shape."""
    if not node.content_equals(other) or len(node.children) != len(other.children):
        return False
    return all(
        subtree_equals(child, other_child)
        for child, other_child in zip(node.children, other.children, strict=True)
    )


def leaf_cost(comparator: Comparator, old_node: Node, new_node: Node) -> float:
    """Comparator value, short-circuited to 0 for identical subtrees."""
    if subtree_equals(old_node, new_node):
        parent, new_parent = old_node.parent, new_node.parent
        if parent is None or new_parent is None or parent.label == new_parent.label:
            return 0.0
    return comparator.compare(old_node, new_node)


def match_roots(old_tree: Node, new_tree: Node, matching: Matching) -> None:
    if not matching.are_matched(old_tree, new_tree):
        matching.match_new(new_tree, old_tree)


def common_descendants(old_node: Node, new_node: Node, matching: Matching) -> int:
    """Count non-property descendants of ``new_node`` matched below ``old_node``."""
    old_subtree = set(old_node.descendants())
    count = 0
    for descendant in new_node.descendants():
        if descendant.is_property():
            continue
        partner = matching.get_new(descendant)
        if partner is not None and partner in old_subtree:
            count += 1
    return count


def propagate_properties(new_tree: Node, matching: Matching) -> None:
    """Match property children of matched control-flow nodes by identical label.

    Recurses into matched property subtrees.  Sibling property nodes are
    assumed to carry distinct labels; with duplicates the last one wins.
    """
    for new_node in new_tree.pre_order():
        if new_node.is_property():
            continue
        old_node = matching.get_new(new_node)
        if old_node is not None:
            _propagate(old_node, new_node, matching)


def _propagate(old_node: Node, new_node: Node, matching: Matching) -> None:
    old_properties = {
        child.label: child for child in old_node.children if child.is_property()
    }
    for new_child in new_node.children:
        if not new_child.is_property():
            continue
        old_child = old_properties.get(new_child.label)
        if old_child is None:
            continue
        if not matching.has_new(new_child) and not matching.has_old(old_child):
            matching.match_new(new_child, old_child)
        if matching.are_matched(old_child, new_child):
            _propagate(old_child, new_child, matching)


def match_by_context(new_tree: Node, matching: Matching) -> int:
    """Match unmatched nodes whose surroundings are matched.

    A new control-flow node qualifies when its parent is matched and each
    direct sibling it has is matched below the parent's partner.  The old
    node in the corresponding slot is taken if it is free and carries the
    same label.  A node without siblings takes the first child of the
    parent's partner.  Nodes matched this way make their own children
    eligible, since the walk is in pre-order.

    Returns:
        The number of pairs added to ``matching``.
    """
    accepted = 0
    for new_node in new_tree.pre_order():
        parent = new_node.parent
        if parent is None or new_node.is_property() or matching.has_new(new_node):
            continue
        old_parent = matching.get_new(parent)
        if old_parent is None or not old_parent.children:
            continue
        candidate = _slot_candidate(new_node, parent, old_parent, matching)
        if candidate is None or candidate.label != new_node.label:
            continue
        if not matching.has_old(candidate):
            matching.match_new(new_node, candidate)
            accepted += 1
    return accepted


def _slot_candidate(
    new_node: Node, parent: Node, old_parent: Node, matching: Matching
) -> Node | None:
    index = new_node.child_index
    left = parent.children[index - 1] if index > 0 else None
    right = parent.children[index + 1] if index + 1 < len(parent.children) else None
    old_left = matching.get_new(left) if left is not None else None
    old_right = matching.get_new(right) if right is not None else None
    if left is not None and (old_left is None or old_left.parent is not old_parent):
        return None
    if right is not None and (old_right is None or old_right.parent is not old_parent):
        return None

    siblings = old_parent.children
    if old_left is not None and old_right is not None:
        if old_right.child_index != old_left.child_index + 2:
            return None
        return siblings[old_left.child_index + 1]
    if old_left is not None:
        if old_left.child_index != len(siblings) - 2:
            return None
        return siblings[-1]
    if old_right is not None:
        return siblings[0] if old_right.child_index == 1 else None
    return siblings[0]
