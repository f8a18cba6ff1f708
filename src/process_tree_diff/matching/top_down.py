"""TopDownMatcher: descend from matched pairs into their children.

Starting at the roots (and any seeded pairs), each matched parent pair
matches those children whose label occurs exactly once among the old
parent's children and exactly once among the new parent's, provided their
comparator value is below ``leaf_threshold``.  The walk then continues
into every child pair matched under that parent, so unmatched subtrees
are never entered.
"""

from __future__ import annotations

import logging
from collections import Counter

from process_tree_diff.algorithm.comparator import StandardComparator
from process_tree_diff.algorithm.config import DiffConfig
from process_tree_diff.matching.common import leaf_cost, match_roots
from process_tree_diff.matching.matching import Matching
from process_tree_diff.protocols import Comparator
from process_tree_diff.tree.nodes import Node

__all__ = ["TopDownMatcher"]

logger = logging.getLogger(__name__)


class TopDownMatcher:
    """Top-down matching strategy."""

    def __init__(self, config: DiffConfig | None = None) -> None:
        self._config: DiffConfig = config if config is not None else DiffConfig()

    def match(
        self,
        old_tree: Node,
        new_tree: Node,
        matching: Matching | None = None,
        comparator: Comparator | None = None,
    ) -> Matching:
        matching = matching if matching is not None else Matching()
        comparator = comparator if comparator is not None else StandardComparator()

        match_roots(old_tree, new_tree, matching)
        stack: list[tuple[Node, Node]] = [(old_tree, new_tree)]
        visited: set[Node] = set()
        while stack:
            old_node, new_node = stack.pop()
            if new_node in visited:
                continue
            visited.add(new_node)
            self._match_children(old_node, new_node, matching, comparator)
            for new_child in reversed(new_node.children):
                old_child = matching.get_new(new_child)
                if old_child is not None and old_child.parent is old_node:
                    stack.append((old_child, new_child))

        logger.debug("Top-down matching produced %d pairs", len(matching))
        return matching

    def _match_children(
        self,
        old_node: Node,
        new_node: Node,
        matching: Matching,
        comparator: Comparator,
    ) -> None:
        old_counts = Counter(child.label for child in old_node.children)
        new_counts = Counter(child.label for child in new_node.children)
        old_by_label = {child.label: child for child in old_node.children}
        for new_child in new_node.children:
            label = new_child.label
            if old_counts[label] != 1 or new_counts[label] != 1:
                continue
            old_child = old_by_label[label]
            if matching.has_new(new_child) or matching.has_old(old_child):
                continue
            cost = leaf_cost(comparator, old_child, new_child)
            if cost < self._config.leaf_threshold:
                matching.match_new(new_child, old_child)
