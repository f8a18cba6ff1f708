"""BucketedMatcher: label-bucketed leaf matching followed by inner nodes.

The primary matching strategy.

1. Leaves are bucketed by label.  Every (new leaf, old leaf) pair in the
   same bucket whose cost is below ``leaf_threshold`` becomes a candidate.
   Candidates are accepted greedily in ascending
   ``(cost, new pre-order, old pre-order)`` order, skipping pairs where
   either side is already taken.  Identical duplicates therefore pair up
   positionally, and raising the threshold only appends candidates, so it
   never loses a match.
2. Inner nodes are processed ascending by subtree size so that matches of
   small subtrees inform their enclosing ones.  Each unmatched new inner
   node takes the unmatched old inner node of the same label minimizing
   ``0.4 * compare + 0.6 * (1 - dice)`` where ``dice`` is the share of
   matched descendants the two subtrees have in common; accepted under
   ``inner_threshold``.
3. Unless disabled, still unmatched nodes whose parent and siblings are
   matched take the old node in the same slot (see ``match_by_context``).
4. Property subtrees are propagated.  The two roots are always matched.
"""

from __future__ import annotations

import logging
from collections import defaultdict

from process_tree_diff.algorithm.comparator import StandardComparator
from process_tree_diff.algorithm.config import DiffConfig
from process_tree_diff.matching.common import (
    common_descendants,
    leaf_cost,
    match_by_context,
    match_roots,
    propagate_properties,
)
from process_tree_diff.matching.matching import Matching
from process_tree_diff.protocols import Comparator
from process_tree_diff.tree.nodes import Node

__all__ = ["BucketedMatcher"]

logger = logging.getLogger(__name__)

COMPARE_WEIGHT = 0.4
OVERLAP_WEIGHT = 0.6


class BucketedMatcher:
    """Bucketed leaf + inner node matching strategy.

    Args:
        config: Thresholds.  Defaults to ``DiffConfig()``.
        match_context: Run the sibling-context pass after inner matching.
    """

    def __init__(
        self, config: DiffConfig | None = None, match_context: bool = True
    ) -> None:
        self._config: DiffConfig = config if config is not None else DiffConfig()
        self._match_context = match_context

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
        leaf_count = self.match_leaves(old_tree, new_tree, matching, comparator)
        inner_count = self._match_inner(old_tree, new_tree, matching, comparator)
        context_count = (
            match_by_context(new_tree, matching) if self._match_context else 0
        )
        propagate_properties(new_tree, matching)

        logger.debug(
            "Bucketed matching accepted %d leaf, %d inner and %d context pairs"
            " (%d total)",
            leaf_count,
            inner_count,
            context_count,
            len(matching),
        )
        return matching

    # ------------------------------------------------------------------
    # Leaves
    # ------------------------------------------------------------------

    def match_leaves(
        self,
        old_tree: Node,
        new_tree: Node,
        matching: Matching,
        comparator: Comparator,
    ) -> int:
        """Greedily match unmatched leaves of equal label below ``leaf_threshold``.

        Candidate pairs are accepted in ascending cost, ties broken by leaf
        order in the new tree, then in the old tree.

        Returns:
            The number of pairs added to ``matching``.
        """
        buckets: dict[str, list[tuple[int, Node]]] = defaultdict(list)
        for old_index, old_leaf in enumerate(old_tree.leaves()):
            if not matching.has_old(old_leaf):
                buckets[old_leaf.label].append((old_index, old_leaf))

        candidates: list[tuple[float, int, int, Node, Node]] = []
        for new_index, new_leaf in enumerate(new_tree.leaves()):
            if matching.has_new(new_leaf):
                continue
            for old_index, old_leaf in buckets.get(new_leaf.label, []):
                cost = leaf_cost(comparator, old_leaf, new_leaf)
                if cost < self._config.leaf_threshold:
                    candidates.append((cost, new_index, old_index, new_leaf, old_leaf))

        candidates.sort(key=lambda candidate: candidate[:3])
        accepted = 0
        for _, _, _, new_leaf, old_leaf in candidates:
            if matching.has_new(new_leaf) or matching.has_old(old_leaf):
                continue
            matching.match_new(new_leaf, old_leaf)
            accepted += 1
        return accepted

    # ------------------------------------------------------------------
    # Inner nodes
    # ------------------------------------------------------------------

    def _match_inner(
        self,
        old_tree: Node,
        new_tree: Node,
        matching: Matching,
        comparator: Comparator,
    ) -> int:
        old_inner = [
            node
            for node in old_tree.inner_nodes()
            if node is not old_tree and not matching.has_old(node)
        ]
        new_inner = [
            node
            for node in new_tree.inner_nodes()
            if node is not new_tree and not matching.has_new(node)
        ]
        new_inner.sort(key=lambda node: node.size())
        flow_sizes = {node: _flow_size(node) for node in old_inner + new_inner}

        accepted = 0
        for new_node in new_inner:
            best: Node | None = None
            best_cost = self._config.inner_threshold
            for old_node in old_inner:
                if old_node.label != new_node.label or matching.has_old(old_node):
                    continue
                total = flow_sizes[old_node] + flow_sizes[new_node]
                if total == 0:
                    overlap = 1.0
                else:
                    common = common_descendants(old_node, new_node, matching)
                    overlap = 2.0 * common / total
                cost = (
                    COMPARE_WEIGHT * comparator.compare(old_node, new_node)
                    + OVERLAP_WEIGHT * (1.0 - overlap)
                )
                if cost < best_cost:
                    best, best_cost = old_node, cost
            if best is not None:
                matching.match_new(new_node, best)
                accepted += 1
        return accepted


def _flow_size(node: Node) -> int:
    return sum(1 for descendant in node.descendants() if not descendant.is_property())
