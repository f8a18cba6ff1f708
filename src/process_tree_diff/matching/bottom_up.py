"""BottomUpMatcher: promote matches from children to parents.

Works on a seed matching.  Without one, leaves are matched first the way
``BucketedMatcher`` matches them.  Then, repeatedly until nothing changes,
every matched pair proposes its parents: the parents are matched when
both are free, share a label, compare below ``inner_threshold`` and at
least half of the larger subtree is already matched into the other one.
"""

from __future__ import annotations

import logging

from process_tree_diff.algorithm.comparator import StandardComparator
from process_tree_diff.algorithm.config import DiffConfig
from process_tree_diff.matching.bucketed import BucketedMatcher
from process_tree_diff.matching.common import (
    common_descendants,
    match_roots,
    propagate_properties,
)
from process_tree_diff.matching.matching import Matching
from process_tree_diff.protocols import Comparator
from process_tree_diff.tree.nodes import Node

__all__ = ["BottomUpMatcher"]

logger = logging.getLogger(__name__)

MIN_COMMONALITY = 0.5


class BottomUpMatcher:
    """Bottom-up matching strategy."""

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

        if not any(new_node.is_leaf() for new_node, _ in matching):
            BucketedMatcher(self._config).match_leaves(
                old_tree, new_tree, matching, comparator
            )

        rounds = 0
        while self._promote(matching, comparator):
            rounds += 1

        match_roots(old_tree, new_tree, matching)
        propagate_properties(new_tree, matching)
        logger.debug(
            "Bottom-up matching reached a fixpoint after %d rounds (%d pairs)",
            rounds,
            len(matching),
        )
        return matching

    def _promote(self, matching: Matching, comparator: Comparator) -> bool:
        changed = False
        for new_node, old_node in matching.pairs():
            new_parent, old_parent = new_node.parent, old_node.parent
            if new_parent is None or old_parent is None:
                continue
            if matching.has_new(new_parent) or matching.has_old(old_parent):
                continue
            if new_parent.label != old_parent.label:
                continue
            cost = comparator.compare(old_parent, new_parent)
            if cost >= self._config.inner_threshold:
                continue
            if _commonality(old_parent, new_parent, matching) < MIN_COMMONALITY:
                continue
            matching.match_new(new_parent, old_parent)
            changed = True
        return changed


def _commonality(old_node: Node, new_node: Node, matching: Matching) -> float:
    flow_size = max(
        sum(1 for node in old_node.descendants() if not node.is_property()),
        sum(1 for node in new_node.descendants() if not node.is_property()),
    )
    if flow_size == 0:
        return 1.0
    return common_descendants(old_node, new_node, matching) / flow_size
