"""Matching strategies establishing node correspondences between two trees."""

from __future__ import annotations

from process_tree_diff.algorithm.config import DiffConfig, MatchingMode
from process_tree_diff.matching.bottom_up import BottomUpMatcher
from process_tree_diff.matching.bucketed import BucketedMatcher
from process_tree_diff.matching.exact import ExactMatcher
from process_tree_diff.matching.matching import Matching
from process_tree_diff.matching.path import PathMatcher
from process_tree_diff.matching.top_down import TopDownMatcher
from process_tree_diff.protocols import MatchingAlgorithm

__all__ = [
    "BottomUpMatcher",
    "BucketedMatcher",
    "ExactMatcher",
    "Matching",
    "PathMatcher",
    "TopDownMatcher",
    "matcher_for",
]

_MATCHERS = {
    MatchingMode.BUCKETED: BucketedMatcher,
    MatchingMode.PATH: PathMatcher,
    MatchingMode.TOP_DOWN: TopDownMatcher,
    MatchingMode.BOTTOM_UP: BottomUpMatcher,
    MatchingMode.EXACT: ExactMatcher,
}


def matcher_for(config: DiffConfig | None = None) -> MatchingAlgorithm:
    """Return a fresh matcher for ``config.matching_mode``."""
    config = config if config is not None else DiffConfig()
    return _MATCHERS[config.matching_mode](config)
