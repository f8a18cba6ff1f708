"""Similarity and assignment algorithms underlying the matchers."""

from __future__ import annotations

from process_tree_diff.algorithm.assignment import assign, mean_assignment_cost
from process_tree_diff.algorithm.comparator import StandardComparator, difference_ratio
from process_tree_diff.algorithm.config import DiffConfig, MatchingMode
from process_tree_diff.algorithm.extract import CallProperties, FeatureExtractor
from process_tree_diff.algorithm.lcs import lcs_length, lcs_pairs, lcs_similarity

__all__ = [
    "CallProperties",
    "DiffConfig",
    "FeatureExtractor",
    "MatchingMode",
    "StandardComparator",
    "assign",
    "difference_ratio",
    "lcs_length",
    "lcs_pairs",
    "lcs_similarity",
    "mean_assignment_cost",
]
