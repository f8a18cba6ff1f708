"""Process tree diff - matching, edit scripts, delta trees and three-way merge."""

from __future__ import annotations

import logging

from process_tree_diff.algorithm.comparator import StandardComparator
from process_tree_diff.algorithm.config import DiffConfig, MatchingMode
from process_tree_diff.api import delta_tree, diff, match, merge, patch
from process_tree_diff.diff.edit_script import EditOperation, EditScript, EditType
from process_tree_diff.differ import TreeDiffer
from process_tree_diff.errors import EditScriptError
from process_tree_diff.matching.matching import Matching
from process_tree_diff.merge.conflicts import ConflictType, MergeConflict
from process_tree_diff.merge.merger import ThreeWayMerger
from process_tree_diff.result import DiffResult, MergeResult
from process_tree_diff.tree.builder import TreeBuilder, to_dict
from process_tree_diff.tree.nodes import ChangeType, DeltaNode, MergeNode, Node

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__: str = "0.1.0"
__all__: list[str] = [
    "ChangeType",
    "ConflictType",
    "DeltaNode",
    "DiffConfig",
    "DiffResult",
    "EditOperation",
    "EditScript",
    "EditScriptError",
    "EditType",
    "Matching",
    "MatchingMode",
    "MergeConflict",
    "MergeNode",
    "MergeResult",
    "Node",
    "StandardComparator",
    "ThreeWayMerger",
    "TreeBuilder",
    "TreeDiffer",
    "delta_tree",
    "diff",
    "match",
    "merge",
    "patch",
    "to_dict",
]
