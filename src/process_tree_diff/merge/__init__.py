"""Three-way merge of two branches of a common base tree."""

from __future__ import annotations

from process_tree_diff.merge.conflicts import ConflictSets, ConflictType, MergeConflict
from process_tree_diff.merge.merger import ThreeWayMerger

__all__ = ["ConflictSets", "ConflictType", "MergeConflict", "ThreeWayMerger"]
