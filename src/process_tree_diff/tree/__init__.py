"""Process tree model: labels, nodes and the dict payload codec."""

from __future__ import annotations

from process_tree_diff.tree.builder import TreeBuilder, to_dict
from process_tree_diff.tree.labels import Keyword
from process_tree_diff.tree.nodes import (
    ChangeType,
    Confidence,
    DeltaNode,
    MergeNode,
    Node,
    Update,
)

__all__ = [
    "ChangeType",
    "Confidence",
    "DeltaNode",
    "Keyword",
    "MergeNode",
    "Node",
    "TreeBuilder",
    "Update",
    "to_dict",
]
