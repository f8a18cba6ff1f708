"""DiffResult and MergeResult dataclasses returned by the orchestrators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from process_tree_diff.diff.edit_script import EditScript
    from process_tree_diff.matching.matching import Matching
    from process_tree_diff.merge.conflicts import ConflictSets, MergeConflict
    from process_tree_diff.tree.nodes import MergeNode

__all__ = ["DiffResult", "MergeResult"]


@dataclass(frozen=True, slots=True)
class DiffResult:
    """Result of a diff() call.

    Attributes:
        edit_script: Operations transforming the old tree into the new one.
        matching: Node correspondence the script was derived from.  It refers
            to the caller's trees and is valid only while they are unchanged.
        computation_time_ms: Wall-clock duration of matching and script
            derivation in milliseconds.
    """

    edit_script: EditScript
    matching: Matching
    computation_time_ms: float

    @property
    def is_identical(self) -> bool:
        return len(self.edit_script) == 0


@dataclass(frozen=True, slots=True)
class MergeResult:
    """Result of a merge() call.

    Attributes:
        tree: The merged tree.  Every node carries ``change_origin`` and a
            ``confidence`` record.
        conflicts: Conflicts that were detected and resolved by policy.
        pending: Conflict queues after resolution; always empty.
        computation_time_ms: Wall-clock duration of the merge in milliseconds.
    """

    tree: MergeNode
    conflicts: list[MergeConflict]
    pending: ConflictSets
    computation_time_ms: float
