"""Merge conflict records and the queues they pass through."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum, auto

from process_tree_diff.tree.nodes import MergeNode

__all__ = ["ConflictSets", "ConflictType", "MergeConflict"]


class ConflictType(StrEnum):
    """Categories of changes two branches cannot both keep.

    - MOVE:   both branches placed the node differently.
    - UPDATE: both branches set a field to different values.
    - DELETE: one branch deleted a subtree the other one changed.
    """

    MOVE = auto()
    UPDATE = auto()
    DELETE = auto()


@dataclass(frozen=True, slots=True)
class MergeConflict:
    """A conflict as it was resolved.

    Attributes:
        conflict_type: Category of the conflict.
        label:         Label of the affected node.
        base_node:     Base-tree id of the affected node, ``None`` for
                       content inserted by both branches.
        winner:        Branch whose change was kept (1 or 2), ``None`` when
                       the node was deleted.
        field:         Affected field for update conflicts.
        value:         Value kept for update conflicts.
    """

    conflict_type: ConflictType
    label: str
    base_node: int | None
    winner: int | None
    field: str | None = None
    value: str | None = None


@dataclass(slots=True)
class ConflictSets:
    """Conflicts detected but not yet resolved.

    Move and update conflicts hold ``(branch A node, branch B node)``
    pairs; delete conflicts hold the subtree roots about to be removed.
    """

    moves: list[tuple[MergeNode, MergeNode]] = field(default_factory=list)
    updates: list[tuple[MergeNode, MergeNode]] = field(default_factory=list)
    deletions: list[MergeNode] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.moves or self.updates or self.deletions)

    def __len__(self) -> int:
        return len(self.moves) + len(self.updates) + len(self.deletions)
