"""EditOperation and EditScript: the portable form of a tree diff.

An edit script is an ordered list of operations meant to be applied in
sequence.  Every path is a child-index path (``"0/2/1"``, the root is
``""``) resolved against the tree *as it is at that step*: old paths point
at the node before the operation, new paths at where it sits afterwards.

Text form, one operation per line::

    UPDATE 0
    MOVE 0/0 -> 0
    SUBTREE_INSERTION -> 1
    DELETION 1
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import StrEnum, auto
from typing import Any

from process_tree_diff.tree.builder import TreeBuilder, to_dict
from process_tree_diff.tree.nodes import Node

__all__ = ["EditOperation", "EditScript", "EditType"]


class EditType(StrEnum):
    INSERTION = auto()
    SUBTREE_INSERTION = auto()
    DELETION = auto()
    SUBTREE_DELETION = auto()
    MOVE = auto()
    UPDATE = auto()


@dataclass(frozen=True, slots=True)
class EditOperation:
    """A single edit.

    Attributes:
        edit_type:    Kind of edit.
        old_path:     Path of the affected node before the edit (deletion,
                      move, update).
        new_path:     Path of the affected node after the edit (insertion,
                      move).
        new_content:  Inserted subtree, or for updates a childless snapshot
                      of the node's new content.
    """

    edit_type: EditType
    old_path: str | None = None
    new_path: str | None = None
    new_content: Node | None = None

    def __str__(self) -> str:
        name = self.edit_type.name
        if self.old_path is not None and self.new_path is not None:
            return f"{name} {self.old_path} -> {self.new_path}"
        if self.new_path is not None:
            return f"{name} -> {self.new_path}"
        return f"{name} {self.old_path}"

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": self.edit_type.value}
        if self.old_path is not None:
            payload["old_path"] = self.old_path
        if self.new_path is not None:
            payload["new_path"] = self.new_path
        if self.new_content is not None:
            payload["new_content"] = to_dict(self.new_content)
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> EditOperation:
        content = payload.get("new_content")
        return cls(
            edit_type=EditType(payload["type"]),
            old_path=payload.get("old_path"),
            new_path=payload.get("new_path"),
            new_content=(
                TreeBuilder(ignored_attributes=(), trim=False).build(content)
                if content is not None
                else None
            ),
        )


@dataclass
class EditScript:
    """Ordered list of edit operations transforming one tree into another."""

    operations: list[EditOperation] = field(default_factory=list)

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def insert(self, node: Node) -> None:
        """Record the insertion of ``node``, which is already in place."""
        edit_type = (
            EditType.SUBTREE_INSERTION if node.has_children() else EditType.INSERTION
        )
        self.operations.append(
            EditOperation(edit_type, new_path=node.path, new_content=node.copy())
        )

    def delete(self, node: Node) -> None:
        """Record the deletion of ``node``, which is still in place."""
        edit_type = (
            EditType.SUBTREE_DELETION if node.has_children() else EditType.DELETION
        )
        self.operations.append(EditOperation(edit_type, old_path=node.path))

    def move(self, old_path: str, new_path: str) -> None:
        self.operations.append(
            EditOperation(EditType.MOVE, old_path=old_path, new_path=new_path)
        )

    def update(self, node: Node, new_content: Node) -> None:
        """Record that ``node`` takes over the content of ``new_content``."""
        self.operations.append(
            EditOperation(
                EditType.UPDATE,
                old_path=node.path,
                new_content=new_content.copy(include_children=False),
            )
        )

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def _count(self, *edit_types: EditType) -> int:
        return sum(1 for op in self.operations if op.edit_type in edit_types)

    @property
    def insertions(self) -> int:
        return self._count(EditType.INSERTION, EditType.SUBTREE_INSERTION)

    @property
    def deletions(self) -> int:
        return self._count(EditType.DELETION, EditType.SUBTREE_DELETION)

    @property
    def moves(self) -> int:
        return self._count(EditType.MOVE)

    @property
    def updates(self) -> int:
        return self._count(EditType.UPDATE)

    def __iter__(self) -> Iterator[EditOperation]:
        return iter(self.operations)

    def __len__(self) -> int:
        return len(self.operations)

    def __getitem__(self, index: int) -> EditOperation:
        return self.operations[index]

    def __str__(self) -> str:
        return "\n".join(str(op) for op in self.operations)

    # ------------------------------------------------------------------
    # Portable form
    # ------------------------------------------------------------------

    def to_dicts(self) -> list[dict[str, Any]]:
        return [op.to_dict() for op in self.operations]

    @classmethod
    def from_dicts(cls, payloads: list[dict[str, Any]]) -> EditScript:
        return cls([EditOperation.from_dict(payload) for payload in payloads])
