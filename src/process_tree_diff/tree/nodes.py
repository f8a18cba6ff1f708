"""Node model for process trees and their change-annotated variants.

Three node classes share one structure:

- ``Node``       a labeled tree vertex with attributes, optional text and
                 ordered children.
- ``DeltaNode``  a ``Node`` annotated with a change type, field-level
                 updates, placeholders and a link back to the base tree.
- ``MergeNode``  a ``DeltaNode`` that also records which branch produced a
                 change and how confident the merge is about it.

A tree exclusively owns its children.  The parent link is a weak
reference, so it never keeps a detached subtree's former parent alive and
never forms an ownership cycle.  ``child_index`` is renumbered on every
structural edit so that ``parent.children[child_index] is node`` holds for
every attached node.  A detached node remembers its last index; placeholders
rely on this to know where they belong.

Nodes compare and hash by identity, which lets them key the dictionaries
a ``Matching`` is built on.
"""

from __future__ import annotations

import weakref
from bisect import bisect_right
from dataclasses import dataclass, field
from enum import StrEnum, auto
from typing import Self

from process_tree_diff.tree import labels

__all__ = ["ChangeType", "Confidence", "DeltaNode", "MergeNode", "Node", "Update"]


class ChangeType(StrEnum):
    """Per-node change annotation in a delta tree."""

    NIL = auto()
    INSERTION = auto()
    SUBTREE_INSERTION = auto()
    DELETION = auto()
    SUBTREE_DELETION = auto()
    MOVE_TO = auto()
    MOVE_FROM = auto()
    UPDATE = auto()


@dataclass(frozen=True, slots=True)
class Update:
    """A single field change.

    Attributes:
        old_value:  Value before the change; ``None`` when the field was added.
        new_value:  Value after the change; ``None`` when the field was removed.
        origin:     Merge branch that produced the change (0 when not merged).
    """

    old_value: str | None
    new_value: str | None
    origin: int = 0


@dataclass(slots=True)
class Confidence:
    """How certain a merge is about a node's content, parent and position."""

    content_confident: bool = True
    parent_confident: bool = True
    position_confident: bool = True

    def is_confident(self) -> bool:
        return (
            self.content_confident
            and self.parent_confident
            and self.position_confident
        )


@dataclass(eq=False)
class Node:
    """A labeled, ordered tree vertex.

    Attributes:
        label:       Node label, e.g. ``"call"`` or ``"endpoint"``.
        attributes:  Attribute name to string value.  Compared as a mapping,
                     so insertion order only matters for serialization.
        text:        Optional text payload.
        children:    Owned, ordered children.  Children passed to the
                     constructor are adopted (their parent link is set).
    """

    label: str
    attributes: dict[str, str] = field(default_factory=dict)
    text: str | None = None
    children: list[Node] = field(default_factory=list, repr=False)
    _parent: weakref.ReferenceType[Node] | None = field(
        default=None, init=False, repr=False
    )
    _child_index: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        adopted, self.children = self.children, []
        for child in adopted:
            self.append_child(child)

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    @property
    def parent(self) -> Node | None:
        if self._parent is None:
            return None
        return self._parent()

    @property
    def child_index(self) -> int:
        return self._child_index

    def is_root(self) -> bool:
        return self.parent is None

    def has_children(self) -> bool:
        return bool(self.children)

    def append_child(self, node: Node) -> None:
        self.insert_child(len(self.children), node)

    def insert_child(self, index: int, node: Node) -> None:
        """Attach ``node`` so that it ends up at ``self.children[index]``."""
        node._parent = weakref.ref(self)
        self.children.insert(index, node)
        self._renumber(index)

    def remove_from_parent(self) -> None:
        """Detach this node.  Its last child index is kept."""
        parent = self.parent
        if parent is None:
            return
        del parent.children[self._child_index]
        parent._renumber(self._child_index)
        self._parent = None

    def change_child_index(self, new_index: int) -> None:
        """Move this node to ``new_index`` among its current siblings."""
        parent = self.parent
        if parent is None or new_index == self._child_index:
            return
        old_index = self._child_index
        parent.children.pop(old_index)
        parent.children.insert(new_index, self)
        parent._renumber(min(old_index, new_index))

    def _renumber(self, start: int = 0) -> None:
        for index in range(start, len(self.children)):
            self.children[index]._child_index = index

    def root(self) -> Node:
        node = self
        while (parent := node.parent) is not None:
            node = parent
        return node

    def ancestors(self) -> list[Node]:
        """Ancestors from the parent up to the root."""
        result: list[Node] = []
        node = self.parent
        while node is not None:
            result.append(node)
            node = node.parent
        return result

    def index_path(self) -> list[int]:
        indices: list[int] = []
        node = self
        while (parent := node.parent) is not None:
            indices.append(node._child_index)
            node = parent
        indices.reverse()
        return indices

    @property
    def path(self) -> str:
        """Child-index path from the root, e.g. ``"0/2/1"``.  The root is ``""``."""
        return "/".join(str(index) for index in self.index_path())

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def pre_order(self) -> list[Node]:
        result: list[Node] = []
        stack: list[Node] = [self]
        while stack:
            node = stack.pop()
            result.append(node)
            stack.extend(reversed(node.children))
        return result

    def post_order(self) -> list[Node]:
        result: list[Node] = []
        for child in self.children:
            result.extend(child.post_order())
        result.append(self)
        return result

    def descendants(self) -> list[Node]:
        return self.pre_order()[1:]

    def size(self) -> int:
        """Number of nodes in this subtree, including this node."""
        return len(self.pre_order())

    def leaves(self) -> list[Node]:
        return [node for node in self.pre_order() if node.is_leaf()]

    def inner_nodes(self) -> list[Node]:
        return [node for node in self.pre_order() if node.is_inner()]

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def is_leaf(self) -> bool:
        return labels.is_leaf_label(self.label)

    def is_inner(self) -> bool:
        return labels.is_inner_label(self.label)

    def is_control_flow(self) -> bool:
        return labels.is_control_flow(self.label)

    def is_property(self) -> bool:
        return labels.is_property_label(self.label)

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    def content_equals(self, other: Node) -> bool:
        return (
            self.label == other.label
            and self.attributes == other.attributes
            and self.text == other.text
        )

    def copy(self, include_children: bool = True) -> Self:
        """Deep-copy this node (and by default its subtree) as the same class."""
        return type(self).from_node(self, include_children)

    @classmethod
    def from_node(cls, node: Node, include_children: bool = True) -> Self:
        """Structurally clone ``node`` as an instance of ``cls``.

        Annotations the source carries are transferred as far as ``cls``
        can hold them: converting a ``DeltaNode`` to ``Node`` drops them,
        converting a ``Node`` to ``DeltaNode`` starts from defaults.
        """
        clone = cls(label=node.label, attributes=dict(node.attributes), text=node.text)
        if include_children:
            for child in node.children:
                clone.append_child(cls.from_node(child))
        node._transfer_annotations(clone)
        return clone

    def _transfer_annotations(self, target: Node) -> None:
        """Copy class-specific annotations onto ``target``.  Plain nodes have none."""


@dataclass(eq=False)
class DeltaNode(Node):
    """A node annotated with what an edit script did to it.

    Attributes:
        change_type:   Structural change of this node.
        updates:       Field name (attribute or ``"text"``) to ``Update``.
        placeholders:  Detached nodes shown at this node's child positions:
                       deleted subtrees and move origins.  Each keeps its
                       target position in ``child_index``; the list is kept
                       in position order.  Not part of the live tree.
        base_node:     Pre-order index of the originating node in the base
                       tree, ``None`` for inserted content.
        move_id:       Correlates a ``MOVE_TO`` node with its ``MOVE_FROM``
                       placeholder.
    """

    change_type: ChangeType = ChangeType.NIL
    updates: dict[str, Update] = field(default_factory=dict)
    placeholders: list[DeltaNode] = field(default_factory=list, repr=False)
    base_node: int | None = None
    move_id: int | None = None

    def is_update(self) -> bool:
        return bool(self.updates)

    def is_nil(self) -> bool:
        return self.change_type == ChangeType.NIL and not self.is_update()

    def is_move(self) -> bool:
        return self.change_type == ChangeType.MOVE_TO

    def is_move_from(self) -> bool:
        return self.change_type == ChangeType.MOVE_FROM

    def is_insertion(self) -> bool:
        return self.change_type in (ChangeType.INSERTION, ChangeType.SUBTREE_INSERTION)

    def is_deletion(self) -> bool:
        return self.change_type in (ChangeType.DELETION, ChangeType.SUBTREE_DELETION)

    def insert_child(self, index: int, node: Node) -> None:
        for placeholder in self.placeholders:
            if placeholder._child_index >= index:
                placeholder._child_index += 1
        super().insert_child(index, node)

    def remove_from_parent(self) -> None:
        parent = self.parent
        if isinstance(parent, DeltaNode):
            for placeholder in parent.placeholders:
                if placeholder._child_index > self._child_index:
                    placeholder._child_index -= 1
        super().remove_from_parent()

    def detach_leaving(self, placeholder: DeltaNode) -> None:
        """Detach from the live tree and park ``placeholder`` at the vacated slot.

        ``placeholder`` may be this node itself (deletion) or a snapshot
        of it (move origin).
        """
        parent = self.parent
        if not isinstance(parent, DeltaNode):
            msg = "cannot detach a node without a delta parent"
            raise ValueError(msg)
        index = self._child_index
        slot = bisect_right([p._child_index for p in parent.placeholders], index)
        self.remove_from_parent()
        placeholder._child_index = index
        parent.placeholders.insert(slot, placeholder)

    def mark_subtree(self, change_type: ChangeType) -> None:
        for node in self.pre_order():
            if isinstance(node, DeltaNode):
                node.change_type = change_type

    def _transfer_annotations(self, target: Node) -> None:
        if not isinstance(target, DeltaNode):
            return
        target.change_type = self.change_type
        target.updates = dict(self.updates)
        target.base_node = self.base_node
        target.move_id = self.move_id
        target.placeholders = []
        for placeholder in self.placeholders:
            clone = type(target).from_node(placeholder)
            clone._child_index = placeholder._child_index
            target.placeholders.append(clone)


@dataclass(eq=False)
class MergeNode(DeltaNode):
    """A delta node inside a merged tree.

    Attributes:
        change_origin:  0 unchanged, 1 changed by branch A, 2 by branch B.
        confidence:     Merge certainty about content, parent and position.
    """

    change_origin: int = 0
    confidence: Confidence = field(default_factory=Confidence)

    def _transfer_annotations(self, target: Node) -> None:
        super()._transfer_annotations(target)
        if isinstance(target, MergeNode):
            target.change_origin = self.change_origin
            target.confidence = Confidence(
                content_confident=self.confidence.content_confident,
                parent_confident=self.confidence.parent_confident,
                position_confident=self.confidence.position_confident,
            )
