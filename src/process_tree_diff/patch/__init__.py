"""Delta trees: edit scripts applied to a tree copy with change annotations."""

from __future__ import annotations

from process_tree_diff.patch.delta_tree import (
    DeltaTreeBuilder,
    apply_update,
    resolve_placeholders,
)

__all__ = ["DeltaTreeBuilder", "apply_update", "resolve_placeholders"]
