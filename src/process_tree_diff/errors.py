"""Exceptions raised by process-tree-diff."""

from __future__ import annotations

__all__ = ["EditScriptError"]


class EditScriptError(ValueError):
    """An edit script addresses a position the tree does not have."""

    def __init__(self, message: str = "edit script not applicable to tree") -> None:
        super().__init__(message)
