"""Edit scripts: derivation from a matching and their portable form."""

from __future__ import annotations

from process_tree_diff.diff.edit_script import EditOperation, EditScript, EditType
from process_tree_diff.diff.generator import EditScriptGenerator

__all__ = ["EditOperation", "EditScript", "EditScriptGenerator", "EditType"]
