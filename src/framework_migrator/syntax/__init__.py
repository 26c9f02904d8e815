"""Structural front-end: tree-sitter parsing into closed node variants."""

from .emitter import TextEdit, apply_edits, find_conflicts
from .nodes import NodeKind, Program, SourceSpan, StructuralNode, SyntaxOptions, walk
from .parser import parse_module, syntax_for

__all__ = [
    "NodeKind",
    "Program",
    "SourceSpan",
    "StructuralNode",
    "SyntaxOptions",
    "TextEdit",
    "apply_edits",
    "find_conflicts",
    "parse_module",
    "syntax_for",
    "walk",
]
