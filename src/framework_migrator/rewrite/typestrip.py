"""Type-syntax stripping for modules emitted as plain JavaScript."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from framework_migrator.rewrite.base import RewriteContext, RuleCategory, RuleOutcome
from framework_migrator.rewrite.imports import render_import
from framework_migrator.syntax.emitter import TextEdit, delete, replace, statement_removal
from framework_migrator.syntax.nodes import (
    Export,
    Import,
    NodeKind,
    Program,
    StructuralNode,
    TypeSyntax,
    walk_pruned,
)

STRIP_RULE_NAME = "strip-types"


@dataclass(frozen=True)
class StripTypesRule:
    """Remove every type-only construct from a TypeScript module."""

    feature: str | None = None
    name: str = STRIP_RULE_NAME

    category: ClassVar[RuleCategory] = RuleCategory.TYPES
    node_kind: ClassVar[NodeKind] = NodeKind.PROGRAM

    def matches(self, node: StructuralNode, context: RewriteContext) -> bool:
        return (
            isinstance(node, Program)
            and node.syntax.typescript
            and not context.options.features.preserve_type_annotations
            and bool(self._collect(node, context))
        )

    def apply(self, node: Program, context: RewriteContext) -> RuleOutcome:
        edits = self._collect(node, context)
        return RuleOutcome.change(
            f"type annotations stripped ({len(edits)} construct(s))",
            *edits,
            consume_subtree=True,
        )

    def _collect(self, node: Program, context: RewriteContext) -> list[TextEdit]:
        edits: list[TextEdit] = []
        prune: set[int] = set()
        for current in walk_pruned(node, prune):
            span = current.span
            if current is not node and context.is_covered(span.start_byte, span.end_byte):
                prune.add(id(current))
                continue
            edit = self._edit_for(current, context)
            if edit is None:
                continue
            edits.append(edit)
            if not (isinstance(current, TypeSyntax) and current.role in ("assertion", "non_null")):
                prune.add(id(current))
        return edits

    def _edit_for(self, node: StructuralNode, context: RewriteContext) -> TextEdit | None:
        if isinstance(node, TypeSyntax):
            removal = node.removal_span
            if context.is_claimed(removal.start_byte, removal.end_byte):
                return None
            if node.role == "declaration":
                return delete(statement_removal(context.data, removal))
            return delete(removal)
        if isinstance(node, Import):
            if node.type_only or (
                node.bindings and all(binding.type_only for binding in node.bindings)
            ):
                return delete(statement_removal(context.data, node.span))
            if any(binding.type_only for binding in node.bindings):
                kept = [binding for binding in node.bindings if not binding.type_only]
                return replace(
                    node.span,
                    render_import(node.source_path, kept, node.quote, node.has_semicolon),
                )
        if isinstance(node, Export) and (
            node.type_only
            or (isinstance(node.declaration, TypeSyntax) and node.declaration.role == "declaration")
        ):
            return delete(statement_removal(context.data, node.span))
        return None
