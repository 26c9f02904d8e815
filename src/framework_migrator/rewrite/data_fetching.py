"""Export retargeting: data-fetching entry points and page props."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import ClassVar

from framework_migrator.rewrite.base import (
    ImportRequirement,
    RewriteContext,
    RuleCategory,
    RuleOutcome,
)
from framework_migrator.syntax.emitter import TextEdit, delete, insert
from framework_migrator.syntax.nodes import (
    Export,
    FunctionDef,
    Import,
    NodeKind,
    Other,
    SourceSpan,
    StructuralNode,
    VariableBinding,
)

QUERY_MODULE = "@tanstack/react-query"
QUERY_HOOK = "useQuery"

DATA_FETCHING_HOOKS: Mapping[str, str] = {
    "getServerSideProps": "useServerSideData",
    "getStaticProps": "useStaticData",
    "getStaticPaths": "useStaticPaths",
}

HOOK_TEMPLATE = """

export function {hook}(context = {{}}) {{
  return {query_hook}({{
    queryKey: [{quote}{loader}{quote}, context],
    queryFn: () => {loader}(context),
  }});
}}"""


def render_query_hook(hook: str, loader: str, quote: str = "'") -> str:
    """Generated hook wrapping ``loader`` in the caching-hook call pattern."""
    return HOOK_TEMPLATE.format(hook=hook, loader=loader, quote=quote, query_hook=QUERY_HOOK)


def _declared_loader(export: Export, names: Mapping[str, str]) -> str | None:
    declaration = export.declaration
    if isinstance(declaration, FunctionDef) and declaration.name in names:
        return declaration.name
    if isinstance(declaration, Other):
        bound = [
            node.name
            for node in declaration.nodes
            if isinstance(node, VariableBinding) and node.name in names
        ]
        if len(bound) == 1 and len(declaration.nodes) == 1:
            return bound[0]
    return None


@dataclass(frozen=True)
class DataFetchingExportRule:
    """Demote a data-fetching export to a local loader and add a query hook."""

    hooks: Mapping[str, str] = field(default_factory=lambda: DATA_FETCHING_HOOKS)
    feature: str | None = "convert_data_fetching"
    name: str = "data-fetching-export"

    category: ClassVar[RuleCategory] = RuleCategory.EXPORT
    node_kind: ClassVar[NodeKind] = NodeKind.EXPORT

    def matches(self, node: StructuralNode, context: RewriteContext) -> bool:
        return (
            isinstance(node, Export)
            and not node.is_default
            and _declared_loader(node, self.hooks) is not None
        )

    def apply(self, node: Export, context: RewriteContext) -> RuleOutcome:
        loader = _declared_loader(node, self.hooks)
        hook = self.hooks[loader]
        quote = next(
            (stmt.quote for stmt in context.program.body if isinstance(stmt, Import)),
            "'",
        )
        edits: list[TextEdit] = [
            delete(SourceSpan(node.span.start_byte, node.declaration.span.start_byte)),
            insert(node.span.end_byte, render_query_hook(hook, loader, quote)),
        ]
        return RuleOutcome.change(
            f"{loader} converted to {hook} hook",
            *edits,
            requirements=(ImportRequirement(QUERY_MODULE, QUERY_HOOK),),
        )


@dataclass(frozen=True)
class DataFetchingClauseRule:
    """``export { getStaticProps }`` forms cannot be demoted in place."""

    hooks: Mapping[str, str] = field(default_factory=lambda: DATA_FETCHING_HOOKS)
    feature: str | None = "convert_data_fetching"
    name: str = "data-fetching-clause"

    category: ClassVar[RuleCategory] = RuleCategory.EXPORT
    node_kind: ClassVar[NodeKind] = NodeKind.EXPORT

    def matches(self, node: StructuralNode, context: RewriteContext) -> bool:
        names = self.hooks
        return (
            isinstance(node, Export)
            and node.declaration is None
            and any(name in names for name in node.names)
        )

    def apply(self, node: Export, context: RewriteContext) -> RuleOutcome:
        names = self.hooks
        exported = ", ".join(name for name in node.names if name in names)
        return RuleOutcome.warning(
            f"re-exported data-fetching entry point {exported} left unchanged; "
            "convert it to a query hook manually"
        )


@dataclass(frozen=True)
class PagePropsRule:
    """Warn when the page component still expects props from a loader."""

    feature: str | None = "convert_data_fetching"
    name: str = "page-props"

    category: ClassVar[RuleCategory] = RuleCategory.EXPORT
    node_kind: ClassVar[NodeKind] = NodeKind.EXPORT

    def _page_function(self, node: Export, context: RewriteContext) -> FunctionDef | None:
        if isinstance(node.declaration, FunctionDef):
            return node.declaration
        if isinstance(node.value, FunctionDef):
            return node.value
        return context.top_level_function(context.facts.default_export_name)

    def matches(self, node: StructuralNode, context: RewriteContext) -> bool:
        if context.strategy != "page" or not isinstance(node, Export) or not node.is_default:
            return False
        if not context.facts.has_data_fetching_export:
            return False
        page = self._page_function(node, context)
        return page is not None and bool(page.parameters)

    def apply(self, node: Export, context: RewriteContext) -> RuleOutcome:
        page = self._page_function(node, context)
        hooks = ", ".join(
            f"{DATA_FETCHING_HOOKS[name]}()"
            for name in context.facts.data_fetching_exports
            if name in DATA_FETCHING_HOOKS
        )
        label = page.name or context.facts.default_export_name or "default export"
        return RuleOutcome.warning(
            f"page component '{label}' receives props from a data-fetching export; "
            f"read them from {hooks} instead"
        )
