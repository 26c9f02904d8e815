"""App-shell strategy: route table, provider wrappers and the ``App`` root."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from framework_migrator.rewrite.base import (
    ImportRequirement,
    PageRoute,
    RewriteContext,
    RuleCategory,
    RuleOutcome,
)
from framework_migrator.rewrite.data_fetching import QUERY_MODULE
from framework_migrator.syntax.emitter import TextEdit, insert, replace
from framework_migrator.syntax.nodes import (
    Export,
    FunctionDef,
    MarkupElement,
    NodeKind,
    Other,
    Return,
    StructuralNode,
    walk_pruned,
)

ROUTER_MODULE = "react-router-dom"
HELMET_MODULE = "react-helmet-async"
PAGE_COMPONENT_TAG = "Component"
ROOT_NAME = "App"
QUERY_CLIENT_DECLARATION = "const queryClient = new QueryClient();"
# Names the app shell declares or imports; page components must not reuse them.
SHELL_NAMES = frozenset(
    {
        ROOT_NAME,
        "Routes",
        "Route",
        "BrowserRouter",
        "HelmetProvider",
        "QueryClient",
        "QueryClientProvider",
    }
)


def render_routes(pages: tuple[PageRoute, ...]) -> str:
    routes = "".join(
        f'<Route path="{page.path}" element={{<{page.component} />}} />' for page in pages
    )
    return f"<Routes>{routes}</Routes>"


def _root_function(node: StructuralNode, context: RewriteContext) -> FunctionDef | None:
    if isinstance(node, Export) and node.is_default:
        if isinstance(node.declaration, FunctionDef):
            return node.declaration
        if isinstance(node.value, FunctionDef):
            return node.value
    return None


def _markup_return(function: FunctionDef) -> StructuralNode | None:
    """Value of the first return holding markup, unwrapped from parentheses."""
    if function.body is None:
        return None
    prune: set[int] = set()
    for node in walk_pruned(function.body, prune):
        if isinstance(node, FunctionDef):
            prune.add(id(node))
        elif isinstance(node, Return) and node.value is not None:
            value = node.value
            while isinstance(value, Other) and value.cst_type == "parenthesized_expression":
                value = value.nodes[0]
            if isinstance(value, MarkupElement):
                return value
    return None


@dataclass(frozen=True)
class RouteTableRule:
    """The framework's page ``<Component />`` slot becomes a ``<Routes>`` table."""

    feature: str | None = None
    name: str = "app-shell-routes"

    category: ClassVar[RuleCategory] = RuleCategory.CALL
    node_kind: ClassVar[NodeKind] = NodeKind.MARKUP_ELEMENT

    def matches(self, node: StructuralNode, context: RewriteContext) -> bool:
        return (
            context.strategy == "app_shell"
            and isinstance(node, MarkupElement)
            and node.tag == PAGE_COMPONENT_TAG
        )

    def apply(self, node: MarkupElement, context: RewriteContext) -> RuleOutcome:
        requirements = [
            ImportRequirement(ROUTER_MODULE, "Routes"),
            ImportRequirement(ROUTER_MODULE, "Route"),
        ]
        requirements.extend(
            ImportRequirement(page.module, "default", page.component) for page in context.pages
        )
        return RuleOutcome.change(
            f"<{node.tag}> replaced by <Routes> with {len(context.pages)} route(s)",
            replace(node.span, render_routes(context.pages)),
            requirements=tuple(requirements),
            consume_subtree=True,
        )


@dataclass(frozen=True)
class AppRootRule:
    """Rename the default-exported root to ``App`` and wrap it in providers."""

    feature: str | None = None
    name: str = "app-shell-root"

    category: ClassVar[RuleCategory] = RuleCategory.CALL
    node_kind: ClassVar[NodeKind] = NodeKind.EXPORT

    def matches(self, node: StructuralNode, context: RewriteContext) -> bool:
        if context.strategy != "app_shell":
            return False
        root = _root_function(node, context)
        return root is not None and _markup_return(root) is not None

    def _providers(self, context: RewriteContext) -> list[tuple[str, str, ImportRequirement]]:
        features = context.options.features
        providers = []
        if features.convert_data_fetching:
            providers.append(
                (
                    "QueryClientProvider client={queryClient}",
                    "QueryClientProvider",
                    ImportRequirement(QUERY_MODULE, "QueryClientProvider"),
                )
            )
        if features.convert_components:
            providers.append(
                ("HelmetProvider", "HelmetProvider", ImportRequirement(HELMET_MODULE, "HelmetProvider"))
            )
        providers.append(
            ("BrowserRouter", "BrowserRouter", ImportRequirement(ROUTER_MODULE, "BrowserRouter"))
        )
        return providers

    def apply(self, node: Export, context: RewriteContext) -> RuleOutcome:
        root = _root_function(node, context)
        value = _markup_return(root)
        providers = self._providers(context)
        opening = "".join(f"<{tag}>" for tag, _, _ in providers)
        closing = "".join(f"</{name}>" for _, name, _ in reversed(providers))
        edits: list[TextEdit] = [
            insert(value.span.start_byte, opening),
            insert(value.span.end_byte, closing),
        ]
        if root.name_span is not None and root.name != ROOT_NAME:
            edits.append(replace(root.name_span, ROOT_NAME))
        if root.parameters and root.parameters_span is not None:
            edits.append(replace(root.parameters_span, "()"))

        requirements = [requirement for _, _, requirement in providers]
        preamble: tuple[str, ...] = ()
        if context.options.features.convert_data_fetching:
            requirements.append(ImportRequirement(QUERY_MODULE, "QueryClient"))
            preamble = (QUERY_CLIENT_DECLARATION,)
        wrappers = ", ".join(name for _, name, _ in providers)
        return RuleOutcome.warning(
            f"root component '{root.name or 'default export'}' renamed to {ROOT_NAME} "
            f"and wrapped in {wrappers}; page props are no longer passed",
            *edits,
            requirements=tuple(requirements),
            preamble=preamble,
        )
