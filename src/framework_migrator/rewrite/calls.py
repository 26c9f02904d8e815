"""Member/call retargeting: routing hooks, router members and lazy loading."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from framework_migrator.rewrite.base import (
    ImportRequirement,
    RewriteContext,
    RuleCategory,
    RuleOutcome,
)
from framework_migrator.syntax.emitter import TextEdit, insert, replace
from framework_migrator.syntax.nodes import (
    Call,
    Comment,
    Identifier,
    MemberAccess,
    NodeKind,
    SourceSpan,
    StructuralNode,
    VariableBinding,
)

ROUTER_MODULE = "react-router-dom"

# Router members and the hook binding each one needs in the target.
MEMBER_HOOKS = {
    "query": ("params", "useParams"),
    "pathname": ("location", "useLocation"),
    "asPath": ("location", "useLocation"),
}
MEMBER_EXPRESSIONS = {
    "query": "params",
    "pathname": "location.pathname",
    "asPath": "location.pathname",
    "push": "navigate",
}
CALL_SHAPES = frozenset({"push", "replace", "back"})


def real_arguments(call: Call) -> list[StructuralNode]:
    return [argument for argument in call.arguments if not isinstance(argument, Comment)]


def _routing_hook_call(value: StructuralNode | None, context: RewriteContext) -> bool:
    return (
        isinstance(value, Call)
        and isinstance(value.callee, Identifier)
        and value.callee.name in context.routing_hooks
    )


def _router_member(node: StructuralNode, context: RewriteContext) -> bool:
    return (
        isinstance(node, MemberAccess)
        and isinstance(node.target, Identifier)
        and node.target.name in context.facts.routing_bindings
    )


@dataclass(frozen=True)
class RouterBindingRule:
    """``const router = useRouter()`` becomes the target hook bindings."""

    feature: str | None = "convert_routing"
    name: str = "routing-binding"

    category: ClassVar[RuleCategory] = RuleCategory.CALL
    node_kind: ClassVar[NodeKind] = NodeKind.VARIABLE_BINDING

    def matches(self, node: StructuralNode, context: RewriteContext) -> bool:
        return (
            isinstance(node, VariableBinding)
            and node.name is not None
            and _routing_hook_call(node.value, context)
        )

    def apply(self, node: VariableBinding, context: RewriteContext) -> RuleOutcome:
        declarators = ["navigate = useNavigate()"]
        requirements = [ImportRequirement(ROUTER_MODULE, "useNavigate")]
        seen = set()
        for member in sorted(context.facts.routing_members):
            binding = MEMBER_HOOKS.get(member)
            if binding is None or binding in seen:
                continue
            seen.add(binding)
            local, hook = binding
            declarators.append(f"{local} = {hook}()")
            requirements.append(ImportRequirement(ROUTER_MODULE, hook))
        message = (
            f"{node.value.callee.name}() binding '{node.name}' retargeted to "
            f"{ROUTER_MODULE} hooks"
        )
        if node.type_annotation is not None:
            message += "; its type annotation was dropped"
        return RuleOutcome.change(
            message,
            replace(node.span, ", ".join(declarators)),
            requirements=tuple(requirements),
            consume_subtree=True,
        )


@dataclass(frozen=True)
class DestructuredRouterRule:
    """Destructured hook results have no one-to-one target shape."""

    target_hook: str = "useNavigate"
    target_module: str = ROUTER_MODULE
    feature: str | None = "convert_routing"
    name: str = "routing-destructured"

    category: ClassVar[RuleCategory] = RuleCategory.CALL
    node_kind: ClassVar[NodeKind] = NodeKind.VARIABLE_BINDING

    def matches(self, node: StructuralNode, context: RewriteContext) -> bool:
        return (
            isinstance(node, VariableBinding)
            and node.name is None
            and _routing_hook_call(node.value, context)
        )

    def apply(self, node: VariableBinding, context: RewriteContext) -> RuleOutcome:
        callee = node.value.callee
        return RuleOutcome.warning(
            f"destructured {callee.name}() result needs manual migration; "
            f"call retargeted to {self.target_hook}()",
            replace(callee.span, self.target_hook),
            requirements=(ImportRequirement(self.target_module, self.target_hook),),
            consume_subtree=True,
        )


@dataclass(frozen=True)
class HookCallRule:
    """A bare routing-hook call is retargeted to the target hook."""

    target_hook: str = "useNavigate"
    target_module: str = ROUTER_MODULE
    feature: str | None = "convert_routing"
    name: str = "routing-hook-call"

    category: ClassVar[RuleCategory] = RuleCategory.CALL
    node_kind: ClassVar[NodeKind] = NodeKind.CALL

    def matches(self, node: StructuralNode, context: RewriteContext) -> bool:
        return _routing_hook_call(node, context)

    def apply(self, node: Call, context: RewriteContext) -> RuleOutcome:
        return RuleOutcome.change(
            f"{node.callee.name}() call retargeted to {self.target_hook}()",
            replace(node.callee.span, self.target_hook),
            requirements=(ImportRequirement(self.target_module, self.target_hook),),
        )


@dataclass(frozen=True)
class RouterCallRule:
    """``router.push/replace/back(...)`` become ``navigate(...)`` calls."""

    feature: str | None = "convert_routing"
    name: str = "routing-call"

    category: ClassVar[RuleCategory] = RuleCategory.CALL
    node_kind: ClassVar[NodeKind] = NodeKind.CALL

    def matches(self, node: StructuralNode, context: RewriteContext) -> bool:
        return (
            isinstance(node, Call)
            and _router_member(node.callee, context)
            and node.callee.member in CALL_SHAPES
        )

    def apply(self, node: Call, context: RewriteContext) -> RuleOutcome:
        callee: MemberAccess = node.callee
        router = callee.target.name
        edits: list[TextEdit] = [replace(callee.span, "navigate")]
        arguments = real_arguments(node)
        closing = node.arguments_span.end_byte - 1
        if callee.member == "replace" and arguments:
            edits.append(insert(arguments[-1].span.end_byte, ", { replace: true }"))
        elif callee.member == "back":
            edits.append(
                replace(SourceSpan(node.arguments_span.start_byte + 1, closing), "-1")
            )
        return RuleOutcome.change(
            f"{router}.{callee.member} transformed to navigate",
            *edits,
            requirements=(ImportRequirement(ROUTER_MODULE, "useNavigate"),),
        )


@dataclass(frozen=True)
class RouterMemberRule:
    """Router member reads map to one fixed target expression each."""

    feature: str | None = "convert_routing"
    name: str = "routing-member"

    category: ClassVar[RuleCategory] = RuleCategory.CALL
    node_kind: ClassVar[NodeKind] = NodeKind.MEMBER_ACCESS

    def matches(self, node: StructuralNode, context: RewriteContext) -> bool:
        if not _router_member(node, context):
            return False
        return not (node.is_callee and node.member in CALL_SHAPES)

    def apply(self, node: MemberAccess, context: RewriteContext) -> RuleOutcome:
        router = node.target.name
        expression = None if node.is_callee else MEMBER_EXPRESSIONS.get(node.member)
        if expression is None:
            return RuleOutcome.warning(
                f"{router}.{node.member} has no {ROUTER_MODULE} equivalent; left unchanged",
                consume_subtree=True,
            )
        return RuleOutcome.change(
            f"{router}.{node.member} transformed to {expression}",
            replace(node.span, expression),
            consume_subtree=True,
        )


@dataclass(frozen=True)
class RouterReferenceRule:
    """A router object used as a plain value cannot be retargeted."""

    feature: str | None = "convert_routing"
    name: str = "routing-reference"

    category: ClassVar[RuleCategory] = RuleCategory.CALL
    node_kind: ClassVar[NodeKind] = NodeKind.IDENTIFIER

    def matches(self, node: StructuralNode, context: RewriteContext) -> bool:
        return isinstance(node, Identifier) and node.name in context.facts.routing_bindings

    def apply(self, node: Identifier, context: RewriteContext) -> RuleOutcome:
        return RuleOutcome.warning(
            f"router object '{node.name}' used directly at line {node.span.line}; "
            "review manually"
        )


@dataclass(frozen=True)
class NavigateCallRule:
    """``navigate(path)`` becomes ``navigate.push(path)`` on a router object."""

    feature: str | None = "convert_routing"
    name: str = "routing-navigate-call"

    category: ClassVar[RuleCategory] = RuleCategory.CALL
    node_kind: ClassVar[NodeKind] = NodeKind.CALL

    def matches(self, node: StructuralNode, context: RewriteContext) -> bool:
        return (
            isinstance(node, Call)
            and isinstance(node.callee, Identifier)
            and node.callee.name in context.facts.routing_bindings
        )

    def apply(self, node: Call, context: RewriteContext) -> RuleOutcome:
        name = node.callee.name
        arguments = real_arguments(node)
        if len(arguments) == 1 and context.text(arguments[0]).strip() == "-1":
            return RuleOutcome.change(
                f"{name}(-1) transformed to {name}.back()",
                replace(SourceSpan(node.callee.span.start_byte, node.span.end_byte), f"{name}.back()"),
                consume_subtree=True,
            )
        return RuleOutcome.change(
            f"{name}() call transformed to {name}.push()",
            replace(node.callee.span, f"{name}.push"),
        )


@dataclass(frozen=True)
class LazyLoadRule:
    """``dynamic(loader[, options])`` becomes ``lazy(loader)``."""

    module: str = "next/dynamic"
    target_module: str = "react"
    feature: str | None = "convert_components"
    name: str = "lazy-loading"

    category: ClassVar[RuleCategory] = RuleCategory.CALL
    node_kind: ClassVar[NodeKind] = NodeKind.CALL

    def matches(self, node: StructuralNode, context: RewriteContext) -> bool:
        local = context.local_for(self.module, "default")
        return (
            local is not None
            and isinstance(node, Call)
            and isinstance(node.callee, Identifier)
            and node.callee.name == local
        )

    def apply(self, node: Call, context: RewriteContext) -> RuleOutcome:
        edits = [replace(node.callee.span, "lazy")]
        requirements = (ImportRequirement(self.target_module, "lazy"),)
        arguments = real_arguments(node)
        if len(arguments) > 1:
            edits.append(
                replace(SourceSpan(arguments[0].span.end_byte, arguments[-1].span.end_byte), "")
            )
            return RuleOutcome.warning(
                f"{node.callee.name}() options dropped: lazy() accepts a loader only",
                *edits,
                requirements=requirements,
                consume_subtree=True,
            )
        return RuleOutcome.change(
            f"{node.callee.name}() converted to lazy()",
            *edits,
            requirements=requirements,
        )
