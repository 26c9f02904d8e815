"""Import retargeting rules and import injection."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import ClassVar

from framework_migrator.rewrite.base import (
    ImportRequirement,
    RewriteContext,
    RuleCategory,
    RuleOutcome,
)
from framework_migrator.syntax.emitter import TextEdit, delete, insert, replace, statement_removal
from framework_migrator.syntax.nodes import Import, ImportBinding, NodeKind, StructuralNode


@dataclass(frozen=True)
class ImportTarget:
    """Where one imported name lives in the target framework."""

    module: str
    imported: str
    local: str


@dataclass(frozen=True)
class ImportRetargetRule:
    """Replace an import of ``source`` by requirements on target modules.

    The original statement is deleted; the injection step renders the
    target imports once all categories have run. Bindings without a
    target entry are dropped with a warning.
    """

    source: str
    targets: Mapping[str, ImportTarget]
    feature: str | None = None
    name: str = "import-retarget"

    category: ClassVar[RuleCategory] = RuleCategory.IMPORT
    node_kind: ClassVar[NodeKind] = NodeKind.IMPORT

    def matches(self, node: StructuralNode, context: RewriteContext) -> bool:
        return isinstance(node, Import) and node.source_path == self.source and not node.type_only

    def apply(self, node: Import, context: RewriteContext) -> RuleOutcome:
        requirements: list[ImportRequirement] = []
        dropped: list[str] = []
        for binding in node.bindings:
            target = self.targets.get(binding.imported)
            if target is None or binding.type_only:
                dropped.append(binding.local)
                continue
            requirements.append(ImportRequirement(target.module, target.imported, target.local))

        modules = list(dict.fromkeys(requirement.module for requirement in requirements))
        destination = ", ".join(f"'{module}'" for module in modules) or "nothing"
        edit = delete(statement_removal(context.data, node.span))
        message = f"import from '{self.source}' retargeted to {destination}"
        if dropped:
            return RuleOutcome.warning(
                f"{message}; {', '.join(dropped)} has no equivalent and was dropped",
                edit,
                requirements=tuple(requirements),
                consume_subtree=True,
            )
        return RuleOutcome.change(
            message,
            edit,
            requirements=tuple(requirements),
            consume_subtree=True,
        )


@dataclass(frozen=True)
class UnmappedImportRule:
    """Warn about source-framework imports that no active rule retargets."""

    feature: str | None = None
    name: str = "import-unmapped"

    category: ClassVar[RuleCategory] = RuleCategory.IMPORT
    node_kind: ClassVar[NodeKind] = NodeKind.IMPORT

    def matches(self, node: StructuralNode, context: RewriteContext) -> bool:
        if not isinstance(node, Import) or node.source_path not in context.markers.framework_paths:
            return False
        # Type stripping deletes type-only imports.
        type_only = node.type_only or (
            bool(node.bindings) and all(binding.type_only for binding in node.bindings)
        )
        return not (type_only and not context.options.features.preserve_type_annotations)

    def apply(self, node: Import, context: RewriteContext) -> RuleOutcome:
        return RuleOutcome.warning(
            f"import from '{node.source_path}' has no "
            f"{context.options.target_framework} equivalent; left unchanged",
            consume_subtree=True,
        )


def render_import(
    module: str,
    bindings: Sequence[ImportBinding],
    quote: str = "'",
    semicolon: bool = True,
) -> str:
    """Render one import statement for ``module``."""
    end = ";" if semicolon else ""
    clause = render_clause(bindings)
    if not clause:
        return f"import {quote}{module}{quote}{end}"
    return f"import {clause} from {quote}{module}{quote}{end}"


def render_clause(bindings: Iterable[ImportBinding]) -> str:
    default: str | None = None
    namespace: str | None = None
    named: list[str] = []
    for binding in bindings:
        if binding.imported == "default":
            default = default or binding.local
        elif binding.imported == "*":
            namespace = namespace or binding.local
        else:
            spec = binding.imported
            if binding.local != binding.imported:
                spec = f"{binding.imported} as {binding.local}"
            named.append(f"type {spec}" if binding.type_only else spec)
    parts = [part for part in (default,) if part]
    if namespace:
        parts.append(f"* as {namespace}")
    elif named:
        parts.append("{ " + ", ".join(named) + " }")
    return ", ".join(parts)


@dataclass
class _ModulePlan:
    """Requirements of one module, keyed by ``(module, imported, local)``."""

    requirements: dict[tuple[str, str, str], ImportRequirement] = field(default_factory=dict)
    from_rules: set[tuple[str, str, str]] = field(default_factory=set)
    from_imports: set[tuple[str, str, str]] = field(default_factory=set)


def plan_import_injection(
    context: RewriteContext,
    requested: Iterable[tuple[ImportRequirement, bool]],
) -> tuple[list[TextEdit], list[str]]:
    """Render the imports that fired rules need but the module lacks.

    Parameters
    ----------
    context : RewriteContext
        Context whose ``claimed`` ranges cover every edit made so far.
    requested : Iterable[tuple[ImportRequirement, bool]]
        Requirements paired with whether a non-import rule asked for them.

    Returns
    -------
    tuple[list[TextEdit], list[str]]
        Edits to apply and one change message per module that gained
        bindings on behalf of a non-import rule.
    """
    plans: dict[str, _ModulePlan] = {}
    for requirement, from_rule in requested:
        plan = plans.setdefault(requirement.module, _ModulePlan())
        plan.requirements.setdefault(requirement.key, requirement)
        (plan.from_rules if from_rule else plan.from_imports).add(requirement.key)
    if not plans:
        return [], []

    existing = [node for node in context.program.body if isinstance(node, Import)]
    live = [node for node in existing if not context.is_claimed(node.span.start_byte, node.span.end_byte)]
    quote = existing[0].quote if existing else "'"
    semicolon = existing[0].has_semicolon if existing else True

    edits: list[TextEdit] = []
    changes: list[str] = []
    new_lines: list[str] = []
    for module, plan in plans.items():
        host = next(
            (
                node
                for node in live
                if node.source_path == module
                and not node.type_only
                and not any(binding.imported == "*" for binding in node.bindings)
            ),
            None,
        )
        present = {(b.imported, b.local) for b in host.bindings} if host is not None else set()
        missing = [
            r for r in plan.requirements.values() if (r.imported, r.local_name) not in present
        ]
        if not missing:
            continue
        added = [ImportBinding(r.imported, r.local_name) for r in missing]
        if host is not None:
            edits.append(
                replace(
                    host.span,
                    render_import(module, [*host.bindings, *added], host.quote, host.has_semicolon),
                )
            )
        else:
            new_lines.append(render_import(module, added, quote, semicolon))
        announced = [
            ImportBinding(r.imported, r.local_name) for r in missing
            if r.key in plan.from_rules and r.key not in plan.from_imports
        ]
        if announced:
            changes.append(f"added import {render_clause(announced)} from '{module}'")

    if new_lines:
        position = existing[0].span.start_byte if existing else 0
        edits.append(insert(position, "".join(f"{line}\n" for line in new_lines)))
    return edits, changes


def preamble_position(context: RewriteContext) -> int:
    """Offset of the line following the last top-level import."""
    imports = [node for node in context.program.body if isinstance(node, Import)]
    if not imports:
        return 0
    return statement_removal(context.data, imports[-1].span).end_byte
