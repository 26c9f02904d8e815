"""Single-pass structural analysis producing a ``ModuleFactSheet``."""

from __future__ import annotations

import logging

from framework_migrator.analysis.facts import (
    NEXTJS_MARKERS,
    FrameworkMarkers,
    ImportFact,
    ModuleFactSheet,
)
from framework_migrator.syntax.nodes import (
    Call,
    Export,
    FunctionDef,
    Identifier,
    Import,
    MarkupElement,
    MemberAccess,
    Program,
    Return,
    StructuralNode,
    VariableBinding,
    walk,
    walk_pruned,
)

logger = logging.getLogger(__name__)

HOOK_PREFIX = "use"


def is_hook_name(name: str | None) -> bool:
    """``use`` prefix followed by an uppercase fourth character."""
    return (
        name is not None
        and name.startswith(HOOK_PREFIX)
        and len(name) > len(HOOK_PREFIX)
        and name[len(HOOK_PREFIX)].isupper()
    )


def is_component_name(name: str | None) -> bool:
    return bool(name) and name[0].isupper()


def returns_markup(function: FunctionDef) -> bool:
    """True when a return in ``function`` (not in nested functions) holds markup."""
    if function.body is None:
        return False
    prune: set[int] = set()
    for node in walk_pruned(function.body, prune):
        if isinstance(node, FunctionDef):
            prune.add(id(node))
        elif isinstance(node, Return) and node.value is not None:
            if any(isinstance(inner, MarkupElement) for inner in walk(node.value)):
                return True
    return False


def _functions_in(value: StructuralNode | None) -> list[FunctionDef]:
    """Function values bound directly or through a wrapper call such as ``memo(...)``."""
    if isinstance(value, FunctionDef):
        return [value]
    if isinstance(value, Call):
        return [arg for arg in value.arguments if isinstance(arg, FunctionDef)]
    return []


def analyze(tree: Program, markers: FrameworkMarkers = NEXTJS_MARKERS) -> ModuleFactSheet:
    """Derive the fact sheet for one parsed module.

    Parameters
    ----------
    tree : Program
        Parsed module; never mutated.
    markers : FrameworkMarkers
        Source-framework name sets used for detection.

    Returns
    -------
    ModuleFactSheet
        Facts for the module, or the empty sheet if traversal fails.
    """
    try:
        return _analyze(tree, markers)
    except Exception:
        logger.exception("analysis of %s failed; using the empty fact sheet", tree.filename)
        return ModuleFactSheet.empty()


def _analyze(tree: Program, markers: FrameworkMarkers) -> ModuleFactSheet:
    imports: list[ImportFact] = []
    exports: set[str] = set()
    components: set[str] = set()
    hooks: set[str] = set()
    default_export_name: str | None = None
    hook_locals: set[str] = set()
    routing_bindings: set[str] = set()
    member_reads: list[tuple[str, str]] = []

    top_level = {id(node) for node in tree.body}
    for node in walk(tree):
        if isinstance(node, Import):
            imports.append(
                ImportFact(
                    source_path=node.source_path,
                    bound_names=tuple(binding.local for binding in node.bindings),
                    bindings=node.bindings,
                    type_only=node.type_only,
                )
            )
            if node.source_path in markers.routing_modules:
                hook_locals.update(
                    binding.local
                    for binding in node.bindings
                    if binding.imported in markers.routing_hooks
                )
        elif isinstance(node, Export) and id(node) in top_level:
            exports.update(node.names)
            if node.is_default:
                default_export_name = _default_export_name(node)
        elif isinstance(node, FunctionDef):
            if is_component_name(node.name) and returns_markup(node):
                components.add(node.name)
            if is_hook_name(node.name):
                hooks.add(node.name)
        elif isinstance(node, VariableBinding):
            if is_component_name(node.name) and any(
                returns_markup(fn) for fn in _functions_in(node.value)
            ):
                components.add(node.name)
            if is_hook_name(node.name) and _functions_in(node.value):
                hooks.add(node.name)
            if (
                node.name is not None
                and isinstance(node.value, Call)
                and isinstance(node.value.callee, Identifier)
                and node.value.callee.name in hook_locals
            ):
                routing_bindings.add(node.name)
        elif isinstance(node, MemberAccess) and isinstance(node.target, Identifier):
            member_reads.append((node.target.name, node.member))

    framework_paths = [
        fact.source_path for fact in imports if fact.source_path in markers.framework_paths
    ]
    data_fetching = tuple(
        name for name in sorted(exports) if name in markers.data_fetching_names
    )
    return ModuleFactSheet(
        imports=tuple(imports),
        exports=frozenset(exports),
        components=frozenset(components),
        hooks=frozenset(hooks),
        has_framework_a_imports=bool(framework_paths),
        has_data_fetching_export=bool(data_fetching),
        data_fetching_exports=data_fetching,
        routing_bindings=frozenset(routing_bindings),
        routing_members=frozenset(
            member for target, member in member_reads if target in routing_bindings
        ),
        default_export_name=default_export_name,
    )


def _default_export_name(node: Export) -> str | None:
    if isinstance(node.declaration, FunctionDef):
        return node.declaration.name
    if isinstance(node.value, FunctionDef):
        return node.value.name
    if isinstance(node.value, Identifier):
        return node.value.name
    return None
