"""Category-ordered rule engine with two-phase emission.

Each category runs one read-only pre-order walk. Rules only collect byte
edits; all edits are applied together once every category and the import
injection step have run. Nodes inside a range an earlier firing already
rewrote are never offered to later rules.
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace

from framework_migrator.analysis.facts import NEXTJS_MARKERS, FrameworkMarkers, ModuleFactSheet
from framework_migrator.errors import EditConflictError, EmitError, RuleApplicationWarning
from framework_migrator.rewrite.base import (
    PageRoute,
    RewriteContext,
    RewriteRule,
    RuleCategory,
    RuleOutcome,
    TransformResult,
)
from framework_migrator.rewrite.imports import plan_import_injection, preamble_position
from framework_migrator.syntax.emitter import TextEdit, apply_edits, delete, insert, statement_removal
from framework_migrator.syntax.nodes import Comment, Program, SourceSpan, SyntaxOptions, walk, walk_pruned
from framework_migrator.types import Strategy
from framework_migrator.validate import validate_emitted_source

logger = logging.getLogger(__name__)

JAVASCRIPT_OUTPUT = SyntaxOptions(typescript=False, markup=True)


@dataclass(frozen=True)
class _Firing:
    rule: RewriteRule
    outcome: RuleOutcome


def active_rules(rules: Iterable[RewriteRule], options) -> list[RewriteRule]:
    """Rules whose feature toggle is enabled, in catalog order."""
    return [
        rule
        for rule in rules
        if rule.feature is None or getattr(options.features, rule.feature)
    ]


def collect_firings(
    context: RewriteContext,
    rules: Sequence[RewriteRule],
) -> tuple[list[_Firing], list[tuple[int, int]]]:
    """Run every category walk and return the firings plus rewritten ranges."""
    program = context.program
    firings: list[_Firing] = []
    claimed: list[tuple[int, int]] = []
    for category in RuleCategory:
        by_kind: dict[str, list[RewriteRule]] = {}
        for rule in rules:
            if rule.category == category:
                by_kind.setdefault(rule.node_kind, []).append(rule)
        if not by_kind:
            continue

        current = replace(context, claimed=tuple(claimed))
        prune: set[int] = set()
        for node in walk_pruned(program, prune):
            span = node.span
            if node is not program and current.is_covered(span.start_byte, span.end_byte):
                prune.add(id(node))
                continue
            for rule in by_kind.get(node.kind, ()):
                if not rule.matches(node, current):
                    continue
                outcome = rule.apply(node, current)
                firings.append(_Firing(rule, outcome))
                rewritten = [(edit.start, edit.end) for edit in outcome.edits if not edit.is_insertion]
                if rewritten:
                    claimed.extend(rewritten)
                    current = replace(current, claimed=tuple(claimed))
                if outcome.consume_subtree:
                    prune.add(id(node))
                break
    return firings, claimed


def _comment_removal(data: bytes, span: SourceSpan) -> SourceSpan:
    line_start = data.rfind(b"\n", 0, span.start_byte) + 1
    line_end = data.find(b"\n", span.end_byte)
    line_end = len(data) if line_end == -1 else line_end
    alone = not data[line_start : span.start_byte].strip() and not data[span.end_byte : line_end].strip()
    return statement_removal(data, span) if alone else span


def _emit(
    context: RewriteContext,
    rules: Sequence[RewriteRule],
    target: SyntaxOptions,
) -> TransformResult:
    program = context.program
    firings, claimed = collect_firings(context, rules)

    changes: list[str] = []
    notices: list[str] = []
    edits: list[TextEdit] = []
    requested = []
    preamble: list[str] = []
    for firing in firings:
        outcome = firing.outcome
        (changes if outcome.severity == "change" else notices).append(outcome.message)
        edits.extend(outcome.edits)
        from_rule = firing.rule.category != RuleCategory.IMPORT
        requested.extend((requirement, from_rule) for requirement in outcome.requirements)
        preamble.extend(line for line in outcome.preamble if line not in preamble)

    final = replace(context, claimed=tuple(claimed))
    import_edits, import_changes = plan_import_injection(final, requested)
    edits.extend(import_edits)
    changes.extend(import_changes)
    if preamble:
        edits.append(insert(preamble_position(final), "".join(f"{line}\n" for line in preamble)))

    if edits and not context.options.preserve_comments:
        final = replace(
            final,
            claimed=(*final.claimed, *((e.start, e.end) for e in import_edits if not e.is_insertion)),
        )
        for node in walk(program):
            if isinstance(node, Comment) and not final.is_claimed(
                node.span.start_byte, node.span.end_byte
            ):
                edits.append(delete(_comment_removal(context.data, node.span)))

    code = apply_edits(program.source_text, edits) if edits else program.source_text
    if code != program.source_text or target != program.syntax:
        validate_emitted_source(code, program.filename, target)
    required = tuple(
        dict.fromkeys(
            requirement.module
            for requirement, _ in requested
            if not requirement.module.startswith(".")
        )
    )
    return TransformResult(
        code=code,
        changes=tuple(changes),
        warnings=tuple(notices),
        syntax=target,
        required_modules=required,
        modified=code != program.source_text,
    )


def passthrough(program: Program, message: str) -> TransformResult:
    """Original text unchanged, with one warning explaining why."""
    return TransformResult(
        code=program.source_text,
        warnings=(message,),
        syntax=program.syntax,
        modified=False,
    )


def rewrite(
    tree: Program,
    facts: ModuleFactSheet,
    options,
    rules: Sequence[RewriteRule],
    *,
    markers: FrameworkMarkers = NEXTJS_MARKERS,
    strategy: Strategy = "module",
    pages: Iterable[PageRoute] = (),
) -> TransformResult:
    """Apply ``rules`` to one parsed module and re-emit its source.

    Parameters
    ----------
    tree : Program
        Parsed module.
    facts : ModuleFactSheet
        Facts derived from ``tree``.
    options : ConversionOptions
        Toggles selecting the active rule subset.
    rules : Sequence[RewriteRule]
        Ordered rule catalog; the engine holds no catalog of its own.
    markers : FrameworkMarkers
        Source-framework name sets.
    strategy : {"page", "app_shell", "module"}
        Entry path chosen by the orchestrator.
    pages : Iterable[PageRoute]
        Pages of the batch, used by the app-shell route table.

    Returns
    -------
    TransformResult
        Never raises for emission problems; on failure the original text
        is returned with a warning.
    """
    context = RewriteContext(
        program=tree,
        facts=facts,
        options=options,
        markers=markers,
        strategy=strategy,
        pages=tuple(pages),
        routing_hooks=facts.routing_hook_locals(markers),
    )
    active = active_rules(rules, options)
    strip = tree.syntax.typescript and not options.features.preserve_type_annotations
    target = JAVASCRIPT_OUTPUT if strip else tree.syntax

    try:
        result = _emit(context, active, target)
    except EditConflictError as exc:
        logger.warning("Conflicting rewrites in %s: %s", tree.filename, exc)
        result = passthrough(tree, f"conflicting rewrites; module emitted unchanged ({exc})")
    except EmitError as exc:
        if not strip:
            logger.warning("Emission failed for %s: %s", tree.filename, exc)
            result = passthrough(tree, f"emission failed; module emitted unchanged ({exc})")
        else:
            result = _retry_with_types(context, active, exc)

    for message in result.warnings:
        warnings.warn(f"{tree.filename}: {message}", RuleApplicationWarning, stacklevel=2)
    logger.debug(
        "Rewrote %s: %d change(s), %d warning(s)",
        tree.filename,
        len(result.changes),
        len(result.warnings),
    )
    return result


def _retry_with_types(
    context: RewriteContext,
    rules: Sequence[RewriteRule],
    error: EmitError,
) -> TransformResult:
    program = context.program
    kept = [rule for rule in rules if rule.category != RuleCategory.TYPES]
    notice = f"type annotations kept: output without them is not valid JavaScript ({error})"
    try:
        result = _emit(context, kept, program.syntax)
    except (EditConflictError, EmitError) as exc:
        logger.warning("Emission failed for %s: %s", program.filename, exc)
        return passthrough(program, f"emission failed; module emitted unchanged ({exc})")
    return replace(result, warnings=(*result.warnings, notice))
