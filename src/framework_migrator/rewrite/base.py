"""Rule descriptors, outcomes and the per-module rewrite context."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from framework_migrator.analysis.facts import FrameworkMarkers, ModuleFactSheet
from framework_migrator.syntax.emitter import TextEdit
from framework_migrator.syntax.nodes import (
    Export,
    FunctionDef,
    NodeKind,
    Other,
    Program,
    SourceSpan,
    StructuralNode,
    SyntaxOptions,
    VariableBinding,
    node_text,
)
from framework_migrator.types import Severity, Strategy

if TYPE_CHECKING:
    from framework_migrator.application.options import ConversionOptions


class RuleCategory(IntEnum):
    """Rule categories in application order."""

    IMPORT = 1
    MARKUP = 2
    CALL = 3
    EXPORT = 4
    TYPES = 5


@dataclass(frozen=True)
class ImportRequirement:
    """A binding some fired rule needs from ``module``.

    ``imported`` is ``"default"`` for a default import; ``local`` defaults
    to ``imported`` for named imports.
    """

    module: str
    imported: str
    local: str | None = None

    @property
    def local_name(self) -> str:
        return self.local or self.imported

    @property
    def key(self) -> tuple[str, str, str]:
        return self.module, self.imported, self.local_name


@dataclass(frozen=True)
class PageRoute:
    """One page known to the batch, used to build an app-shell route table."""

    path: str
    component: str
    module: str


@dataclass(frozen=True)
class RuleOutcome:
    """Everything one rule firing contributes.

    A firing carries exactly one message, so a change and a warning can
    never come from the same firing.
    """

    message: str
    severity: Severity = "change"
    edits: tuple[TextEdit, ...] = ()
    requirements: tuple[ImportRequirement, ...] = ()
    preamble: tuple[str, ...] = ()
    consume_subtree: bool = False

    @classmethod
    def change(cls, message: str, *edits: TextEdit, **extra: object) -> RuleOutcome:
        return cls(message=message, severity="change", edits=edits, **extra)

    @classmethod
    def warning(cls, message: str, *edits: TextEdit, **extra: object) -> RuleOutcome:
        return cls(message=message, severity="warning", edits=edits, **extra)


@dataclass(frozen=True)
class RewriteContext:
    """Read-only inputs shared by every rule during one module rewrite."""

    program: Program
    facts: ModuleFactSheet
    options: ConversionOptions
    markers: FrameworkMarkers
    strategy: Strategy = "module"
    pages: tuple[PageRoute, ...] = ()
    routing_hooks: frozenset[str] = frozenset()
    claimed: tuple[tuple[int, int], ...] = ()

    def text(self, node: StructuralNode | SourceSpan) -> str:
        return node_text(self.program, node)

    @property
    def data(self) -> bytes:
        return self.program.source_bytes

    def local_for(self, module: str, imported: str) -> str | None:
        fact = self.facts.imports_from(module)
        return fact.local_for(imported) if fact is not None else None

    def is_claimed(self, start: int, end: int) -> bool:
        """True when ``[start, end)`` overlaps a range already rewritten."""
        for claimed_start, claimed_end in self.claimed:
            if start < claimed_end and claimed_start < end:
                return True
            if start == end and claimed_start < start < claimed_end:
                return True
        return False

    def is_covered(self, start: int, end: int) -> bool:
        """True when ``[start, end)`` lies inside a range already rewritten."""
        return any(
            claimed_start <= start and end <= claimed_end and claimed_start < claimed_end
            for claimed_start, claimed_end in self.claimed
        )

    def top_level_function(self, name: str | None) -> FunctionDef | None:
        """Find a module-level function or function-valued binding by name."""
        if name is None:
            return None
        for statement in self.program.body:
            candidates = [statement]
            if isinstance(statement, Export) and statement.declaration is not None:
                candidates = [statement.declaration]
            for candidate in candidates:
                if isinstance(candidate, FunctionDef) and candidate.name == name:
                    return candidate
                if isinstance(candidate, Other):
                    for binding in candidate.nodes:
                        if (
                            isinstance(binding, VariableBinding)
                            and binding.name == name
                            and isinstance(binding.value, FunctionDef)
                        ):
                            return binding.value
        return None


@runtime_checkable
class RewriteRule(Protocol):
    """Stateless rewrite rule.

    Attributes
    ----------
    name : str
        Stable rule identifier.
    category : RuleCategory
        Walk in which the rule is consulted.
    node_kind : NodeKind
        Only nodes of this kind are offered to ``matches``.
    feature : str | None
        ``FeatureToggles`` attribute gating the rule, or ``None``.
    """

    name: str
    category: RuleCategory
    node_kind: NodeKind
    feature: str | None

    def matches(self, node: StructuralNode, context: RewriteContext) -> bool:
        """Return True when the rule applies to ``node``."""

    def apply(self, node: StructuralNode, context: RewriteContext) -> RuleOutcome:
        """Return the edits and message for ``node``."""


@dataclass(frozen=True)
class TransformResult:
    """Output of one module rewrite."""

    code: str
    changes: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    syntax: SyntaxOptions | None = None
    required_modules: tuple[str, ...] = ()
    modified: bool = False

    def to_dict(self) -> dict[str, object]:
        return {
            "code": self.code,
            "changes": list(self.changes),
            "warnings": list(self.warnings),
            "modified": self.modified,
            "required_modules": list(self.required_modules),
        }
