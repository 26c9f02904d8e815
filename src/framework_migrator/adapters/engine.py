"""Default parser, analyzer and rewriter adapters."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from framework_migrator.analysis.analyzer import analyze
from framework_migrator.analysis.facts import FrameworkMarkers, ModuleFactSheet
from framework_migrator.application.options import ConversionOptions
from framework_migrator.rewrite.base import PageRoute, RewriteRule, TransformResult
from framework_migrator.rewrite.rewriter import rewrite
from framework_migrator.syntax.nodes import Program, SyntaxOptions
from framework_migrator.syntax.parser import parse_module
from framework_migrator.types import Strategy


class TreeSitterModuleParser:
    """Parse modules with the tree-sitter JavaScript/TypeScript grammars."""

    def parse(self, source_text: str, filename: str, syntax: SyntaxOptions | None = None) -> Program:
        """Parse ``source_text``; raises ``ParseError`` on malformed input.

        Parameters
        ----------
        source_text : str
            Module source.
        filename : str
            Module name, used for grammar selection and error messages.
        syntax : SyntaxOptions | None
            Explicit dialect; derived from ``filename`` when omitted.

        Returns
        -------
        Program
            Structural tree of the module.
        """
        return parse_module(source_text, filename, syntax)


class FactSheetAnalyzer:
    """Single-walk analyzer producing ``ModuleFactSheet`` objects."""

    def analyze(self, tree: Program, markers: FrameworkMarkers) -> ModuleFactSheet:
        return analyze(tree, markers)


class CatalogRewriter:
    """Apply an injected rule catalog with two-phase emission."""

    def rewrite(
        self,
        tree: Program,
        facts: ModuleFactSheet,
        options: ConversionOptions,
        rules: Sequence[RewriteRule],
        *,
        markers: FrameworkMarkers,
        strategy: Strategy,
        pages: Iterable[PageRoute],
    ) -> TransformResult:
        return rewrite(
            tree,
            facts,
            options,
            rules,
            markers=markers,
            strategy=strategy,
            pages=pages,
        )
