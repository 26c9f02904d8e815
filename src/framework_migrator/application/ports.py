"""Application ports for clean architecture boundaries."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Protocol

from framework_migrator.analysis.facts import FrameworkMarkers, ModuleFactSheet
from framework_migrator.application.options import ConversionOptions, SourceFile
from framework_migrator.rewrite.base import PageRoute, RewriteRule, TransformResult
from framework_migrator.syntax.nodes import Program, SyntaxOptions
from framework_migrator.types import Strategy

if TYPE_CHECKING:
    from framework_migrator.profiles.base import MigrationProfile


class ModuleParser(Protocol):
    """Parse one module's source text into a structural tree."""

    def parse(self, source_text: str, filename: str, syntax: SyntaxOptions | None = None) -> Program:
        """Return the tree or raise ``ParseError``."""


class ModuleAnalyzer(Protocol):
    """Derive the read-only fact sheet of a parsed module."""

    def analyze(self, tree: Program, markers: FrameworkMarkers) -> ModuleFactSheet:
        """Never raises; returns the empty sheet on failure."""


class ModuleRewriter(Protocol):
    """Apply an explicit rule catalog to a parsed module."""

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
        """Return the re-emitted module."""


class ContentReader(Protocol):
    """Read input file content; the only suspending operation of a batch."""

    async def read(self, file: SourceFile) -> str:
        """Return the decoded text of ``file``."""


class ManifestPostProcessor(Protocol):
    """Update a dependency manifest for the target framework."""

    def run(
        self,
        manifest_text: str,
        profile: MigrationProfile,
        required_modules: Iterable[str],
        options: ConversionOptions,
    ) -> tuple[str, list[str]]:
        """Return the updated manifest text and one change line per edit."""


