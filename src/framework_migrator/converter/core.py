"""Batch orchestrator: classification, batched reads and per-file isolation."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from hashlib import sha256
from pathlib import PurePosixPath

from framework_migrator.adapters.engine import (
    CatalogRewriter,
    FactSheetAnalyzer,
    TreeSitterModuleParser,
)
from framework_migrator.application.options import ConversionOptions, SourceFile
from framework_migrator.application.ports import (
    ContentReader,
    ManifestPostProcessor,
    ModuleAnalyzer,
    ModuleParser,
    ModuleRewriter,
)
from framework_migrator.application.results import BatchError, BatchResult, ConvertedFile
from framework_migrator.errors import BatchFatalError, ManifestError, MigrationError, ParseError
from framework_migrator.infrastructure.filesystem import SourceReader
from framework_migrator.infrastructure.postprocessing import ManifestPostProcessorImpl
from framework_migrator.profiles.base import FileKind, MigrationProfile
from framework_migrator.rewrite.base import PageRoute
from framework_migrator.syntax.parser import TYPESCRIPT_SUFFIXES
from framework_migrator.types import ErrorSeverity

logger = logging.getLogger(__name__)

BATCH_SIZE = 5

PARSE_FAILED = "PARSE_FAILED"
READ_FAILED = "READ_FAILED"
FILE_TRANSFORM_FAILED = "FILE_TRANSFORM_FAILED"
DESTINATION_COLLISION = "DESTINATION_COLLISION"
FILE_SKIPPED = "FILE_SKIPPED"

TRANSFORMED_KINDS = frozenset({FileKind.PAGE, FileKind.APP_SHELL, FileKind.MODULE})
SKIPPED_KINDS = frozenset({FileKind.DOCUMENT, FileKind.API_ROUTE})


def digest_bytes(data: bytes) -> str:
    """Compute SHA-256 digest for byte payload."""
    return sha256(data).hexdigest()


def digest_text(text: str) -> str:
    return digest_bytes(text.encode("utf-8"))


def suffixed_destination(destination: str, counter: int) -> str:
    """``src/pages/Home.tsx`` with counter 2 gives ``src/pages/Home2.tsx``."""
    path = PurePosixPath(destination)
    return path.with_name(f"{path.stem}{counter}{path.suffix}").as_posix()


@dataclass(frozen=True)
class PlannedFile:
    """Classification and destination decided before any read."""

    index: int
    file: SourceFile
    kind: FileKind
    destination: str | None
    strip_types: bool = False
    collision: BatchError | None = None


@dataclass
class FileOutcome:
    """Result of one file task; merged on the control thread."""

    planned: PlannedFile
    output: ConvertedFile | None = None
    errors: list[BatchError] = field(default_factory=list)
    detail: str = ""
    required_modules: tuple[str, ...] = ()
    manifest_text: str | None = None


def _error(code: str, severity: ErrorSeverity, message: str, file: str) -> BatchError:
    return BatchError(code=code, severity=severity, message=message, file=file)


class BatchOrchestrator:
    """Convert a set of files for one profile in sequential batches.

    Parameters
    ----------
    profile : MigrationProfile
        Framework-pair profile: classification, destinations and rules.
    options : ConversionOptions
        Immutable options snapshot for the whole run.
    parser, analyzer, rewriter : optional
        Engine ports; default to the tree-sitter adapters.
    reader : ContentReader, optional
        Content source; defaults to in-memory content only.
    postprocessor : ManifestPostProcessor, optional
        Manifest updater used when ``update_dependencies`` is on.
    batch_size : int, default=5
        Files whose reads overlap.
    """

    def __init__(
        self,
        profile: MigrationProfile,
        options: ConversionOptions,
        *,
        parser: ModuleParser | None = None,
        analyzer: ModuleAnalyzer | None = None,
        rewriter: ModuleRewriter | None = None,
        reader: ContentReader | None = None,
        postprocessor: ManifestPostProcessor | None = None,
        batch_size: int = BATCH_SIZE,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        self.profile = profile
        self.options = options
        self.parser = parser or TreeSitterModuleParser()
        self.analyzer = analyzer or FactSheetAnalyzer()
        self.rewriter = rewriter or CatalogRewriter()
        self.reader = reader or SourceReader()
        self.postprocessor = postprocessor or ManifestPostProcessorImpl()
        self.batch_size = batch_size

    async def run(self, files: Sequence[SourceFile]) -> BatchResult:
        """Process ``files`` and aggregate the batch result.

        Raises
        ------
        BatchFatalError
            If a failure escapes the per-file boundary.
        """
        try:
            return await self._run(files)
        except BatchFatalError:
            raise
        except Exception as exc:
            logger.exception("Batch run aborted")
            raise BatchFatalError(f"Batch run aborted: {exc}") from exc

    async def _run(self, files: Sequence[SourceFile]) -> BatchResult:
        planned = self.plan(files)
        pages = self.page_routes(planned)
        outcomes: list[FileOutcome] = []
        total_batches = (len(planned) + self.batch_size - 1) // self.batch_size
        for number, start in enumerate(range(0, len(planned), self.batch_size), start=1):
            batch = planned[start : start + self.batch_size]
            logger.info("Processing batch %d/%d (%d file(s))", number, total_batches, len(batch))
            contents = await asyncio.gather(*(self._read(item) for item in batch))
            for item, (text, error) in zip(batch, contents, strict=True):
                outcomes.append(self._process(item, text, error, pages))

        required = tuple(
            dict.fromkeys(module for outcome in outcomes for module in outcome.required_modules)
        )
        for outcome in outcomes:
            if outcome.manifest_text is not None:
                self._finish_manifest(outcome, required)
        return self._aggregate(len(files), outcomes)

    def plan(self, files: Sequence[SourceFile]) -> list[PlannedFile]:
        """Classify every file and resolve destination collisions in input order.

        The later of two files mapping to the same destination gets a
        numeric suffix and a ``DESTINATION_COLLISION`` warning.
        """
        taken: dict[str, str] = {}
        planned = []
        for index, file in enumerate(files):
            kind = self.profile.classify(file.path)
            if kind is FileKind.ASSET or kind in SKIPPED_KINDS:
                planned.append(PlannedFile(index, file, kind, None))
                continue
            strip = (
                kind in TRANSFORMED_KINDS
                and not self.options.features.preserve_type_annotations
                and PurePosixPath(file.path).suffix in TYPESCRIPT_SUFFIXES
            )
            destination = self.profile.destination(file.path, kind, strip)
            collision = None
            if destination in taken:
                counter = 2
                while suffixed_destination(destination, counter) in taken:
                    counter += 1
                resolved = suffixed_destination(destination, counter)
                collision = _error(
                    DESTINATION_COLLISION,
                    "warning",
                    f"{destination} is already produced by {taken[destination]}; "
                    f"writing {resolved} instead",
                    file.path,
                )
                logger.warning("Destination collision: %s", collision.message)
                destination = resolved
            taken[destination] = file.path
            planned.append(PlannedFile(index, file, kind, destination, strip, collision))
        return planned

    def page_routes(self, planned: Sequence[PlannedFile]) -> tuple[PageRoute, ...]:
        """Routes for every page, named after its final destination."""
        routes = []
        for item in planned:
            if item.kind is not FileKind.PAGE:
                continue
            route = self.profile.page_route(item.file.path)
            if route is None:
                continue
            component = PurePosixPath(item.destination).stem
            routes.append(replace(route, component=component, module=f"./pages/{component}"))
        return tuple(routes)

    async def _read(self, item: PlannedFile) -> tuple[str | None, BatchError | None]:
        if item.kind is FileKind.ASSET or item.kind in SKIPPED_KINDS:
            return None, None
        try:
            return await self.reader.read(item.file), None
        except (OSError, UnicodeDecodeError, MigrationError) as exc:
            logger.warning("Could not read %s: %s", item.file.path, exc)
            return None, _error(READ_FAILED, "error", f"could not read file: {exc}", item.file.path)

    def _process(
        self,
        item: PlannedFile,
        text: str | None,
        read_error: BatchError | None,
        pages: tuple[PageRoute, ...],
    ) -> FileOutcome:
        path = item.file.path
        outcome = FileOutcome(planned=item)
        if item.collision is not None:
            outcome.errors.append(item.collision)
        if item.kind is FileKind.ASSET:
            outcome.detail = f"{path}: skipped binary asset"
            return outcome
        if item.kind in SKIPPED_KINDS:
            label = item.kind.value.replace("_", " ")
            message = f"{label} has no {self.profile.target_framework} equivalent; skipped"
            outcome.errors.append(_error(FILE_SKIPPED, "warning", message, path))
            outcome.detail = f"{path}: skipped ({item.kind.value})"
            return outcome
        if read_error is not None:
            outcome.errors.append(read_error)
            outcome.detail = f"{path}: read failed"
            return outcome

        if item.kind is FileKind.MANIFEST:
            outcome.manifest_text = text
            return outcome
        if item.kind is FileKind.STATIC:
            outcome.output = self._output(item, text, "static", item.destination)
            outcome.detail = f"{path} -> {item.destination}: copied"
            return outcome

        try:
            return self._transform(item, text, pages, outcome)
        except Exception as exc:
            logger.exception("Transformation failed for %s", path)
            outcome.errors.append(
                _error(FILE_TRANSFORM_FAILED, "error", f"transformation failed: {exc}", path)
            )
            outcome.output = self._output(
                item,
                text,
                item.kind.value,
                item.destination,
                warnings=(f"transformation failed; module emitted unchanged ({exc})",),
            )
            outcome.detail = f"{path} -> {item.destination}: failed, emitted unchanged"
            return outcome

    def _transform(
        self,
        item: PlannedFile,
        text: str,
        pages: tuple[PageRoute, ...],
        outcome: FileOutcome,
    ) -> FileOutcome:
        path = item.file.path
        try:
            tree = self.parser.parse(text, path)
        except ParseError as exc:
            logger.warning("Parse failed for %s: %s", path, exc.message)
            outcome.errors.append(_error(PARSE_FAILED, "error", exc.message, path))
            outcome.output = self._output(
                item,
                text,
                item.kind.value,
                self._unstripped(item),
                warnings=(f"parse failed; module emitted unchanged ({exc.message})",),
            )
            outcome.detail = f"{path} -> {outcome.output.destination_path}: parse failed"
            return outcome

        facts = self.analyzer.analyze(tree, self.profile.markers)
        result = self.rewriter.rewrite(
            tree,
            facts,
            self.options,
            self.profile.rules(item.kind.strategy),
            markers=self.profile.markers,
            strategy=item.kind.strategy,
            pages=pages if item.kind is FileKind.APP_SHELL else (),
        )
        destination = item.destination
        if item.strip_types and (result.syntax is None or result.syntax.typescript):
            destination = self._unstripped(item)
        outcome.output = self._output(
            item,
            result.code,
            item.kind.value,
            destination,
            modified=result.modified,
            changes=result.changes,
            warnings=result.warnings,
        )
        outcome.required_modules = result.required_modules
        outcome.detail = (
            f"{path} -> {destination}: {len(result.changes)} change(s), "
            f"{len(result.warnings)} warning(s)"
        )
        return outcome

    def _unstripped(self, item: PlannedFile) -> str:
        """Planned destination with the original suffix restored."""
        if not item.strip_types:
            return item.destination
        original = PurePosixPath(item.file.path).suffix
        return PurePosixPath(item.destination).with_suffix(original).as_posix()

    def _finish_manifest(self, outcome: FileOutcome, required: tuple[str, ...]) -> None:
        item = outcome.planned
        path = item.file.path
        text = outcome.manifest_text
        try:
            updated, changes = self.postprocessor.run(text, self.profile, required, self.options)
        except ManifestError as exc:
            logger.warning("Manifest update failed for %s: %s", path, exc)
            outcome.errors.append(_error(FILE_TRANSFORM_FAILED, "error", str(exc), path))
            updated, changes = text, []
        outcome.output = self._output(
            item,
            updated,
            "manifest",
            item.destination,
            modified=updated != text,
            changes=tuple(changes),
        )
        outcome.detail = f"{path} -> {item.destination}: {len(changes)} dependency change(s)"

    @staticmethod
    def _output(
        item: PlannedFile,
        content: str,
        kind: str,
        destination: str,
        *,
        modified: bool = False,
        changes: tuple[str, ...] = (),
        warnings: tuple[str, ...] = (),
    ) -> ConvertedFile:
        return ConvertedFile(
            source_path=item.file.path,
            destination_path=destination,
            content=content,
            sha256=digest_text(content),
            kind=kind,
            modified=modified,
            changes=changes,
            warnings=warnings,
        )

    @staticmethod
    def _aggregate(total_files: int, outcomes: Sequence[FileOutcome]) -> BatchResult:
        outputs = tuple(outcome.output for outcome in outcomes if outcome.output is not None)
        transformed = tuple(output.destination_path for output in outputs if output.modified)
        return BatchResult(
            transformed_files=transformed,
            modified_count=len(transformed),
            total_files=total_files,
            details=tuple(outcome.detail for outcome in outcomes if outcome.detail),
            errors=tuple(error for outcome in outcomes for error in outcome.errors),
            outputs=outputs,
        )
