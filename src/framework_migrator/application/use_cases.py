"""Application use-cases orchestrating migration workflows."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping, Sequence

from pydantic import ValidationError

from framework_migrator.adapters.engine import (
    CatalogRewriter,
    FactSheetAnalyzer,
    TreeSitterModuleParser,
)
from framework_migrator.analysis.facts import ModuleFactSheet
from framework_migrator.application.options import ConversionOptions, FeatureToggles, SourceFile
from framework_migrator.application.ports import (
    ContentReader,
    ManifestPostProcessor,
    ModuleAnalyzer,
    ModuleParser,
    ModuleRewriter,
)
from framework_migrator.application.results import BatchResult
from framework_migrator.converter.core import BatchOrchestrator
from framework_migrator.errors import MigrationError, ParseError
from framework_migrator.profiles.base import MigrationProfile
from framework_migrator.profiles.registry import ProfileRegistry, create_default_registry
from framework_migrator.rewrite.base import PageRoute, TransformResult
from framework_migrator.schemas import ConversionOptionsConfig, SourceFileConfig
from framework_migrator.types import Strategy

logger = logging.getLogger(__name__)

type FileInput = SourceFile | Mapping[str, object]


def build_conversion_options(
    *,
    source_framework: str = "nextjs",
    target_framework: str = "react",
    preserve_comments: bool = True,
    convert_routing: bool = True,
    convert_data_fetching: bool = True,
    convert_components: bool = True,
    update_dependencies: bool = True,
    preserve_type_annotations: bool = True,
    profile_name: str | None = None,
    profile_modules: Iterable[str] = (),
) -> ConversionOptions:
    """Use-case: validate and freeze conversion options."""
    try:
        config = ConversionOptionsConfig(
            source_framework=source_framework,
            target_framework=target_framework,
            preserve_comments=preserve_comments,
            convert_routing=convert_routing,
            convert_data_fetching=convert_data_fetching,
            convert_components=convert_components,
            update_dependencies=update_dependencies,
            preserve_type_annotations=preserve_type_annotations,
            profile_name=profile_name,
            profile_modules=tuple(profile_modules),
        )
    except ValidationError as exc:
        raise MigrationError(f"Invalid conversion options: {exc}") from exc

    return ConversionOptions(
        source_framework=config.source_framework,
        target_framework=config.target_framework,
        preserve_comments=config.preserve_comments,
        features=FeatureToggles(
            convert_routing=config.convert_routing,
            convert_data_fetching=config.convert_data_fetching,
            convert_components=config.convert_components,
            update_dependencies=config.update_dependencies,
            preserve_type_annotations=config.preserve_type_annotations,
        ),
        profile_name=config.profile_name,
        profile_modules=config.profile_modules,
    )


def resolve_profile(
    options: ConversionOptions,
    registry: ProfileRegistry | None = None,
) -> MigrationProfile:
    """Use-case: pick the profile for the options' framework pair."""
    registry = registry or create_default_registry(options.profile_modules)
    return registry.resolve(
        options.source_framework,
        options.target_framework,
        options.profile_name,
    )


def normalize_files(files: Iterable[FileInput]) -> list[SourceFile]:
    """Validate ``{path, content}`` inputs into ``SourceFile`` objects."""
    normalized = []
    for entry in files:
        payload = (
            {"path": entry.path, "content": entry.content}
            if isinstance(entry, SourceFile)
            else dict(entry)
        )
        try:
            config = SourceFileConfig(**payload)
        except ValidationError as exc:
            raise MigrationError(f"Invalid input file: {exc}") from exc
        normalized.append(SourceFile(path=config.path, content=config.content))
    return normalized


def transform_module(
    *,
    source_text: str,
    filename: str,
    options: ConversionOptions,
    strategy: Strategy = "module",
    pages: Iterable[PageRoute] = (),
    profile: MigrationProfile | None = None,
    parser: ModuleParser | None = None,
    analyzer: ModuleAnalyzer | None = None,
    rewriter: ModuleRewriter | None = None,
) -> TransformResult:
    """Use-case: rewrite one module in isolation.

    A module that fails to parse is returned verbatim with one warning.
    """
    profile = profile or resolve_profile(options)
    parser = parser or TreeSitterModuleParser()
    analyzer = analyzer or FactSheetAnalyzer()
    rewriter = rewriter or CatalogRewriter()

    try:
        tree = parser.parse(source_text, filename)
    except ParseError as exc:
        logger.warning("Parse failed for %s: %s", filename, exc.message)
        return TransformResult(
            code=source_text,
            warnings=(f"parse failed; module emitted unchanged ({exc.message})",),
        )
    facts = analyzer.analyze(tree, profile.markers)
    return rewriter.rewrite(
        tree,
        facts,
        options,
        profile.rules(strategy),
        markers=profile.markers,
        strategy=strategy,
        pages=pages,
    )


def analyze_module(
    *,
    source_text: str,
    filename: str = "module.tsx",
    options: ConversionOptions | None = None,
    profile: MigrationProfile | None = None,
    parser: ModuleParser | None = None,
    analyzer: ModuleAnalyzer | None = None,
) -> ModuleFactSheet:
    """Use-case: parse and inspect one module.

    Raises
    ------
    ParseError
        If the module cannot be parsed.
    """
    profile = profile or resolve_profile(options or ConversionOptions())
    parser = parser or TreeSitterModuleParser()
    analyzer = analyzer or FactSheetAnalyzer()
    return analyzer.analyze(parser.parse(source_text, filename), profile.markers)


async def convert_files_async(
    *,
    files: Iterable[FileInput],
    options: ConversionOptions,
    profile: MigrationProfile | None = None,
    reader: ContentReader | None = None,
    parser: ModuleParser | None = None,
    analyzer: ModuleAnalyzer | None = None,
    rewriter: ModuleRewriter | None = None,
    postprocessor: ManifestPostProcessor | None = None,
) -> BatchResult:
    """Use-case: convert a file set in batches of five."""
    sources: Sequence[SourceFile] = normalize_files(files)
    orchestrator = BatchOrchestrator(
        profile or resolve_profile(options),
        options,
        parser=parser,
        analyzer=analyzer,
        rewriter=rewriter,
        reader=reader,
        postprocessor=postprocessor,
    )
    result = await orchestrator.run(sources)
    logger.info(
        "Converted %d/%d file(s) (%d error(s))",
        result.modified_count,
        result.total_files,
        len(result.errors),
    )
    return result


def convert_files(
    *,
    files: Iterable[FileInput],
    options: ConversionOptions,
    profile: MigrationProfile | None = None,
    reader: ContentReader | None = None,
    parser: ModuleParser | None = None,
    analyzer: ModuleAnalyzer | None = None,
    rewriter: ModuleRewriter | None = None,
    postprocessor: ManifestPostProcessor | None = None,
) -> BatchResult:
    """Use-case: synchronous wrapper over ``convert_files_async``."""
    return asyncio.run(
        convert_files_async(
            files=files,
            options=options,
            profile=profile,
            reader=reader,
            parser=parser,
            analyzer=analyzer,
            rewriter=rewriter,
            postprocessor=postprocessor,
        )
    )
