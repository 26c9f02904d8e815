"""Application-layer use-cases and option objects."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from framework_migrator.application.options import ConversionOptions, FeatureToggles, SourceFile
from framework_migrator.application.results import (
    BatchError,
    BatchResult,
    ConvertedFile,
    TransformResult,
)

if TYPE_CHECKING:
    from framework_migrator.analysis.facts import ModuleFactSheet
    from framework_migrator.application.use_cases import FileInput
    from framework_migrator.types import Strategy


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
    """Build typed conversion options via lazy use-case import."""
    from framework_migrator.application.use_cases import build_conversion_options as _impl

    return _impl(
        source_framework=source_framework,
        target_framework=target_framework,
        preserve_comments=preserve_comments,
        convert_routing=convert_routing,
        convert_data_fetching=convert_data_fetching,
        convert_components=convert_components,
        update_dependencies=update_dependencies,
        preserve_type_annotations=preserve_type_annotations,
        profile_name=profile_name,
        profile_modules=profile_modules,
    )


def transform_module(
    *,
    source_text: str,
    filename: str,
    options: ConversionOptions,
    strategy: Strategy = "module",
) -> TransformResult:
    """Rewrite one module via lazy use-case import."""
    from framework_migrator.application.use_cases import transform_module as _impl

    return _impl(source_text=source_text, filename=filename, options=options, strategy=strategy)


def analyze_module(
    *,
    source_text: str,
    filename: str = "module.tsx",
    options: ConversionOptions | None = None,
) -> ModuleFactSheet:
    """Inspect one module via lazy use-case import."""
    from framework_migrator.application.use_cases import analyze_module as _impl

    return _impl(source_text=source_text, filename=filename, options=options)


def convert_files(
    *,
    files: Iterable[FileInput],
    options: ConversionOptions,
) -> BatchResult:
    """Convert a file set via lazy use-case import."""
    from framework_migrator.application.use_cases import convert_files as _impl

    return _impl(files=files, options=options)


async def convert_files_async(
    *,
    files: Iterable[FileInput],
    options: ConversionOptions,
) -> BatchResult:
    """Convert a file set from a running event loop via lazy use-case import."""
    from framework_migrator.application.use_cases import convert_files_async as _impl

    return await _impl(files=files, options=options)


__all__ = [
    "BatchError",
    "BatchResult",
    "ConversionOptions",
    "ConvertedFile",
    "FeatureToggles",
    "SourceFile",
    "TransformResult",
    "analyze_module",
    "build_conversion_options",
    "convert_files",
    "convert_files_async",
    "transform_module",
]
