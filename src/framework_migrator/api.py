"""Flat-keyword API over the migration use-cases."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path

from framework_migrator.analysis.facts import ModuleFactSheet
from framework_migrator.application.results import BatchResult, TransformResult
from framework_migrator.application.use_cases import (
    analyze_module,
    build_conversion_options,
    convert_files,
    transform_module,
)
from framework_migrator.infrastructure.filesystem import (
    SourceReader,
    collect_source_files,
    write_outputs,
)


def convert_directory(
    source_dir: Path,
    output_dir: Path | None = None,
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
) -> BatchResult:
    """Convert every file under ``source_dir``.

    Parameters
    ----------
    source_dir : Path
        Project root of the source-framework application.
    output_dir : Path | None
        Where converted files are written; nothing is written when omitted.
    source_framework, target_framework : str
        Framework pair selecting the migration profile.
    profile_name : str | None
        Explicit profile, bypassing framework-pair resolution.
    profile_modules : Iterable[str]
        Trusted modules registering extra profiles.

    Returns
    -------
    BatchResult
        Aggregated per-file outputs, metrics and collected errors.
    """
    options = build_conversion_options(
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
    result = convert_files(
        files=collect_source_files(source_dir),
        options=options,
        reader=SourceReader(source_dir),
    )
    if output_dir is not None:
        write_outputs(output_dir, result.outputs)
    return result


def convert_sources(
    sources: Mapping[str, str],
    source_framework: str = "nextjs",
    target_framework: str = "react",
    preserve_comments: bool = True,
    convert_routing: bool = True,
    convert_data_fetching: bool = True,
    convert_components: bool = True,
    update_dependencies: bool = True,
    preserve_type_annotations: bool = True,
) -> BatchResult:
    """Convert in-memory ``{path: content}`` sources."""
    options = build_conversion_options(
        source_framework=source_framework,
        target_framework=target_framework,
        preserve_comments=preserve_comments,
        convert_routing=convert_routing,
        convert_data_fetching=convert_data_fetching,
        convert_components=convert_components,
        update_dependencies=update_dependencies,
        preserve_type_annotations=preserve_type_annotations,
    )
    return convert_files(
        files=[{"path": path, "content": content} for path, content in sources.items()],
        options=options,
    )


def transform_source(
    source_text: str,
    filename: str,
    source_framework: str = "nextjs",
    target_framework: str = "react",
    preserve_comments: bool = True,
    convert_routing: bool = True,
    convert_data_fetching: bool = True,
    convert_components: bool = True,
    preserve_type_annotations: bool = True,
) -> TransformResult:
    """Rewrite a single module as a generic (non-page) module."""
    options = build_conversion_options(
        source_framework=source_framework,
        target_framework=target_framework,
        preserve_comments=preserve_comments,
        convert_routing=convert_routing,
        convert_data_fetching=convert_data_fetching,
        convert_components=convert_components,
        preserve_type_annotations=preserve_type_annotations,
    )
    return transform_module(source_text=source_text, filename=filename, options=options)


def analyze_source(source_text: str, filename: str = "module.tsx") -> ModuleFactSheet:
    """Return the fact sheet of one module."""
    return analyze_module(source_text=source_text, filename=filename)
