"""Source-to-source migration of Next.js projects to React with react-router."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from framework_migrator.analysis.facts import ModuleFactSheet
    from framework_migrator.application.results import BatchResult, TransformResult

__version__ = "0.1.0"


def convert_directory(
    source_dir: Path,
    output_dir: Path | None = None,
    source_framework: str = "nextjs",
    target_framework: str = "react",
    profile_name: str | None = None,
    profile_modules: Iterable[str] = (),
    **flags: bool,
) -> BatchResult:
    """Convert a project directory, writing outputs when ``output_dir`` is set.

    Parameters
    ----------
    source_dir : Path
        Project root.
    output_dir : Path | None, default=None
        Output root; nothing is written when omitted.
    **flags : bool
        Feature toggles: ``preserve_comments``, ``convert_routing``,
        ``convert_data_fetching``, ``convert_components``,
        ``update_dependencies`` and ``preserve_type_annotations``.
    """
    from .api import convert_directory as _impl

    return _impl(
        source_dir=Path(source_dir),
        output_dir=Path(output_dir) if output_dir is not None else None,
        source_framework=source_framework,
        target_framework=target_framework,
        profile_name=profile_name,
        profile_modules=profile_modules,
        **flags,
    )


def convert_sources(sources: Mapping[str, str], **flags: bool | str) -> BatchResult:
    """Convert in-memory ``{path: content}`` sources."""
    from .api import convert_sources as _impl

    return _impl(sources, **flags)


def transform_source(source_text: str, filename: str, **flags: bool | str) -> TransformResult:
    """Rewrite one module and return code, changes and warnings."""
    from .api import transform_source as _impl

    return _impl(source_text, filename, **flags)


def analyze_source(source_text: str, filename: str = "module.tsx") -> ModuleFactSheet:
    """Return the read-only fact sheet of one module."""
    from .api import analyze_source as _impl

    return _impl(source_text, filename)


__all__ = [
    "analyze_source",
    "convert_directory",
    "convert_sources",
    "transform_source",
]
