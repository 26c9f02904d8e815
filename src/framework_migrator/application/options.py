"""Typed option objects shared across migration use-cases."""

from __future__ import annotations

from dataclasses import dataclass

from framework_migrator.types import FrameworkKind


@dataclass(frozen=True)
class FeatureToggles:
    """Rule-family toggles selecting the active catalog subset."""

    convert_routing: bool = True
    convert_data_fetching: bool = True
    convert_components: bool = True
    update_dependencies: bool = True
    preserve_type_annotations: bool = True


@dataclass(frozen=True)
class SourceFile:
    """One input file; ``content`` is read lazily when ``None``."""

    path: str
    content: str | bytes | None = None


@dataclass(frozen=True)
class ConversionOptions:
    """Immutable configuration snapshot passed through use-cases."""

    source_framework: FrameworkKind = "nextjs"
    target_framework: FrameworkKind = "react"
    preserve_comments: bool = True
    features: FeatureToggles = FeatureToggles()
    profile_name: str | None = None
    profile_modules: tuple[str, ...] = ()
