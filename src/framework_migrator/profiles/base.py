"""Migration profile protocol and file classification kinds."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import Protocol, runtime_checkable

from framework_migrator.analysis.facts import FrameworkMarkers
from framework_migrator.rewrite.base import PageRoute, RewriteRule
from framework_migrator.types import Strategy


class FileKind(StrEnum):
    """Classification of one input file by path convention."""

    ASSET = "asset"
    PAGE = "page"
    APP_SHELL = "app_shell"
    DOCUMENT = "document"
    API_ROUTE = "api_route"
    MANIFEST = "manifest"
    STATIC = "static"
    MODULE = "module"

    @property
    def strategy(self) -> Strategy:
        if self is FileKind.PAGE:
            return "page"
        if self is FileKind.APP_SHELL:
            return "app_shell"
        return "module"


@runtime_checkable
class MigrationProfile(Protocol):
    """Protocol implemented by framework-pair migration profiles.

    Attributes
    ----------
    name : str
        Unique profile name.
    source_framework : str
        Framework the inputs are written against.
    target_framework : str
        Framework the outputs are written for.
    markers : FrameworkMarkers
        Source-framework name sets used by analysis.
    removed_dependencies : frozenset[str]
        Manifest packages that belong only to the source framework.
    dependency_versions : Mapping[str, str]
        Version ranges for target modules required by fired rules.
    runtime_dependencies : Mapping[str, str]
        Packages the target framework always needs at runtime.
    dev_dependencies : Mapping[str, str]
        Build tooling the target scripts rely on.
    scripts : Mapping[str, str]
        Manifest scripts replaced for the target toolchain.
    """

    name: str
    source_framework: str
    target_framework: str
    markers: FrameworkMarkers
    removed_dependencies: frozenset[str]
    dependency_versions: Mapping[str, str]
    runtime_dependencies: Mapping[str, str]
    dev_dependencies: Mapping[str, str]
    scripts: Mapping[str, str]

    def can_handle(self, source_framework: str, target_framework: str) -> bool:
        """Check whether the profile migrates between the given frameworks.

        Parameters
        ----------
        source_framework : str
            Framework of the input modules.
        target_framework : str
            Requested output framework.

        Returns
        -------
        bool
            ``True`` if this profile covers the pair.
        """

    def rules(self, strategy: Strategy) -> tuple[RewriteRule, ...]:
        """Return the ordered rule catalog for one entry path."""

    def classify(self, path: str) -> FileKind:
        """Classify a project-relative POSIX path."""

    def destination(self, path: str, kind: FileKind, strip_types: bool) -> str:
        """Return the project-relative output path for ``path``."""

    def page_route(self, path: str) -> PageRoute | None:
        """Return the route a page file contributes to the app shell."""
