"""Built-in migration profiles."""

from __future__ import annotations

import re
from collections.abc import Mapping
from pathlib import PurePosixPath
from types import MappingProxyType

from framework_migrator.analysis.facts import NEXTJS_MARKERS, REACT_ROUTER_MARKERS
from framework_migrator.profiles.base import FileKind
from framework_migrator.rewrite.app_shell import SHELL_NAMES, AppRootRule, RouteTableRule
from framework_migrator.rewrite.base import PageRoute, RewriteRule
from framework_migrator.rewrite.calls import (
    DestructuredRouterRule,
    HookCallRule,
    LazyLoadRule,
    NavigateCallRule,
    RouterBindingRule,
    RouterCallRule,
    RouterMemberRule,
    RouterReferenceRule,
)
from framework_migrator.rewrite.data_fetching import (
    DataFetchingClauseRule,
    DataFetchingExportRule,
    PagePropsRule,
)
from framework_migrator.rewrite.imports import ImportRetargetRule, ImportTarget, UnmappedImportRule
from framework_migrator.rewrite.markup import ElementSpec, element_rules
from framework_migrator.rewrite.typestrip import StripTypesRule
from framework_migrator.syntax.parser import SOURCE_SUFFIXES
from framework_migrator.types import Strategy

# Binary files are never read, only counted.
ASSET_SUFFIXES = frozenset(
    {
        ".jpg",
        ".jpeg",
        ".png",
        ".gif",
        ".svg",
        ".webp",
        ".ico",
        ".mp4",
        ".mp3",
        ".pdf",
        ".woff",
        ".woff2",
        ".ttf",
    }
)
MANIFEST_NAME = "package.json"
STRIPPED_SUFFIXES = {".tsx": ".jsx", ".ts": ".js", ".mts": ".mjs", ".cts": ".cjs"}

_WORD = re.compile(r"[A-Za-z0-9]+")


def component_name(stem: str) -> str:
    """Component identifier for a page file stem.

    ``about`` gives ``About``, ``[slug]`` gives ``Slug`` and
    ``blog-post`` gives ``BlogPost``.
    """
    words = _WORD.findall(stem)
    name = "".join(word[0].upper() + word[1:] for word in words)
    if not name:
        return "Page"
    return f"Page{name}" if name[0].isdigit() else name


def output_suffix(suffix: str, strip_types: bool) -> str:
    return STRIPPED_SUFFIXES.get(suffix, suffix) if strip_types else suffix


def _pages_index(parts: tuple[str, ...]) -> int | None:
    """Index of the ``pages`` directory in ``pages/...`` or ``src/pages/...``."""
    if len(parts) > 1 and parts[0] == "pages":
        return 0
    if len(parts) > 2 and parts[0] == "src" and parts[1] == "pages":
        return 1
    return None


def _classify_common(path: PurePosixPath) -> FileKind | None:
    suffix = path.suffix.lower()
    if suffix in ASSET_SUFFIXES:
        return FileKind.ASSET
    if path.name == MANIFEST_NAME:
        return FileKind.MANIFEST
    if suffix not in SOURCE_SUFFIXES:
        return FileKind.STATIC
    return None


class NextToReactProfile:
    """Migrate a Next.js pages-router project to React with react-router.

    Notes
    -----
    Files under ``pages/`` become route components under ``src/pages/``,
    ``_app`` becomes the ``src/App`` shell and every other file is moved
    under ``src/``.
    """

    name = "nextjs-to-react"
    source_framework = "nextjs"
    target_framework = "react"
    markers = NEXTJS_MARKERS
    removed_dependencies = frozenset({"next", "eslint-config-next", "@next/font"})
    dependency_versions: Mapping[str, str] = MappingProxyType(
        {
            "react": "^18.2.0",
            "react-router-dom": "^6.22.0",
            "@tanstack/react-query": "^5.28.0",
            "react-helmet-async": "^2.0.4",
            "react-image": "^4.1.0",
        }
    )
    runtime_dependencies: Mapping[str, str] = MappingProxyType(
        {"react": "^18.2.0", "react-dom": "^18.2.0"}
    )
    dev_dependencies: Mapping[str, str] = MappingProxyType(
        {"vite": "^5.2.0", "@vitejs/plugin-react": "^4.2.1"}
    )
    scripts: Mapping[str, str] = MappingProxyType(
        {"dev": "vite", "build": "vite build", "start": "vite preview"}
    )

    image = ElementSpec(
        module="next/image",
        imported="default",
        label="Image",
        target_tag="Img",
        target_module="react-image",
        dropped=frozenset(
            {
                "priority",
                "placeholder",
                "blurDataURL",
                "quality",
                "fill",
                "loader",
                "unoptimized",
                "layout",
                "objectFit",
                "objectPosition",
            }
        ),
        default_attribute=("loading", '"lazy"'),
        default_unless=frozenset({"priority"}),
    )
    link = ElementSpec(
        module="next/link",
        imported="default",
        label="Link",
        target_tag="Link",
        target_module="react-router-dom",
        dropped=frozenset({"passHref", "prefetch", "legacyBehavior", "shallow", "scroll", "locale"}),
        renamed=MappingProxyType({"href": "to"}),
    )
    head = ElementSpec(
        module="next/head",
        imported="default",
        label="Head",
        target_tag="Helmet",
        target_module="react-helmet-async",
    )

    def can_handle(self, source_framework: str, target_framework: str) -> bool:
        return source_framework == self.source_framework and target_framework == self.target_framework

    def rules(self, strategy: Strategy) -> tuple[RewriteRule, ...]:
        """Ordered catalog: imports, markup, calls, exports, then types."""
        rules: list[RewriteRule] = [
            ImportRetargetRule(
                "next/image",
                {"default": ImportTarget("react-image", "Img", "Img")},
                feature="convert_components",
                name="import:next/image",
            ),
            ImportRetargetRule(
                "next/link",
                {"default": ImportTarget("react-router-dom", "Link", "Link")},
                feature="convert_components",
                name="import:next/link",
            ),
            ImportRetargetRule(
                "next/head",
                {"default": ImportTarget("react-helmet-async", "Helmet", "Helmet")},
                feature="convert_components",
                name="import:next/head",
            ),
            ImportRetargetRule(
                "next/dynamic",
                {"default": ImportTarget("react", "lazy", "lazy")},
                feature="convert_components",
                name="import:next/dynamic",
            ),
            ImportRetargetRule(
                "next/router",
                {"useRouter": ImportTarget("react-router-dom", "useNavigate", "useNavigate")},
                feature="convert_routing",
                name="import:next/router",
            ),
            UnmappedImportRule(),
        ]
        for spec in (self.image, self.link, self.head):
            rules.extend(element_rules(spec))
        rules.extend(
            [
                RouteTableRule(),
                AppRootRule(),
                RouterBindingRule(),
                DestructuredRouterRule(),
                RouterCallRule(),
                HookCallRule(),
                LazyLoadRule(),
                RouterMemberRule(),
                RouterReferenceRule(),
                DataFetchingExportRule(),
                DataFetchingClauseRule(),
                PagePropsRule(),
                StripTypesRule(),
            ]
        )
        return tuple(rules)

    def classify(self, path: str) -> FileKind:
        """Classify a project-relative path by Next.js directory conventions.

        Parameters
        ----------
        path : str
            POSIX path relative to the project root.

        Returns
        -------
        FileKind
            ``PAGE`` for route files, ``APP_SHELL`` for ``pages/_app``,
            ``DOCUMENT`` for ``pages/_document`` and ``API_ROUTE`` for
            ``pages/api/**``.
        """
        posix = PurePosixPath(path)
        common = _classify_common(posix)
        if common is not None:
            return common
        index = _pages_index(posix.parts)
        if index is None:
            return FileKind.MODULE
        rest = posix.parts[index + 1 :]
        if rest[0] == "api":
            return FileKind.API_ROUTE
        if len(rest) == 1 and posix.stem == "_app":
            return FileKind.APP_SHELL
        if len(rest) == 1 and posix.stem == "_document":
            return FileKind.DOCUMENT
        return FileKind.PAGE

    def destination(self, path: str, kind: FileKind, strip_types: bool) -> str:
        posix = PurePosixPath(path)
        suffix = output_suffix(posix.suffix, strip_types)
        if kind is FileKind.PAGE:
            return f"src/pages/{self._page_component(posix)}{suffix}"
        if kind is FileKind.APP_SHELL:
            return f"src/App{suffix}"
        if kind is FileKind.MANIFEST:
            return path
        relocated = posix.with_suffix(suffix) if posix.suffix else posix
        if posix.parts[0] in ("src", "public"):
            return relocated.as_posix()
        return f"src/{relocated.as_posix()}"

    def _page_component(self, posix: PurePosixPath) -> str:
        index = _pages_index(posix.parts)
        rest = [*posix.parts[index + 1 : -1], posix.stem]
        if rest == ["index"]:
            return "Home"
        if rest[-1] == "index":
            rest.pop()
        name = "".join(component_name(part) for part in rest)
        return f"Page{name}" if name in SHELL_NAMES else name

    def page_route(self, path: str) -> PageRoute | None:
        """Route path and component for a page file.

        ``pages/index.tsx`` maps to ``/``, ``pages/blog/[slug].tsx`` to
        ``/blog/:slug`` and catch-all segments to ``*``.
        """
        posix = PurePosixPath(path)
        index = _pages_index(posix.parts)
        if index is None:
            return None
        segments = [*posix.parts[index + 1 : -1], posix.stem]
        if segments[-1] == "index":
            segments.pop()
        route = []
        for segment in segments:
            if segment.startswith("[[...") or segment.startswith("[..."):
                route.append("*")
            elif segment.startswith("[") and segment.endswith("]"):
                route.append(f":{segment[1:-1]}")
            else:
                route.append(segment)
        component = self._page_component(posix)
        return PageRoute(
            path="/" + "/".join(route),
            component=component,
            module=f"./pages/{component}",
        )


class ReactToNextProfile:
    """Migrate React components using react-router back to Next.js pages.

    Only module-level rewrites are provided: router hooks, ``Link`` and
    navigation calls. App shells are converted as plain modules.
    """

    name = "react-to-nextjs"
    source_framework = "react"
    target_framework = "nextjs"
    markers = REACT_ROUTER_MARKERS
    removed_dependencies = frozenset({"react-router", "react-router-dom", "vite", "@vitejs/plugin-react"})
    dependency_versions: Mapping[str, str] = MappingProxyType({"next": "^14.1.0"})
    runtime_dependencies: Mapping[str, str] = MappingProxyType({"next": "^14.1.0"})
    dev_dependencies: Mapping[str, str] = MappingProxyType({})
    scripts: Mapping[str, str] = MappingProxyType(
        {"dev": "next dev", "build": "next build", "start": "next start"}
    )

    link = ElementSpec(
        module="react-router-dom",
        imported="Link",
        label="Link",
        target_tag="Link",
        target_module="next/link",
        dropped=frozenset({"reloadDocument", "state", "relative", "preventScrollReset"}),
        renamed=MappingProxyType({"to": "href"}),
    )

    def can_handle(self, source_framework: str, target_framework: str) -> bool:
        return source_framework == self.source_framework and target_framework == self.target_framework

    def rules(self, strategy: Strategy) -> tuple[RewriteRule, ...]:
        router = ImportTarget("next/router", "useRouter", "useRouter")
        rules: list[RewriteRule] = [
            ImportRetargetRule(
                "react-router-dom",
                {
                    "Link": ImportTarget("next/link", "default", "Link"),
                    "useNavigate": router,
                    "useHistory": router,
                },
                name="import:react-router-dom",
            ),
            UnmappedImportRule(),
            *element_rules(self.link),
            HookCallRule(target_hook="useRouter", target_module="next/router"),
            NavigateCallRule(),
            StripTypesRule(),
        ]
        return tuple(rules)

    def classify(self, path: str) -> FileKind:
        posix = PurePosixPath(path)
        common = _classify_common(posix)
        if common is not None:
            return common
        parts = posix.parts
        if len(parts) == 3 and parts[0] == "src" and parts[1] == "pages":
            return FileKind.PAGE
        return FileKind.MODULE

    def destination(self, path: str, kind: FileKind, strip_types: bool) -> str:
        posix = PurePosixPath(path)
        suffix = output_suffix(posix.suffix, strip_types)
        if kind is FileKind.PAGE:
            stem = "index" if posix.stem == "Home" else _route_segment(posix.stem)
            return f"pages/{stem}{suffix}"
        if kind is FileKind.MANIFEST or not posix.suffix:
            return path
        return posix.with_suffix(suffix).as_posix()

    def page_route(self, path: str) -> PageRoute | None:
        return None


def _route_segment(stem: str) -> str:
    """``BlogPost`` gives ``blog-post``."""
    return re.sub(r"(?<!^)(?=[A-Z])", "-", stem).lower()
