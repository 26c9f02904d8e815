"""Read-only per-module fact sheet and framework marker sets."""

from __future__ import annotations

from dataclasses import dataclass

from framework_migrator.syntax.nodes import ImportBinding


@dataclass(frozen=True)
class ImportFact:
    """One import declaration: module path plus the local names it binds."""

    source_path: str
    bound_names: tuple[str, ...]
    bindings: tuple[ImportBinding, ...] = ()
    type_only: bool = False

    def local_for(self, imported: str) -> str | None:
        """Return the local name bound to ``imported``, if any."""
        for binding in self.bindings:
            if binding.imported == imported:
                return binding.local
        return None


@dataclass(frozen=True)
class FrameworkMarkers:
    """Fixed name sets identifying source-framework constructs.

    Parameters
    ----------
    framework_paths : frozenset[str]
        Import paths that belong to the source framework.
    data_fetching_names : frozenset[str]
        Exported entry points that signal server/build-time data loading.
    routing_modules : frozenset[str]
        Import paths that provide the routing hooks.
    routing_hooks : frozenset[str]
        Hook names whose call result is a router object.
    """

    framework_paths: frozenset[str] = frozenset()
    data_fetching_names: frozenset[str] = frozenset()
    routing_modules: frozenset[str] = frozenset()
    routing_hooks: frozenset[str] = frozenset()


NEXTJS_MARKERS = FrameworkMarkers(
    framework_paths=frozenset(
        {
            "next",
            "next/app",
            "next/config",
            "next/document",
            "next/dynamic",
            "next/head",
            "next/image",
            "next/link",
            "next/navigation",
            "next/router",
            "next/script",
            "next/server",
        }
    ),
    data_fetching_names=frozenset({"getServerSideProps", "getStaticProps", "getStaticPaths"}),
    routing_modules=frozenset({"next/router", "next/navigation"}),
    routing_hooks=frozenset({"useRouter"}),
)

REACT_ROUTER_MARKERS = FrameworkMarkers(
    framework_paths=frozenset({"react-router", "react-router-dom"}),
    routing_modules=frozenset({"react-router", "react-router-dom"}),
    routing_hooks=frozenset({"useNavigate", "useHistory"}),
)


@dataclass(frozen=True)
class ModuleFactSheet:
    """Facts derived from one parsed module; never mutated after creation."""

    imports: tuple[ImportFact, ...] = ()
    exports: frozenset[str] = frozenset()
    components: frozenset[str] = frozenset()
    hooks: frozenset[str] = frozenset()
    has_framework_a_imports: bool = False
    has_data_fetching_export: bool = False
    data_fetching_exports: tuple[str, ...] = ()
    routing_bindings: frozenset[str] = frozenset()
    routing_members: frozenset[str] = frozenset()
    default_export_name: str | None = None

    @classmethod
    def empty(cls) -> ModuleFactSheet:
        return cls()

    def imports_from(self, source_path: str) -> ImportFact | None:
        for fact in self.imports:
            if fact.source_path == source_path:
                return fact
        return None

    def routing_hook_locals(self, markers: FrameworkMarkers) -> frozenset[str]:
        """Local names bound to a routing hook imported from a routing module."""
        names: set[str] = set()
        for fact in self.imports:
            if fact.source_path in markers.routing_modules:
                names.update(
                    binding.local
                    for binding in fact.bindings
                    if binding.imported in markers.routing_hooks
                )
        return frozenset(names)

    def to_dict(self) -> dict[str, object]:
        """JSON-friendly view used by the CLI and HTTP transport."""
        return {
            "imports": [
                {"source_path": fact.source_path, "bound_names": list(fact.bound_names)}
                for fact in self.imports
            ],
            "exports": sorted(self.exports),
            "components": sorted(self.components),
            "hooks": sorted(self.hooks),
            "has_framework_a_imports": self.has_framework_a_imports,
            "has_data_fetching_export": self.has_data_fetching_export,
            "data_fetching_exports": list(self.data_fetching_exports),
            "routing_bindings": sorted(self.routing_bindings),
            "routing_members": sorted(self.routing_members),
            "default_export_name": self.default_export_name,
        }
