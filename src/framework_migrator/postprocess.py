"""Post-processing helpers for dependency manifests (``package.json``)."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping

from framework_migrator.errors import ManifestError

DEPENDENCY_SECTIONS = ("dependencies", "devDependencies")

type Manifest = dict[str, object]


def package_name(module: str) -> str:
    """Package that provides an import path.

    ``next/router`` gives ``next``; ``@tanstack/react-query`` is kept whole.
    """
    parts = module.split("/")
    if module.startswith("@") and len(parts) > 1:
        return "/".join(parts[:2])
    return parts[0]


def load_manifest(manifest_text: str) -> Manifest:
    """Parse manifest text into a mutable mapping."""
    try:
        data = json.loads(manifest_text)
    except json.JSONDecodeError as exc:
        raise ManifestError(f"package.json is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ManifestError("package.json must contain a JSON object.")
    return data


def dump_manifest(data: Manifest) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def _section(data: Manifest, name: str, create: bool = False) -> dict[str, object] | None:
    section = data.get(name)
    if section is None and create:
        section = data[name] = {}
    if section is not None and not isinstance(section, dict):
        raise ManifestError(f"package.json '{name}' must be an object.")
    return section


def remove_dependencies(data: Manifest, names: Iterable[str]) -> list[str]:
    """Drop ``names`` from every dependency section."""
    changes = []
    for section_name in DEPENDENCY_SECTIONS:
        section = _section(data, section_name)
        if not section:
            continue
        for name in sorted(set(names) & section.keys()):
            del section[name]
            changes.append(f"removed {name} from {section_name}")
    return changes


def add_dependencies(
    data: Manifest,
    versions: Mapping[str, str],
    section_name: str = "dependencies",
) -> list[str]:
    """Add packages that no dependency section declares yet."""
    declared: set[str] = set()
    for name in DEPENDENCY_SECTIONS:
        declared.update((_section(data, name) or {}).keys())
    missing = [name for name in versions if name not in declared]
    if not missing:
        return []
    section = _section(data, section_name, create=True)
    changes = []
    for name in missing:
        section[name] = versions[name]
        changes.append(f"added {name}@{versions[name]} to {section_name}")
    return changes


def map_scripts(data: Manifest, scripts: Mapping[str, str]) -> list[str]:
    """Point the lifecycle scripts at the target toolchain."""
    if not scripts:
        return []
    section = _section(data, "scripts", create=True)
    changes = []
    for name, command in scripts.items():
        if section.get(name) != command:
            section[name] = command
            changes.append(f"script '{name}' set to '{command}'")
    return changes


def update_manifest(
    manifest_text: str,
    *,
    removed: Iterable[str],
    required_modules: Iterable[str],
    versions: Mapping[str, str],
    runtime: Mapping[str, str] | None = None,
    dev: Mapping[str, str] | None = None,
    scripts: Mapping[str, str] | None = None,
) -> tuple[str, list[str]]:
    """Rewrite a manifest for the target framework.

    Parameters
    ----------
    manifest_text : str
        Original ``package.json`` text.
    removed : Iterable[str]
        Source-framework packages to drop.
    required_modules : Iterable[str]
        Import paths needed by fired rules across the batch.
    versions : Mapping[str, str]
        Version table for required packages; unknown packages are ignored.
    runtime : Mapping[str, str] | None
        Packages always added to ``dependencies``.
    dev : Mapping[str, str] | None
        Packages always added to ``devDependencies``.
    scripts : Mapping[str, str] | None
        Script commands to set.

    Returns
    -------
    tuple[str, list[str]]
        Updated text and one change line per edit. The text is returned
        unchanged when there is nothing to edit.
    """
    data = load_manifest(manifest_text)
    required: dict[str, str] = dict(runtime or {})
    for module in required_modules:
        name = package_name(module)
        if name in versions and name not in required:
            required[name] = versions[name]

    changes = remove_dependencies(data, removed)
    changes += add_dependencies(data, required)
    changes += add_dependencies(data, dev or {}, "devDependencies")
    changes += map_scripts(data, scripts or {})
    if not changes:
        return manifest_text, []
    return dump_manifest(data), changes
