"""Profile registry and discovery helpers."""

from __future__ import annotations

import importlib
import importlib.util
from collections.abc import Iterable
from pathlib import Path
from types import ModuleType

from pydantic import ValidationError

from framework_migrator.errors import ProfileError
from framework_migrator.profiles.base import MigrationProfile
from framework_migrator.profiles.builtins import NextToReactProfile, ReactToNextProfile
from framework_migrator.schemas import ProfileResolutionConfig


class ProfileRegistry:
    """Registry for migration profiles."""

    def __init__(self) -> None:
        self._profiles: dict[str, MigrationProfile] = {}

    def register(self, profile: MigrationProfile) -> None:
        """Register profile instance by unique name.

        Parameters
        ----------
        profile : MigrationProfile
            Profile instance to register.

        Raises
        ------
        ProfileError
            If the profile does not provide a valid name.
        """
        name = getattr(profile, "name", "").strip()
        if not name:
            raise ProfileError("Profile must define a non-empty 'name'.")
        self._profiles[name] = profile

    def names(self) -> list[str]:
        """Return registered profile names, sorted."""
        return sorted(self._profiles.keys())

    def get(self, name: str) -> MigrationProfile:
        """Get profile by name.

        Raises
        ------
        ProfileError
            If the profile name is not registered.
        """
        try:
            return self._profiles[name]
        except KeyError as exc:
            raise ProfileError(
                f"Unknown profile '{name}'. Available profiles: {', '.join(self.names())}"
            ) from exc

    def resolve(
        self,
        source_framework: str,
        target_framework: str,
        profile_name: str | None = None,
    ) -> MigrationProfile:
        """Resolve a profile either explicitly or by ``can_handle`` lookup.

        Parameters
        ----------
        source_framework : str
            Framework of the input project.
        target_framework : str
            Requested output framework.
        profile_name : str | None
            Explicit profile name.

        Returns
        -------
        MigrationProfile
            Resolved profile.

        Raises
        ------
        ProfileError
            If no profile (or more than one) handles the framework pair.
        """
        try:
            payload = ProfileResolutionConfig(
                source_framework=source_framework,
                target_framework=target_framework,
                profile_name=profile_name,
            )
        except ValidationError as exc:
            raise ProfileError(f"Invalid profile resolution options: {exc}") from exc

        if payload.profile_name:
            return self.get(payload.profile_name)

        matches = [
            profile
            for profile in self._profiles.values()
            if profile.can_handle(payload.source_framework, payload.target_framework)
        ]
        if not matches:
            raise ProfileError(
                f"No profile migrates {payload.source_framework} to "
                f"{payload.target_framework}. Available profiles: {', '.join(self.names())}"
            )
        if len(matches) > 1:
            names = ", ".join(profile.name for profile in matches)
            raise ProfileError(
                f"Multiple profiles handle this migration ({names}). "
                "Pass --profile explicitly."
            )
        return matches[0]

    def load_module(self, module_or_path: str) -> None:
        """Load profile providers from a module name or file path.

        .. warning::
            This method executes code from the specified module. Only load
            profiles from trusted sources.
        """
        module = _import_module_or_path(module_or_path)
        _register_from_module(module, self)


def _import_module_or_path(module_or_path: str) -> ModuleType:
    """Import module by import path or filesystem path.

    Parameters
    ----------
    module_or_path : str
        Python module path or local file path. Must be from a trusted source.

    Returns
    -------
    ModuleType
        Imported module object.

    Raises
    ------
    ProfileError
        If the import cannot be completed.
    """
    candidate = Path(module_or_path)
    if candidate.exists():
        spec = importlib.util.spec_from_file_location(candidate.stem, candidate)
        if spec is None or spec.loader is None:
            raise ProfileError(f"Unable to load profile module from {candidate}.")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    try:
        return importlib.import_module(module_or_path)
    except Exception as exc:
        raise ProfileError(
            f"Unable to import profile module '{module_or_path}': {exc}"
        ) from exc


def _register_from_module(module: ModuleType, registry: ProfileRegistry) -> None:
    if hasattr(module, "register_profiles"):
        module.register_profiles(registry)
        return

    profiles_obj = getattr(module, "PROFILES", None)
    if profiles_obj is not None:
        for profile in profiles_obj:
            registry.register(profile)
        return

    profile_obj = getattr(module, "PROFILE", None)
    if profile_obj is not None:
        registry.register(profile_obj)
        return

    raise ProfileError(
        "Profile module must expose register_profiles(registry), PROFILES, or PROFILE."
    )


def create_default_registry(
    extra_modules: Iterable[str] | None = None,
) -> ProfileRegistry:
    """Create the default profile registry.

    Parameters
    ----------
    extra_modules : Iterable[str] | None, optional
        Additional profile modules to load.

    Returns
    -------
    ProfileRegistry
        Registry with built-in and external profiles.
    """
    registry = ProfileRegistry()
    registry.register(NextToReactProfile())
    registry.register(ReactToNextProfile())
    for module in extra_modules or []:
        registry.load_module(module)
    return registry
