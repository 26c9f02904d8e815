"""Migration profiles: framework-pair rule catalogs and path conventions."""

from .base import FileKind, MigrationProfile
from .builtins import NextToReactProfile, ReactToNextProfile, component_name
from .registry import ProfileRegistry, create_default_registry

__all__ = [
    "FileKind",
    "MigrationProfile",
    "NextToReactProfile",
    "ProfileRegistry",
    "ReactToNextProfile",
    "component_name",
    "create_default_registry",
]
