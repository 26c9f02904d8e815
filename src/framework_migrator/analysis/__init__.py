"""Structural analysis of parsed modules."""

from .analyzer import analyze, is_hook_name
from .facts import (
    NEXTJS_MARKERS,
    REACT_ROUTER_MARKERS,
    FrameworkMarkers,
    ImportFact,
    ModuleFactSheet,
)

__all__ = [
    "NEXTJS_MARKERS",
    "REACT_ROUTER_MARKERS",
    "FrameworkMarkers",
    "ImportFact",
    "ModuleFactSheet",
    "analyze",
    "is_hook_name",
]
