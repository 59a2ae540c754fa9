"""Module builder support: placement aggregation and buildable envelope."""

from .envelope import BuildableEnvelope, FloorEnvelope, compute_buildable_envelope
from .placement import (
    ModuleCatalog,
    ModuleDefinition,
    ModulePlacement,
    find_collisions,
    summarize_placements,
)

__all__ = [
    "BuildableEnvelope",
    "FloorEnvelope",
    "ModuleCatalog",
    "ModuleDefinition",
    "ModulePlacement",
    "compute_buildable_envelope",
    "find_collisions",
    "summarize_placements",
]
