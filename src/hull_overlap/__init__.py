"""Public API for the survey line hull overlap engine."""

from hull_overlap.contracts import (
    BoundingBox,
    EngineState,
    HullBoundary,
    HullMethod,
    LineSelector,
    LocalFrame,
    OverlapConfig,
    OverlapResult,
    ProjectionPlane,
    RetentionPolicy,
)
from hull_overlap.engine import HullOverlap
from hull_overlap.errors import ConfigurationError, DegenerateGeometryError, HullOverlapError

__all__ = [
    "BoundingBox",
    "ConfigurationError",
    "DegenerateGeometryError",
    "EngineState",
    "HullBoundary",
    "HullMethod",
    "HullOverlap",
    "HullOverlapError",
    "LineSelector",
    "LocalFrame",
    "OverlapConfig",
    "OverlapResult",
    "ProjectionPlane",
    "RetentionPolicy",
]
