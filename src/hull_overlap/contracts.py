"""Contracts for the hull overlap engine."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from hull_overlap.errors import ConfigurationError, DegenerateGeometryError

Vec4 = Tuple[float, float, float, float]


class HullMethod(Enum):
    """Algorithms available to outline a projected line."""
    CONVEX_CHAIN = "convex_chain"  # Andrew's monotone chain
    CONCAVE = "concave"            # shapely concave hull, shaped by alpha

    @classmethod
    def parse(cls, value: Union["HullMethod", str]) -> "HullMethod":
        """Resolve an enum member, its value, or a legacy label.

        Raises:
            ConfigurationError: if *value* names no known method.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip()
            if key in _LEGACY_HULL_LABELS:
                return _LEGACY_HULL_LABELS[key]
            for member in cls:
                if key.lower() in (member.value, member.name.lower()):
                    return member
        raise ConfigurationError(
            f'"{value}" is not a valid method to find the hull '
            f"(expected one of {[m.value for m in cls]})"
        )


_LEGACY_HULL_LABELS = {
    "Andrew's": HullMethod.CONVEX_CHAIN,
    "PCL ConcaveHull": HullMethod.CONCAVE,
}


class RetentionPolicy(Enum):
    """Lifetime of the intermediate buffers of one overlap computation."""
    MINIMAL = "minimal"  # drop each buffer once its consumer is done
    FULL = "full"        # keep buffers and matched indices for queries

    @classmethod
    def parse(cls, value: Union["RetentionPolicy", str, bool]) -> "RetentionPolicy":
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            return cls.FULL if value else cls.MINIMAL
        if isinstance(value, str):
            for member in cls:
                if value.strip().lower() in (member.value, member.name.lower()):
                    return member
        raise ConfigurationError(f"Unknown retention policy: {value!r}")


class LineSelector(IntEnum):
    """Selects one of the two lines of an overlap computation."""
    A = 0
    B = 1

    @classmethod
    def coerce(cls, value) -> Optional["LineSelector"]:
        """Return the matching selector, or ``None`` for anything else."""
        if isinstance(value, cls):
            return value
        if isinstance(value, (bool, np.bool_)):
            return None
        if isinstance(value, (int, np.integer)) and int(value) in (0, 1):
            return cls(int(value))
        return None


class EngineState(Enum):
    """Pipeline stages reached by the last overlap computation."""
    UNCONFIGURED = "unconfigured"
    PLANES_PROJECTED = "planes_projected"
    FRAMED_AND_MAPPED_2D = "framed_and_mapped_2d"
    HULLS_COMPUTED = "hulls_computed"
    MEMBERSHIP_RESOLVED = "membership_resolved"


@dataclass(frozen=True)
class ProjectionPlane:
    """Plane ``a*x + b*y + c*z + d = 0`` that both lines are projected onto."""

    a: float
    b: float
    c: float
    d: float

    def __post_init__(self):
        for name in ("a", "b", "c", "d"):
            value = float(getattr(self, name))
            if not math.isfinite(value):
                raise DegenerateGeometryError(
                    f"Plane coefficient {name} must be finite, got {value}"
                )
            object.__setattr__(self, name, value)
        if self.a == 0.0 and self.b == 0.0 and self.c == 0.0:
            raise DegenerateGeometryError("Plane normal (a, b, c) cannot be zero")

    @classmethod
    def from_coefficients(
        cls, coefficients: Union["ProjectionPlane", Sequence[float]],
    ) -> "ProjectionPlane":
        if isinstance(coefficients, cls):
            return coefficients
        values = list(coefficients)
        if len(values) != 4:
            raise DegenerateGeometryError(
                f"Expected 4 plane coefficients (a, b, c, d), got {len(values)}"
            )
        return cls(*values)

    @property
    def normal(self) -> np.ndarray:
        """(3,) normal vector, not normalized."""
        return np.array([self.a, self.b, self.c], dtype=float)

    @property
    def coefficients(self) -> Vec4:
        return (self.a, self.b, self.c, self.d)


@dataclass(frozen=True)
class LocalFrame:
    """2D coordinate system embedded in the projection plane.

    ``axis_u`` runs from the first to the last projected point of line A,
    ``axis_v`` completes the in-plane orthonormal pair, and ``origin`` is
    the first projected point of line A.
    """

    origin: np.ndarray  # (3,)
    axis_u: np.ndarray  # (3,) unit
    axis_v: np.ndarray  # (3,) unit

    @property
    def orthogonality_error(self) -> float:
        """|axis_u . axis_v|, zero for a perfectly orthogonal frame."""
        return abs(float(np.dot(self.axis_u, self.axis_v)))

    def to_3d(self, u: float, v: float) -> np.ndarray:
        """Convert a local 2D coordinate back to its 3D point on the plane."""
        return self.origin + u * self.axis_u + v * self.axis_v


@dataclass
class HullBoundary:
    """Ordered hull outline of a projected line.

    ``vertices`` is an open ring: the first vertex is not repeated at the
    end. ``indices`` points into the projected 2D line the hull was built
    from, and is ``None`` when index retention was not requested.
    """

    vertices: np.ndarray                  # (K, 2)
    indices: Optional[np.ndarray] = None  # (K,) int64

    def __len__(self) -> int:
        return int(len(self.vertices))


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box over the matched points of both lines."""

    min_corner: np.ndarray
    max_corner: np.ndarray

    @property
    def extent(self) -> np.ndarray:
        return self.max_corner - self.min_corner


@dataclass
class OverlapResult:
    """Outcome of one overlap computation.

    ``points_a``/``points_b`` hold the matched rows of the input lines
    when points were collected. ``indices_a``/``indices_b`` are present
    only under ``RetentionPolicy.FULL``.
    """

    count_a: int
    count_b: int
    retention: RetentionPolicy
    points_a: Optional[np.ndarray] = None
    points_b: Optional[np.ndarray] = None
    indices_a: Optional[np.ndarray] = None
    indices_b: Optional[np.ndarray] = None

    @property
    def counts(self) -> Tuple[int, int]:
        return (self.count_a, self.count_b)

    @property
    def has_indices(self) -> bool:
        return self.indices_a is not None and self.indices_b is not None


@dataclass(frozen=True)
class OverlapConfig:
    """Configuration for an overlap computation between two lines."""

    hull_method: HullMethod = HullMethod.CONVEX_CHAIN
    alpha_a: float = 1.0  # concave hull ratio for line A
    alpha_b: float = 1.0  # concave hull ratio for line B
    retention: RetentionPolicy = RetentionPolicy.FULL
    boundary_tolerance: float = 0.0  # extra in-plane distance still counted as inside
    parallel: bool = False

    def __post_init__(self):
        object.__setattr__(self, "hull_method", HullMethod.parse(self.hull_method))
        object.__setattr__(self, "retention", RetentionPolicy.parse(self.retention))

        if self.hull_method is HullMethod.CONCAVE:
            for name in ("alpha_a", "alpha_b"):
                alpha = float(getattr(self, name))
                if not alpha >= 0.0:
                    raise ConfigurationError(
                        f"{name} must be >= 0 for the concave hull, got {alpha}"
                    )

        tolerance = float(self.boundary_tolerance)
        if not math.isfinite(tolerance) or tolerance < 0.0:
            raise ConfigurationError(
                f"boundary_tolerance must be a finite value >= 0, got {tolerance}"
            )
        object.__setattr__(self, "boundary_tolerance", tolerance)

    def alpha_for(self, line: LineSelector) -> float:
        return float(self.alpha_a if line is LineSelector.A else self.alpha_b)
