"""
Hull outlines for projected lines.

Two interchangeable strategies produce the same ``HullBoundary`` shape:
Andrew's monotone chain convex hull, and shapely's concave hull driven by
a per-line alpha ratio. Both return an open, counter-clockwise ring plus,
on request, the indices of the input points forming it.
"""
import logging
from abc import ABC, abstractmethod
from typing import List

import numpy as np
import shapely
from scipy.spatial import cKDTree
from shapely.geometry import LineString, Point, Polygon
from shapely.geometry.polygon import orient

from hull_overlap.contracts import HullBoundary, HullMethod

logger = logging.getLogger(__name__)


# ─── Andrew's monotone chain ─────────────────────────────────────────────────

def _cross(ox: float, oy: float, ax: float, ay: float, bx: float, by: float) -> float:
    """z of (A - O) x (B - O): > 0 for a counter-clockwise turn O -> A -> B."""
    return (ax - ox) * (by - oy) - (ay - oy) * (bx - ox)


def monotone_chain(points_2d: np.ndarray) -> np.ndarray:
    """Indices of the convex hull vertices of a 2D point set.

    Three points or fewer are returned as they are, in input order.
    Otherwise the hull is listed counter-clockwise starting from the
    lowest (x, y) point, without repeating it at the end. Collinear
    points on hull edges are not part of the result.

    Args:
        points_2d: (N, 2) points.

    Returns:
        (K,) int64 indices into *points_2d*.
    """
    pts = np.asarray(points_2d, dtype=float).reshape(-1, 2)
    n = len(pts)
    if n <= 3:
        return np.arange(n, dtype=np.int64)

    # lexsort keys are given last-first: sort by x, then y
    order = np.lexsort((pts[:, 1], pts[:, 0])).tolist()
    xs = pts[:, 0].tolist()
    ys = pts[:, 1].tolist()

    chain: List[int] = []

    def extend(candidates, floor: int) -> None:
        for i in candidates:
            while len(chain) >= floor:
                o, a = chain[-2], chain[-1]
                if _cross(xs[o], ys[o], xs[a], ys[a], xs[i], ys[i]) > 0:
                    break
                chain.pop()
            chain.append(i)

    extend(order, 2)
    # Upper chain keeps the whole lower chain, so it may only pop what it added
    extend(order[-2::-1], len(chain) + 1)

    chain.pop()  # closing vertex repeats the first
    return np.asarray(chain, dtype=np.int64)


# ─── Strategies ──────────────────────────────────────────────────────────────

class HullStrategy(ABC):
    """Computes the outline of one projected line."""

    method: HullMethod

    @abstractmethod
    def compute(self, points_2d: np.ndarray, keep_indices: bool = True) -> HullBoundary:
        """Return the hull of *points_2d* ((N, 2) array)."""


class ConvexChainHull(HullStrategy):
    """Convex hull via Andrew's monotone chain."""

    method = HullMethod.CONVEX_CHAIN

    def compute(self, points_2d: np.ndarray, keep_indices: bool = True) -> HullBoundary:
        pts = np.asarray(points_2d, dtype=float).reshape(-1, 2)
        idx = monotone_chain(pts)
        return HullBoundary(
            vertices=pts[idx],
            indices=idx if keep_indices else None,
        )

    def __repr__(self) -> str:
        return "ConvexChainHull()"


class ConcaveHull(HullStrategy):
    """Concave hull via ``shapely.concave_hull``.

    ``alpha`` is shapely's ratio: 0 follows the points as tightly as
    possible, 1 or more gives the convex hull.
    """

    method = HullMethod.CONCAVE

    def __init__(self, alpha: float = 1.0):
        self.alpha = float(alpha)

    def compute(self, points_2d: np.ndarray, keep_indices: bool = True) -> HullBoundary:
        pts = np.asarray(points_2d, dtype=float).reshape(-1, 2)
        if len(pts) == 0:
            return HullBoundary(
                vertices=np.empty((0, 2)),
                indices=np.empty(0, dtype=np.int64) if keep_indices else None,
            )

        hull = shapely.concave_hull(
            shapely.multipoints(pts), ratio=min(self.alpha, 1.0), allow_holes=False,
        )
        vertices = boundary_vertices(hull)
        logger.debug(
            "Concave hull (alpha=%.3f): %d of %d points on the boundary",
            self.alpha, len(vertices), len(pts),
        )

        indices = None
        if keep_indices:
            # Hull vertices are input points, so the nearest neighbour is exact
            _, nearest = cKDTree(pts).query(vertices)
            indices = np.asarray(nearest, dtype=np.int64).reshape(-1)

        return HullBoundary(vertices=vertices, indices=indices)

    def __repr__(self) -> str:
        return f"ConcaveHull(alpha={self.alpha})"


def boundary_vertices(geom) -> np.ndarray:
    """Open counter-clockwise ring of a shapely hull result, as (K, 2)."""
    if geom is None or geom.is_empty:
        return np.empty((0, 2))
    if isinstance(geom, Polygon):
        ring = np.asarray(orient(geom, sign=1.0).exterior.coords)[:-1]
        return ring[:, :2].copy()
    if isinstance(geom, (LineString, Point)):
        return np.asarray(geom.coords)[:, :2].copy()
    raise TypeError(f"Unexpected hull geometry type: {geom.geom_type}")


def make_hull_strategy(method: HullMethod, alpha: float = 1.0) -> HullStrategy:
    """Resolve a hull method to its strategy object."""
    method = HullMethod.parse(method)
    if method is HullMethod.CONCAVE:
        return ConcaveHull(alpha)
    return ConvexChainHull()
