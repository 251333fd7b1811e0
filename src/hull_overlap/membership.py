"""Point-in-hull tests for projected lines.

Membership is boundary inclusive: points on a hull edge or vertex are
inside. Points within ``tolerance`` of the hull also count, which absorbs
rounding from the change to the local 2D frame.
"""
import logging

import numpy as np
import shapely
from shapely.geometry import LineString, Point, Polygon

logger = logging.getLogger(__name__)


def hull_geometry(vertices: np.ndarray):
    """Build the shapely geometry of a hull outline.

    One distinct vertex gives a ``Point``, two (or a ring with no area)
    a ``LineString``, and anything else a ``Polygon``. Returns ``None``
    for an empty outline.
    """
    ring = np.asarray(vertices, dtype=float).reshape(-1, 2)
    if len(ring) > 1:
        # drop repeated consecutive vertices, closing vertex included
        keep = np.any(ring != np.roll(ring, 1, axis=0), axis=1)
        keep[0] = True
        ring = ring[keep]
        if len(ring) > 1 and np.array_equal(ring[0], ring[-1]):
            ring = ring[:-1]

    if len(ring) == 0:
        return None
    if len(ring) == 1:
        return Point(ring[0])
    if len(ring) == 2:
        return LineString(ring)

    polygon = Polygon(ring)
    if polygon.area <= 0.0:
        return LineString(np.vstack([ring, ring[:1]]))
    return polygon


def points_in_hull(
    points_2d: np.ndarray,
    hull_vertices: np.ndarray,
    tolerance: float = 0.0,
) -> np.ndarray:
    """Classify 2D points against a hull outline.

    Args:
        points_2d: (N, 2) points to test.
        hull_vertices: (K, 2) ordered hull outline (open or closed ring).
        tolerance: distance from the hull still classified as inside.

    Returns:
        (N,) boolean mask, True where the point is within or on the hull.
    """
    pts = np.asarray(points_2d, dtype=float).reshape(-1, 2)
    geom = hull_geometry(hull_vertices)
    if geom is None or len(pts) == 0:
        return np.zeros(len(pts), dtype=bool)

    shapely.prepare(geom)
    inside = np.asarray(shapely.intersects_xy(geom, pts[:, 0], pts[:, 1]), dtype=bool)

    if tolerance > 0.0 and not inside.all():
        outside = np.flatnonzero(~inside)
        near = shapely.distance(geom, shapely.points(pts[outside])) <= tolerance
        inside[outside[near]] = True

    logger.debug(
        "%d of %d points inside %s hull", int(inside.sum()), len(pts), geom.geom_type,
    )
    return inside
