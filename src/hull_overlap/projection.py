"""
Plane projection and the local 2D frame used for hull computations.

Both lines are projected orthogonally onto the projection plane, then
expressed in a 2D (u, v) frame anchored on line A so that hull building
and membership testing run in 2D.
"""
import logging
from typing import Optional

import numpy as np

from hull_overlap.contracts import LocalFrame, ProjectionPlane
from hull_overlap.errors import DegenerateGeometryError

logger = logging.getLogger(__name__)

_MIN_AXIS_LENGTH = 1e-9


def as_line(points) -> np.ndarray:
    """Return a read-only ``(N, 3)`` float32 view of a line's points.

    The caller's array is never copied when it already is float32, and is
    never written to.
    """
    arr = np.asarray(points, dtype=np.float32)
    if arr.ndim == 1 and arr.size == 0:
        arr = arr.reshape(0, 3)
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise DegenerateGeometryError(
            f"A line must be an (N, 3) array of points, got shape {arr.shape}"
        )
    view = arr.view()
    view.flags.writeable = False
    return view


def project_to_plane(points: np.ndarray, plane: ProjectionPlane) -> np.ndarray:
    """Orthogonally project each point onto the plane.

    Args:
        points: (N, 3) points.
        plane: projection plane; its normal need not be unit length.

    Returns:
        (N, 3) float64 array of projected points, in input order.
    """
    pts = np.asarray(points, dtype=float).reshape(-1, 3)
    n = plane.normal
    signed = (pts @ n + plane.d) / float(n @ n)
    return pts - signed[:, None] * n


def _unit_vector(vector: np.ndarray) -> Optional[np.ndarray]:
    norm = float(np.linalg.norm(vector))
    if norm < _MIN_AXIS_LENGTH:
        return None
    return np.asarray(vector, dtype=float) / norm


def build_local_frame(projected: np.ndarray, normal: np.ndarray) -> LocalFrame:
    """Build the (u, v) frame from the projected points of line A.

    ``axis_u`` points from the first to the last projected point,
    ``axis_v = normal x axis_u``, and the origin is the first point.

    Raises:
        DegenerateGeometryError: fewer than two points, coincident first
            and last points, or a normal parallel to ``axis_u``.
    """
    if len(projected) < 2:
        raise DegenerateGeometryError(
            f"Line A needs at least 2 points to define a frame, got {len(projected)}"
        )

    origin = np.asarray(projected[0], dtype=float).copy()
    axis_u = _unit_vector(np.asarray(projected[-1], dtype=float) - origin)
    if axis_u is None:
        raise DegenerateGeometryError(
            "First and last projected points of line A coincide; "
            "cannot derive the in-plane u axis"
        )

    axis_v = _unit_vector(np.cross(np.asarray(normal, dtype=float), axis_u))
    if axis_v is None:
        raise DegenerateGeometryError("Plane normal is parallel to the u axis")

    frame = LocalFrame(origin=origin, axis_u=axis_u, axis_v=axis_v)
    logger.debug(
        "Local frame: u=%s v=%s (u.v=%.3g)",
        np.round(axis_u, 6), np.round(axis_v, 6), frame.orthogonality_error,
    )
    return frame


def map_to_frame(projected: np.ndarray, frame: LocalFrame) -> np.ndarray:
    """Express in-plane 3D points as (u, v) coordinates of *frame*.

    Returns:
        (N, 2) float64 array, in input order.
    """
    delta = np.asarray(projected, dtype=float).reshape(-1, 3) - frame.origin
    return np.column_stack((delta @ frame.axis_u, delta @ frame.axis_v))
