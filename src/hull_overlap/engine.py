"""
Overlap between two survey lines projected onto a common plane.

Pipeline, restarted from scratch on every computation:
1. Project both lines onto the plane
2. Build the local 2D frame from line A and map both lines into it
3. Compute the hull of each line with the configured strategy
4. Test line A against hull(B) and line B against hull(A)

A point of line A inside hull(B) is in the overlap of both lines, since it
is inside hull(A) by construction; the same holds for line B.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import nullcontext
from typing import Callable, Dict, Optional, Sequence, Tuple, Union

import numpy as np

from hull_overlap.contracts import (
    BoundingBox,
    EngineState,
    HullBoundary,
    LineSelector,
    LocalFrame,
    OverlapConfig,
    OverlapResult,
    ProjectionPlane,
    RetentionPolicy,
)
from hull_overlap.hulls import HullStrategy, make_hull_strategy
from hull_overlap.membership import points_in_hull
from hull_overlap.projection import as_line, build_local_frame, map_to_frame, project_to_plane

logger = logging.getLogger(__name__)

PROJECTED_3D = "projected_3d"
PROJECTED_2D = "projected_2d"
HULL = "hull"
MATCHED = "matched_indices"


class _BufferStore:
    """Per-line intermediate buffers of one overlap computation.

    A stage hands each buffer it produces to the store and reports it
    consumed once its last reader is done. Consumed buffers are dropped
    right away unless the store was created to retain them.
    """

    def __init__(self, retain: bool):
        self.retain = retain
        self._buffers: Dict[Tuple[str, LineSelector], object] = {}

    def put(self, name: str, line: LineSelector, value) -> None:
        self._buffers[(name, line)] = value

    def get(self, name: str, line: LineSelector):
        return self._buffers.get((name, line))

    def consumed(self, name: str, line: LineSelector) -> None:
        if not self.retain:
            self._buffers.pop((name, line), None)

    def __len__(self) -> int:
        return len(self._buffers)


class HullOverlap:
    """Points of each line that fall inside the other line's hull.

    Args:
        line_a: (N, 3) points of line A; anchors the 2D frame.
        line_b: (M, 3) points of line B.
        plane: ``ProjectionPlane`` or ``(a, b, c, d)`` of
            ``a*x + b*y + c*z + d = 0``.
        config: hull method, alphas, retention policy, tolerance.

    Raises:
        ConfigurationError: invalid configuration values.
        DegenerateGeometryError: zero plane normal or malformed lines.
    """

    def __init__(
        self,
        line_a,
        line_b,
        plane: Union[ProjectionPlane, Sequence[float]],
        config: Optional[OverlapConfig] = None,
    ):
        if config is None:
            config = OverlapConfig()
        self.config = config
        self.plane = ProjectionPlane.from_coefficients(plane)
        self._lines: Dict[LineSelector, np.ndarray] = {
            LineSelector.A: as_line(line_a),
            LineSelector.B: as_line(line_b),
        }
        self._strategies: Dict[LineSelector, HullStrategy] = {
            line: make_hull_strategy(config.hull_method, config.alpha_for(line))
            for line in LineSelector
        }

        self._state = EngineState.UNCONFIGURED
        self._frame: Optional[LocalFrame] = None
        self._store: Optional[_BufferStore] = None
        self._counts: Optional[Dict[LineSelector, int]] = None
        self._last_result: Optional[OverlapResult] = None

    def __repr__(self) -> str:
        return (
            f"HullOverlap(len_a={len(self.line_a)}, len_b={len(self.line_b)}, "
            f"plane={self.plane.coefficients}, hull={self.config.hull_method.value})"
        )

    # ─── Properties ──────────────────────────────────────────────────────────

    @property
    def line_a(self) -> np.ndarray:
        return self._lines[LineSelector.A]

    @property
    def line_b(self) -> np.ndarray:
        return self._lines[LineSelector.B]

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def frame(self) -> Optional[LocalFrame]:
        """Frame of the last computation that got past projection."""
        return self._frame

    @property
    def last_result(self) -> Optional[OverlapResult]:
        return self._last_result

    # ─── Computation ─────────────────────────────────────────────────────────

    def compute_overlap(
        self,
        retain_detail: Optional[bool] = None,
        collect_points: bool = True,
    ) -> OverlapResult:
        """Find the points of each line inside the other line's hull.

        Args:
            retain_detail: ``True`` keeps projections, hulls and matched
                indices for the query methods; ``False`` releases every
                buffer once consumed. ``None`` follows ``config.retention``.
            collect_points: copy the matched points of the input lines
                into the result.

        Returns:
            OverlapResult with the counts for line A and line B.

        Raises:
            DegenerateGeometryError: line A cannot define the 2D frame.
        """
        if retain_detail is None:
            retention = self.config.retention
        else:
            retention = RetentionPolicy.parse(bool(retain_detail))
        retain = retention is RetentionPolicy.FULL

        self._reset()
        store = _BufferStore(retain=retain)
        tolerance = self.config.boundary_tolerance

        try:
            with self._executor() as pool:
                self._stage(pool, store, PROJECTED_3D,
                            lambda line: project_to_plane(self._lines[line], self.plane))
                self._state = EngineState.PLANES_PROJECTED
                logger.debug(
                    "Projected %d + %d points onto plane %s",
                    len(self.line_a), len(self.line_b), self.plane.coefficients,
                )

                frame = build_local_frame(store.get(PROJECTED_3D, LineSelector.A),
                                          self.plane.normal)
                self._frame = frame
                self._stage(pool, store, PROJECTED_2D,
                            lambda line: map_to_frame(store.get(PROJECTED_3D, line), frame))
                for line in LineSelector:
                    store.consumed(PROJECTED_3D, line)
                self._state = EngineState.FRAMED_AND_MAPPED_2D

                self._stage(pool, store, HULL,
                            lambda line: self._strategies[line].compute(
                                store.get(PROJECTED_2D, line), keep_indices=retain))
                self._state = EngineState.HULLS_COMPUTED
                logger.debug(
                    "Hull vertices: A=%d, B=%d (%s)",
                    len(store.get(HULL, LineSelector.A)),
                    len(store.get(HULL, LineSelector.B)),
                    self.config.hull_method.value,
                )

                # Both hulls are complete here; each line is tested against the other's
                def match(line: LineSelector) -> np.ndarray:
                    other = _other(line)
                    inside = points_in_hull(
                        store.get(PROJECTED_2D, line), store.get(HULL, other).vertices, tolerance,
                    )
                    # The other line's test reads neither of these
                    store.consumed(PROJECTED_2D, line)
                    store.consumed(HULL, other)
                    return np.flatnonzero(inside).astype(np.int64)

                self._stage(pool, store, MATCHED, match)
        except Exception:
            self._reset()
            raise

        matched = {line: store.get(MATCHED, line) for line in LineSelector}
        for line in LineSelector:
            store.consumed(MATCHED, line)

        points = {line: None for line in LineSelector}
        if collect_points:
            points = {line: self._lines[line][matched[line]] for line in LineSelector}

        result = OverlapResult(
            count_a=int(len(matched[LineSelector.A])),
            count_b=int(len(matched[LineSelector.B])),
            retention=retention,
            points_a=points[LineSelector.A],
            points_b=points[LineSelector.B],
            indices_a=matched[LineSelector.A] if retain else None,
            indices_b=matched[LineSelector.B] if retain else None,
        )

        self._counts = {LineSelector.A: result.count_a, LineSelector.B: result.count_b}
        self._store = store if retain else None
        self._last_result = result
        self._state = EngineState.MEMBERSHIP_RESOLVED

        logger.info(
            "Overlap: %d/%d points of line A in hull B, %d/%d points of line B in hull A",
            result.count_a, len(self.line_a), result.count_b, len(self.line_b),
        )
        return result

    def compute_points_in_both_hulls(self) -> OverlapResult:
        """Matched points of both lines, releasing every intermediate buffer."""
        return self.compute_overlap(retain_detail=False, collect_points=True)

    # ─── Queries ─────────────────────────────────────────────────────────────

    def matched_indices(self, line) -> Optional[np.ndarray]:
        """Indices into the input line of its points inside the other hull."""
        return self._retained(MATCHED, line, "matched_indices")

    def projected_2d(self, line) -> Optional[np.ndarray]:
        """(N, 2) coordinates of the line in the local frame."""
        return self._retained(PROJECTED_2D, line, "projected_2d")

    def projected_3d(self, line) -> Optional[np.ndarray]:
        """(N, 3) projection of the line onto the plane."""
        return self._retained(PROJECTED_3D, line, "projected_3d")

    def hull_indices(self, line) -> Optional[np.ndarray]:
        """Indices of the line's points forming its own hull."""
        hull: Optional[HullBoundary] = self._retained(HULL, line, "hull_indices")
        return None if hull is None else hull.indices

    def hull_vertices(self, line) -> Optional[np.ndarray]:
        """(K, 2) hull outline of the line in the local frame."""
        hull: Optional[HullBoundary] = self._retained(HULL, line, "hull_vertices")
        return None if hull is None else hull.vertices

    def overlap_count(self, line) -> Optional[int]:
        """Number of the line's points inside the other line's hull."""
        selector = _selector(line, "overlap_count")
        if selector is None or self._counts is None:
            return None
        return self._counts[selector]

    def overlap_bounds_2d(self) -> Optional[BoundingBox]:
        """Bounding box in the local frame of all matched points."""
        return self._overlap_bounds(PROJECTED_2D)

    def overlap_bounds_3d(self) -> Optional[BoundingBox]:
        """Bounding box of all matched points projected onto the plane."""
        return self._overlap_bounds(PROJECTED_3D)

    # ─── Internal helpers ────────────────────────────────────────────────────

    def _reset(self) -> None:
        self._state = EngineState.UNCONFIGURED
        self._frame = None
        self._store = None
        self._counts = None
        self._last_result = None

    def _executor(self):
        if not self.config.parallel:
            return nullcontext(None)
        return ThreadPoolExecutor(max_workers=2, thread_name_prefix="hull-overlap")

    @staticmethod
    def _stage(
        pool: Optional[ThreadPoolExecutor],
        store: _BufferStore,
        name: str,
        fn: Callable[[LineSelector], object],
    ) -> None:
        """Run *fn* for both lines and hand the results to *store*."""
        if pool is None:
            results = {line: fn(line) for line in LineSelector}
        else:
            futures = {line: pool.submit(fn, line) for line in LineSelector}
            results = {line: future.result() for line, future in futures.items()}
        for line, value in results.items():
            store.put(name, line, value)

    def _retained(self, name: str, line, accessor: str):
        selector = _selector(line, accessor)
        if selector is None or self._store is None:
            return None
        return self._store.get(name, selector)

    def _overlap_bounds(self, name: str) -> Optional[BoundingBox]:
        if self._store is None:
            return None

        chunks = []
        for line in LineSelector:
            indices = self._store.get(MATCHED, line)
            points = self._store.get(name, line)
            # both lines must contribute points to the overlap
            if indices is None or points is None or len(indices) == 0:
                return None
            chunks.append(points[indices])

        stacked = np.vstack(chunks)
        return BoundingBox(min_corner=stacked.min(axis=0), max_corner=stacked.max(axis=0))


def _other(line: LineSelector) -> LineSelector:
    return LineSelector.B if line is LineSelector.A else LineSelector.A


def _selector(value, accessor: str) -> Optional[LineSelector]:
    selector = LineSelector.coerce(value)
    if selector is None:
        logger.warning(
            "%s(): line selector %r must be 0 (line A) or 1 (line B); returning None",
            accessor, value,
        )
    return selector
