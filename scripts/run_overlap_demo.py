#!/usr/bin/env python3
"""Compute the overlap of two synthetic survey swaths.

Builds two square grids of points, the second shifted in x/y, projects
both onto a plane and reports how many points of each swath fall inside
the other swath's hull.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import numpy as np

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from hull_overlap import HullMethod, HullOverlap, OverlapConfig, RetentionPolicy


def grid_swath(size: int, spacing: float, offset=(0.0, 0.0, 0.0)) -> np.ndarray:
    """(size*size, 3) grid centred on *offset*, ordered row by row."""
    half = (size - 1) / 2.0
    ticks = (np.arange(size) - half) * spacing
    xs, ys = np.meshgrid(ticks, ticks)
    grid = np.column_stack((xs.ravel(), ys.ravel(), np.zeros(xs.size)))
    return (grid + np.asarray(offset, dtype=float)).astype(np.float32)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Overlap of two synthetic survey swaths projected onto a plane"
    )
    parser.add_argument("--size", type=int, default=5, help="Grid points per side")
    parser.add_argument("--spacing", type=float, default=1.0, help="Grid spacing")
    parser.add_argument(
        "--shift",
        type=float,
        nargs=2,
        default=(2.0, 2.0),
        metavar=("DX", "DY"),
        help="Offset of swath B relative to swath A",
    )
    parser.add_argument(
        "--plane",
        type=float,
        nargs=4,
        default=(0.0, 0.0, 1.0, 0.0),
        metavar=("A", "B", "C", "D"),
        help="Projection plane coefficients of ax + by + cz + d = 0",
    )
    parser.add_argument(
        "--hull-method",
        default=HullMethod.CONVEX_CHAIN.value,
        choices=[m.value for m in HullMethod],
        help="Hull algorithm",
    )
    parser.add_argument("--alpha-a", type=float, default=1.0, help="Concave ratio, swath A")
    parser.add_argument("--alpha-b", type=float, default=1.0, help="Concave ratio, swath B")
    parser.add_argument(
        "--minimal-memory",
        action="store_true",
        help="Release intermediate buffers (no bounds report)",
    )
    parser.add_argument(
        "--parallel", action="store_true", help="Run per-swath stages on two threads"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logs"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = OverlapConfig(
        hull_method=args.hull_method,
        alpha_a=args.alpha_a,
        alpha_b=args.alpha_b,
        retention=RetentionPolicy.MINIMAL if args.minimal_memory else RetentionPolicy.FULL,
        parallel=args.parallel,
    )
    size = max(2, int(args.size))
    line_a = grid_swath(size, args.spacing)
    line_b = grid_swath(size, args.spacing, offset=(args.shift[0], args.shift[1], 0.0))

    engine = HullOverlap(line_a, line_b, tuple(args.plane), config)
    result = engine.compute_overlap()

    print(f"Swath A: {result.count_a}/{len(line_a)} points inside hull B")
    print(f"Swath B: {result.count_b}/{len(line_b)} points inside hull A")

    bounds = engine.overlap_bounds_3d()
    if bounds is not None:
        print(f"Overlap bounds min: {np.round(bounds.min_corner, 3).tolist()}")
        print(f"Overlap bounds max: {np.round(bounds.max_corner, 3).tolist()}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
