"""
Shared test fixtures for the hull overlap tests.
"""
import sys
from pathlib import Path

import numpy as np
import pytest

# Add src/ to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from hull_overlap import OverlapConfig, ProjectionPlane


def make_grid(size: int = 5, spacing: float = 1.0, offset=(0.0, 0.0, 0.0)) -> np.ndarray:
    """(size*size, 3) float32 grid in z=0 centred on *offset*, row by row."""
    half = (size - 1) / 2.0
    ticks = (np.arange(size) - half) * spacing
    xs, ys = np.meshgrid(ticks, ticks)
    grid = np.column_stack((xs.ravel(), ys.ravel(), np.zeros(xs.size)))
    return (grid + np.asarray(offset, dtype=float)).astype(np.float32)


@pytest.fixture
def horizontal_plane():
    """The z=0 plane."""
    return ProjectionPlane(0.0, 0.0, 1.0, 0.0)


@pytest.fixture
def shifted_grids():
    """5x5 unit grid centred at the origin and the same grid shifted by (2, 2)."""
    return make_grid(), make_grid(offset=(2.0, 2.0, 0.0))


@pytest.fixture
def disjoint_squares():
    """Two unit squares (corners + centre) three units apart along x."""
    square = np.array(
        [[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0], [0.5, 0.5, 0]],
        dtype=np.float32,
    )
    return square, square + np.array([3.0, 0.0, 0.0], dtype=np.float32)


@pytest.fixture
def l_shaped_line():
    """Dense L-shaped swath: x-arm [0,4]x[0,1] then y-arm [0,1]x(1,4]."""
    step = 0.25
    arm_x = [(x, y, 0.0) for y in np.arange(0.0, 1.0 + 1e-9, step)
             for x in np.arange(0.0, 4.0 + 1e-9, step)]
    arm_y = [(x, y, 0.0) for y in np.arange(1.0 + step, 4.0 + 1e-9, step)
             for x in np.arange(0.0, 1.0 + 1e-9, step)]
    return np.array(arm_x + arm_y, dtype=np.float32)


@pytest.fixture
def full_config():
    return OverlapConfig()
