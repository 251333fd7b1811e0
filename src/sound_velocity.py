"""
Sound velocity profiles for acoustic ray computations.

A profile is an ordered list of (depth, speed) samples. The salt water
model is a constant 1520 m/s profile down to 15 km.
"""

from dataclasses import dataclass, field
from typing import List, Tuple

import numpy as np

SALT_WATER_SPEED_M_S = 1520.0
SALT_WATER_MAX_DEPTH_M = 15000.0


@dataclass
class SoundVelocityProfile:
    """Sound speed samples ordered by depth."""

    samples: List[Tuple[float, float]] = field(default_factory=list)  # (depth m, speed m/s)

    def add(self, depth: float, speed: float) -> None:
        """Insert a sample, keeping the profile sorted by depth."""
        self.samples.append((float(depth), float(speed)))
        self.samples.sort(key=lambda s: s[0])

    def __len__(self) -> int:
        return len(self.samples)

    @property
    def depths(self) -> np.ndarray:
        return np.array([s[0] for s in self.samples], dtype=float)

    @property
    def speeds(self) -> np.ndarray:
        return np.array([s[1] for s in self.samples], dtype=float)

    def speed_at(self, depth: float) -> float:
        """Linearly interpolated speed, held constant past either end."""
        if not self.samples:
            raise ValueError("Sound velocity profile has no samples")
        return float(np.interp(float(depth), self.depths, self.speeds))


def build_salt_water_model() -> SoundVelocityProfile:
    """Constant-speed salt water profile."""
    profile = SoundVelocityProfile()
    profile.add(0.0, SALT_WATER_SPEED_M_S)
    profile.add(SALT_WATER_MAX_DEPTH_M, SALT_WATER_SPEED_M_S)
    return profile
