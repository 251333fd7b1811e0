"""
Side-scan sonar ping container.

Holds the samples of one ping of one transducer channel together with its
timestamp and along-range sample spacing. Samples of every native type are
stored as floats.
"""

from dataclasses import dataclass, field
from typing import Iterable, List

import numpy as np


@dataclass
class SidescanPing:
    """One ping of a side-scan channel."""

    channel_number: int = 0
    timestamp: int = 0  # microseconds since epoch
    distance_per_sample: float = 0.0  # metres between consecutive samples
    samples: List[float] = field(default_factory=list)

    def append_sample(self, value: float) -> None:
        self.samples.append(float(value))

    def extend_samples(self, values: Iterable[float]) -> None:
        self.samples.extend(float(v) for v in values)

    def set_samples(self, values: Iterable[float]) -> None:
        """Replace the sample buffer with a copy of *values*."""
        self.samples = [float(v) for v in values]

    def __len__(self) -> int:
        return len(self.samples)

    def as_array(self) -> np.ndarray:
        return np.asarray(self.samples, dtype=float)

    def slant_ranges(self) -> np.ndarray:
        """Range of each sample from the transducer, in metres."""
        return np.arange(len(self.samples), dtype=float) * self.distance_per_sample
