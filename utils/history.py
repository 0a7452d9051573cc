"""
Fixed-capacity rolling sample history.

Used during startup calibration to collect sensor readings and derive
their noise statistics. Once full, new samples overwrite the oldest.
"""

from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray


@dataclass
class History:
    """
    Rolling buffer of the most recent ``capacity`` samples.

    Standard deviation uses the population convention (divide by N),
    so ``get_stdev() ** 2`` is the population variance of the samples.

    Attributes:
        capacity: Maximum number of samples retained
    """

    capacity: int
    _samples: NDArray[np.float64] = field(init=False, repr=False, compare=False)
    _count: int = field(default=0, init=False, repr=False)
    _next: int = field(default=0, init=False, repr=False)

    def __post_init__(self):
        if self.capacity < 1:
            raise ValueError(f"History capacity must be positive, got {self.capacity}")
        self._samples = np.zeros(self.capacity)

    def add(self, value: float) -> None:
        """Append a sample, evicting the oldest one when full."""
        self._samples[self._next] = value
        self._next = (self._next + 1) % self.capacity
        self._count = min(self._count + 1, self.capacity)

    def at_capacity(self) -> bool:
        return self._count == self.capacity

    def clear(self) -> None:
        self._count = 0
        self._next = 0

    def __len__(self) -> int:
        return self._count

    def _filled(self) -> NDArray[np.float64]:
        if self._count == 0:
            raise ValueError("History is empty")
        return self._samples[:self._count]

    def get_mean(self) -> float:
        """Mean of the retained samples."""
        return float(np.mean(self._filled()))

    def get_variance(self) -> float:
        """Population variance of the retained samples."""
        return float(np.var(self._filled()))

    def get_stdev(self) -> float:
        """Population standard deviation of the retained samples."""
        return float(np.std(self._filled()))
