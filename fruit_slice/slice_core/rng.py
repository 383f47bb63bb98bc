"""
RNG - Spawn Sampling
====================

Seeded random draws used by the spawn scheduler. Every range draw tolerates
reversed bounds by swapping them first.
"""

from __future__ import annotations

import random
from typing import Optional, Tuple

from fruit_slice.slice_core.difficulty import Range
from fruit_slice.slice_core.fruit_catalog import FruitCatalog, FruitKind


def _bounds(value) -> Tuple[float, float]:
    if isinstance(value, Range):
        low, high = value.low, value.high
    else:
        low, high = value
    if low > high:
        low, high = high, low
    return low, high


class SpawnRandom:
    """
    Thin wrapper over ``random.Random`` with range-aware helpers.

    The same seed reproduces the same launch sequence.
    """

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize sampler.

        Args:
            seed: Random seed for reproducibility. Random if None.
        """
        self._seed = seed
        self._rng = random.Random(seed)

    @property
    def seed(self) -> Optional[int]:
        return self._seed

    def unit(self) -> float:
        """Uniform draw in [0, 1)."""
        return self._rng.random()

    def uniform(self, bounds) -> float:
        """Uniform float within a Range or (low, high) pair."""
        low, high = _bounds(bounds)
        return self._rng.uniform(low, high)

    def integer(self, bounds) -> int:
        """Uniform integer within a Range or (low, high) pair, inclusive."""
        low, high = _bounds(bounds)
        return self._rng.randint(int(round(low)), int(round(high)))

    def chance(self, probability: float) -> bool:
        """True with the given probability."""
        return self._rng.random() < probability

    def direction(self) -> int:
        """-1 or +1 with equal odds."""
        return -1 if self._rng.random() < 0.5 else 1

    def fruit(self, catalog: FruitCatalog) -> FruitKind:
        """Weighted fruit variant draw."""
        return catalog.choose(self._rng.random())

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Restart the sequence.

        Args:
            seed: New random seed. Keeps current if None.
        """
        if seed is not None:
            self._seed = seed
        self._rng = random.Random(self._seed)
