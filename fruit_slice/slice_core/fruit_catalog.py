"""
Fruit Catalog
=============

Projectile kinds and the weighted fruit table loaded from config.

A projectile is either a fruit (variant + score value) or a bomb. Code that
behaves differently per kind branches on ``isinstance(kind, BombKind)``.
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import accumulate
from typing import Iterator, Optional, Tuple, Union

from fruit_slice.slice_core.config_loader import FruitConfig, GameConfig, get_config


@dataclass(frozen=True)
class FruitKind:
    """A sliceable fruit worth ``score_value`` points."""
    fruit_id: int
    variant: str
    score_value: int
    color: Tuple[int, int, int] = (255, 255, 255)

    @property
    def name(self) -> str:
        return self.variant

    @property
    def is_bomb(self) -> bool:
        return False

    @classmethod
    def from_config(cls, fruit_config: FruitConfig) -> "FruitKind":
        return cls(
            fruit_id=fruit_config.id,
            variant=fruit_config.variant,
            score_value=fruit_config.score,
            color=fruit_config.color
        )


@dataclass(frozen=True)
class BombKind:
    """Penalty projectile: slicing it costs a life, missing it is harmless."""

    @property
    def name(self) -> str:
        return "bomb"

    @property
    def is_bomb(self) -> bool:
        return True


BOMB = BombKind()

ProjectileKind = Union[FruitKind, BombKind]


def weighted_index(cumulative: Tuple[float, ...], r: float) -> int:
    """
    Pick an index from cumulative weights.

    Args:
        cumulative: Running sum of the weights (last entry is the total).
        r: Uniform draw in [0, 1).

    Returns:
        Index of the chosen entry. Falls back to the last entry when
        floating-point error pushes the target past the total.
    """
    target = r * cumulative[-1]
    for index, bound in enumerate(cumulative):
        if target < bound:
            return index
    return len(cumulative) - 1


class FruitCatalog:
    """
    Immutable table of fruit variants with their spawn weights.

    Sampling is a pure function of a uniform draw, so the catalog carries
    no random state of its own.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize catalog from game config.

        Args:
            config: GameConfig instance. If None, loads from default location.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._kinds: Tuple[FruitKind, ...] = tuple(
            FruitKind.from_config(fruit_config) for fruit_config in config.fruits
        )
        self._weights: Tuple[float, ...] = tuple(f.weight for f in config.fruits)
        self._cumulative: Tuple[float, ...] = tuple(accumulate(self._weights))

    def __len__(self) -> int:
        return len(self._kinds)

    def __getitem__(self, fruit_id: int) -> FruitKind:
        """Get fruit kind by ID."""
        if 0 <= fruit_id < len(self._kinds):
            return self._kinds[fruit_id]
        raise IndexError(f"Fruit ID {fruit_id} out of range [0, {len(self._kinds)})")

    def __iter__(self) -> Iterator[FruitKind]:
        return iter(self._kinds)

    @property
    def all_kinds(self) -> Tuple[FruitKind, ...]:
        return self._kinds

    @property
    def total_weight(self) -> float:
        return self._cumulative[-1]

    def probability(self, fruit_id: int) -> float:
        """Chance that a fruit draw yields this variant."""
        return self._weights[fruit_id] / self.total_weight

    def choose(self, r: float) -> FruitKind:
        """
        Choose a fruit variant for a uniform draw.

        Args:
            r: Uniform draw in [0, 1).

        Returns:
            The selected fruit kind.
        """
        return self._kinds[weighted_index(self._cumulative, r)]

    def get_by_variant(self, variant: str) -> Optional[FruitKind]:
        """Get fruit kind by variant name (case-insensitive)."""
        variant_lower = variant.lower()
        for kind in self._kinds:
            if kind.variant.lower() == variant_lower:
                return kind
        return None
