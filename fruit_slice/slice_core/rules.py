"""
Game Rules
==========

Handles launch positioning, the miss line and which projectiles cost a life.
"""

from __future__ import annotations

from typing import Optional, Tuple

from fruit_slice.slice_core.config_loader import GameConfig, get_config
from fruit_slice.slice_core.difficulty import DifficultySnapshot
from fruit_slice.slice_core.fruit_catalog import BombKind, ProjectileKind


class SpawnRules:
    """
    Launch placement relative to the current viewport.

    Projectiles start just below the visible area, inside a horizontal band
    that keeps them clear of the side edges.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize spawn rules.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._margin = config.spawn.horizontal_margin
        self._offset = config.spawn.offset_below_screen
        self._apex_band = config.spawn.apex_band

    def get_spawn_x_range(self, snapshot: DifficultySnapshot) -> Tuple[float, float]:
        """
        Valid launch x range for the viewport.

        Collapses to the center line when the viewport is narrower than
        both margins.
        """
        margin = self._margin * snapshot.scale.x
        min_x = margin
        max_x = snapshot.screen_width - margin
        if min_x > max_x:
            center = snapshot.screen_width / 2.0
            return (center, center)
        return (min_x, max_x)

    def spawn_y(self, snapshot: DifficultySnapshot) -> float:
        """
        Y coordinate for launching, just below the visible area.

        The offset is not scaled with the viewport so launches always start
        above the miss line, which is a fixed margin below the screen too.
        """
        return snapshot.screen_height + self._offset

    def get_apex_y_range(self, snapshot: DifficultySnapshot) -> Tuple[float, float]:
        """Band of target apex heights in screen coordinates."""
        low, high = self._apex_band
        return (low * snapshot.screen_height, high * snapshot.screen_height)


class MissRules:
    """
    Decides when an unsliced projectile has fallen out of play and whether
    that costs a life.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._margin = config.session.miss_margin

    @property
    def margin(self) -> float:
        return self._margin

    def lower_bound(self, screen_height: float) -> float:
        """Y coordinate past which a projectile is gone."""
        return screen_height + self._margin

    @staticmethod
    def costs_life(kind: ProjectileKind) -> bool:
        """Missing a fruit costs a life; letting a bomb fall is harmless."""
        if isinstance(kind, BombKind):
            return False
        return True


class GameRules:
    """
    Combined interface for all game rules.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize game rules.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self.spawn = SpawnRules(config)
        self.miss = MissRules(config)
