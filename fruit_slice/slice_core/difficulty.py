"""
Difficulty Curve
================

Maps elapsed session time to every tunable gameplay parameter.

Progress follows ``1 - exp(-2.3 * t / ramp)`` which is 0 at the start,
about 0.9 after one ramp period and never reaches 1. Each tunable is a
linear interpolation of its preset's ``(start, end)`` pair at that progress.
Velocities, gravity and projectile size are scaled to the current viewport
here, so every consumer reads already-scaled values.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Optional

from fruit_slice.slice_core.config_loader import (
    DifficultyPreset,
    GameConfig,
    Pair,
    ScreenConfig,
    get_config,
)

# Exponent constant giving progress(ramp) = 1 - e^-2.3 ~= 0.90
RAMP_CONSTANT = 2.3

# Largest double below 1.0
_PROGRESS_CEILING = 1.0 - 2.0 ** -53


def progress_at(elapsed_ms: float, ramp_seconds: float) -> float:
    """
    Normalized difficulty progress in [0, 1).

    Args:
        elapsed_ms: Session time in milliseconds. Negative values count as 0.
        ramp_seconds: Time in seconds to reach ~90% progress.

    Returns:
        Progress value, strictly below 1.
    """
    t = max(0.0, elapsed_ms) / 1000.0
    value = -math.expm1(-RAMP_CONSTANT * t / ramp_seconds)
    return min(value, _PROGRESS_CEILING)


def lerp(start: float, end: float, t: float) -> float:
    """Linear interpolation, exact at both endpoints."""
    return (1.0 - t) * start + t * end


def lerp_pair(pair: Pair, t: float) -> float:
    return lerp(pair[0], pair[1], t)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class Range:
    """Closed numeric interval; ``low > high`` is tolerated and swapped on use."""
    low: float
    high: float

    def ordered(self) -> "Range":
        if self.low > self.high:
            return Range(self.high, self.low)
        return self

    def scaled(self, factor: float) -> "Range":
        return Range(self.low * factor, self.high * factor)


@dataclass(frozen=True)
class ScreenScale:
    """Viewport scale factors relative to the reference resolution."""
    x: float
    y: float
    uniform: float


def screen_scale(width: float, height: float, screen: ScreenConfig) -> ScreenScale:
    """
    Compute scale factors for a viewport.

    Horizontal quantities follow the width ratio and vertical ones the height
    ratio. The uniform factor sizes projectiles: landscape viewports fit the
    reference box, portrait ones fit the rotated box and never upscale.

    Args:
        width: Current viewport width in pixels.
        height: Current viewport height in pixels.
        screen: Reference resolution.

    Returns:
        ScreenScale for the viewport.
    """
    width = max(1.0, float(width))
    height = max(1.0, float(height))
    sx = width / screen.reference_width
    sy = height / screen.reference_height

    if height > width:
        uniform = min(width / screen.reference_height, height / screen.reference_width, 1.0)
    else:
        uniform = min(sx, sy)

    return ScreenScale(x=sx, y=sy, uniform=uniform)


@dataclass(frozen=True)
class DifficultySnapshot:
    """
    Gameplay parameters at one instant, already scaled to the viewport.

    Recomputed on every query; never stored between ticks.
    """
    elapsed_ms: float
    progress: float
    spawn_interval_range: Range
    wave_size: Range
    wave_delay_range: Range
    horizontal_velocity_range: Range
    vertical_velocity_range: Range
    gravity: float
    max_concurrent_projectiles: int
    bomb_chance: float
    starting_lives: int
    projectile_radius: float
    screen_width: float
    screen_height: float
    scale: ScreenScale


class DifficultyClock:
    """
    Elapsed session time that drives the curve.

    Only ``advance`` and ``reset`` change it; the game stops calling
    ``advance`` while paused, which freezes difficulty in place.
    """

    def __init__(self):
        self._elapsed_ms: float = 0.0

    @property
    def elapsed_ms(self) -> float:
        return self._elapsed_ms

    def advance(self, delta_ms: float) -> None:
        if delta_ms > 0:
            self._elapsed_ms += delta_ms

    def reset(self) -> None:
        self._elapsed_ms = 0.0


class DifficultyCurve:
    """
    Pure evaluation of a preset at a point in time.

    Holds no time of its own; pair it with a DifficultyClock.
    """

    def __init__(
        self,
        preset: Optional[DifficultyPreset] = None,
        config: Optional[GameConfig] = None
    ):
        """
        Initialize curve.

        Args:
            preset: Difficulty tier. Uses the config's default mode if None.
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()
        if preset is None:
            preset = config.get_preset()

        self._config = config
        self._preset = preset

    @property
    def preset(self) -> DifficultyPreset:
        return self._preset

    @property
    def mode(self) -> str:
        return self._preset.name

    def progress(self, elapsed_ms: float) -> float:
        return progress_at(elapsed_ms, self._preset.ramp_seconds)

    def evaluate(
        self,
        elapsed_ms: float,
        screen_width: float,
        screen_height: float
    ) -> DifficultySnapshot:
        """
        Evaluate all tunables.

        Args:
            elapsed_ms: Session time in milliseconds.
            screen_width: Current viewport width.
            screen_height: Current viewport height.

        Returns:
            DifficultySnapshot with scaled values.
        """
        preset = self._preset
        p = self.progress(elapsed_ms)
        scale = screen_scale(screen_width, screen_height, self._config.screen)

        spawn_interval = Range(
            lerp_pair(preset.spawn_interval_min, p),
            lerp_pair(preset.spawn_interval_max, p)
        ).ordered()
        wave_size = Range(
            round_half_up(lerp_pair(preset.wave_size_min, p)),
            round_half_up(lerp_pair(preset.wave_size_max, p))
        ).ordered()
        wave_delay = Range(
            lerp_pair(preset.wave_delay_min, p),
            lerp_pair(preset.wave_delay_max, p)
        ).ordered()
        horizontal = Range(*preset.horizontal_velocity).ordered().scaled(scale.x)
        vertical = Range(
            lerp_pair(preset.vertical_velocity_min, p),
            lerp_pair(preset.vertical_velocity_max, p)
        ).ordered().scaled(scale.y)

        bomb_chance = min(1.0, max(0.0, lerp_pair(preset.bomb_chance, p)))

        return DifficultySnapshot(
            elapsed_ms=max(0.0, elapsed_ms),
            progress=p,
            spawn_interval_range=spawn_interval,
            wave_size=wave_size,
            wave_delay_range=wave_delay,
            horizontal_velocity_range=horizontal,
            vertical_velocity_range=vertical,
            gravity=preset.gravity * scale.y,
            max_concurrent_projectiles=round_half_up(lerp_pair(preset.max_concurrent, p)),
            bomb_chance=bomb_chance,
            starting_lives=preset.starting_lives,
            projectile_radius=self._config.spawn.base_radius * scale.uniform,
            screen_width=float(screen_width),
            screen_height=float(screen_height),
            scale=scale
        )

    def debug_info(self, elapsed_ms: float) -> Dict[str, str]:
        """Human-readable summary of the current tunables."""
        snap = self.evaluate(
            elapsed_ms,
            self._config.screen.reference_width,
            self._config.screen.reference_height
        )
        return {
            "mode": self.mode,
            "elapsed": f"{round_half_up(elapsed_ms / 1000.0)}s",
            "progress": f"{snap.progress * 100:.1f}%",
            "spawn_interval": f"{snap.spawn_interval_range.low:.0f}-{snap.spawn_interval_range.high:.0f}ms",
            "fruits_per_wave": f"{snap.wave_size.low:.0f}-{snap.wave_size.high:.0f}",
            "wave_delay": f"{snap.wave_delay_range.low:.0f}-{snap.wave_delay_range.high:.0f}ms",
            "max_concurrent": str(snap.max_concurrent_projectiles),
            "bomb_chance": f"{snap.bomb_chance * 100:.1f}%",
        }
