"""
Scoring System
==============

Combo chaining and per-hit score calculation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from fruit_slice.slice_core.config_loader import GameConfig, get_config
from fruit_slice.slice_core.timers import TimerScheduler, TimerToken


@dataclass
class ScoreEvent:
    """Record of a scoring event."""
    points: int
    base_points: int
    multiplier: int
    combo_count: int

    def __repr__(self) -> str:
        if self.multiplier > 1:
            return f"ScoreEvent(+{self.points} = {self.base_points} x{self.multiplier})"
        return f"ScoreEvent(+{self.points})"


def combo_points(base_points: int, combo_count: int) -> int:
    """Points for a hit: base value times the running combo count (at least 1)."""
    return base_points * max(1, combo_count)


class ComboTracker:
    """
    Counts fruit hits that land within ``combo.window`` ms of each other.

    Every hit re-arms a finalize timer. When it fires with no further hit,
    a combo of at least ``announce_threshold`` is announced through
    ``on_combo`` and the count goes back to 0 either way. The multiplier is
    applied at the moment of each hit, so it compounds within a chain:
    hits worth 10, 10, 15 score 10x1 + 10x2 + 15x3.
    """

    def __init__(
        self,
        timers: TimerScheduler,
        config: Optional[GameConfig] = None,
        on_combo: Optional[Callable[[int], None]] = None
    ):
        """
        Initialize combo tracker.

        Args:
            timers: Session timer scheduler (finalize timers live here).
            config: Game configuration. Uses default if None.
            on_combo: Called with the final count of an announced combo.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._timers = timers
        self._on_combo = on_combo
        self._window = config.combo.window
        self._threshold = config.combo.announce_threshold

        self._count: int = 0
        self._timer: Optional[TimerToken] = None
        self._combos_announced: int = 0
        self._best_combo: int = 0

    @property
    def count(self) -> int:
        """Hits in the current chain."""
        return self._count

    @property
    def window_expires_at(self) -> Optional[float]:
        """Logical time the pending finalize fires, or None."""
        if self._timer is not None and self._timers.is_pending(self._timer):
            return self._timer.deadline_ms
        return None

    @property
    def combos_announced(self) -> int:
        return self._combos_announced

    @property
    def best_combo(self) -> int:
        """Largest announced combo this session."""
        return self._best_combo

    def on_swipe_start(self) -> None:
        """A new swipe drops any chain in progress without announcing it."""
        self._cancel_timer()
        self._count = 0

    def on_slice_outcome(self, base_points: int) -> ScoreEvent:
        """
        Register a fruit hit.

        Args:
            base_points: The fruit's score value.

        Returns:
            ScoreEvent with the points earned by this hit.
        """
        self._count += 1
        multiplier = max(1, self._count)
        event = ScoreEvent(
            points=combo_points(base_points, self._count),
            base_points=base_points,
            multiplier=multiplier,
            combo_count=self._count
        )
        self._cancel_timer()
        self._timer = self._timers.schedule_once(self._window, self._finalize)
        return event

    def _finalize(self) -> None:
        self._timer = None
        count = self._count
        self._count = 0
        if count >= self._threshold:
            self._combos_announced += 1
            self._best_combo = max(self._best_combo, count)
            if self._on_combo is not None:
                self._on_combo(count)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timers.cancel(self._timer)
            self._timer = None

    def cancel(self) -> None:
        """Drop the chain and any pending finalize (session teardown)."""
        self._cancel_timer()
        self._count = 0

    def reset(self) -> None:
        self.cancel()
        self._combos_announced = 0
        self._best_combo = 0
