"""
Slice Detection
===============

Matches the swipe trail against live projectiles.

Each pointer move appends to the trail, then the most recent segments that
are fast enough are tested against the most recently spawned projectiles:
an axis-aligned box test first, then the exact closest-point test on the
survivors. A projectile that passes the box but misses the circle is put on
a short cooldown before it is considered again.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from fruit_slice.slice_core.config_loader import GameConfig, get_config
from fruit_slice.slice_core.fruit_catalog import ProjectileKind
from fruit_slice.slice_core.geometry import (
    segment_bounds,
    segment_hits_circles,
    within_bounds,
)
from fruit_slice.slice_core.physics_world import Projectile, ProjectileWorld
from fruit_slice.slice_core.trail import TrailBuffer, TrailPoint

logger = logging.getLogger(__name__)


@dataclass
class SliceOutcome:
    """A projectile cut by the swipe."""
    projectile: Projectile
    position: Tuple[float, float]
    swipe_angle: float   # radians, direction of the cutting segment
    swipe_speed: float   # px/s
    timestamp: float

    @property
    def uid(self) -> int:
        return self.projectile.uid

    @property
    def kind(self) -> ProjectileKind:
        return self.projectile.kind

    @property
    def is_bomb(self) -> bool:
        return self.projectile.is_bomb

    @property
    def score_value(self) -> int:
        return self.projectile.score_value


def segment_speed(a: TrailPoint, b: TrailPoint) -> float:
    """Pointer speed between two samples in px/s (time floored at 1ms)."""
    dt = max(1.0, b.t - a.t)
    return math.hypot(b.x - a.x, b.y - a.y) / dt * 1000.0


class SliceDetector:
    """
    Turns pointer samples into slice outcomes.

    Owns the TrailBuffer. Sliced projectiles are flagged and removed from
    the world at once, so each one produces exactly one outcome.
    """

    def __init__(self, world: ProjectileWorld, config: Optional[GameConfig] = None):
        """
        Initialize detector.

        Args:
            world: Live-projectile set to test against.
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._world = world
        slice_config = config.slice
        self._trail = TrailBuffer(slice_config.max_trail_points, slice_config.max_trail_age)
        self._min_speed = slice_config.min_slice_speed
        self._segments_per_move = slice_config.segments_per_move
        self._margin = slice_config.bbox_margin
        self._cooldown = slice_config.near_miss_cooldown
        self._max_checked = slice_config.max_projectiles_checked

        self._pointer_down = False
        self._segments_tested = 0
        self._circle_tests = 0

    @property
    def trail(self) -> TrailBuffer:
        return self._trail

    @property
    def is_pointer_down(self) -> bool:
        return self._pointer_down

    @property
    def segments_tested(self) -> int:
        return self._segments_tested

    @property
    def circle_tests(self) -> int:
        """Exact segment-circle tests run (after the box test)."""
        return self._circle_tests

    @property
    def min_slice_speed(self) -> float:
        return self._min_speed

    def set_min_slice_speed(self, speed: float) -> None:
        """Near-zero values turn swipes into tap/hold detection."""
        self._min_speed = max(0.0, float(speed))

    def pointer_down(self, x: float, y: float, t: float) -> None:
        """Start a new swipe: the trail restarts at this sample."""
        self._pointer_down = True
        self._trail.clear()
        self._trail.append(x, y, t)

    def pointer_up(self, t: Optional[float] = None) -> None:
        self._pointer_down = False
        self._trail.clear()

    def cancel(self) -> None:
        """Drop the swipe in progress."""
        self.pointer_up()

    def pointer_move(self, x: float, y: float, t: float) -> List[SliceOutcome]:
        """
        Process one move sample.

        Ignored unless the pointer is down.

        Args:
            x: Pointer x.
            y: Pointer y.
            t: Host timestamp in ms.

        Returns:
            Outcomes for every projectile cut by this move, in spawn order.
        """
        if not self._pointer_down:
            return []

        self._trail.append(x, y, t)
        segments = [
            (a, b) for a, b in self._trail.recent_segments(self._segments_per_move)
            if segment_speed(a, b) >= self._min_speed
        ]
        if not segments:
            return []
        return self._slice_segments(segments, t)

    def check_segment(self, a: TrailPoint, b: TrailPoint) -> List[SliceOutcome]:
        """Test a single segment regardless of speed or pointer state."""
        return self._slice_segments([(a, b)], b.t)

    def _candidates(self, now: float) -> List[Projectile]:
        return [
            p for p in self._world.most_recent(self._max_checked)
            if not p.sliced and now >= p.slice_cooldown_until
        ]

    def _slice_segments(
        self,
        segments: List[Tuple[TrailPoint, TrailPoint]],
        now: float
    ) -> List[SliceOutcome]:
        candidates = self._candidates(now)
        if not candidates:
            return []

        centers = np.array([(p.x, p.y) for p in candidates], dtype=np.float64)
        radii = np.array([p.radius for p in candidates], dtype=np.float64)

        near = np.zeros(len(candidates), dtype=bool)
        hit_segment = np.full(len(candidates), -1, dtype=np.int64)

        # Newest segment first so the cut angle follows the latest motion
        for index, (a, b) in enumerate(segments):
            self._segments_tested += 1
            in_box = within_bounds(centers, segment_bounds(a.position, b.position, self._margin))
            in_box &= hit_segment < 0
            if not in_box.any():
                continue

            near |= in_box
            idx = np.flatnonzero(in_box)
            self._circle_tests += len(idx)
            hits = segment_hits_circles(a.position, b.position, centers[idx], radii[idx])
            hit_segment[idx[hits]] = index

        outcomes: List[SliceOutcome] = []
        for i, projectile in enumerate(candidates):
            seg = int(hit_segment[i])
            if seg >= 0:
                outcome = self._mark_sliced(projectile, segments[seg], now)
                if outcome is not None:
                    outcomes.append(outcome)
            elif near[i]:
                projectile.slice_cooldown_until = now + self._cooldown

        return outcomes

    def _mark_sliced(
        self,
        projectile: Projectile,
        segment: Tuple[TrailPoint, TrailPoint],
        now: float
    ) -> Optional[SliceOutcome]:
        if projectile.sliced:
            return None
        projectile.sliced = True
        self._world.remove(projectile.uid)

        a, b = segment
        angle = math.atan2(b.y - a.y, b.x - a.x)
        logger.debug("sliced %s #%d", projectile.kind.name, projectile.uid)
        return SliceOutcome(
            projectile=projectile,
            position=(projectile.x, projectile.y),
            swipe_angle=angle,
            swipe_speed=segment_speed(a, b),
            timestamp=now
        )
