"""
Swipe Trail
===========

Rolling history of pointer samples for the current swipe.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterator, List, Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class TrailPoint:
    """One pointer sample; ``t`` is the host timestamp in ms."""
    x: float
    y: float
    t: float

    @property
    def position(self) -> Tuple[float, float]:
        return self.x, self.y


class TrailBuffer:
    """
    Append-only trail with oldest-first eviction.

    A point is evicted once the buffer holds more than ``max_points`` or the
    point is older than ``max_age_ms`` relative to the newest sample.
    A ``max_age_ms`` of 0 disables age-based eviction.
    """

    def __init__(self, max_points: int = 14, max_age_ms: float = 0.0):
        self._max_points = max(2, int(max_points))
        self._max_age_ms = max(0.0, float(max_age_ms))
        self._points: Deque[TrailPoint] = deque(maxlen=self._max_points)

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[TrailPoint]:
        return iter(self._points)

    @property
    def points(self) -> List[TrailPoint]:
        return list(self._points)

    @property
    def newest(self) -> Optional[TrailPoint]:
        return self._points[-1] if self._points else None

    def append(self, x: float, y: float, t: float) -> TrailPoint:
        """Add a sample and evict whatever fell out of the window."""
        point = TrailPoint(float(x), float(y), float(t))
        self._points.append(point)
        if self._max_age_ms > 0:
            cutoff = point.t - self._max_age_ms
            while len(self._points) > 1 and self._points[0].t < cutoff:
                self._points.popleft()
        return point

    def clear(self) -> None:
        self._points.clear()

    def recent_segments(self, count: int) -> List[Tuple[TrailPoint, TrailPoint]]:
        """
        Up to ``count`` most recent consecutive segments, newest first.

        Args:
            count: Maximum number of segments.

        Returns:
            List of (older, newer) point pairs.
        """
        pts = self._points
        n = len(pts)
        segments = []
        for i in range(n - 1, 0, -1):
            if len(segments) >= count:
                break
            segments.append((pts[i - 1], pts[i]))
        return segments

    def as_array(self) -> np.ndarray:
        """(N, 3) float32 array of x, y, t."""
        if not self._points:
            return np.zeros((0, 3), dtype=np.float32)
        return np.array([(p.x, p.y, p.t) for p in self._points], dtype=np.float32)
