"""
Cooperative Timers
==================

Deferred callbacks driven by the session's logical clock.

Nothing here runs on its own: timers only fire inside ``advance``. The game
skips ``advance`` while paused, so every pending timer is frozen at once and
resumes with exactly the time it had left.
"""

from __future__ import annotations

import heapq
from dataclasses import dataclass, field
from typing import Callable, List, Set


@dataclass(frozen=True)
class TimerToken:
    """Handle returned by ``schedule_once``; pass it to ``cancel``."""
    id: int
    deadline_ms: float


@dataclass(order=True)
class _Entry:
    deadline_ms: float
    seq: int
    token: TimerToken = field(compare=False)
    callback: Callable[[], None] = field(compare=False)


class TimerScheduler:
    """
    Min-heap of one-shot timers on a logical millisecond clock.

    Timers fire in deadline order, ties in scheduling order. A callback may
    schedule further timers; any whose deadline falls inside the current
    ``advance`` window fire during the same call.
    """

    def __init__(self):
        self._now_ms: float = 0.0
        self._heap: List[_Entry] = []
        self._pending: Set[int] = set()
        self._seq: int = 0

    @property
    def now_ms(self) -> float:
        """Current logical time."""
        return self._now_ms

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def is_pending(self, token: TimerToken) -> bool:
        return token.id in self._pending

    def schedule_once(self, delay_ms: float, callback: Callable[[], None]) -> TimerToken:
        """
        Schedule ``callback`` to run after ``delay_ms`` of logical time.

        Args:
            delay_ms: Delay in milliseconds; negative values count as 0.
            callback: Zero-argument callable.

        Returns:
            Token that can cancel the timer.
        """
        self._seq += 1
        token = TimerToken(id=self._seq, deadline_ms=self._now_ms + max(0.0, delay_ms))
        heapq.heappush(self._heap, _Entry(token.deadline_ms, self._seq, token, callback))
        self._pending.add(token.id)
        return token

    def cancel(self, token: TimerToken) -> bool:
        """
        Cancel a pending timer.

        Returns:
            True if the timer was pending, False if it already fired or was
            cancelled before.
        """
        if token.id in self._pending:
            self._pending.discard(token.id)
            return True
        return False

    def cancel_all(self) -> None:
        self._heap.clear()
        self._pending.clear()

    def reset(self) -> None:
        """Cancel everything and rewind the clock to 0."""
        self.cancel_all()
        self._now_ms = 0.0

    def advance(self, delta_ms: float) -> int:
        """
        Move the clock forward, firing every timer that comes due.

        Args:
            delta_ms: Elapsed logical time. Non-positive values fire nothing.

        Returns:
            Number of callbacks run.
        """
        if delta_ms <= 0:
            return 0

        target = self._now_ms + delta_ms
        fired = 0
        while self._heap and self._heap[0].deadline_ms <= target:
            entry = heapq.heappop(self._heap)
            if entry.token.id not in self._pending:
                continue
            self._pending.discard(entry.token.id)
            self._now_ms = max(self._now_ms, entry.deadline_ms)
            entry.callback()
            fired += 1

        self._now_ms = target
        return fired
