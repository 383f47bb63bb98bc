"""
Tests for the cooperative timer scheduler.
"""

from fruit_slice.slice_core.timers import TimerScheduler


class TestTimerScheduler:
    """Test firing order, cancellation and nesting."""

    def test_fires_in_deadline_order(self):
        timers = TimerScheduler()
        fired = []
        timers.schedule_once(30, lambda: fired.append("c"))
        timers.schedule_once(10, lambda: fired.append("a"))
        timers.schedule_once(20, lambda: fired.append("b"))

        assert timers.advance(25) == 2
        assert fired == ["a", "b"]
        timers.advance(5)
        assert fired == ["a", "b", "c"]

    def test_ties_fire_in_scheduling_order(self):
        timers = TimerScheduler()
        fired = []
        for name in "xyz":
            timers.schedule_once(10, lambda n=name: fired.append(n))
        timers.advance(10)
        assert fired == ["x", "y", "z"]

    def test_cancel(self):
        timers = TimerScheduler()
        fired = []
        token = timers.schedule_once(10, lambda: fired.append(1))

        assert timers.cancel(token)
        assert not timers.cancel(token)
        timers.advance(100)
        assert fired == []

    def test_cancel_after_fire_returns_false(self):
        timers = TimerScheduler()
        token = timers.schedule_once(5, lambda: None)
        timers.advance(5)
        assert not timers.is_pending(token)
        assert not timers.cancel(token)

    def test_nested_schedule_fires_in_same_advance(self):
        timers = TimerScheduler()
        fired = []

        def first():
            fired.append(timers.now_ms)
            timers.schedule_once(10, lambda: fired.append(timers.now_ms))

        timers.schedule_once(10, first)
        timers.advance(50)
        assert fired == [10, 20]
        assert timers.now_ms == 50

    def test_non_positive_advance_does_nothing(self):
        timers = TimerScheduler()
        timers.schedule_once(0, lambda: None)
        assert timers.advance(0) == 0
        assert timers.advance(-10) == 0
        assert timers.pending_count == 1
        assert timers.now_ms == 0

    def test_reset(self):
        timers = TimerScheduler()
        timers.schedule_once(10, lambda: None)
        timers.advance(5)
        timers.reset()
        assert timers.pending_count == 0
        assert timers.now_ms == 0
