"""
Tests for the swipe trail buffer.
"""

from fruit_slice.slice_core.trail import TrailBuffer


class TestTrailBuffer:
    """Test eviction and segment access."""

    def test_count_eviction_keeps_newest(self):
        trail = TrailBuffer(max_points=3)
        for i in range(5):
            trail.append(i, 0, i * 10)

        assert len(trail) == 3
        assert [p.x for p in trail] == [2, 3, 4]

    def test_age_eviction(self):
        trail = TrailBuffer(max_points=14, max_age_ms=250)
        trail.append(0, 0, 0)
        trail.append(1, 0, 100)
        trail.append(2, 0, 300)

        # t=0 is more than 250ms older than t=300
        assert [p.t for p in trail] == [100, 300]

    def test_age_eviction_keeps_one_point(self):
        trail = TrailBuffer(max_points=14, max_age_ms=50)
        trail.append(0, 0, 0)
        trail.append(1, 0, 1000)

        assert len(trail) == 1
        assert trail.newest.t == 1000

    def test_zero_age_disables_age_eviction(self):
        trail = TrailBuffer(max_points=14, max_age_ms=0)
        trail.append(0, 0, 0)
        trail.append(1, 0, 1e6)
        assert len(trail) == 2

    def test_recent_segments_newest_first(self):
        trail = TrailBuffer(max_points=14)
        for i in range(4):
            trail.append(i, 0, i)

        segments = trail.recent_segments(2)
        assert [(a.x, b.x) for a, b in segments] == [(2, 3), (1, 2)]

    def test_recent_segments_short_trail(self):
        trail = TrailBuffer()
        assert trail.recent_segments(3) == []
        trail.append(0, 0, 0)
        assert trail.recent_segments(3) == []
        trail.append(1, 1, 1)
        assert len(trail.recent_segments(3)) == 1

    def test_clear(self):
        trail = TrailBuffer()
        trail.append(0, 0, 0)
        trail.clear()
        assert len(trail) == 0
        assert trail.newest is None

    def test_as_array(self):
        trail = TrailBuffer()
        assert trail.as_array().shape == (0, 3)
        trail.append(5, 6, 7)
        arr = trail.as_array()
        assert arr.shape == (1, 3)
        assert arr[0].tolist() == [5.0, 6.0, 7.0]
