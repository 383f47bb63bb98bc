"""
Tests for the difficulty curve and viewport scaling.
"""

import pytest

from fruit_slice.slice_core.config_loader import load_config
from fruit_slice.slice_core.difficulty import (
    DifficultyClock,
    DifficultyCurve,
    lerp,
    progress_at,
    screen_scale,
)


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def curve(config):
    return DifficultyCurve(config.get_preset("normal"), config)


class TestProgress:
    """Test the exponential ramp."""

    def test_starts_at_zero(self):
        assert progress_at(0, 90) == 0.0

    def test_negative_time_counts_as_zero(self):
        assert progress_at(-500, 90) == 0.0

    def test_about_ninety_percent_after_one_ramp(self):
        value = progress_at(90 * 1000, 90)
        assert 0.85 <= value <= 0.95

    def test_never_reaches_one(self):
        assert progress_at(1e12, 90) < 1.0
        assert progress_at(1e15, 0.001) < 1.0

    def test_monotonic(self):
        values = [progress_at(t, 60) for t in range(0, 300000, 997)]
        assert all(b >= a for a, b in zip(values, values[1:]))

    def test_curve_uses_preset_ramp(self, config):
        easy = DifficultyCurve(config.get_preset("easy"), config)
        hard = DifficultyCurve(config.get_preset("hard"), config)
        assert hard.progress(30000) > easy.progress(30000)


class TestLerp:
    """Test interpolation endpoints."""

    def test_exact_endpoints(self):
        assert lerp(0.05, 0.18, 0.0) == 0.05
        assert lerp(0.05, 0.18, 1.0) == 0.18

    def test_midpoint(self):
        assert lerp(900, 350, 0.5) == pytest.approx(625)


class TestEvaluate:
    """Test evaluated snapshots at the reference resolution."""

    def test_start_values(self, curve):
        snap = curve.evaluate(0, 1280, 720)

        assert snap.progress == 0.0
        assert snap.bomb_chance == 0.05
        assert snap.spawn_interval_range.low == 900
        assert snap.spawn_interval_range.high == 1400
        assert snap.max_concurrent_projectiles == 3
        assert snap.gravity == pytest.approx(450)
        assert snap.projectile_radius == pytest.approx(28)
        assert snap.starting_lives == 3

    def test_values_move_toward_end(self, curve):
        early = curve.evaluate(0, 1280, 720)
        late = curve.evaluate(300000, 1280, 720)

        assert late.bomb_chance > early.bomb_chance
        assert late.bomb_chance <= 0.18
        assert late.spawn_interval_range.high < early.spawn_interval_range.high
        assert late.max_concurrent_projectiles == 8

    def test_ranges_are_ordered(self, curve):
        for t in (0, 10000, 45000, 90000, 600000):
            snap = curve.evaluate(t, 1280, 720)
            assert snap.spawn_interval_range.low <= snap.spawn_interval_range.high
            assert snap.wave_size.low <= snap.wave_size.high
            assert snap.wave_delay_range.low <= snap.wave_delay_range.high
            assert snap.vertical_velocity_range.low <= snap.vertical_velocity_range.high

    def test_bomb_chance_in_unit_interval(self, curve):
        for t in (0, 1000, 1e6, 1e9):
            assert 0.0 <= curve.evaluate(t, 1280, 720).bomb_chance <= 1.0

    def test_debug_info(self, curve):
        info = curve.debug_info(45000)
        assert info["mode"] == "normal"
        assert info["elapsed"] == "45s"
        assert info["bomb_chance"].endswith("%")


class TestScaling:
    """Test viewport scaling of velocities, gravity and size."""

    def test_half_size_viewport(self, curve):
        snap = curve.evaluate(0, 640, 360)

        assert snap.gravity == pytest.approx(225)
        assert snap.horizontal_velocity_range.low == pytest.approx(40)
        assert snap.horizontal_velocity_range.high == pytest.approx(100)
        assert snap.projectile_radius == pytest.approx(14)
        assert snap.vertical_velocity_range.low == pytest.approx(-350)

    def test_portrait_never_upscales(self, config):
        scale = screen_scale(1080, 1920, config.screen)
        assert scale.uniform == pytest.approx(1.0)

    def test_portrait_fits_rotated_box(self, config):
        scale = screen_scale(360, 640, config.screen)
        assert scale.uniform == pytest.approx(0.5)

    def test_zero_viewport_does_not_divide_by_zero(self, curve):
        snap = curve.evaluate(0, 0, 0)
        assert snap.projectile_radius > 0


class TestDifficultyClock:
    """Test the clock that drives the curve."""

    def test_advance_and_reset(self):
        clock = DifficultyClock()
        clock.advance(16)
        clock.advance(-5)
        clock.advance(0)
        assert clock.elapsed_ms == 16

        clock.reset()
        assert clock.elapsed_ms == 0
