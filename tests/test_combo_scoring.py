"""
Tests for combo chaining and scoring.
"""

import pytest

from fruit_slice.slice_core.config_loader import load_config
from fruit_slice.slice_core.game import CoreGame
from fruit_slice.slice_core.scoring import ComboTracker, combo_points
from fruit_slice.slice_core.timers import TimerScheduler


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def timers():
    return TimerScheduler()


class TestComboTracker:
    """Test the chain counter on its own."""

    def test_multiplier_compounds(self, timers, config):
        combo = ComboTracker(timers, config)
        points = [combo.on_slice_outcome(v).points for v in (10, 10, 15)]
        assert points == [10, 20, 45]
        assert sum(points) == 75

    def test_announce_at_threshold(self, timers, config):
        announced = []
        combo = ComboTracker(timers, config, on_combo=announced.append)
        for _ in range(3):
            combo.on_slice_outcome(10)

        timers.advance(149)
        assert announced == []
        timers.advance(1)
        assert announced == [3]
        assert combo.count == 0
        assert combo.best_combo == 3

    def test_below_threshold_not_announced(self, timers, config):
        announced = []
        combo = ComboTracker(timers, config, on_combo=announced.append)
        combo.on_slice_outcome(10)
        combo.on_slice_outcome(10)
        timers.advance(500)
        assert announced == []
        assert combo.count == 0

    def test_each_hit_rearms_window(self, timers, config):
        combo = ComboTracker(timers, config)
        combo.on_slice_outcome(10)
        timers.advance(100)
        combo.on_slice_outcome(10)
        timers.advance(100)
        assert combo.count == 2
        assert combo.window_expires_at == pytest.approx(250)

    def test_hit_after_window_restarts_at_one(self, timers, config):
        combo = ComboTracker(timers, config)
        for v in (10, 10, 15):
            combo.on_slice_outcome(v)
        timers.advance(150)
        event = combo.on_slice_outcome(10)
        assert event.combo_count == 1
        assert event.points == 10

    def test_swipe_start_drops_chain_silently(self, timers, config):
        announced = []
        combo = ComboTracker(timers, config, on_combo=announced.append)
        for _ in range(4):
            combo.on_slice_outcome(10)
        combo.on_swipe_start()
        timers.advance(1000)
        assert announced == []
        assert combo.count == 0

    def test_combo_points(self):
        assert combo_points(25, 0) == 25
        assert combo_points(25, 4) == 100


class TestComboInGame:
    """Test combos through the full game loop."""

    def test_three_fruit_swipe_then_restart(self, config):
        game = CoreGame(config=config, seed=1, autostart=False)
        catalog = game.spawner.catalog
        for variant, x in (("red", 300), ("green", 400), ("yellow", 500)):
            game.spawn_projectile(
                kind=catalog.get_by_variant(variant),
                position=(x, 300),
                velocity=(0, 0),
                radius=28
            )

        game.pointer_down(250, 300, 0)
        outcomes = game.pointer_move(550, 300, 10)
        assert len(outcomes) == 3
        assert game.score == 75

        game.advance(150)
        assert game.combo.count == 0

        game.spawn_projectile(
            kind=catalog.get_by_variant("red"),
            position=(600, 300),
            velocity=(0, 0),
            radius=28
        )
        game.pointer_move(650, 300, 20)
        assert game.score == 85
        assert game.combo.count == 1
