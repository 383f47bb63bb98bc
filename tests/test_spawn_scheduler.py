"""
Tests for spawn scheduling and launch sampling.
"""

import copy
import logging
import os
from collections import Counter

import pytest
import yaml

import fruit_slice
from fruit_slice.slice_core.config_loader import config_from_dict, load_config
from fruit_slice.slice_core.difficulty import DifficultyCurve
from fruit_slice.slice_core.fruit_catalog import BOMB, BombKind, FruitCatalog
from fruit_slice.slice_core.kinematics import apex_y
from fruit_slice.slice_core.physics_world import ProjectileWorld
from fruit_slice.slice_core.spawner import SpawnScheduler
from fruit_slice.slice_core.timers import TimerScheduler


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def raw_config():
    path = os.path.join(os.path.dirname(fruit_slice.__file__), "game_config.yaml")
    with open(path, "r") as f:
        return yaml.safe_load(f)


def make_scheduler(config, seed=42, elapsed_ms=0.0, size=(1280, 720)):
    world = ProjectileWorld()
    timers = TimerScheduler()
    curve = DifficultyCurve(config.get_preset(), config)
    spawner = SpawnScheduler(
        world=world,
        timers=timers,
        difficulty=lambda: curve.evaluate(elapsed_ms, size[0], size[1]),
        config=config,
        seed=seed
    )
    return spawner, world, timers, curve


class TestDeterminism:
    """Test seeded reproducibility."""

    def test_same_seed_same_launches(self, config):
        s1, w1, _, c1 = make_scheduler(config, seed=42)
        s2, w2, _, c2 = make_scheduler(config, seed=42)
        snap = c1.evaluate(0, 1280, 720)

        seq1 = [s1.launch(snap) for _ in range(30)]
        seq2 = [s2.launch(snap) for _ in range(30)]

        assert [(p.kind, p.x, p.vx, p.vy) for p in seq1] == [(p.kind, p.x, p.vx, p.vy) for p in seq2]

    def test_different_seeds_differ(self, config):
        s1, _, _, curve = make_scheduler(config, seed=42)
        s2, _, _, _ = make_scheduler(config, seed=123)
        snap = curve.evaluate(0, 1280, 720)

        xs1 = [s1.launch(snap).x for _ in range(30)]
        xs2 = [s2.launch(snap).x for _ in range(30)]
        assert xs1 != xs2

    def test_reset_replays_sequence(self, config):
        spawner, _, _, curve = make_scheduler(config, seed=7)
        snap = curve.evaluate(0, 1280, 720)
        first = [spawner.launch(snap).x for _ in range(10)]
        spawner.reset()
        second = [spawner.launch(snap).x for _ in range(10)]
        assert first == second


class TestKindSelection:
    """Test bomb chance and weighted fruit choice."""

    def test_weighted_distribution(self, config):
        catalog = FruitCatalog(config)
        spawner, _, _, curve = make_scheduler(config, seed=3)
        snap = curve.evaluate(0, 1280, 720)

        counts = Counter()
        for _ in range(4000):
            counts[spawner.choose_kind(snap).name] += 1

        for kind in catalog:
            assert counts[kind.name] > 0
        assert counts["red"] > counts["pink"]

        # bomb_chance is 0.05 at the start of a normal session
        assert 0.02 < counts["bomb"] / 4000 < 0.09

    def test_catalog_choose_edges(self, config):
        catalog = FruitCatalog(config)
        assert catalog.choose(0.0).variant == "red"
        assert catalog.choose(0.999999).variant == "pink"
        assert catalog.probability(0) == pytest.approx(0.25)

    def test_catalog_lookup(self, config):
        catalog = FruitCatalog(config)
        assert catalog.get_by_variant("Yellow").score_value == 15
        assert catalog.get_by_variant("durian") is None
        with pytest.raises(IndexError):
            catalog[len(catalog)]

    def test_forced_kind(self, config):
        spawner, _, _, curve = make_scheduler(config)
        p = spawner.launch(curve.evaluate(0, 1280, 720), kind=BOMB)
        assert isinstance(p.kind, BombKind)
        assert p.score_value == 0


class TestLaunchKinematics:
    """Test launch position and velocity."""

    def test_spawns_below_screen_within_margins(self, config):
        spawner, _, _, curve = make_scheduler(config)
        snap = curve.evaluate(0, 1280, 720)

        for _ in range(100):
            p = spawner.launch(snap)
            assert p.y == pytest.approx(790)
            assert 60 <= p.x <= 1220
            assert p.vy < 0
            assert 80 <= abs(p.vx) <= 200

    def test_apex_inside_band(self, config):
        spawner, _, _, curve = make_scheduler(config)
        snap = curve.evaluate(0, 1280, 720)

        for _ in range(100):
            p = spawner.launch(snap)
            peak = apex_y(p.y, p.vy, p.gravity)
            assert 0.12 * 720 - 1e-6 <= peak <= 0.40 * 720 + 1e-6

    def test_radius_variation(self, config):
        spawner, _, _, curve = make_scheduler(config)
        snap = curve.evaluate(0, 1280, 720)
        radii = [spawner.launch(snap).radius for _ in range(100)]
        assert all(28 * 0.9 - 1e-9 <= r <= 28 * 1.1 + 1e-9 for r in radii)
        assert len(set(radii)) > 1

    def test_velocity_mode(self, raw_config):
        raw = copy.deepcopy(raw_config)
        raw["spawn"]["vertical_mode"] = "velocity"
        config = config_from_dict(raw)
        spawner, _, _, curve = make_scheduler(config)
        snap = curve.evaluate(0, 1280, 720)

        for _ in range(50):
            p = spawner.launch(snap)
            assert -700 <= p.vy <= -620

    def test_narrow_viewport_collapses_to_center(self, config):
        spawner, _, _, curve = make_scheduler(config, size=(40, 720))
        p = spawner.launch(curve.evaluate(0, 40, 720))
        assert p.x == pytest.approx(20)


class TestContinuousPolicy:
    """Test timer-driven single launches."""

    def test_initial_delay(self, config):
        spawner, world, timers, _ = make_scheduler(config)
        spawner.start()

        timers.advance(399)
        assert world.count == 0
        timers.advance(1)
        assert world.count == 1
        assert spawner.launched == 1

    def test_respects_concurrency_cap(self, config):
        spawner, world, timers, _ = make_scheduler(config)
        spawner.start()

        timers.advance(60000)
        # max_concurrent is 3 at progress 0 and nothing is removed
        assert world.count == 3

    def test_stop_cancels_pending(self, config):
        spawner, world, timers, _ = make_scheduler(config)
        spawner.start()
        spawner.stop()
        timers.advance(10000)
        assert world.count == 0
        assert spawner.pending_timers == 0
        assert timers.pending_count == 0

    def test_non_positive_cap_never_spawns(self, raw_config, caplog):
        raw = copy.deepcopy(raw_config)
        raw["difficulty"]["presets"]["normal"]["max_concurrent"] = [0, 0]
        config = config_from_dict(raw)
        spawner, world, timers, _ = make_scheduler(config)
        spawner.start()

        with caplog.at_level(logging.WARNING, logger="fruit_slice.slice_core.spawner"):
            timers.advance(20000)

        assert world.count == 0
        warnings = [r for r in caplog.records if "max_concurrent_projectiles" in r.getMessage()]
        assert len(warnings) == 1


class TestWavePolicy:
    """Test staggered wave launches."""

    @pytest.fixture
    def wave_config(self, raw_config):
        raw = copy.deepcopy(raw_config)
        raw["spawn"]["policy"] = "wave"
        raw["difficulty"]["presets"]["normal"]["max_concurrent"] = [20, 20]
        return config_from_dict(raw)

    def test_first_launch_is_immediate(self, wave_config):
        spawner, world, timers, _ = make_scheduler(wave_config)
        assert spawner.policy == "wave"
        spawner.start()

        timers.advance(400)
        assert world.count == 1

    def test_wave_sizes_within_bounds(self, wave_config):
        spawner, world, timers, _ = make_scheduler(wave_config, seed=11)
        spawner.start()

        # First wave fires at 400ms; the next wave is at least 1500ms later
        timers.advance(400 + 80 * 5)
        assert 1 <= world.count <= 2

    def test_waves_repeat(self, wave_config):
        spawner, world, timers, _ = make_scheduler(wave_config, seed=5)
        spawner.start()
        timers.advance(400 + 2200 * 3)
        assert world.count >= 3
