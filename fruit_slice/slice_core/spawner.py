"""
Spawn Scheduler
===============

Decides when to launch projectiles, which kind, and with what initial
kinematics.

Two policies are supported, fixed per session by ``spawn.policy``:

- ``continuous``: one timer launches a single projectile per fire (if the
  live count is below the cap) and re-arms itself after a delay drawn from
  the spawn interval.
- ``wave``: a wave timer draws a wave size, schedules that many launches
  staggered by ``wave_stagger``, then waits a delay drawn from the wave
  delay bounds.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple

from fruit_slice.slice_core.config_loader import GameConfig, get_config
from fruit_slice.slice_core.difficulty import DifficultySnapshot
from fruit_slice.slice_core.fruit_catalog import BOMB, FruitCatalog, ProjectileKind
from fruit_slice.slice_core.kinematics import apex_launch_velocity
from fruit_slice.slice_core.physics_world import Projectile, ProjectileWorld
from fruit_slice.slice_core.rng import SpawnRandom
from fruit_slice.slice_core.rules import SpawnRules
from fruit_slice.slice_core.timers import TimerScheduler, TimerToken

logger = logging.getLogger(__name__)

# Shortest re-arm delay, so a zero interval cannot spin inside one advance
MIN_REARM_DELAY_MS = 1.0


class SpawnScheduler:
    """
    Launch timing and initial kinematics.

    Reads a fresh DifficultySnapshot each time a timer fires, so every
    launch uses the difficulty and viewport of that moment.
    """

    def __init__(
        self,
        world: ProjectileWorld,
        timers: TimerScheduler,
        difficulty: Callable[[], DifficultySnapshot],
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        on_spawn: Optional[Callable[[Projectile], None]] = None
    ):
        """
        Initialize spawner.

        Args:
            world: Live-projectile set launches are added to.
            timers: Session timer scheduler.
            difficulty: Returns the current DifficultySnapshot.
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility.
            on_spawn: Called with each launched projectile.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._world = world
        self._timers = timers
        self._difficulty = difficulty
        self._on_spawn = on_spawn
        self._catalog = FruitCatalog(config)
        self._rules = SpawnRules(config)
        self._rng = SpawnRandom(seed)
        self._policy = config.spawn.policy

        self._timer: Optional[TimerToken] = None
        self._wave_launches: List[TimerToken] = []
        self._running = False
        self._warned_bad_cap = False
        self._launched = 0

    @property
    def policy(self) -> str:
        return self._policy

    @property
    def running(self) -> bool:
        return self._running

    @property
    def launched(self) -> int:
        """Projectiles launched since the last reset."""
        return self._launched

    @property
    def catalog(self) -> FruitCatalog:
        return self._catalog

    @property
    def pending_timers(self) -> int:
        count = 1 if self._timer is not None and self._timers.is_pending(self._timer) else 0
        return count + sum(1 for t in self._wave_launches if self._timers.is_pending(t))

    def start(self) -> None:
        """Arm the first timer after the initial delay."""
        self.stop()
        self._running = True
        callback = self._on_wave_timer if self._policy == "wave" else self._on_spawn_timer
        self._timer = self._timers.schedule_once(self._config.spawn.initial_delay, callback)

    def stop(self) -> None:
        """Cancel every pending launch; nothing fires into stale state."""
        self._running = False
        if self._timer is not None:
            self._timers.cancel(self._timer)
            self._timer = None
        for token in self._wave_launches:
            self._timers.cancel(token)
        self._wave_launches = []

    def reset(self, seed: Optional[int] = None) -> None:
        self.stop()
        self._rng.reset(seed)
        self._warned_bad_cap = False
        self._launched = 0

    def _has_capacity(self, snapshot: DifficultySnapshot) -> bool:
        cap = snapshot.max_concurrent_projectiles
        if cap <= 0:
            if not self._warned_bad_cap:
                logger.warning(
                    "max_concurrent_projectiles is %s at progress %.3f; not spawning",
                    cap, snapshot.progress
                )
                self._warned_bad_cap = True
            return False
        return self._world.live_count < cap

    def _on_spawn_timer(self) -> None:
        if not self._running:
            return
        snapshot = self._difficulty()
        if self._has_capacity(snapshot):
            self.launch(snapshot)

        delay = max(MIN_REARM_DELAY_MS, self._rng.uniform(snapshot.spawn_interval_range))
        self._timer = self._timers.schedule_once(delay, self._on_spawn_timer)

    def _on_wave_timer(self) -> None:
        if not self._running:
            return
        snapshot = self._difficulty()
        count = max(0, self._rng.integer(snapshot.wave_size))
        stagger = self._config.spawn.wave_stagger

        self._wave_launches = [t for t in self._wave_launches if self._timers.is_pending(t)]
        for i in range(count):
            if i == 0:
                self._launch_in_wave()
            else:
                self._wave_launches.append(
                    self._timers.schedule_once(stagger * i, self._launch_in_wave)
                )

        delay = max(MIN_REARM_DELAY_MS, self._rng.uniform(snapshot.wave_delay_range))
        self._timer = self._timers.schedule_once(delay, self._on_wave_timer)
        logger.debug("wave of %d scheduled, next wave in %.0fms", count, delay)

    def _launch_in_wave(self) -> None:
        if not self._running:
            return
        snapshot = self._difficulty()
        if self._has_capacity(snapshot):
            self.launch(snapshot)

    def choose_kind(self, snapshot: DifficultySnapshot) -> ProjectileKind:
        """Bomb with probability ``bomb_chance``, otherwise a weighted fruit."""
        if self._rng.chance(snapshot.bomb_chance):
            return BOMB
        return self._rng.fruit(self._catalog)

    def launch_velocity(
        self,
        snapshot: DifficultySnapshot,
        launch_y: float
    ) -> Tuple[float, float]:
        """
        Draw initial velocity for a launch.

        Horizontal speed comes from the scaled range with a random direction.
        Vertical speed is either drawn directly or back-solved so the apex
        lands inside the configured band.
        """
        vx = self._rng.uniform(snapshot.horizontal_velocity_range) * self._rng.direction()
        if self._config.spawn.vertical_mode == "apex":
            apex = self._rng.uniform(self._rules.get_apex_y_range(snapshot))
            vy = apex_launch_velocity(snapshot.gravity, launch_y, apex)
        else:
            vy = self._rng.uniform(snapshot.vertical_velocity_range)
        return vx, vy

    def launch(
        self,
        snapshot: DifficultySnapshot,
        kind: Optional[ProjectileKind] = None
    ) -> Projectile:
        """
        Launch one projectile now.

        Args:
            snapshot: Difficulty and viewport for this launch.
            kind: Force a kind instead of drawing one.

        Returns:
            The launched Projectile.
        """
        if kind is None:
            kind = self.choose_kind(snapshot)

        x = self._rng.uniform(self._rules.get_spawn_x_range(snapshot))
        y = self._rules.spawn_y(snapshot)
        velocity = self.launch_velocity(snapshot, y)
        radius = snapshot.projectile_radius * self._rng.uniform(self._config.spawn.radius_variation)
        spin = self._rng.uniform(self._config.spawn.spin_range)

        projectile = self._world.spawn(
            kind=kind,
            x=x,
            y=y,
            velocity=velocity,
            gravity=snapshot.gravity,
            radius=radius,
            spawned_at=self._timers.now_ms,
            spin=spin
        )
        self._launched += 1
        logger.debug(
            "launched %s #%d at (%.0f, %.0f) v=(%.0f, %.0f)",
            kind.name, projectile.uid, x, y, velocity[0], velocity[1]
        )
        if self._on_spawn is not None:
            self._on_spawn(projectile)
        return projectile
