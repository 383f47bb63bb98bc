"""
Core Game
=========

Main game orchestrator combining difficulty, spawning, slicing, combos and
the session state machine.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Dict, List, Optional, Tuple

from fruit_slice.slice_core.config_loader import GameConfig, get_config
from fruit_slice.slice_core.difficulty import DifficultyClock, DifficultyCurve, DifficultySnapshot
from fruit_slice.slice_core.events import EventDispatcher, ScoreBoard, SessionListener
from fruit_slice.slice_core.fruit_catalog import ProjectileKind
from fruit_slice.slice_core.physics_world import Projectile, ProjectileWorld
from fruit_slice.slice_core.rules import GameRules
from fruit_slice.slice_core.scoring import ComboTracker
from fruit_slice.slice_core.session import SessionState, SessionStatus
from fruit_slice.slice_core.slicing import SliceDetector, SliceOutcome
from fruit_slice.slice_core.spawner import SpawnScheduler
from fruit_slice.slice_core.state_snapshot import SessionSnapshot, SnapshotBuilder
from fruit_slice.slice_core.timers import TimerScheduler, TimerToken

logger = logging.getLogger(__name__)


class CoreGame:
    """
    Main game simulation class.

    Orchestrates:
    - Difficulty clock and curve
    - Spawn scheduler and the live-projectile world
    - Slice detection over the pointer trail
    - Combo tracking and scoring
    - Lives, pause and game over

    The host drives it with ``advance(delta_ms)`` once per frame and the
    ``pointer_*`` methods between frames. All calls must come from one
    thread (or one queue); nothing here blocks.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        mode: Optional[str] = None,
        seed: Optional[int] = None,
        viewport: Optional[Tuple[float, float]] = None,
        listeners: Optional[List[SessionListener]] = None,
        score_board: Optional[ScoreBoard] = None,
        sound_enabled: Optional[bool] = None,
        autostart: bool = True
    ):
        """
        Initialize game.

        Args:
            config: Game configuration. Uses default if None.
            mode: Difficulty preset name. Uses the config default if None.
            seed: Random seed for reproducibility.
            viewport: (width, height). Uses the reference resolution if None.
            listeners: Host callbacks.
            score_board: Best-score collaborator. In-memory if None.
            sound_enabled: Emit sound requests. Uses config if None.
            autostart: Arm the spawn timer immediately.
        """
        if config is None:
            config = get_config()
        if viewport is None:
            viewport = (config.screen.reference_width, config.screen.reference_height)
        if sound_enabled is None:
            sound_enabled = config.session.sound_enabled

        self._config = config
        self._seed = seed
        self._width = float(viewport[0])
        self._height = float(viewport[1])

        # Initialize subsystems
        self._curve = DifficultyCurve(config.get_preset(mode), config)
        self._clock = DifficultyClock()
        self._timers = TimerScheduler()
        self._world = ProjectileWorld()
        self._rules = GameRules(config)
        self._dispatcher = EventDispatcher(listeners, score_board, sound_enabled)
        self._session = SessionState(self._curve.preset.starting_lives, self._dispatcher)
        self._spawner = SpawnScheduler(
            world=self._world,
            timers=self._timers,
            difficulty=self.current_difficulty,
            config=config,
            seed=seed,
            on_spawn=self._on_projectile_spawned
        )
        self._slicer = SliceDetector(self._world, config)
        self._combo = ComboTracker(self._timers, config, on_combo=self._on_combo)
        self._snapshot_builder = SnapshotBuilder(config)
        self._sfx_rng = random.Random(seed)

        # End-of-session state
        self._end_timer: Optional[TimerToken] = None
        self._end_reported = False
        self._is_new_best = False

        if autostart:
            self._spawner.start()

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config

    @property
    def mode(self) -> str:
        """Active difficulty mode."""
        return self._curve.mode

    @property
    def score(self) -> int:
        return self._session.score

    @property
    def lives(self) -> int:
        return self._session.lives

    @property
    def status(self) -> SessionStatus:
        return self._session.status

    @property
    def is_over(self) -> bool:
        return self._session.is_over

    @property
    def is_paused(self) -> bool:
        return self._session.is_paused

    @property
    def elapsed_ms(self) -> float:
        """Difficulty clock (frozen while paused or over)."""
        return self._clock.elapsed_ms

    @property
    def now_ms(self) -> float:
        """Logical timer clock."""
        return self._timers.now_ms

    @property
    def viewport(self) -> Tuple[float, float]:
        return self._width, self._height

    @property
    def world(self) -> ProjectileWorld:
        return self._world

    @property
    def projectiles(self) -> List[Projectile]:
        return list(self._world.projectiles.values())

    @property
    def session(self) -> SessionState:
        return self._session

    @property
    def spawner(self) -> SpawnScheduler:
        return self._spawner

    @property
    def slicer(self) -> SliceDetector:
        return self._slicer

    @property
    def combo(self) -> ComboTracker:
        return self._combo

    @property
    def curve(self) -> DifficultyCurve:
        return self._curve

    @property
    def timers(self) -> TimerScheduler:
        return self._timers

    @property
    def dispatcher(self) -> EventDispatcher:
        return self._dispatcher

    @property
    def session_reported(self) -> bool:
        """True once ``session_ended`` has been emitted."""
        return self._end_reported

    @property
    def is_new_best(self) -> bool:
        return self._is_new_best

    @property
    def best_score(self) -> int:
        """Best score for the active mode according to the score board."""
        return self._dispatcher.best_score(self.mode)

    def add_listener(self, listener: SessionListener) -> None:
        self._dispatcher.add_listener(listener)

    def set_sound_enabled(self, enabled: bool) -> None:
        self._dispatcher.sound_enabled = bool(enabled)

    def current_difficulty(self) -> DifficultySnapshot:
        """Difficulty at the current elapsed time and viewport."""
        return self._curve.evaluate(self._clock.elapsed_ms, self._width, self._height)

    def set_viewport(self, width: float, height: float) -> None:
        """Resize; scaled values are re-derived on the next query."""
        self._width = float(width)
        self._height = float(height)

    # ----------------------------
    # Tick
    # ----------------------------

    def advance(self, delta_ms: float) -> None:
        """
        Advance the simulation by one frame.

        While paused nothing moves: difficulty, projectiles and timers all
        stay frozen. After game over only the end-of-session grace timer
        keeps running.

        Args:
            delta_ms: Frame time in milliseconds.
        """
        if delta_ms <= 0 or self._session.is_paused:
            return

        if self._session.is_over:
            self._timers.advance(delta_ms)
            return

        self._clock.advance(delta_ms)
        self._world.step(delta_ms)
        self._timers.advance(delta_ms)
        self._check_fallen()

    def _check_fallen(self) -> None:
        lower_bound = self._rules.miss.lower_bound(self._height)
        for projectile in self._world.collect_fallen(lower_bound):
            if self._session.is_over:
                break
            if not self._rules.miss.costs_life(projectile.kind):
                logger.debug("bomb #%d fell harmlessly", projectile.uid)
                continue

            self._dispatcher.sound("miss", volume=0.5)
            self._dispatcher.emit("miss_occurred", projectile.uid)
            if self._session.lose_life("miss"):
                self._game_over(grace_ms=0.0)

    # ----------------------------
    # Pointer input
    # ----------------------------

    def pointer_down(self, x: float, y: float, t: float) -> None:
        """Start a swipe. Resets the combo chain."""
        if not self._session.is_playing:
            return
        self._slicer.pointer_down(x, y, t)
        self._combo.on_swipe_start()

    def pointer_move(self, x: float, y: float, t: float) -> List[SliceOutcome]:
        """
        Extend the swipe and resolve any slices.

        Ignored unless a swipe is in progress and the session is playing.

        Returns:
            Slice outcomes applied by this sample.
        """
        if not self._session.is_playing:
            return []

        applied = []
        for outcome in self._slicer.pointer_move(x, y, t):
            if not self._session.is_playing:
                break
            self._apply_slice(outcome)
            applied.append(outcome)
        return applied

    def pointer_up(self, t: Optional[float] = None) -> None:
        self._slicer.pointer_up(t)

    def _apply_slice(self, outcome: SliceOutcome) -> None:
        projectile = outcome.projectile
        if projectile.is_bomb:
            self._dispatcher.sound("bomb", volume=0.8)
            self._dispatcher.emit(
                "slice_occurred", projectile.uid, projectile.kind,
                outcome.position, outcome.swipe_angle, 0, 0
            )
            self._dispatcher.emit("bomb_detonated", projectile.uid)
            if self._session.lose_life("bomb"):
                self._game_over(grace_ms=self._config.session.game_over_grace)
            return

        event = self._combo.on_slice_outcome(projectile.score_value)
        self._dispatcher.sound("slice", volume=0.6, detune=self._sfx_rng.uniform(-100, 100))
        self._session.award(event.points)
        self._dispatcher.emit(
            "slice_occurred", projectile.uid, projectile.kind,
            outcome.position, outcome.swipe_angle, event.points, event.combo_count
        )

    def _on_combo(self, count: int) -> None:
        self._dispatcher.sound("combo", volume=0.7, detune=min(count * 50, 300))
        self._dispatcher.emit("combo_achieved", count)

    def _on_projectile_spawned(self, projectile: Projectile) -> None:
        self._dispatcher.emit("projectile_spawned", projectile)

    # ----------------------------
    # Lifecycle
    # ----------------------------

    def pause(self) -> bool:
        """Freeze the session. Drops the swipe in progress."""
        if not self._session.pause():
            return False
        self._slicer.cancel()
        return True

    def resume(self) -> bool:
        return self._session.resume()

    def toggle_pause(self) -> bool:
        if self._session.is_playing:
            return self.pause()
        return self.resume()

    def _game_over(self, grace_ms: float) -> None:
        self._spawner.stop()
        self._combo.cancel()
        self._slicer.cancel()
        logger.debug("game over at score %d (mode %s)", self._session.score, self.mode)

        if grace_ms > 0:
            self._end_timer = self._timers.schedule_once(grace_ms, self._report_end)
        else:
            self._report_end()

    def _report_end(self) -> None:
        self._end_timer = None
        if self._end_reported:
            return
        self._end_reported = True
        self._dispatcher.sound("gameover", volume=0.7)
        self._is_new_best = self._dispatcher.report_score(self.mode, self._session.score)
        self._dispatcher.emit("session_ended", self._session.score, self._is_new_best)

    def reset(self, seed: Optional[int] = None, mode: Optional[str] = None) -> None:
        """
        Start over: fresh lives, zero score, empty world, difficulty at 0.

        Args:
            seed: New random seed. Uses previous if None.
            mode: Switch difficulty preset. Keeps current if None.
        """
        if seed is not None:
            self._seed = seed
        if mode is not None:
            self._curve = DifficultyCurve(self._config.get_preset(mode), self._config)

        self._timers.reset()
        self._world.clear()
        self._clock.reset()
        self._combo.reset()
        self._slicer.cancel()
        self._end_timer = None
        self._end_reported = False
        self._is_new_best = False
        self._sfx_rng = random.Random(self._seed)

        self._session.reset(self._curve.preset.starting_lives)
        self._spawner.reset(self._seed)
        self._spawner.start()

    def close(self) -> None:
        """Tear down: cancel every timer and drop all projectiles."""
        self._spawner.stop()
        self._combo.cancel()
        self._slicer.cancel()
        self._timers.cancel_all()
        self._world.clear()

    # ----------------------------
    # Direct control and inspection
    # ----------------------------

    def spawn_projectile(
        self,
        kind: Optional[ProjectileKind] = None,
        position: Optional[Tuple[float, float]] = None,
        velocity: Optional[Tuple[float, float]] = None,
        radius: Optional[float] = None
    ) -> Projectile:
        """
        Launch a projectile immediately, outside the spawn timers.

        With no position/velocity the spawner picks them as for a timed
        launch. Explicit values are used as given, with the current
        difficulty's gravity.

        Args:
            kind: Fruit or bomb. Drawn from the difficulty if None.
            position: (x, y) start position.
            velocity: (vx, vy) in px/s.
            radius: Hit radius. Uses the scaled base radius if None.

        Returns:
            The launched Projectile.
        """
        snapshot = self.current_difficulty()
        if position is None and velocity is None and radius is None:
            return self._spawner.launch(snapshot, kind)

        if kind is None:
            kind = self._spawner.choose_kind(snapshot)
        if position is None:
            position = (self._width / 2.0, self._rules.spawn.spawn_y(snapshot))
        if velocity is None:
            velocity = self._spawner.launch_velocity(snapshot, position[1])
        if radius is None:
            radius = snapshot.projectile_radius

        projectile = self._world.spawn(
            kind=kind,
            x=position[0],
            y=position[1],
            velocity=velocity,
            gravity=snapshot.gravity,
            radius=radius,
            spawned_at=self._timers.now_ms
        )
        self._on_projectile_spawned(projectile)
        return projectile

    def get_info(self) -> Dict[str, Any]:
        """Summary of the session state."""
        snapshot = self.current_difficulty()
        return {
            "mode": self.mode,
            "score": self._session.score,
            "lives": self._session.lives,
            "status": self._session.status.name,
            "elapsed_ms": self._clock.elapsed_ms,
            "progress": snapshot.progress,
            "projectiles": self._world.count,
            "launched": self._spawner.launched,
            "combo": self._combo.count,
            "best_combo": self._combo.best_combo,
        }

    def snapshot(self) -> SessionSnapshot:
        """Numpy snapshot of projectiles, trail and session state."""
        return self._snapshot_builder.build(
            world=self._world,
            trail=self._slicer.trail,
            difficulty=self.current_difficulty(),
            score=self._session.score,
            lives=self._session.lives,
            status=self._session.status,
            combo_count=self._combo.count
        )

    def get_render_data(self) -> Dict[str, Any]:
        """
        Get data needed for rendering.

        Returns:
            Dict with projectiles, trail points and HUD values.
        """
        projectiles_data = []
        for p in self._world.projectiles.values():
            projectiles_data.append({
                "uid": p.uid,
                "kind": p.kind.name,
                "is_bomb": p.is_bomb,
                "x": p.x,
                "y": p.y,
                "angle": p.angle,
                "radius": p.radius,
                "color": None if p.is_bomb else p.kind.color,
            })

        return {
            "width": self._width,
            "height": self._height,
            "projectiles": projectiles_data,
            "trail": [(pt.x, pt.y) for pt in self._slicer.trail],
            "score": self._session.score,
            "lives": self._session.lives,
            "status": self._session.status.name,
            "combo": self._combo.count,
        }
