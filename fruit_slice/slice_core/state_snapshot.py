"""
State Snapshot
==============

Packs session state into fixed-size numpy arrays for renderers, bots and
replay tools.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Optional

import numpy as np

from fruit_slice.slice_core.config_loader import GameConfig, get_config

if TYPE_CHECKING:
    from fruit_slice.slice_core.difficulty import DifficultySnapshot
    from fruit_slice.slice_core.physics_world import ProjectileWorld
    from fruit_slice.slice_core.session import SessionStatus
    from fruit_slice.slice_core.trail import TrailBuffer

# Default number of projectile slots in a snapshot
MAX_SNAPSHOT_OBJECTS = 32

# obj_kind values that are not fruit IDs
EMPTY_SLOT = -1
BOMB_KIND_ID = -2


@dataclass
class SessionSnapshot:
    """
    Complete session snapshot.

    Projectile arrays are fixed-size with a mask for the used slots, oldest
    projectile first.
    """
    # Core state
    score: int
    lives: int
    status: str
    combo_count: int
    progress: float
    elapsed_ms: float
    objects_count: int

    # Viewport
    screen_width: float
    screen_height: float
    miss_line_y: float

    # Derived features
    fruits_in_play: int
    bombs_in_play: int
    lowest_falling_fruit_y: float     # Largest y among falling fruits (0 if none)

    # Object arrays (fixed size, padded)
    obj_uid: np.ndarray               # (MAX_OBJ,) int32
    obj_kind: np.ndarray              # (MAX_OBJ,) int16, fruit id / BOMB_KIND_ID / EMPTY_SLOT
    obj_x: np.ndarray                 # (MAX_OBJ,) float32
    obj_y: np.ndarray                 # (MAX_OBJ,) float32
    obj_vx: np.ndarray                # (MAX_OBJ,) float32
    obj_vy: np.ndarray                # (MAX_OBJ,) float32
    obj_radius: np.ndarray            # (MAX_OBJ,) float32
    obj_mask: np.ndarray              # (MAX_OBJ,) bool

    # Trail (variable length)
    trail: np.ndarray                 # (N, 3) float32 of x, y, t

    def to_dict(self) -> Dict[str, np.ndarray]:
        """Convert to a dictionary of numpy values."""
        return {
            "score": np.array(self.score, dtype=np.int64),
            "lives": np.array(self.lives, dtype=np.int32),
            "combo_count": np.array(self.combo_count, dtype=np.int32),
            "progress": np.array(self.progress, dtype=np.float32),
            "elapsed_ms": np.array(self.elapsed_ms, dtype=np.float32),
            "objects_count": np.array(self.objects_count, dtype=np.int32),
            "screen_width": np.array(self.screen_width, dtype=np.float32),
            "screen_height": np.array(self.screen_height, dtype=np.float32),
            "miss_line_y": np.array(self.miss_line_y, dtype=np.float32),
            "fruits_in_play": np.array(self.fruits_in_play, dtype=np.int32),
            "bombs_in_play": np.array(self.bombs_in_play, dtype=np.int32),
            "lowest_falling_fruit_y": np.array(self.lowest_falling_fruit_y, dtype=np.float32),
            "obj_uid": self.obj_uid,
            "obj_kind": self.obj_kind,
            "obj_x": self.obj_x,
            "obj_y": self.obj_y,
            "obj_vx": self.obj_vx,
            "obj_vy": self.obj_vy,
            "obj_radius": self.obj_radius,
            "obj_mask": self.obj_mask,
            "trail": self.trail,
        }


class SnapshotBuilder:
    """Builds session snapshots with pre-allocated arrays."""

    def __init__(self, config: Optional[GameConfig] = None, max_objects: int = MAX_SNAPSHOT_OBJECTS):
        if config is None:
            config = get_config()

        self._config = config
        self._max_objects = max(1, int(max_objects))
        self._miss_margin = config.session.miss_margin

        # Pre-allocate arrays
        self._obj_uid = np.zeros(self._max_objects, dtype=np.int32)
        self._obj_kind = np.zeros(self._max_objects, dtype=np.int16)
        self._obj_x = np.zeros(self._max_objects, dtype=np.float32)
        self._obj_y = np.zeros(self._max_objects, dtype=np.float32)
        self._obj_vx = np.zeros(self._max_objects, dtype=np.float32)
        self._obj_vy = np.zeros(self._max_objects, dtype=np.float32)
        self._obj_radius = np.zeros(self._max_objects, dtype=np.float32)
        self._obj_mask = np.zeros(self._max_objects, dtype=bool)

    @property
    def max_objects(self) -> int:
        return self._max_objects

    def build(
        self,
        world: "ProjectileWorld",
        trail: "TrailBuffer",
        difficulty: "DifficultySnapshot",
        score: int,
        lives: int,
        status: "SessionStatus",
        combo_count: int = 0
    ) -> SessionSnapshot:
        """Build a snapshot from current session state."""
        # Reset arrays
        self._obj_uid.fill(-1)
        self._obj_kind.fill(EMPTY_SLOT)
        self._obj_x.fill(0)
        self._obj_y.fill(0)
        self._obj_vx.fill(0)
        self._obj_vy.fill(0)
        self._obj_radius.fill(0)
        self._obj_mask.fill(False)

        projectiles = list(world.projectiles.values())
        count = min(len(projectiles), self._max_objects)

        fruits_in_play = 0
        bombs_in_play = 0
        lowest_falling = 0.0

        for p in projectiles:
            if p.is_bomb:
                bombs_in_play += 1
            else:
                fruits_in_play += 1
                if p.vy > 0:
                    lowest_falling = max(lowest_falling, p.y)

        for i, p in enumerate(projectiles[:count]):
            self._obj_uid[i] = p.uid
            self._obj_kind[i] = BOMB_KIND_ID if p.is_bomb else p.kind.fruit_id
            self._obj_x[i] = p.x
            self._obj_y[i] = p.y
            self._obj_vx[i] = p.vx
            self._obj_vy[i] = p.vy
            self._obj_radius[i] = p.radius
            self._obj_mask[i] = True

        return SessionSnapshot(
            score=score,
            lives=lives,
            status=status.name,
            combo_count=combo_count,
            progress=difficulty.progress,
            elapsed_ms=difficulty.elapsed_ms,
            objects_count=len(projectiles),
            screen_width=difficulty.screen_width,
            screen_height=difficulty.screen_height,
            miss_line_y=difficulty.screen_height + self._miss_margin,
            fruits_in_play=fruits_in_play,
            bombs_in_play=bombs_in_play,
            lowest_falling_fruit_y=lowest_falling,
            obj_uid=self._obj_uid.copy(),
            obj_kind=self._obj_kind.copy(),
            obj_x=self._obj_x.copy(),
            obj_y=self._obj_y.copy(),
            obj_vx=self._obj_vx.copy(),
            obj_vy=self._obj_vy.copy(),
            obj_radius=self._obj_radius.copy(),
            obj_mask=self._obj_mask.copy(),
            trail=trail.as_array()
        )
