"""
Physics World
=============

Owns the live-projectile set: creation, per-tick integration, removal and
fall-off detection.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from fruit_slice.slice_core.fruit_catalog import ProjectileKind
from fruit_slice.slice_core.kinematics import integrate


@dataclass
class Projectile:
    """
    A launched fruit or bomb.

    Mutated in place by integration and slice detection; lives in exactly
    one ProjectileWorld until sliced, fallen or cleared.
    """
    uid: int
    kind: ProjectileKind
    x: float
    y: float
    vx: float
    vy: float
    gravity: float
    radius: float
    spawned_at: float
    sliced: bool = False
    slice_cooldown_until: float = -math.inf
    angle: float = 0.0
    spin: float = 0.0

    @property
    def position(self) -> Tuple[float, float]:
        return self.x, self.y

    @property
    def velocity(self) -> Tuple[float, float]:
        return self.vx, self.vy

    @property
    def is_bomb(self) -> bool:
        return self.kind.is_bomb

    @property
    def score_value(self) -> int:
        """Base points for slicing (0 for bombs)."""
        if self.kind.is_bomb:
            return 0
        return self.kind.score_value


class ProjectileWorld:
    """
    The set of live projectiles, kept in spawn order.

    Single owner of every Projectile it creates. The game mutates it only
    from the tick and pointer handlers, never concurrently.
    """

    def __init__(self):
        self._projectiles: Dict[int, Projectile] = {}
        self._next_uid = 0

    @property
    def projectiles(self) -> Dict[int, Projectile]:
        """All live projectiles by UID, oldest first."""
        return self._projectiles

    @property
    def count(self) -> int:
        return len(self._projectiles)

    @property
    def live_count(self) -> int:
        """Projectiles still in play (not yet sliced)."""
        return sum(1 for p in self._projectiles.values() if not p.sliced)

    def spawn(
        self,
        kind: ProjectileKind,
        x: float,
        y: float,
        velocity: Tuple[float, float],
        gravity: float,
        radius: float,
        spawned_at: float,
        spin: float = 0.0
    ) -> Projectile:
        """
        Add a projectile to the world.

        Args:
            kind: Fruit or bomb.
            x: Initial x coordinate.
            y: Initial y coordinate.
            velocity: Initial (vx, vy) in px/s.
            gravity: Downward acceleration in px/s^2.
            radius: Hit radius in pixels.
            spawned_at: Session time of the launch (ms).
            spin: Cosmetic angular velocity (deg/s).

        Returns:
            The created Projectile.
        """
        uid = self._next_uid
        self._next_uid += 1

        projectile = Projectile(
            uid=uid,
            kind=kind,
            x=float(x),
            y=float(y),
            vx=float(velocity[0]),
            vy=float(velocity[1]),
            gravity=float(gravity),
            radius=float(radius),
            spawned_at=spawned_at,
            spin=float(spin)
        )
        self._projectiles[uid] = projectile
        return projectile

    def remove(self, uid: int) -> Optional[Projectile]:
        """
        Remove a projectile from the world.

        Returns:
            The removed Projectile, or None if not found.
        """
        return self._projectiles.pop(uid, None)

    def get(self, uid: int) -> Optional[Projectile]:
        return self._projectiles.get(uid)

    def step(self, delta_ms: float) -> None:
        """Integrate every live projectile by ``delta_ms``."""
        for projectile in self._projectiles.values():
            integrate(projectile, delta_ms)

    def collect_fallen(self, lower_bound: float) -> List[Projectile]:
        """
        Remove and return unsliced projectiles below ``lower_bound``.

        Args:
            lower_bound: Y coordinate past which a projectile is gone.

        Returns:
            Fallen projectiles in spawn order (fruits and bombs alike).
        """
        fallen = [
            p for p in self._projectiles.values()
            if not p.sliced and p.y > lower_bound
        ]
        for projectile in fallen:
            del self._projectiles[projectile.uid]
        return fallen

    def most_recent(self, limit: int) -> List[Projectile]:
        """The ``limit`` most recently spawned projectiles, oldest first."""
        values = list(self._projectiles.values())
        if limit <= 0:
            return []
        return values[-limit:]

    def clear(self) -> None:
        """Remove all projectiles and restart UIDs."""
        self._projectiles.clear()
        self._next_uid = 0
