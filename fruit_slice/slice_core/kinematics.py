"""
Projectile Kinematics
=====================

Ballistic motion under constant gravity. Screen coordinates: +y is down,
so launches have negative vertical velocity and gravity is positive.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fruit_slice.slice_core.physics_world import Projectile


def integrate(projectile: "Projectile", delta_ms: float) -> None:
    """
    Advance one projectile by semi-implicit Euler.

    Velocity is updated first, then position uses the new velocity.

    Args:
        projectile: Projectile to update in place.
        delta_ms: Step length in milliseconds.
    """
    if delta_ms <= 0:
        return
    dt = delta_ms / 1000.0
    projectile.vy += projectile.gravity * dt
    projectile.x += projectile.vx * dt
    projectile.y += projectile.vy * dt
    projectile.angle += projectile.spin * dt


def apex_launch_velocity(gravity: float, launch_y: float, apex_y: float) -> float:
    """
    Vertical launch velocity that peaks exactly at ``apex_y``.

    Uses v = -sqrt(2 * g * d) with d the rise from launch to apex, which
    keeps the peak where intended regardless of the gravity magnitude.

    Args:
        gravity: Downward acceleration (px/s^2).
        launch_y: Starting y coordinate.
        apex_y: Desired highest point (smaller y is higher on screen).

    Returns:
        Vertical velocity in px/s (negative is upward, 0 if there is no rise).
    """
    rise = launch_y - apex_y
    if rise <= 0 or gravity <= 0:
        return 0.0
    return -math.sqrt(2.0 * gravity * rise)


def time_to_apex(vy: float, gravity: float) -> float:
    """Seconds until vertical velocity reaches zero (0 if already falling)."""
    if gravity <= 0 or vy >= 0:
        return 0.0
    return -vy / gravity


def apex_y(y: float, vy: float, gravity: float) -> float:
    """Highest y coordinate reached from the current state."""
    if gravity <= 0 or vy >= 0:
        return y
    return y - (vy * vy) / (2.0 * gravity)

