"""
Segment / Circle Intersection
=============================

Closest-point test between a swipe segment and projectile circles, in a
scalar form and a numpy form that tests many circles at once.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

# Squared length below which a segment counts as a point
MIN_SEGMENT_LENGTH_SQ = 1e-4

Point = Tuple[float, float]


def closest_point_on_segment(p1: Point, p2: Point, c: Point) -> Point:
    """
    Closest point to ``c`` on segment p1-p2 via clamped projection.

    A degenerate segment returns ``p1``.
    """
    x1, y1 = p1
    dx = p2[0] - x1
    dy = p2[1] - y1
    len2 = dx * dx + dy * dy
    if len2 <= MIN_SEGMENT_LENGTH_SQ:
        return (x1, y1)

    t = ((c[0] - x1) * dx + (c[1] - y1) * dy) / len2
    t = max(0.0, min(1.0, t))
    return (x1 + t * dx, y1 + t * dy)


def segment_intersects_circle(p1: Point, p2: Point, center: Point, radius: float) -> bool:
    """
    True when the segment passes within ``radius`` of ``center``.

    Zero-length segments never intersect.
    """
    dx = p2[0] - p1[0]
    dy = p2[1] - p1[1]
    if dx * dx + dy * dy <= MIN_SEGMENT_LENGTH_SQ:
        return False

    px, py = closest_point_on_segment(p1, p2, center)
    ex = px - center[0]
    ey = py - center[1]
    return ex * ex + ey * ey <= radius * radius


def segment_bounds(p1: Point, p2: Point, margin: float) -> Tuple[float, float, float, float]:
    """Axis-aligned box around the segment grown by ``margin`` (min_x, min_y, max_x, max_y)."""
    return (
        min(p1[0], p2[0]) - margin,
        min(p1[1], p2[1]) - margin,
        max(p1[0], p2[0]) + margin,
        max(p1[1], p2[1]) + margin,
    )


def within_bounds(
    centers: np.ndarray,
    bounds: Tuple[float, float, float, float]
) -> np.ndarray:
    """
    Broad-phase mask of centers inside an axis-aligned box.

    Args:
        centers: (N, 2) array of circle centers.
        bounds: (min_x, min_y, max_x, max_y).

    Returns:
        (N,) bool array.
    """
    min_x, min_y, max_x, max_y = bounds
    x = centers[:, 0]
    y = centers[:, 1]
    return (x >= min_x) & (x <= max_x) & (y >= min_y) & (y <= max_y)


def segment_hits_circles(
    p1: Point,
    p2: Point,
    centers: np.ndarray,
    radii: np.ndarray
) -> np.ndarray:
    """
    Vectorized segment-vs-circle test.

    Args:
        p1: Segment start.
        p2: Segment end.
        centers: (N, 2) array of circle centers.
        radii: (N,) array of radii.

    Returns:
        (N,) bool array, all False for a degenerate segment.
    """
    centers = np.asarray(centers, dtype=np.float64).reshape(-1, 2)
    radii = np.asarray(radii, dtype=np.float64).reshape(-1)

    start = np.array(p1, dtype=np.float64)
    d = np.array(p2, dtype=np.float64) - start
    len2 = float(d @ d)
    if len2 <= MIN_SEGMENT_LENGTH_SQ:
        return np.zeros(len(centers), dtype=bool)

    t = np.clip(((centers - start) @ d) / len2, 0.0, 1.0)
    closest = start + t[:, None] * d
    diff = closest - centers
    dist2 = np.einsum("ij,ij->i", diff, diff)
    return dist2 <= radii * radii
