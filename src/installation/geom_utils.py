"""Shared numeric and geometry helpers for installation modules."""

from __future__ import annotations

import math
from typing import Dict, Iterable, Tuple

EPSILON = 1e-6

Vec3 = Tuple[float, float, float]


def clamp(value: float, min_value: float, max_value: float) -> float:
    return max(min_value, min(max_value, float(value)))


def clamp01(value: float) -> float:
    return clamp(value, 0.0, 1.0)


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def inverse_lerp(a: float, b: float, value: float) -> float:
    span = b - a
    if abs(span) < EPSILON:
        return 0.0
    return clamp01((value - a) / span)


def safe_divisor(value: float, minimum: float = EPSILON) -> float:
    # Divisors here are lengths/radii; anything below the floor is degenerate.
    return max(minimum, abs(float(value)))


def round_count(value: float) -> int:
    """Nearest non-negative integer; overflowing products count as 0."""
    if not math.isfinite(value):
        return 0
    return max(0, int(round(value)))


def vec_add(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def vec_sub(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def vec_scale(a: Vec3, factor: float) -> Vec3:
    return (a[0] * factor, a[1] * factor, a[2] * factor)


def vec_dot(a: Vec3, b: Vec3) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def vec_length(a: Vec3) -> float:
    return math.sqrt(vec_dot(a, a))


def vec_normalize(a: Vec3, fallback: Vec3 = (0.0, -1.0, 0.0)) -> Vec3:
    length = vec_length(a)
    if length < EPSILON:
        return fallback
    return (a[0] / length, a[1] / length, a[2] / length)


def points_bbox(points: Iterable[Vec3]) -> Dict[str, Vec3]:
    min_x = float("inf")
    min_y = float("inf")
    min_z = float("inf")
    max_x = float("-inf")
    max_y = float("-inf")
    max_z = float("-inf")
    has_any = False
    for x, y, z in points:
        has_any = True
        min_x = min(min_x, x)
        min_y = min(min_y, y)
        min_z = min(min_z, z)
        max_x = max(max_x, x)
        max_y = max(max_y, y)
        max_z = max(max_z, z)
    if not has_any:
        return {
            "min": (0.0, 0.0, 0.0),
            "max": (0.0, 0.0, 0.0),
        }
    return {
        "min": (min_x, min_y, min_z),
        "max": (max_x, max_y, max_z),
    }
