"""Saddle (hyperbolic paraboloid) surface."""

from __future__ import annotations

from src.installation.geom_utils import safe_divisor
from src.installation.plan_types import Point
from src.installation.spec.types import HyperbolicParaboloidSurface
from src.installation.surfaces.cone import MIN_JITTERED_LENGTH, random_offset


def saddle_height(surface: HyperbolicParaboloidSurface, point: Point) -> float:
    # Second horizontal axis of the footprint frame is z.
    dx = (point.position[0] - surface.surface_center[0]) / safe_divisor(surface.a)
    dz = (point.position[2] - surface.surface_center[1]) / safe_divisor(surface.b)
    return surface.amplitude * (dx * dx - dz * dz)


def calculate_saddle_length(surface: HyperbolicParaboloidSurface, point: Point, rng=None) -> float:
    height = saddle_height(surface, point) + random_offset(surface.random_variation_ratio, rng)
    return max(MIN_JITTERED_LENGTH, abs(surface.ceiling_height - height))
