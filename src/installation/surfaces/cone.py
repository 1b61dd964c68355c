"""Cone surface with bounded random jitter."""

from __future__ import annotations

import math

from src.installation.geom_utils import clamp01, safe_divisor
from src.installation.plan_types import Point
from src.installation.spec.types import ConeSurface

MIN_JITTERED_LENGTH = 0.1


def random_offset(ratio: float, rng) -> float:
    ratio = abs(float(ratio))
    if ratio == 0.0 or rng is None:
        return 0.0
    return rng.uniform(-ratio, ratio)


def cone_base_length(surface: ConeSurface, point: Point) -> float:
    dx = point.position[0] - surface.apex[0]
    dz = point.position[2] - surface.apex[2]
    radial_distance = math.sqrt(dx * dx + dz * dz)
    return surface.height * (1.0 - clamp01(radial_distance / safe_divisor(surface.base_radius)))


def calculate_cone_length(surface: ConeSurface, point: Point, rng=None) -> float:
    offset = random_offset(surface.random_variation_ratio, rng)
    return max(MIN_JITTERED_LENGTH, abs(surface.ceiling_height - (cone_base_length(surface, point) + offset)))
