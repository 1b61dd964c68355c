"""Flat ceiling surface."""

from __future__ import annotations

from src.installation.plan_types import Point
from src.installation.spec.types import FlatSurface

MIN_FLAT_LENGTH = 0.01


def calculate_flat_length(surface: FlatSurface, point: Point, rng=None) -> float:
    del rng
    length = abs(surface.ceiling_y - point.position[1]) + surface.additional_length
    return max(MIN_FLAT_LENGTH, length)
