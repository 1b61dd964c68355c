"""Circle and oval footprints; both bound their columns with the ellipse equation."""

from __future__ import annotations

import math

from src.installation.geom_utils import EPSILON, clamp01, lerp
from src.installation.spec.types import CircleFootprint, FootprintBounds, OvalFootprint


def _center(origin: tuple[float, float, float], semi_x: float, semi_z: float, centered: bool):
    ox, oy, oz = origin
    if centered:
        return (ox, oy, oz)
    # Origin is the min corner of the bounding box.
    return (ox + semi_x, oy, oz + semi_z)


def ellipse_bounds(
    origin: tuple[float, float, float],
    semi_x: float,
    semi_z: float,
    centered: bool = True,
) -> FootprintBounds:
    semi_x = max(0.0, semi_x)
    semi_z = max(0.0, semi_z)
    cx, cy, cz = _center(origin, semi_x, semi_z, centered)
    return FootprintBounds(
        min_x=cx - semi_x,
        max_x=cx + semi_x,
        min_z=cz - semi_z,
        max_z=cz + semi_z,
        y=cy,
    )


def ellipse_vertical_bounds(bounds: FootprintBounds, semi_x: float, semi_z: float, u: float) -> tuple[float, float]:
    center_z = (bounds.min_z + bounds.max_z) / 2.0
    semi_x = max(0.0, semi_x)
    semi_z = max(0.0, semi_z)
    if semi_x < EPSILON or semi_z < EPSILON:
        return (center_z, center_z)
    local_x = lerp(-semi_x, semi_x, clamp01(u))
    ratio = local_x / semi_x
    remainder = 1.0 - ratio * ratio
    if remainder <= 0.0:
        # Column sits on (or past) the rim; the envelope collapses.
        return (center_z, center_z)
    delta = semi_z * math.sqrt(remainder)
    return (center_z - delta, center_z + delta)


def circle_area(footprint: CircleFootprint) -> float:
    radius = max(0.0, footprint.diameter) / 2.0
    return math.pi * radius * radius


def circle_bounds(footprint: CircleFootprint) -> FootprintBounds:
    radius = max(0.0, footprint.diameter) / 2.0
    return ellipse_bounds(footprint.origin, radius, radius, footprint.center_on_origin)


def circle_vertical_bounds(footprint: CircleFootprint, u: float) -> tuple[float, float]:
    radius = max(0.0, footprint.diameter) / 2.0
    return ellipse_vertical_bounds(circle_bounds(footprint), radius, radius, u)


def oval_area(footprint: OvalFootprint) -> float:
    return math.pi * (max(0.0, footprint.major_axis) / 2.0) * (max(0.0, footprint.minor_axis) / 2.0)


def oval_bounds(footprint: OvalFootprint) -> FootprintBounds:
    return ellipse_bounds(
        footprint.origin,
        max(0.0, footprint.major_axis) / 2.0,
        max(0.0, footprint.minor_axis) / 2.0,
        footprint.center_on_origin,
    )


def oval_vertical_bounds(footprint: OvalFootprint, u: float) -> tuple[float, float]:
    return ellipse_vertical_bounds(
        oval_bounds(footprint),
        max(0.0, footprint.major_axis) / 2.0,
        max(0.0, footprint.minor_axis) / 2.0,
        u,
    )
