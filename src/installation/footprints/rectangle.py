"""Rectangle footprint: constant vertical extent unless curved edges are requested."""

from __future__ import annotations

import math

from src.installation.geom_utils import EPSILON, clamp01
from src.installation.spec.types import FootprintBounds, RectangleFootprint

TOP_CURVES = frozenset({"flat", "parabola", "cosine"})
BOTTOM_PROFILES = frozenset({"flat", "triple"})

# Rise fraction at the start/end of each linked bottom segment.
_TRIPLE_SEGMENTS = (
    (0.0, 0.3),
    (0.3, 0.6),
    (0.6, 0.0),
)


def rectangle_area(footprint: RectangleFootprint) -> float:
    return max(0.0, footprint.length) * max(0.0, footprint.width)


def _plate_center(footprint: RectangleFootprint) -> tuple[float, float, float]:
    ox, oy, oz = footprint.origin
    if footprint.center_on_origin:
        return (ox, oy, oz)
    return (ox + footprint.length * 0.5, oy, oz + footprint.width * 0.5)


def rectangle_bounds(footprint: RectangleFootprint) -> FootprintBounds:
    usable_w = max(0.0, footprint.length - 2.0 * footprint.margin_x)
    usable_h = max(0.0, footprint.width - 2.0 * footprint.margin_z)
    cx, cy, cz = _plate_center(footprint)
    return FootprintBounds(
        min_x=cx - usable_w / 2.0,
        max_x=cx + usable_w / 2.0,
        min_z=cz - usable_h / 2.0,
        max_z=cz + usable_h / 2.0,
        y=cy,
    )


def _smooth(t: float) -> float:
    # Two-key curve with flat tangents.
    t = clamp01(t)
    return t * t * (3.0 - 2.0 * t)


def _segment_rise(u: float, start: float, end: float, segment: tuple[float, float]) -> float:
    span = max(EPSILON, end - start)
    t = clamp01((u - start) / span)
    v0, v1 = segment
    return clamp01(v0 + (v1 - v0) * _smooth(t))


def triple_bottom_rise(u: float, split_left: float, split_right: float) -> float:
    """Normalized rise (0..1) of the three-segment bottom edge at ``u``."""
    s_left = clamp01(split_left)
    s_right = clamp01(split_right)
    if s_right <= s_left:
        s_right = s_left + 0.01
    if u <= s_left:
        return _segment_rise(u, 0.0, s_left, _TRIPLE_SEGMENTS[0])
    if u < s_right:
        return _segment_rise(u, s_left, s_right, _TRIPLE_SEGMENTS[1])
    return _segment_rise(u, s_right, 1.0, _TRIPLE_SEGMENTS[2])


def _top_z(footprint: RectangleFootprint, bounds: FootprintBounds, u: float) -> float:
    sag = max(0.0, footprint.top_sag)
    if footprint.top_curve == "parabola":
        return bounds.max_z - 4.0 * u * (1.0 - u) * sag
    if footprint.top_curve == "cosine":
        return bounds.max_z - (1.0 - math.cos(math.pi * u)) * 0.5 * sag
    return bounds.max_z


def _bottom_z(footprint: RectangleFootprint, bounds: FootprintBounds, u: float) -> float:
    if footprint.bottom_profile != "triple":
        return bounds.min_z
    rise = triple_bottom_rise(u, footprint.split_left, footprint.split_right)
    return bounds.min_z + rise * max(0.0, footprint.bottom_max_rise)


def rectangle_vertical_bounds(footprint: RectangleFootprint, u: float) -> tuple[float, float]:
    bounds = rectangle_bounds(footprint)
    u = clamp01(u)
    top = _top_z(footprint, bounds, u)
    bottom = _bottom_z(footprint, bounds, u)
    return (min(top, bottom), max(top, bottom))
