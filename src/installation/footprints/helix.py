"""Helix footprint.

The helix is treated as ``helix_count`` equally phased strands wound on a
cylinder of ``diameter`` and ``height``, seen from the front: X runs across
the cylinder and Z up its axis. Its "area" is the effective helix length,
because helix density is measured along cable length rather than footprint
area.
"""

from __future__ import annotations

import math

from src.installation.geom_utils import EPSILON, clamp01, lerp, safe_divisor
from src.installation.spec.types import FootprintBounds, HelixFootprint

_MIN_STRAND_SAMPLES = 32
_MAX_STRAND_SAMPLES = 512
_SAMPLES_PER_TURN = 48


def helix_length(footprint: HelixFootprint) -> float:
    """Effective cable length: ``ref_len * (h / ref_h) * (d / ref_d)``."""
    height = max(0.0, footprint.height)
    diameter = max(0.0, footprint.diameter)
    return (
        max(0.0, footprint.ref_helix_length)
        * (height / safe_divisor(footprint.ref_height))
        * (diameter / safe_divisor(footprint.ref_diameter))
    )


def points_per_helix(footprint: HelixFootprint) -> float:
    return (
        max(0.0, footprint.ref_points_per_helix)
        * (max(0.0, footprint.diameter) / safe_divisor(footprint.ref_diameter))
        * (max(0.0, footprint.height) / safe_divisor(footprint.ref_height))
    )


def helix_turns(footprint: HelixFootprint) -> float:
    """Number of revolutions one strand makes over the full height."""
    strands = max(1, int(footprint.helix_count))
    strand_length = helix_length(footprint) / strands
    height = max(0.0, footprint.height)
    horizontal_run = math.sqrt(max(0.0, strand_length * strand_length - height * height))
    circumference = math.pi * max(0.0, footprint.diameter)
    if circumference < EPSILON:
        return 0.0
    return horizontal_run / circumference


def helix_bounds(footprint: HelixFootprint) -> FootprintBounds:
    radius = max(0.0, footprint.diameter) / 2.0
    half_height = max(0.0, footprint.height) / 2.0
    ox, oy, oz = footprint.origin
    if footprint.center_on_origin:
        cx, cz = ox, oz
    else:
        cx, cz = ox + radius, oz + half_height
    return FootprintBounds(
        min_x=cx - radius,
        max_x=cx + radius,
        min_z=cz - half_height,
        max_z=cz + half_height,
        y=oy,
    )


def _strand_samples(turns: float) -> int:
    wanted = int(math.ceil(turns * _SAMPLES_PER_TURN)) + 1
    return max(_MIN_STRAND_SAMPLES, min(_MAX_STRAND_SAMPLES, wanted))


def helix_strand_points(
    footprint: HelixFootprint,
    strand_index: int,
    samples: int | None = None,
) -> list[tuple[float, float, float]]:
    """Projected path of one strand, bottom to top, in the footprint plane."""
    strands = max(1, int(footprint.helix_count))
    bounds = helix_bounds(footprint)
    radius = max(0.0, footprint.diameter) / 2.0
    cx = (bounds.min_x + bounds.max_x) / 2.0
    turns = helix_turns(footprint)
    count = samples if samples is not None else _strand_samples(turns)
    count = max(2, int(count))
    phase = 2.0 * math.pi * (int(strand_index) % strands) / strands
    path: list[tuple[float, float, float]] = []
    for index in range(count):
        t = index / float(count - 1)
        angle = phase + 2.0 * math.pi * turns * t
        path.append((cx + radius * math.cos(angle), bounds.y, lerp(bounds.min_z, bounds.max_z, t)))
    return path


def _crossings(path: list[tuple[float, float, float]], column_x: float) -> list[float]:
    heights: list[float] = []
    for (x0, _y0, z0), (x1, _y1, z1) in zip(path, path[1:]):
        d0 = x0 - column_x
        d1 = x1 - column_x
        if abs(d0) <= EPSILON:
            heights.append(z0)
            continue
        if d0 * d1 < 0.0:
            t = d0 / (d0 - d1)
            heights.append(z0 + (z1 - z0) * t)
    last_x, _last_y, last_z = path[-1]
    if abs(last_x - column_x) <= EPSILON:
        heights.append(last_z)
    return heights


def helix_vertical_bounds(footprint: HelixFootprint, u: float) -> tuple[float, float]:
    """Lowest and highest strand crossing of the column at ``u``."""
    bounds = helix_bounds(footprint)
    center_z = (bounds.min_z + bounds.max_z) / 2.0
    if bounds.width < EPSILON or bounds.height < EPSILON or int(footprint.helix_count) <= 0:
        return (center_z, center_z)
    column_x = lerp(bounds.min_x, bounds.max_x, clamp01(u))
    heights: list[float] = []
    for strand_index in range(int(footprint.helix_count)):
        heights.extend(_crossings(helix_strand_points(footprint, strand_index), column_x))
    if not heights:
        return (center_z, center_z)
    return (min(heights), max(heights))
