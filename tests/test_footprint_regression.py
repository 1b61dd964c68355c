from __future__ import annotations

import math
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.installation.footprint import (
    calculate_target_point_count,
    footprint_area,
    get_bounds,
    get_vertical_bounds,
)
from src.installation.footprints import helix_strand_points
from src.installation.footprints.helix import helix_turns
from src.installation.spec.types import (
    CircleFootprint,
    DensityProfile,
    HelixFootprint,
    OvalFootprint,
    RectangleFootprint,
)


def _assert_close(actual: float, expected: float, tol: float = 1e-9) -> None:
    assert abs(actual - expected) <= tol, f"{actual} != {expected}"


AREA_CASES = [
    (RectangleFootprint(length=2.45, width=0.9), 2.205),
    (RectangleFootprint(length=0.0, width=0.9), 0.0),
    (CircleFootprint(diameter=2.0), math.pi),
    (CircleFootprint(diameter=0.0), 0.0),
    (OvalFootprint(major_axis=2.0, minor_axis=1.0), math.pi / 2.0),
    (HelixFootprint(), 5.4),
    (HelixFootprint(diameter=1.5, height=2.0), 16.2),
    (HelixFootprint(height=0.0), 0.0),
]


def test_footprint_area_closed_forms():
    for footprint, expected in AREA_CASES:
        _assert_close(footprint_area(footprint), expected)


def test_rectangle_area_scales_linearly_per_side():
    base = footprint_area(RectangleFootprint(length=1.2, width=0.7))
    _assert_close(footprint_area(RectangleFootprint(length=2.4, width=0.7)), base * 2.0)
    _assert_close(footprint_area(RectangleFootprint(length=1.2, width=2.1)), base * 3.0)


def test_circle_area_quadruples_when_diameter_doubles():
    small = footprint_area(CircleFootprint(diameter=0.8))
    large = footprint_area(CircleFootprint(diameter=1.6))
    _assert_close(large, small * 4.0)


def test_target_point_count_matches_density_rule():
    profile = DensityProfile(points_per_reference_area=120.0, reference_area_units=1.0)
    assert calculate_target_point_count(RectangleFootprint(), profile) == 265
    assert calculate_target_point_count(RectangleFootprint(length=0.0), profile) == 0
    halved_units = DensityProfile(points_per_reference_area=120.0, reference_area_units=2.0)
    assert calculate_target_point_count(RectangleFootprint(), halved_units) == 132


def test_target_point_count_is_monotonic():
    profile = DensityProfile()
    counts = [calculate_target_point_count(CircleFootprint(diameter=d / 10.0), profile) for d in range(0, 30)]
    assert counts == sorted(counts)

    footprint = OvalFootprint(major_axis=1.4, minor_axis=0.6)
    by_density = [
        calculate_target_point_count(footprint, DensityProfile(points_per_reference_area=float(ppra)))
        for ppra in range(0, 300, 10)
    ]
    assert by_density == sorted(by_density)


def test_target_point_count_survives_zero_reference_units():
    profile = DensityProfile(points_per_reference_area=120.0, reference_area_units=0.0)
    assert calculate_target_point_count(RectangleFootprint(), profile) > 0
    assert calculate_target_point_count(CircleFootprint(diameter=0.0), profile) == 0


def test_rectangle_bounds_respect_margins_and_origin():
    centered = get_bounds(RectangleFootprint(length=2.45, width=0.9, margin_x=0.05, margin_z=0.05))
    _assert_close(centered.min_x, -1.175)
    _assert_close(centered.max_x, 1.175)
    _assert_close(centered.min_z, -0.4)
    _assert_close(centered.max_z, 0.4)

    corner = get_bounds(RectangleFootprint(length=2.0, width=1.0, origin=(1.0, 2.0, 3.0), center_on_origin=False))
    _assert_close(corner.min_x, 1.0)
    _assert_close(corner.max_x, 3.0)
    _assert_close(corner.min_z, 3.0)
    _assert_close(corner.max_z, 4.0)
    _assert_close(corner.y, 2.0)

    collapsed = get_bounds(RectangleFootprint(length=0.05, width=0.9, margin_x=0.1))
    _assert_close(collapsed.width, 0.0)


def test_rectangle_vertical_extent_is_constant_by_default():
    footprint = RectangleFootprint()
    for u in (0.0, 0.25, 0.5, 1.0):
        low, high = get_vertical_bounds(footprint, u)
        _assert_close(low, -0.45)
        _assert_close(high, 0.45)


def test_rectangle_curved_edges():
    parabola = RectangleFootprint(top_curve="parabola", top_sag=0.08)
    _assert_close(get_vertical_bounds(parabola, 0.5)[1], 0.37)
    _assert_close(get_vertical_bounds(parabola, 0.0)[1], 0.45)

    cosine = RectangleFootprint(top_curve="cosine", top_sag=0.08)
    _assert_close(get_vertical_bounds(cosine, 1.0)[1], 0.37)

    triple = RectangleFootprint(bottom_profile="triple", bottom_max_rise=0.1)
    _assert_close(get_vertical_bounds(triple, 0.0)[0], -0.45)
    _assert_close(get_vertical_bounds(triple, 0.33)[0], -0.42)
    _assert_close(get_vertical_bounds(triple, 1.0)[0], -0.45)


def test_circle_vertical_extent_follows_ellipse():
    footprint = CircleFootprint(diameter=2.0)
    low, high = get_vertical_bounds(footprint, 0.5)
    _assert_close(low, -1.0)
    _assert_close(high, 1.0)

    low, high = get_vertical_bounds(footprint, 0.25)
    _assert_close(high, math.sqrt(0.75))
    _assert_close(low, -math.sqrt(0.75))

    assert get_vertical_bounds(footprint, 0.0) == (0.0, 0.0)
    assert get_vertical_bounds(CircleFootprint(diameter=0.0), 0.5) == (0.0, 0.0)


def test_oval_vertical_extent_uses_minor_axis():
    footprint = OvalFootprint(major_axis=2.0, minor_axis=1.0, origin=(0.0, 0.0, 2.0))
    low, high = get_vertical_bounds(footprint, 0.5)
    _assert_close(low, 1.5)
    _assert_close(high, 2.5)


def test_helix_envelope_comes_from_strand_crossings():
    footprint = HelixFootprint()
    bounds = get_bounds(footprint)
    low, high = get_vertical_bounds(footprint, 0.5)
    assert bounds.min_z <= low < 0.0 < high <= bounds.max_z

    empty = HelixFootprint(helix_count=0)
    assert get_vertical_bounds(empty, 0.5) == (0.0, 0.0)


def test_helix_strand_progression():
    footprint = HelixFootprint()
    assert helix_turns(footprint) == pytest.approx(math.sqrt(1.8 * 1.8 - 1.0) / math.pi)

    path = helix_strand_points(footprint, 0, samples=16)
    assert len(path) == 16
    _assert_close(path[0][2], -0.5)
    _assert_close(path[-1][2], 0.5)
    _assert_close(path[0][0], 0.5)
    heights = [z for _x, _y, z in path]
    assert heights == sorted(heights)

    shifted = helix_strand_points(footprint, 1, samples=16)
    assert shifted[0][0] != pytest.approx(path[0][0])


def test_unknown_footprint_kind_raises():
    class Torus:
        kind = "torus"

    with pytest.raises(ValueError):
        footprint_area(Torus())


def test_target_count_of_overflowing_area_is_zero():
    profile = DensityProfile(points_per_reference_area=120.0, reference_area_units=1.0)
    huge = RectangleFootprint(length=1e200, width=1e200)
    assert calculate_target_point_count(huge, profile) == 0
