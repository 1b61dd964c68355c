from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.installation.spec.resolve import resolve
from src.installation.spec.types import DensityLevel, ShapeType, SnapMode, SurfaceType
from src.schema import InstallationRequest, InstallationStyle

EXAMPLES_DIR = ROOT / "data" / "examples"


def _load(path: Path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


def test_example_configs_validate_and_resolve_cleanly():
    paths = sorted(EXAMPLES_DIR.glob("*.json"))
    assert len(paths) >= 4
    for path in paths:
        request = InstallationRequest.model_validate(_load(path))
        _resolved, diagnostics = resolve(request.to_config())
        assert diagnostics.warnings == [], (path.name, diagnostics.codes())


ALIAS_CASES = [
    ({"shape": "круг"}, "shape", ShapeType.circle),
    ({"shape": "Ellipse"}, "shape", ShapeType.oval),
    ({"shape": "spiral"}, "shape", ShapeType.helix),
    ({"surface_kind": "saddle"}, "surface_kind", SurfaceType.hyperbolic_paraboloid),
    ({"surface_kind": "hypar"}, "surface_kind", SurfaceType.hyperbolic_paraboloid),
    ({"surface_kind": "Projected-Sphere"}, "surface_kind", SurfaceType.projected_sphere),
    ({"style": "bowl"}, "style", InstallationStyle.sphere),
]


def test_aliases_are_canonicalized():
    for payload, field_name, expected in ALIAS_CASES:
        request = InstallationRequest.model_validate(payload)
        assert getattr(request, field_name) == expected


def test_nested_aliases_and_density_index():
    request = InstallationRequest.model_validate(
        {"density": {"level": 2}, "generator": {"snapping": "Snap to bottom"}}
    )
    assert request.density.level == DensityLevel.low
    assert request.generator.snapping == SnapMode.snap_to_bottom

    request = InstallationRequest.model_validate({"density": {"level": "mid"}})
    assert request.density.level == DensityLevel.medium


INVALID_CASES = [
    {"footprints": {"rectangle": {"length": -1.0}}},
    {"footprints": {"rectangle": {"split_left": 0.8, "split_right": 0.2}}},
    {"footprints": {"rectangle": {"top_curve": "zigzag"}}},
    {"footprints": {"helix": {"ref_height": 0.0}}},
    {"style": "sphere", "surface_kind": "flat"},
    {"shape": "torus"},
    {"generator": {"min_cols": 20, "max_cols": 5}},
    {"generator": {"vertical_alignment": 1.5}},
    {"density": {"level": 5}},
    {"surfaces": {"projected_sphere": {"radius": 0.0}}},
    {"surfaces": {"projected_sphere": {"hang_direction": [0.0, 0.0, 0.0]}}},
    {"pricing": {"strand_count": 0}},
    {"layout": {"base_area": 0.0}},
]


def test_invalid_requests_raise():
    for payload in INVALID_CASES:
        with pytest.raises(ValidationError):
            InstallationRequest.model_validate(payload)


def test_to_config_drops_unset_fields():
    request = InstallationRequest.model_validate({"shape": "круг"})
    assert request.to_config() == {"shape": "circle"}
    resolved, _ = resolve(request.to_config())
    assert resolved.shape == ShapeType.circle


def test_to_config_round_trips_nested_sections():
    request = InstallationRequest.model_validate(
        {
            "style": "saddle",
            "surfaces": {"hyperbolic_paraboloid": {"surface_center": [0.5, -0.5], "amplitude": 0.3}},
        }
    )
    config = request.to_config()
    assert config["style"] == "saddle"
    assert config["surfaces"]["hyperbolic_paraboloid"] == {"surface_center": [0.5, -0.5], "amplitude": 0.3}
    resolved, _ = resolve(config)
    assert resolved.surface.surface_center == (0.5, -0.5)
    assert resolved.surface.amplitude == 0.3
