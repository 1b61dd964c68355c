from __future__ import annotations

import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.installation.diagnostics import NoopDiagnosticsSink
from src.installation.plan_snapshot import plan_to_snapshot
from src.installation.plan_types import HangerPlan, Point
from src.installation.system import InstallationSystem

EXAMPLES_DIR = ROOT / "data" / "examples"


def _load(name: str) -> dict:
    return json.loads((EXAMPLES_DIR / name).read_text(encoding="utf-8"))


def _snapshot(config: dict) -> dict:
    system = InstallationSystem(config, diag=NoopDiagnosticsSink())
    return plan_to_snapshot(system.build_system())


def test_snapshot_is_deterministic_per_example():
    for path in sorted(EXAMPLES_DIR.glob("*.json")):
        config = _load(path.name)
        first = _snapshot(config)
        second = _snapshot(config)
        assert first == second, path.name
        assert first["hangers"], path.name
        assert json.dumps(first, sort_keys=True) == json.dumps(second, sort_keys=True)


def test_seeded_jitter_repeats_across_systems():
    config = _load("oval_cone.json")
    lengths_a = [hanger["length"] for hanger in _snapshot(config)["hangers"]]
    lengths_b = [hanger["length"] for hanger in _snapshot(config)["hangers"]]
    assert lengths_a == lengths_b
    assert len(set(lengths_a)) > 1


def test_snapshot_rounds_to_six_decimals():
    plan = HangerPlan(
        points=[Point(position=(0.1234567891, 1.0, -0.0000004), accepted=True, row_index=0, total_rows=1, u=1 / 3)],
        metadata={"b": "x", "a": "y"},
    )
    snapshot = plan_to_snapshot(plan)
    point = snapshot["points"][0]
    assert point["position"] == [0.123457, 1.0, -0.0]
    assert point["u"] == 0.333333
    assert list(snapshot["metadata"]) == ["a", "b"]
    assert snapshot["stats"] == {"created": 0, "skipped": 0, "total_grid_points": 0}


def test_snapshot_metadata_has_build_context():
    snapshot = _snapshot(_load("rectangle_flat.json"))
    metadata = snapshot["metadata"]
    assert metadata["style"] == "flat"
    assert metadata["preset_id"] == "flat_ceiling_v1"
    assert metadata["shape"] == "rectangle"
    assert metadata["density_level"] == "medium"
    assert metadata["surface"] == "flat"
