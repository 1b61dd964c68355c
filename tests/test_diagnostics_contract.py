from __future__ import annotations

import io
import json
import sys
from collections import Counter
from contextlib import redirect_stdout
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.installation.diagnostics import (
    FilteringDiagnosticsSink,
    JsonlDiagnosticsSink,
    ListDiagnosticsSink,
    Severity,
    VALID_COMPONENTS,
    VALID_SEVERITIES,
    VALID_SOURCES,
    VALID_STAGES,
    count_by_code,
    emit_simple,
    make_event,
    read_jsonl,
    reemit,
)


def _load_config(name: str) -> dict:
    return json.loads((ROOT / "data" / "examples" / name).read_text(encoding="utf-8"))


def test_build_pipeline_is_stdout_silent(monkeypatch):
    sink = ListDiagnosticsSink()
    import src.installation.system as system_mod

    monkeypatch.setattr(system_mod, "_diag_sink_from_env", lambda: sink)
    config = _load_config("rectangle_flat.json")

    buf = io.StringIO()
    with redirect_stdout(buf):
        plan = system_mod.InstallationSystem(config).build_system()
    assert plan.hangers
    assert buf.getvalue() == ""


def test_diagnostics_event_contract_and_stability(monkeypatch):
    sink = ListDiagnosticsSink()
    import src.installation.system as system_mod

    monkeypatch.setattr(system_mod, "_diag_sink_from_env", lambda: sink)
    config = _load_config("circle_sphere.json")
    # Force at least one resolve warning event.
    config["footprints"]["circle"]["diameter"] = -2.0
    config["footprints"]["rectangle"] = {"length": 2.0}

    buf = io.StringIO()
    with redirect_stdout(buf):
        system = system_mod.InstallationSystem(config)
        system.build_system()
    assert buf.getvalue() == ""

    assert sink.events
    required_keys = {
        "ts",
        "run_id",
        "stage",
        "component",
        "code",
        "severity",
        "path",
        "source",
        "input_value",
        "resolved_value",
        "reason",
        "meta",
    }
    signatures: list[tuple[str, str, str, int]] = []
    for event in sink.events:
        payload = event.to_dict()
        assert set(payload.keys()) == required_keys
        assert payload["run_id"] == system.ctx.run_id
        assert payload["severity"] in VALID_SEVERITIES
        assert payload["stage"] in VALID_STAGES
        assert payload["source"] in VALID_SOURCES
        assert payload["component"] in VALID_COMPONENTS
        assert isinstance(payload["code"], str) and payload["code"]
        if payload["path"] == "":
            assert payload["code"] in {"BUILD_START", "BUILD_DONE"}
            assert payload["reason"] or payload["meta"]
        signatures.append(
            (
                payload["stage"],
                payload["component"],
                payload["code"],
                int(payload["severity"]),
            )
        )

    counts = Counter(signatures)
    assert counts[("generate", "system", "BUILD_START", int(Severity.INFO))] == 1
    assert counts[("hang", "system", "BUILD_DONE", int(Severity.INFO))] == 1
    assert counts[("resolve", "resolver", "CONFIG_CLAMP", int(Severity.WARN))] == 1
    assert counts[("resolve", "system", "CONFIG_APPLIED", int(Severity.INFO))] == 1


def test_emit_simple_contract_and_normalization() -> None:
    sink = ListDiagnosticsSink()
    event = emit_simple(
        sink,
        run_id="run-1",
        stage="layout",
        component="layout",
        code="UNIT_EVENT",
        path="layout.base_area",
        payload={"min": 0.0001, "max": None},
        severity=Severity.WARN,
        iter_index=2,
        source="computed",
        reason="unit test",
        input_value=-1,
        resolved_value=0.0001,
        meta={"hint": "clamp"},
    )
    assert sink.events and sink.events[-1] is event
    event_payload = event.to_dict()
    assert event_payload["stage"] == "layout"
    assert event_payload["component"] == "layout"
    assert event_payload["source"] == "computed"
    assert event_payload["meta"]["iter_index"] == 2
    assert event_payload["meta"]["payload"] == {"min": 0.0001, "max": None}
    assert event_payload["meta"]["hint"] == "clamp"
    assert event.severity_label == "warn"

    normalized = emit_simple(
        sink,
        code="UNIT_EVENT_NORMALIZE",
        stage="unknown_stage",
        component="unknown_component",
        source="unknown_source",
    )
    assert normalized.stage == "generate"
    assert normalized.component == "system"
    assert normalized.source == "computed"
    assert normalized.meta["normalized_from"] == {
        "stage": "unknown_stage",
        "component": "unknown_component",
        "source": "unknown_source",
    }
    assert normalized.reason == "normalized diagnostics vocabulary"


def test_severity_is_clamped() -> None:
    assert make_event(stage="hang", component="hangers", code="X", severity=99).severity == int(Severity.FATAL)
    assert make_event(stage="hang", component="hangers", code="X", severity=-5).severity == int(Severity.INFO)
    assert make_event(stage="hang", component="hangers", code="X", severity="bad").severity == int(Severity.INFO)


def test_reemit_rebinds_run_id() -> None:
    buffered = make_event(stage="resolve", component="resolver", code="CONFIG_CLAMP", severity=Severity.WARN, ts="t0")
    sink = ListDiagnosticsSink()
    forwarded = reemit(sink, buffered, run_id="run-9")
    assert forwarded.run_id == "run-9"
    assert forwarded.ts == "t0"
    assert forwarded.code == "CONFIG_CLAMP"
    assert sink.events == [forwarded]


def test_jsonl_sink_appends_sorted_lines(tmp_path) -> None:
    target = tmp_path / "diag" / "events.jsonl"
    sink = JsonlDiagnosticsSink(str(target))
    emit_simple(sink, code="FIRST", stage="report", component="report", run_id="r")
    emit_simple(sink, code="SECOND", stage="report", component="report")
    lines = target.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert first["code"] == "FIRST"
    assert list(first) == sorted(first)
    assert json.loads(lines[1])["ts"]


SEVERITY_CASES = [
    ("warn", Severity.WARN),
    (" Error ", Severity.ERROR),
    (3, Severity.FATAL),
    (Severity.INFO, Severity.INFO),
    ("loud", Severity.INFO),
    (None, Severity.INFO),
]


def test_severity_parse_cases() -> None:
    for raw, expected in SEVERITY_CASES:
        assert Severity.parse(raw) == expected, raw
    assert Severity.parse("loud", Severity.WARN) == Severity.WARN


def test_filtering_sink_drops_low_severity() -> None:
    inner = ListDiagnosticsSink()
    sink = FilteringDiagnosticsSink(inner, "warn")
    emit_simple(sink, code="QUIET", stage="hang", component="hangers")
    emit_simple(sink, code="LOUD", stage="resolve", component="resolver", severity=Severity.WARN)
    emit_simple(sink, code="BROKEN", stage="layout", component="system", severity=Severity.ERROR)
    assert inner.codes() == ["LOUD", "BROKEN"]


def test_jsonl_round_trip_and_counts(tmp_path) -> None:
    target = tmp_path / "events.jsonl"
    sink = JsonlDiagnosticsSink(target)
    emit_simple(sink, code="CONFIG_CLAMP", stage="resolve", component="resolver", severity=Severity.WARN, run_id="r")
    emit_simple(sink, code="CONFIG_CLAMP", stage="resolve", component="resolver", severity=Severity.WARN, run_id="r")
    emit_simple(sink, code="POINTS_GENERATED", stage="generate", component="generator", run_id="r")
    events = read_jsonl(target)
    assert [event.code for event in events] == ["CONFIG_CLAMP", "CONFIG_CLAMP", "POINTS_GENERATED"]
    assert events[0].severity == int(Severity.WARN)
    assert events[0].run_id == "r"
    assert count_by_code(events) == {"CONFIG_CLAMP": 2, "POINTS_GENERATED": 1}
    assert count_by_code(events, Severity.WARN) == {"CONFIG_CLAMP": 2}
