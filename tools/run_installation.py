"""Build a hanger plan from a JSON configuration and save snapshot + report.

Usage:
python tools/run_installation.py path/to/config.json [out_dir]

Env vars:
- INSTALLATION_DIAG_JSONL: append diagnostics events to this JSONL file
  (default: <run dir>/diagnostics.jsonl)
- INSTALLATION_DIAG_MIN_SEVERITY: drop events below this level (info|warn|error|fatal)
- DEBUG*=1: enable debug mode on the build context
"""

import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from src.installation.diagnostics import (  # noqa: E402
    FilteringDiagnosticsSink,
    JsonlDiagnosticsSink,
    Severity,
    count_by_code,
    read_jsonl,
)
from src.installation.plan_snapshot import plan_to_snapshot  # noqa: E402
from src.installation.report import collect_statistics, write_report_csv, write_report_json  # noqa: E402
from src.installation.system import InstallationSystem  # noqa: E402
from tools.debug.io import config_sha256, load_json, make_run_id, save_json  # noqa: E402


def _diag_sink(run_dir: Path):
    path = os.environ.get("INSTALLATION_DIAG_JSONL", "").strip() or str(run_dir / "diagnostics.jsonl")
    sink = JsonlDiagnosticsSink(path)
    min_severity = os.environ.get("INSTALLATION_DIAG_MIN_SEVERITY", "").strip()
    if min_severity:
        return FilteringDiagnosticsSink(sink, Severity.parse(min_severity)), sink.path
    return sink, sink.path


def main() -> int:
    if len(sys.argv) < 2:
        print(__doc__)
        return 2
    config = load_json(sys.argv[1])
    out_root = Path(sys.argv[2]) if len(sys.argv) > 2 else ROOT / "out" / "runs"
    run_dir = out_root / make_run_id()
    sink, diag_path = _diag_sink(run_dir)

    system = InstallationSystem(config, diag=sink)
    plan = system.build_system()

    save_json(
        run_dir / "snapshot.json",
        {
            "config_sha256": config_sha256(config),
            "run_id": system.ctx.run_id,
            "plan": plan_to_snapshot(plan),
        },
    )
    write_report_json(plan, run_dir / "report.json")
    write_report_csv(plan, run_dir / "report.csv")

    stats = collect_statistics(plan)
    layout = system.layout_result
    print(f"run dir: {run_dir}")
    print(f"points: {plan.stats.total_grid_points} | hangers: {plan.stats.created} | skipped: {plan.stats.skipped}")
    print(f"total wire length: {stats['total_wire_length']:.3f} | avg: {stats['avg_wire_length']:.3f}")
    if layout is not None:
        print(
            f"area: {layout.area:.4f} | attachment units: {layout.attachment_unit_count}"
            f" | attachment cost: {layout.attachment_cost:.2f} | bead cost: {layout.bead_cost:.2f}"
        )

    if diag_path.exists():
        own = [event for event in read_jsonl(diag_path) if event.run_id == system.ctx.run_id]
        warnings = count_by_code(own, Severity.WARN)
        print(f"diagnostics: {diag_path} ({len(own)} events)")
        for code, count in warnings.items():
            print(f"  {code}: {count}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
