"""Hanger plan statistics and JSON/CSV export."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any

from src.installation.geom_utils import points_bbox
from src.installation.plan_types import Hanger, HangerPlan

CSV_HEADER = (
    "wire_label",
    "grid_point",
    "column",
    "row",
    "wire_length",
    "anchor_x",
    "anchor_y",
    "anchor_z",
    "end_x",
    "end_y",
    "end_z",
    "group",
)


def wire_group(label: str) -> str:
    """Letter prefix of a wire label (A1 -> A, AA5 -> AA)."""
    index = 0
    while index < len(label) and label[index].isalpha():
        index += 1
    return label[:index] if index > 0 else "Ungrouped"


def _sorted_hangers(plan: HangerPlan, by_length: bool = False) -> list[Hanger]:
    if by_length:
        return sorted(plan.hangers, key=lambda hanger: hanger.length)
    return sorted(plan.hangers, key=lambda hanger: hanger.label.lower())


def collect_statistics(plan: HangerPlan) -> dict[str, Any]:
    lengths = [hanger.length for hanger in plan.hangers]
    stats: dict[str, Any] = {
        "total_points": sum(1 for point in plan.points if point.accepted),
        "total_grid_points": plan.stats.total_grid_points,
        "total_wires": len(plan.hangers),
        "min_wire_length": 0.0,
        "max_wire_length": 0.0,
        "avg_wire_length": 0.0,
        "total_wire_length": 0.0,
        "system_center": [0.0, 0.0, 0.0],
        "system_size": [0.0, 0.0, 0.0],
        "distribution_area": 0.0,
        "group_counts": {},
        "group_total_lengths": {},
    }
    if not lengths:
        return stats

    stats["min_wire_length"] = min(lengths)
    stats["max_wire_length"] = max(lengths)
    stats["total_wire_length"] = sum(lengths)
    stats["avg_wire_length"] = stats["total_wire_length"] / len(lengths)

    bbox = points_bbox([hanger.anchor for hanger in plan.hangers] + [hanger.end for hanger in plan.hangers])
    low, high = bbox["min"], bbox["max"]
    size = [high[i] - low[i] for i in range(3)]
    stats["system_center"] = [(low[i] + high[i]) * 0.5 for i in range(3)]
    stats["system_size"] = size
    stats["distribution_area"] = size[0] * size[2]

    group_counts: dict[str, int] = {}
    group_lengths: dict[str, float] = {}
    for hanger in plan.hangers:
        group = wire_group(hanger.label)
        group_counts[group] = group_counts.get(group, 0) + 1
        group_lengths[group] = group_lengths.get(group, 0.0) + hanger.length
    stats["group_counts"] = dict(sorted(group_counts.items()))
    stats["group_total_lengths"] = dict(sorted(group_lengths.items()))
    return stats


def length_distribution(plan: HangerPlan, buckets: int = 5) -> list[dict[str, Any]]:
    """Equal-width histogram of hanger lengths; the last bucket is closed."""
    buckets = max(1, int(buckets))
    lengths = [hanger.length for hanger in plan.hangers]
    if not lengths:
        return []

    low = min(lengths)
    high = max(lengths)
    width = (high - low) / buckets
    counts = [0] * buckets
    for length in lengths:
        index = buckets - 1 if width <= 0.0 else min(int((length - low) / width), buckets - 1)
        counts[index] += 1

    return [
        {
            "start": low + index * width,
            "end": low + (index + 1) * width,
            "count": counts[index],
        }
        for index in range(buckets)
    ]


def _hanger_record(hanger: Hanger) -> dict[str, Any]:
    return {
        "wire_label": hanger.label,
        "name": hanger.name,
        "grid_point": hanger.grid_point,
        "column": hanger.column_index,
        "row": hanger.row_index,
        "wire_length": hanger.length,
        "anchor": list(hanger.anchor),
        "end": list(hanger.end),
        "group": wire_group(hanger.label),
    }


def report_to_dict(plan: HangerPlan, *, sort_by_length: bool = False, buckets: int = 5) -> dict[str, Any]:
    return {
        "metadata": dict(plan.metadata),
        "build": {
            "created": plan.stats.created,
            "skipped": plan.stats.skipped,
            "total_grid_points": plan.stats.total_grid_points,
        },
        "statistics": collect_statistics(plan),
        "distribution": length_distribution(plan, buckets),
        "wires": [_hanger_record(hanger) for hanger in _sorted_hangers(plan, sort_by_length)],
    }


def write_report_json(plan: HangerPlan, path: str | Path, **kwargs: Any) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(report_to_dict(plan, **kwargs), ensure_ascii=False, indent=2), encoding="utf-8")
    return target


def write_report_csv(plan: HangerPlan, path: str | Path, *, sort_by_length: bool = False) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.writer(handle)
        writer.writerow(CSV_HEADER)
        for hanger in _sorted_hangers(plan, sort_by_length):
            writer.writerow(
                [
                    hanger.label,
                    hanger.grid_point,
                    hanger.column_index,
                    hanger.row_index,
                    f"{hanger.length:.4f}",
                    *(f"{value:.4f}" for value in hanger.anchor),
                    *(f"{value:.4f}" for value in hanger.end),
                    wire_group(hanger.label),
                ]
            )
    return target
