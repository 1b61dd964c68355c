"""Stable serialization of hanger plans for regression snapshots."""

from __future__ import annotations

from typing import Any

from src.installation.plan_types import HangerPlan


def _round_value(value: Any):
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return round(float(value), 6)
    if isinstance(value, (list, tuple)):
        return [_round_value(item) for item in value]
    if isinstance(value, dict):
        normalized: dict[str, Any] = {}
        for key in sorted(value):
            normalized[str(key)] = _round_value(value[key])
        return normalized
    return value


def plan_to_snapshot(plan: HangerPlan) -> dict[str, Any]:
    points: list[dict[str, Any]] = []
    for point in plan.points:
        points.append(
            {
                "name": point.name,
                "accepted": point.accepted,
                "position": _round_value(point.position),
                "row_index": point.row_index,
                "column_index": point.column_index,
                "u": _round_value(point.u),
            }
        )

    hangers: list[dict[str, Any]] = []
    for hanger in plan.hangers:
        hangers.append(
            {
                "name": hanger.name,
                "label": hanger.label,
                "grid_point": hanger.grid_point,
                "anchor": _round_value(hanger.anchor),
                "end": _round_value(hanger.end),
                "length": _round_value(hanger.length),
            }
        )

    return {
        "points": points,
        "hangers": hangers,
        "stats": {
            "created": plan.stats.created,
            "skipped": plan.stats.skipped,
            "total_grid_points": plan.stats.total_grid_points,
        },
        "metadata": _round_value(dict(plan.metadata)),
    }
