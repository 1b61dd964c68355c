"""Hanger plan construction from generated points and a target surface."""

from __future__ import annotations

import random
import re
from dataclasses import replace
from typing import Iterable

from src.installation.diagnostics import Severity, emit_simple
from src.installation.geom_utils import vec_add, vec_normalize, vec_scale
from src.installation.plan_types import BuildStatistics, Hanger, HangerPlan, Point
from src.installation.spec.types import (
    BuildContext,
    HangerSettings,
    ProjectedSphereSurface,
    TargetSurface,
    default_context,
)
from src.installation.surface import select_surface_handler

HANGER_PREFIX = "HANG_"
_GRID_NAME = re.compile(r"C(\d+)-R(\d+)")


def column_letters(column: int) -> str:
    """1 -> A, 26 -> Z, 27 -> AA."""
    letters = ""
    value = max(1, int(column))
    while value > 0:
        value, remainder = divmod(value - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


def wire_label(grid_name: str) -> str:
    match = _GRID_NAME.search(grid_name.strip())
    if match is None:
        return f"WIRE_{grid_name.strip()}"
    column = int(match.group(1))
    row = int(match.group(2))
    return f"{column_letters(column)}{row}"


def _hang_direction(surface: TargetSurface, settings: HangerSettings) -> tuple[float, float, float]:
    if isinstance(surface, ProjectedSphereSurface):
        return vec_normalize(surface.hang_direction)
    return vec_normalize(settings.hang_direction)


def build_hangers(
    points: Iterable[Point],
    surface: TargetSurface,
    settings: HangerSettings | None = None,
    ctx: BuildContext | None = None,
    rng: random.Random | None = None,
) -> HangerPlan:
    """Evaluate every point against ``surface`` and collect attachable hangers.

    Rejected points and lengths at or below the threshold produce no hanger;
    the point is re-emitted with ``accepted=False``. Output order follows the
    input order.
    """
    settings = settings or HangerSettings()
    ctx = ctx or default_context()
    handler = select_surface_handler(surface, ctx)
    direction = _hang_direction(surface, settings)

    plan = HangerPlan(metadata={"surface": str(surface.kind)})
    stats = BuildStatistics()
    for point in points:
        stats.total_grid_points += 1
        length = handler(surface, point, rng) if point.accepted else 0.0
        if not point.accepted or length <= settings.threshold_length:
            stats.skipped += 1
            plan.points.append(replace(point, accepted=False) if point.accepted else point)
            if point.accepted:
                emit_simple(
                    ctx.diag,
                    run_id=ctx.run_id,
                    stage="hang",
                    component="hangers",
                    code="HANGER_SKIPPED",
                    severity=Severity.INFO,
                    path=f"hangers.{point.name}",
                    input_value=length,
                    resolved_value=0.0,
                    reason="point not attachable to target surface",
                    threshold=settings.threshold_length,
                )
            continue

        label = wire_label(point.name)
        plan.points.append(point)
        plan.hangers.append(
            Hanger(
                name=f"{HANGER_PREFIX}{label}",
                label=label,
                grid_point=point.name,
                anchor=point.position,
                end=vec_add(point.position, vec_scale(direction, length)),
                length=length,
                column_index=point.column_index,
                row_index=point.row_index,
            )
        )
        stats.created += 1

    plan.stats = stats
    emit_simple(
        ctx.diag,
        run_id=ctx.run_id,
        stage="hang",
        component="hangers",
        code="HANGERS_BUILT",
        severity=Severity.INFO,
        path="hangers",
        resolved_value={
            "created": stats.created,
            "skipped": stats.skipped,
            "total_grid_points": stats.total_grid_points,
        },
        reason="hanger evaluation complete",
    )
    return plan
