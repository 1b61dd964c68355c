"""Grid-based point generation over a footprint shape."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from src.installation.diagnostics import Severity, emit_simple
from src.installation.footprint import FootprintOps, select_footprint_ops
from src.installation.geom_utils import EPSILON, clamp, inverse_lerp
from src.installation.plan_types import Point
from src.installation.snapping import snap_position
from src.installation.spec.types import (
    BuildContext,
    DensityLevel,
    Footprint,
    FootprintBounds,
    GeneratorSettings,
    GridSizing,
    default_context,
)

# Slack for float drift when the last row lands exactly on an edge.
ACCEPT_EPSILON = 1e-9


@dataclass(frozen=True)
class GridMetrics:
    columns: int
    rows: int
    spacing_x: float
    spacing_z: float
    target_points: int
    accepted_points: int
    rejected_points: int
    mode: str
    bounds: FootprintBounds


@dataclass(frozen=True)
class PointSet:
    points: list[Point] = field(default_factory=list)
    metrics: GridMetrics | None = None

    @property
    def accepted(self) -> list[Point]:
        return [point for point in self.points if point.accepted]

    def __len__(self) -> int:
        return len(self.points)


def _column_x(bounds: FootprintBounds, column: int, columns: int, dx: float) -> float:
    if columns == 1:
        return bounds.min_x + bounds.width * 0.5
    return bounds.min_x + column * dx


def _row_z(bounds: FootprintBounds, row: int, rows: int, dz: float, top_to_bottom: bool) -> float:
    if rows == 1:
        return bounds.min_z + bounds.height * 0.5
    if top_to_bottom:
        return bounds.max_z - row * dz
    return bounds.min_z + row * dz


def _u_parameter(x: float, bounds: FootprintBounds, left_to_right: bool) -> float:
    u = inverse_lerp(bounds.min_x, bounds.max_x, x)
    return u if left_to_right else 1.0 - u


def _spacing(extent: float, count: int) -> float:
    return extent if count == 1 else extent / (count - 1)


def _inside(z: float, column_bounds: tuple[float, float]) -> bool:
    return column_bounds[0] - ACCEPT_EPSILON <= z <= column_bounds[1] + ACCEPT_EPSILON


def _count_accepted(
    footprint: Footprint,
    ops: FootprintOps,
    bounds: FootprintBounds,
    columns: int,
    rows: int,
    settings: GeneratorSettings,
) -> int:
    dx = _spacing(bounds.width, columns)
    dz = _spacing(bounds.height, rows)
    accepted = 0
    for column in range(columns):
        x = _column_x(bounds, column, columns, dx)
        column_bounds = ops.vertical_bounds(footprint, _u_parameter(x, bounds, settings.left_to_right))
        for row in range(rows):
            if _inside(_row_z(bounds, row, rows, dz, settings.top_to_bottom), column_bounds):
                accepted += 1
    return accepted


def _auto_match_grid(
    footprint: Footprint,
    ops: FootprintOps,
    bounds: FootprintBounds,
    target: int,
    settings: GeneratorSettings,
) -> tuple[int, int]:
    min_cols = max(1, int(settings.min_cols))
    max_cols = max(min_cols, int(settings.max_cols))
    aspect = 1.0 if bounds.height <= EPSILON else bounds.width / bounds.height
    columns = int(clamp(max(1, round(math.sqrt(target * clamp(aspect, 0.25, 4.0)))), min_cols, max_cols))
    rows = max(1, int(round(target / float(columns))))

    for _iteration in range(max(1, int(settings.max_auto_iters))):
        accepted = _count_accepted(footprint, ops, bounds, columns, rows, settings)
        tolerance = abs(accepted - target) / max(1.0, float(target))
        if tolerance <= settings.accept_tolerance:
            return columns, rows

        if accepted == 0:
            columns = min(max_cols, columns + 2)
            rows += 2
            continue

        scale = math.sqrt(target / float(accepted))
        new_columns = int(clamp(max(1, round(columns * scale)), min_cols, max_cols))
        new_rows = max(1, int(round(rows * scale)))
        if new_columns == columns and new_rows == rows:
            rows += 1
        else:
            columns, rows = new_columns, new_rows
    return columns, rows


def _fixed_spacing_grid(bounds: FootprintBounds, spacing: float) -> tuple[int, int]:
    step = max(EPSILON, spacing)
    columns = max(1, int(math.floor(bounds.width / step)) + 1)
    rows = max(1, int(math.floor(bounds.height / step)) + 1)
    return columns, rows


def grid_shape(
    footprint: Footprint,
    ops: FootprintOps,
    bounds: FootprintBounds,
    target: int,
    settings: GeneratorSettings,
    level: DensityLevel = DensityLevel.high,
) -> tuple[int, int]:
    if GridSizing(settings.grid_sizing) == GridSizing.fixed_spacing:
        return _fixed_spacing_grid(bounds, level.fixed_spacing)
    return _auto_match_grid(footprint, ops, bounds, target, settings)


def generate_points(
    footprint: Footprint,
    target_points: int,
    settings: GeneratorSettings | None = None,
    ctx: BuildContext | None = None,
    *,
    level: DensityLevel = DensityLevel.high,
) -> PointSet:
    """Lay a grid over ``footprint`` and return every candidate, row-major.

    Candidates whose raw height falls outside the column envelope are kept with
    ``accepted=False`` so callers can map points to stable slots; accepted ones
    are snapped with the configured mode.
    """
    settings = settings or GeneratorSettings()
    ctx = ctx or default_context()
    ops = select_footprint_ops(footprint, ctx)
    bounds = ops.bounds(footprint)
    target = max(0, int(target_points))

    if target == 0:
        emit_simple(
            ctx.diag,
            run_id=ctx.run_id,
            stage="generate",
            component="generator",
            code="TARGET_EMPTY",
            severity=Severity.INFO,
            path="generator.target_points",
            input_value=target_points,
            resolved_value=0,
            reason="zero target point count; nothing to place",
        )
        return PointSet(
            points=[],
            metrics=GridMetrics(0, 0, 0.0, 0.0, 0, 0, 0, GridSizing(settings.grid_sizing).value, bounds),
        )

    columns, rows = grid_shape(footprint, ops, bounds, target, settings, level)
    dx = _spacing(bounds.width, columns)
    dz = _spacing(bounds.height, rows)
    emit_simple(
        ctx.diag,
        run_id=ctx.run_id,
        stage="generate",
        component="generator",
        code="GRID_SELECTED",
        severity=Severity.INFO,
        path="generator.grid_sizing",
        payload={"columns": columns, "rows": rows, "dx": dx, "dz": dz},
        resolved_value={"mode": GridSizing(settings.grid_sizing).value, "target": target},
        reason="grid dimensions chosen",
    )

    column_data: list[tuple[float, float, tuple[float, float]]] = []
    for column in range(columns):
        x = _column_x(bounds, column, columns, dx)
        u = _u_parameter(x, bounds, settings.left_to_right)
        column_data.append((x, u, ops.vertical_bounds(footprint, u)))

    points: list[Point] = []
    for row in range(rows):
        z = _row_z(bounds, row, rows, dz, settings.top_to_bottom)
        for column, (x, u, column_bounds) in enumerate(column_data):
            candidate = (x, bounds.y, z)
            accepted = _inside(z, column_bounds)
            position = candidate
            if accepted:
                position = snap_position(
                    settings.snapping,
                    candidate,
                    column_bounds,
                    row,
                    rows,
                    vertical_alignment=settings.vertical_alignment,
                    top_to_bottom=settings.top_to_bottom,
                )
            points.append(
                Point(
                    position=position,
                    accepted=accepted,
                    row_index=row,
                    total_rows=rows,
                    u=u,
                    column_index=column,
                    name=f"C{column + 1}-R{row + 1}",
                    column_bounds=column_bounds,
                )
            )

    accepted_count = sum(1 for point in points if point.accepted)
    metrics = GridMetrics(
        columns=columns,
        rows=rows,
        spacing_x=dx,
        spacing_z=dz,
        target_points=target,
        accepted_points=accepted_count,
        rejected_points=len(points) - accepted_count,
        mode=GridSizing(settings.grid_sizing).value,
        bounds=bounds,
    )
    emit_simple(
        ctx.diag,
        run_id=ctx.run_id,
        stage="generate",
        component="generator",
        code="POINTS_GENERATED",
        severity=Severity.INFO,
        path="generator.points",
        resolved_value={
            "target": target,
            "accepted": accepted_count,
            "rejected": metrics.rejected_points,
        },
        reason="point generation pass complete",
    )
    return PointSet(points=points, metrics=metrics)
