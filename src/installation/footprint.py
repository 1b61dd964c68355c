"""Footprint shape operations dispatched over the closed set of shape kinds."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from src.installation.diagnostics import Severity, emit_simple
from src.installation.footprints import (
    circle_area,
    circle_bounds,
    circle_vertical_bounds,
    helix_bounds,
    helix_length,
    helix_vertical_bounds,
    oval_area,
    oval_bounds,
    oval_vertical_bounds,
    rectangle_area,
    rectangle_bounds,
    rectangle_vertical_bounds,
)
from src.installation.geom_utils import round_count, safe_divisor
from src.installation.snapping import snap_position
from src.installation.spec.types import (
    BuildContext,
    DensityProfile,
    Footprint,
    FootprintBounds,
    ShapeType,
    SnapMode,
)


@dataclass(frozen=True)
class FootprintOps:
    handler: str
    area: Callable[[Footprint], float]
    bounds: Callable[[Footprint], FootprintBounds]
    vertical_bounds: Callable[[Footprint, float], tuple[float, float]]


FOOTPRINT_STRATEGIES: dict[str, FootprintOps] = {
    ShapeType.rectangle.value: FootprintOps(
        "footprint_rectangle", rectangle_area, rectangle_bounds, rectangle_vertical_bounds
    ),
    ShapeType.circle.value: FootprintOps(
        "footprint_circle", circle_area, circle_bounds, circle_vertical_bounds
    ),
    ShapeType.oval.value: FootprintOps(
        "footprint_oval", oval_area, oval_bounds, oval_vertical_bounds
    ),
    ShapeType.helix.value: FootprintOps(
        "footprint_helix", helix_length, helix_bounds, helix_vertical_bounds
    ),
}


def footprint_ops(footprint: Footprint) -> FootprintOps:
    kind = getattr(footprint, "kind", None)
    ops = FOOTPRINT_STRATEGIES.get(kind)
    if ops is None:
        raise ValueError(f"unsupported footprint kind: {kind!r}")
    return ops


def select_footprint_ops(footprint: Footprint, ctx: BuildContext) -> FootprintOps:
    ops = footprint_ops(footprint)
    emit_simple(
        ctx.diag,
        run_id=ctx.run_id,
        stage="generate",
        component="footprint",
        code="STRATEGY_SELECTED",
        severity=Severity.INFO,
        path="footprint.kind",
        source="computed",
        payload={
            "key": {"kind": footprint.kind},
            "handler": ops.handler,
        },
        resolved_value={"kind": footprint.kind},
        reason="dispatch footprint shape strategy",
    )
    return ops


def footprint_area(footprint: Footprint) -> float:
    """Planar area; for a helix this is the effective helix length."""
    return footprint_ops(footprint).area(footprint)


def get_bounds(footprint: Footprint) -> FootprintBounds:
    return footprint_ops(footprint).bounds(footprint)


def get_vertical_bounds(footprint: Footprint, u: float) -> tuple[float, float]:
    return footprint_ops(footprint).vertical_bounds(footprint, u)


def calculate_target_point_count(footprint: Footprint, density: DensityProfile) -> int:
    """``round(points_per_reference_area * area / reference_area_units)``, never negative."""
    area = footprint_area(footprint)
    raw = density.points_per_reference_area * area / safe_divisor(density.reference_area_units)
    return round_count(raw)


def apply_snapping(
    footprint: Footprint,
    mode: SnapMode | str,
    raw_position: tuple[float, float, float],
    u: float,
    bounds: tuple[float, float] | None,
    row_index: int,
    total_rows: int,
    vertical_alignment: float = 0.5,
    top_to_bottom: bool = True,
) -> tuple[float, float, float]:
    """Snap a candidate into the column envelope of ``footprint`` at ``u``.

    ``bounds`` may be passed when the caller already looked the envelope up;
    otherwise it is computed from the shape.
    """
    column_bounds = bounds if bounds is not None else get_vertical_bounds(footprint, u)
    return snap_position(
        mode,
        raw_position,
        column_bounds,
        row_index,
        total_rows,
        vertical_alignment=vertical_alignment,
        top_to_bottom=top_to_bottom,
    )
