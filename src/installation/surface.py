"""Target surface dispatch: one hanger length per generated point."""

from __future__ import annotations

import random
from typing import Callable

from src.installation.diagnostics import Severity, emit_simple
from src.installation.plan_types import Point
from src.installation.spec.types import BuildContext, SurfaceType, TargetSurface
from src.installation.surfaces import (
    calculate_cone_length,
    calculate_flat_length,
    calculate_projected_sphere_length,
    calculate_saddle_length,
)

LengthHandler = Callable[..., float]

SURFACE_STRATEGIES: dict[str, tuple[str, LengthHandler]] = {
    SurfaceType.flat.value: ("surface_flat", calculate_flat_length),
    SurfaceType.projected_sphere.value: ("surface_projected_sphere", calculate_projected_sphere_length),
    SurfaceType.cone.value: ("surface_cone", calculate_cone_length),
    SurfaceType.hyperbolic_paraboloid.value: ("surface_saddle", calculate_saddle_length),
}


def surface_handler(surface: TargetSurface) -> tuple[str, LengthHandler]:
    kind = getattr(surface, "kind", None)
    entry = SURFACE_STRATEGIES.get(kind)
    if entry is None:
        raise ValueError(f"unsupported surface kind: {kind!r}")
    return entry


def select_surface_handler(surface: TargetSurface, ctx: BuildContext) -> LengthHandler:
    handler_name, handler = surface_handler(surface)
    emit_simple(
        ctx.diag,
        run_id=ctx.run_id,
        stage="hang",
        component="surface",
        code="STRATEGY_SELECTED",
        severity=Severity.INFO,
        path="surface.kind",
        source="computed",
        payload={
            "key": {"kind": surface.kind},
            "handler": handler_name,
        },
        resolved_value={"kind": surface.kind},
        reason="dispatch target surface strategy",
    )
    return handler


def calculate_length(surface: TargetSurface, point: Point, rng: random.Random | None = None) -> float:
    """Hanger length from ``point`` to ``surface``; 0.0 means unattachable.

    ``rng`` drives the bounded jitter of the cone and saddle surfaces; without
    one those surfaces are evaluated without jitter.
    """
    _handler_name, handler = surface_handler(surface)
    return handler(surface, point, rng)
