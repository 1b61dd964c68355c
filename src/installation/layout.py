"""Per-shape layout calculation: counts, density tiers and cost estimates."""

from __future__ import annotations

from dataclasses import replace

from src.installation.diagnostics import Severity, emit_simple
from src.installation.footprint import footprint_area
from src.installation.footprints.helix import points_per_helix
from src.installation.geom_utils import round_count
from src.installation.spec.types import (
    DENSITY_MULTIPLIERS,
    BuildContext,
    DensityLevel,
    Footprint,
    HelixFootprint,
    LayoutConstants,
    LayoutResult,
    PricingConstants,
    default_context,
)

MIN_BASE_AREA = 0.0001
DENSITY_PERCENT = 100.0


def _helix_extras(footprint: HelixFootprint, area: float) -> dict[str, float]:
    per_helix = points_per_helix(footprint)
    return {
        "helix_length": area,
        "points_per_helix": per_helix,
        "total_helix_points": per_helix * max(0, int(footprint.helix_count)),
    }


def compute_layout(
    footprint: Footprint,
    constants: LayoutConstants | None = None,
    pricing: PricingConstants | None = None,
) -> LayoutResult:
    constants = constants or LayoutConstants()
    pricing = pricing or PricingConstants()

    base_area = max(MIN_BASE_AREA, constants.base_area)
    base_spots = max(0.0, constants.base_spots)
    base_points = max(0.0, constants.base_points)

    area = footprint_area(footprint)
    total_spots = base_spots * area / base_area
    total_points = base_points * area / base_area

    bead_length_total = max(0.0, total_points) * max(0.0, pricing.length_per_point)
    extras = _helix_extras(footprint, area) if isinstance(footprint, HelixFootprint) else {}
    return LayoutResult(
        shape=footprint.kind,
        area=area,
        total_spots=total_spots,
        total_points=total_points,
        density=DENSITY_PERCENT,
        high_density=total_points * DENSITY_MULTIPLIERS[DensityLevel.high],
        medium_density=total_points * DENSITY_MULTIPLIERS[DensityLevel.medium],
        low_density=total_points * DENSITY_MULTIPLIERS[DensityLevel.low],
        attachment_unit_count=round_count(total_spots),
        attachment_cost=area * max(0.0, pricing.price_per_area),
        bead_length_total=bead_length_total,
        bead_cost=bead_length_total * max(0.0, pricing.price_per_length) * max(1, int(pricing.strand_count)),
        extras=extras,
    )


class LayoutCalculator:
    """Holds one shape's parameters and its last computed layout.

    A disabled calculator keeps its last result and stops producing updates
    until it is enabled again.
    """

    def __init__(
        self,
        footprint: Footprint,
        constants: LayoutConstants | None = None,
        pricing: PricingConstants | None = None,
    ) -> None:
        self.footprint = footprint
        self.constants = constants or LayoutConstants()
        self.pricing = pricing or PricingConstants()
        self.enabled = True
        self.result: LayoutResult | None = None

    @property
    def shape(self) -> str:
        return self.footprint.kind

    def set_footprint(self, footprint: Footprint) -> None:
        if footprint.kind != self.footprint.kind:
            raise ValueError(f"calculator for {self.footprint.kind!r} cannot take a {footprint.kind!r} footprint")
        self.footprint = footprint

    def apply_shared_constants(self, constants: LayoutConstants) -> None:
        self.constants = replace(constants)

    def calculate_layout(self, ctx: BuildContext | None = None) -> LayoutResult | None:
        ctx = ctx or default_context()
        if not self.enabled:
            emit_simple(
                ctx.diag,
                run_id=ctx.run_id,
                stage="layout",
                component="layout",
                code="LAYOUT_SKIPPED",
                severity=Severity.INFO,
                path=f"layout.{self.shape}",
                reason="calculator disabled",
            )
            return self.result

        self.result = compute_layout(self.footprint, self.constants, self.pricing)
        emit_simple(
            ctx.diag,
            run_id=ctx.run_id,
            stage="layout",
            component="layout",
            code="LAYOUT_CALCULATED",
            severity=Severity.INFO,
            path=f"layout.{self.shape}",
            resolved_value={
                "area": self.result.area,
                "total_spots": self.result.total_spots,
                "total_points": self.result.total_points,
                "attachment_unit_count": self.result.attachment_unit_count,
                "attachment_cost": self.result.attachment_cost,
                "bead_cost": self.result.bead_cost,
            },
            reason="layout recalculated",
        )
        return self.result
