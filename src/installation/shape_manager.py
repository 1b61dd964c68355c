"""Active footprint shape selection across the per-shape layout calculators."""

from __future__ import annotations

from src.installation.diagnostics import Severity, emit_simple
from src.installation.layout import LayoutCalculator
from src.installation.spec.types import (
    BuildContext,
    CircleFootprint,
    Footprint,
    HelixFootprint,
    LayoutConstants,
    LayoutResult,
    OvalFootprint,
    PricingConstants,
    RectangleFootprint,
    ShapeType,
    default_context,
)

SHAPE_ORDER: tuple[ShapeType, ...] = (
    ShapeType.rectangle,
    ShapeType.circle,
    ShapeType.oval,
    ShapeType.helix,
)

_DEFAULT_FOOTPRINTS: dict[ShapeType, Footprint] = {
    ShapeType.rectangle: RectangleFootprint(),
    ShapeType.circle: CircleFootprint(),
    ShapeType.oval: OvalFootprint(),
    ShapeType.helix: HelixFootprint(),
}


class ShapeManager:
    """Keeps exactly one layout calculator enabled.

    Shared reference constants are pushed to every calculator, active or not,
    so a later switch starts from consistent values.
    """

    def __init__(
        self,
        footprints: dict[ShapeType, Footprint] | None = None,
        constants: LayoutConstants | None = None,
        pricing: PricingConstants | None = None,
        default_shape: ShapeType = ShapeType.rectangle,
    ) -> None:
        merged = dict(_DEFAULT_FOOTPRINTS)
        merged.update(footprints or {})
        self.constants = constants or LayoutConstants()
        self.calculators: dict[ShapeType, LayoutCalculator] = {
            shape: LayoutCalculator(merged[shape], self.constants, pricing) for shape in SHAPE_ORDER
        }
        self.active_shape = ShapeType(default_shape)
        for shape, calculator in self.calculators.items():
            calculator.enabled = shape == self.active_shape

    def get_active(self) -> LayoutCalculator:
        return self.calculators[self.active_shape]

    def calculator(self, shape: ShapeType | str) -> LayoutCalculator:
        return self.calculators[ShapeType(shape)]

    def set_shared_constants(self, constants: LayoutConstants) -> None:
        self.constants = constants
        for calculator in self.calculators.values():
            calculator.apply_shared_constants(constants)

    def set_pricing(self, pricing: PricingConstants) -> None:
        for calculator in self.calculators.values():
            calculator.pricing = pricing

    def set_footprint(self, footprint: Footprint) -> None:
        self.calculators[ShapeType(footprint.kind)].set_footprint(footprint)

    def switch_to(
        self,
        shape: ShapeType | str,
        ctx: BuildContext | None = None,
        *,
        recalc: bool = True,
    ) -> LayoutResult | None:
        ctx = ctx or default_context()
        target = ShapeType(shape)
        previous = self.active_shape

        self.calculators[previous].enabled = False
        self.active_shape = target
        self.calculators[target].enabled = True
        self.set_shared_constants(self.constants)

        emit_simple(
            ctx.diag,
            run_id=ctx.run_id,
            stage="layout",
            component="shape_manager",
            code="SHAPE_SWITCHED",
            severity=Severity.INFO,
            path="shape",
            input_value=previous.value,
            resolved_value=target.value,
            reason="active footprint shape changed",
        )
        if not recalc:
            return self.calculators[target].result
        return self.recalculate(ctx)

    def recalculate(self, ctx: BuildContext | None = None) -> LayoutResult | None:
        return self.get_active().calculate_layout(ctx)
