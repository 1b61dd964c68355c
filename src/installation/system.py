"""Installation system facade: the entry points a host UI or builder calls."""

from __future__ import annotations

import os
import random
import uuid

from src.installation.diagnostics import (
    FilteringDiagnosticsSink,
    JsonlDiagnosticsSink,
    NoopDiagnosticsSink,
    Severity,
    emit_simple,
    reemit,
)
from src.installation.footprint import calculate_target_point_count
from src.installation.hangers import build_hangers
from src.installation.plan_types import HangerPlan, Point
from src.installation.point_generator import PointSet, generate_points
from src.installation.shape_manager import ShapeManager
from src.installation.spec.resolve import resolve
from src.installation.spec.types import (
    BuildContext,
    DensityLevel,
    LayoutResult,
    ResolveDiagnostics,
    ResolvedConfig,
    ShapeType,
)
from src.schema import InstallationRequest


def _debug_env_enabled() -> bool:
    # Any non-falsey DEBUG* env variable enables debug mode.
    falsey = {"", "0", "false", "off", "no", "none"}
    for key, value in os.environ.items():
        if not key.startswith("DEBUG"):
            continue
        if str(value).strip().lower() not in falsey:
            return True
    return False


def _diag_sink_from_env():
    # Diagnostics are opt-in: JSONL sink only when INSTALLATION_DIAG_JSONL is set.
    path = os.environ.get("INSTALLATION_DIAG_JSONL", "").strip()
    if not path:
        return NoopDiagnosticsSink()
    sink = JsonlDiagnosticsSink(path)
    min_severity = os.environ.get("INSTALLATION_DIAG_MIN_SEVERITY", "").strip()
    if min_severity:
        return FilteringDiagnosticsSink(sink, Severity.parse(min_severity))
    return sink


def _coerce_level(level) -> DensityLevel | None:
    if isinstance(level, DensityLevel):
        return level
    if isinstance(level, int) and not isinstance(level, bool):
        return DensityLevel.from_index(level)
    if isinstance(level, str):
        try:
            return DensityLevel(level.strip().lower())
        except ValueError:
            return None
    return None


class InstallationSystem:
    """Owns one resolved configuration and the passes built from it.

    Each generation pass reads the immutable ``ResolvedConfig``; the only
    mutable state here is the active shape, the density level and the last
    generated points/plan.
    """

    def __init__(
        self,
        config: dict | InstallationRequest | None = None,
        *,
        diag=None,
        debug: bool | None = None,
        seed: int | None = None,
    ) -> None:
        self.ctx = BuildContext(
            run_id=uuid.uuid4().hex,
            debug=_debug_env_enabled() if debug is None else bool(debug),
            diag=diag if diag is not None else _diag_sink_from_env(),
        )
        self.config: ResolvedConfig | None = None
        self.resolve_diagnostics = ResolveDiagnostics()
        self.shape_manager = ShapeManager()
        self.density_level = DensityLevel.high
        self.point_set: PointSet | None = None
        self.plan: HangerPlan | None = None
        self._seed = seed
        self.rng = random.Random(seed)
        if config is not None:
            self.apply_configuration(config)

    # --- state views -------------------------------------------------------

    @property
    def points(self) -> list[Point]:
        return list(self.point_set.points) if self.point_set is not None else []

    @property
    def active_shape(self) -> ShapeType:
        return self.shape_manager.active_shape

    @property
    def layout_result(self) -> LayoutResult | None:
        return self.shape_manager.get_active().result

    def _config_missing(self, stage: str, path: str, reason: str, input_value=None) -> None:
        emit_simple(
            self.ctx.diag,
            run_id=self.ctx.run_id,
            stage=stage,
            component="system",
            code="CONFIG_MISSING",
            severity=Severity.ERROR,
            path=path,
            input_value=input_value,
            reason=reason,
        )

    def _pass_rng(self) -> random.Random:
        seed = self.config.seed if self.config is not None and self.config.seed is not None else self._seed
        if seed is None:
            return self.rng
        return random.Random(seed)

    # --- entry points ------------------------------------------------------

    def apply_configuration(self, config: dict | InstallationRequest) -> ResolvedConfig:
        raw = config.to_config() if isinstance(config, InstallationRequest) else config
        resolved, diagnostics = resolve(raw if isinstance(raw, dict) else {})
        for event in diagnostics.warnings:
            reemit(self.ctx.diag, event, run_id=self.ctx.run_id)

        self.config = resolved
        self.resolve_diagnostics = diagnostics
        self.density_level = resolved.density_level
        self.shape_manager = ShapeManager(
            resolved.footprints,
            resolved.layout,
            resolved.pricing,
            default_shape=resolved.shape,
        )
        self.point_set = None
        self.plan = None
        emit_simple(
            self.ctx.diag,
            run_id=self.ctx.run_id,
            stage="resolve",
            component="system",
            code="CONFIG_APPLIED",
            severity=Severity.INFO,
            path="config",
            source="config",
            resolved_value={
                "config_id": resolved.config_id,
                "style": resolved.style,
                "preset_id": resolved.preset_id,
                "shape": resolved.shape.value,
                "surface": resolved.surface.kind,
                "density_level": resolved.density_level.value,
            },
            reason="configuration resolved",
            warnings=len(diagnostics.warnings),
        )
        self.calculate_layout()
        return resolved

    def set_density_level(self, level: DensityLevel | str | int) -> int:
        """Select a density tier and return the resulting target point count."""
        resolved_level = _coerce_level(level)
        if resolved_level is None:
            self._config_missing("layout", "density.level", "unknown density level", input_value=level)
            return 0
        self.density_level = resolved_level
        target = self.target_point_count()
        emit_simple(
            self.ctx.diag,
            run_id=self.ctx.run_id,
            stage="layout",
            component="system",
            code="DENSITY_LEVEL_SET",
            severity=Severity.INFO,
            path="density.level",
            input_value=level if isinstance(level, (int, str)) else resolved_level.value,
            resolved_value={"level": resolved_level.value, "target_points": target},
            reason="density tier selected",
        )
        return target

    def target_point_count(self) -> int:
        if self.config is None:
            return 0
        profile = self.config.density_profile.scaled(self.density_level.multiplier)
        return calculate_target_point_count(self.shape_manager.get_active().footprint, profile)

    def generate_points_data(self) -> list[Point]:
        if self.config is None:
            self._config_missing("generate", "config", "no configuration applied; nothing generated")
            return []
        self.point_set = generate_points(
            self.shape_manager.get_active().footprint,
            self.target_point_count(),
            self.config.generator,
            self.ctx,
            level=self.density_level,
        )
        return list(self.point_set.points)

    def clear_all_points(self) -> None:
        cleared = len(self.point_set.points) if self.point_set is not None else 0
        self.point_set = None
        self.plan = None
        emit_simple(
            self.ctx.diag,
            run_id=self.ctx.run_id,
            stage="generate",
            component="system",
            code="POINTS_CLEARED",
            severity=Severity.INFO,
            path="points",
            resolved_value=cleared,
            reason="generated points discarded",
        )

    def calculate_layout(self) -> LayoutResult | None:
        if self.config is None:
            self._config_missing("layout", "config", "no configuration applied; layout not calculated")
            return None
        return self.shape_manager.recalculate(self.ctx)

    def recalculate(self) -> LayoutResult | None:
        return self.calculate_layout()

    def switch_to(self, shape: ShapeType | str) -> LayoutResult | None:
        try:
            target = ShapeType(shape.strip().lower() if isinstance(shape, str) else shape)
        except ValueError:
            self._config_missing("layout", "shape", "unknown footprint shape", input_value=shape)
            return None
        if self.point_set is not None:
            self.clear_all_points()
        return self.shape_manager.switch_to(target, self.ctx, recalc=self.config is not None)

    def build_system(self) -> HangerPlan:
        """Clear, generate and hang in one pass; returns the new hanger plan."""
        emit_simple(
            self.ctx.diag,
            run_id=self.ctx.run_id,
            stage="generate",
            component="system",
            code="BUILD_START",
            severity=Severity.INFO,
            reason="build pipeline start",
            resolved_value={
                "config_id": self.config.config_id if self.config is not None else None,
                "shape": self.active_shape.value,
                "density_level": self.density_level.value,
            },
        )
        self.clear_all_points()
        points = self.generate_points_data()
        if self.config is None:
            plan = HangerPlan()
        else:
            plan = build_hangers(points, self.config.surface, self.config.hangers, self.ctx, self._pass_rng())
            plan.metadata.update(
                {
                    "style": self.config.style,
                    "preset_id": self.config.preset_id,
                    "shape": self.active_shape.value,
                    "density_level": self.density_level.value,
                    "target_points": str(self.point_set.metrics.target_points if self.point_set else 0),
                }
            )
        self.plan = plan
        emit_simple(
            self.ctx.diag,
            run_id=self.ctx.run_id,
            stage="hang",
            component="system",
            code="BUILD_DONE",
            severity=Severity.INFO,
            reason="build pipeline complete",
            resolved_value={
                "points": plan.stats.total_grid_points,
                "hangers": plan.stats.created,
                "skipped": plan.stats.skipped,
            },
        )
        return plan

    def clear_system(self) -> None:
        self.clear_all_points()
