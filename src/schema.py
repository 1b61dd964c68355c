from __future__ import annotations

import re
from enum import Enum
from typing import Any, Dict, Optional, Tuple
from typing_extensions import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from src.installation.spec.types import DensityLevel, GridSizing, ShapeType, SnapMode, SurfaceType


# =========================
# Enums / core types
# =========================

class InstallationStyle(str, Enum):
    flat = "flat"
    sphere = "sphere"
    cone = "cone"
    saddle = "saddle"


STYLE_SURFACES: Dict[InstallationStyle, SurfaceType] = {
    InstallationStyle.flat: SurfaceType.flat,
    InstallationStyle.sphere: SurfaceType.projected_sphere,
    InstallationStyle.cone: SurfaceType.cone,
    InstallationStyle.saddle: SurfaceType.hyperbolic_paraboloid,
}

Vec3 = Tuple[float, float, float]


# =========================
# Aliases / Canonicalization
# =========================

def _canon(s: str) -> str:
    s = s.strip().lower()
    s = s.replace("ё", "е")
    s = s.replace("-", " ")
    s = s.replace("_", " ")
    s = re.sub(r"\s+", " ", s)
    return s


SHAPE_ALIASES = {
    "rectangle": "rectangle",
    "rect": "rectangle",
    "plate": "rectangle",
    "прямоугольник": "rectangle",

    "circle": "circle",
    "round": "circle",
    "круг": "circle",

    "oval": "oval",
    "ellipse": "oval",
    "овал": "oval",

    "helix": "helix",
    "spiral": "helix",
    "спираль": "helix",
}

SURFACE_ALIASES = {
    "flat": "flat",
    "ceiling": "flat",
    "flat ceiling": "flat",

    "projected sphere": "projected_sphere",
    "sphere": "projected_sphere",
    "сфера": "projected_sphere",

    "cone": "cone",
    "конус": "cone",

    "hyperbolic paraboloid": "hyperbolic_paraboloid",
    "saddle": "hyperbolic_paraboloid",
    "hypar": "hyperbolic_paraboloid",
}

STYLE_ALIASES = {
    "flat": "flat",
    "sphere": "sphere",
    "bowl": "sphere",
    "cone": "cone",
    "saddle": "saddle",
    "hypar": "saddle",
}

DENSITY_ALIASES = {
    "high": "high",
    "max": "high",
    "medium": "medium",
    "mid": "medium",
    "low": "low",
    "min": "low",
}

SNAP_ALIASES = {
    "snap to top": "snap_to_top",
    "top": "snap_to_top",
    "snap to bottom": "snap_to_bottom",
    "bottom": "snap_to_bottom",
    "vertical alignment": "vertical_alignment",
    "align": "vertical_alignment",
    "none": "none",
    "no snapping": "none",
}


def _alias(table: Dict[str, str], v):
    if v is None or not isinstance(v, str):
        return v
    return table.get(_canon(v), v)


# =========================
# Footprint records
# =========================

class PlacementParams(BaseModel):
    origin: Optional[Vec3] = None
    center_on_origin: Optional[bool] = None


class RectangleParams(PlacementParams):
    length: Optional[float] = Field(default=None, ge=0)
    width: Optional[float] = Field(default=None, ge=0)
    margin_x: Optional[float] = Field(default=None, ge=0)
    margin_z: Optional[float] = Field(default=None, ge=0)
    top_curve: Optional[Literal["flat", "parabola", "cosine"]] = None
    top_sag: Optional[float] = Field(default=None, ge=0)
    bottom_profile: Optional[Literal["flat", "triple"]] = None
    bottom_max_rise: Optional[float] = Field(default=None, ge=0)
    split_left: Optional[float] = Field(default=None, ge=0, le=1)
    split_right: Optional[float] = Field(default=None, ge=0, le=1)

    @model_validator(mode="after")
    def validate_splits(self):
        if self.split_left is not None and self.split_right is not None and self.split_left > self.split_right:
            raise ValueError("split_left must be <= split_right")
        return self


class CircleParams(PlacementParams):
    diameter: Optional[float] = Field(default=None, ge=0)


class OvalParams(PlacementParams):
    major_axis: Optional[float] = Field(default=None, ge=0)
    minor_axis: Optional[float] = Field(default=None, ge=0)


class HelixParams(PlacementParams):
    diameter: Optional[float] = Field(default=None, ge=0)
    height: Optional[float] = Field(default=None, ge=0)
    helix_count: Optional[int] = Field(default=None, ge=0, le=64)
    ref_diameter: Optional[float] = Field(default=None, gt=0)
    ref_height: Optional[float] = Field(default=None, gt=0)
    ref_helix_length: Optional[float] = Field(default=None, ge=0)
    ref_points_per_helix: Optional[float] = Field(default=None, ge=0)


class FootprintsParams(BaseModel):
    rectangle: Optional[RectangleParams] = None
    circle: Optional[CircleParams] = None
    oval: Optional[OvalParams] = None
    helix: Optional[HelixParams] = None


# =========================
# Target surface records
# =========================

class FlatParams(BaseModel):
    ceiling_y: Optional[float] = None
    additional_length: Optional[float] = None


class SphereParams(BaseModel):
    center: Optional[Vec3] = None
    radius: Optional[float] = Field(default=None, gt=0)
    use_bottom_half: Optional[bool] = None
    hang_direction: Optional[Vec3] = None
    height_offset: Optional[float] = None

    @field_validator("hang_direction")
    @classmethod
    def validate_direction(cls, v: Optional[Vec3]):
        if v is None:
            return None
        if all(abs(component) < 1e-9 for component in v):
            raise ValueError("hang_direction must be a non-zero vector")
        return v


class ConeParams(BaseModel):
    ceiling_height: Optional[float] = None
    apex: Optional[Vec3] = None
    base_radius: Optional[float] = Field(default=None, gt=0)
    height: Optional[float] = Field(default=None, ge=0)
    random_variation_ratio: Optional[float] = Field(default=None, ge=0)


class SaddleParams(BaseModel):
    ceiling_height: Optional[float] = None
    surface_center: Optional[Tuple[float, float]] = None
    a: Optional[float] = Field(default=None, gt=0)
    b: Optional[float] = Field(default=None, gt=0)
    amplitude: Optional[float] = None
    random_variation_ratio: Optional[float] = Field(default=None, ge=0)


class SurfacesParams(BaseModel):
    flat: Optional[FlatParams] = None
    projected_sphere: Optional[SphereParams] = None
    cone: Optional[ConeParams] = None
    hyperbolic_paraboloid: Optional[SaddleParams] = None


# =========================
# Density / generation / costing records
# =========================

class DensityParams(BaseModel):
    points_per_reference_area: Optional[float] = Field(default=None, ge=0)
    reference_area_units: Optional[float] = Field(default=None, gt=0)
    level: Optional[DensityLevel] = None

    @field_validator("level", mode="before")
    @classmethod
    def _v_level(cls, v):
        # Dropdown index (0=High, 1=Medium, 2=Low).
        if isinstance(v, int) and not isinstance(v, bool):
            if v not in (0, 1, 2):
                raise ValueError("density level index must be 0, 1 or 2")
            return DensityLevel.from_index(v)
        return _alias(DENSITY_ALIASES, v)


class GeneratorParams(BaseModel):
    grid_sizing: Optional[GridSizing] = None
    snapping: Optional[SnapMode] = None
    vertical_alignment: Optional[float] = Field(default=None, ge=0, le=1)
    top_to_bottom: Optional[bool] = None
    left_to_right: Optional[bool] = None
    accept_tolerance: Optional[float] = Field(default=None, ge=0)
    max_auto_iters: Optional[int] = Field(default=None, ge=1, le=100)
    min_cols: Optional[int] = Field(default=None, ge=1)
    max_cols: Optional[int] = Field(default=None, ge=1)

    @field_validator("snapping", mode="before")
    @classmethod
    def _v_snapping(cls, v):
        return _alias(SNAP_ALIASES, v)

    @model_validator(mode="after")
    def validate_column_range(self):
        if self.min_cols is not None and self.max_cols is not None and self.min_cols > self.max_cols:
            raise ValueError("min_cols must be <= max_cols")
        return self


class LayoutParams(BaseModel):
    base_area: Optional[float] = Field(default=None, gt=0)
    base_spots: Optional[float] = Field(default=None, ge=0)
    base_points: Optional[float] = Field(default=None, ge=0)


class PricingParams(BaseModel):
    price_per_area: Optional[float] = Field(default=None, ge=0)
    length_per_point: Optional[float] = Field(default=None, ge=0)
    price_per_length: Optional[float] = Field(default=None, ge=0)
    strand_count: Optional[int] = Field(default=None, ge=1)


class HangerParams(BaseModel):
    threshold_length: Optional[float] = Field(default=None, ge=0)
    hang_direction: Optional[Vec3] = None


# =========================
# Request model
# =========================

class InstallationRequest(BaseModel):
    """
    External configuration record. Everything is optional: the resolver
    fills gaps from the style preset and global defaults.
    """

    config_id: Optional[str] = None
    style: Optional[InstallationStyle] = None
    preset_id: Optional[str] = None
    variant: Optional[str] = None
    seed: Optional[int] = None

    shape: Optional[ShapeType] = None
    surface_kind: Optional[SurfaceType] = None

    footprints: Optional[FootprintsParams] = None
    surfaces: Optional[SurfacesParams] = None
    density: Optional[DensityParams] = None
    generator: Optional[GeneratorParams] = None
    layout: Optional[LayoutParams] = None
    pricing: Optional[PricingParams] = None
    hangers: Optional[HangerParams] = None

    # --- Alias validators (before enum parsing) ---

    @field_validator("shape", mode="before")
    @classmethod
    def _v_shape(cls, v):
        return _alias(SHAPE_ALIASES, v)

    @field_validator("surface_kind", mode="before")
    @classmethod
    def _v_surface(cls, v):
        return _alias(SURFACE_ALIASES, v)

    @field_validator("style", mode="before")
    @classmethod
    def _v_style(cls, v):
        return _alias(STYLE_ALIASES, v)

    # --- Structural validators ---

    @model_validator(mode="after")
    def validate_style_surface(self):
        if self.style is not None and self.surface_kind is not None:
            expected = STYLE_SURFACES[self.style]
            if self.surface_kind != expected:
                raise ValueError(
                    f"surface_kind {self.surface_kind.value} conflicts with style {self.style.value}"
                )
        return self

    def to_config(self) -> Dict[str, Any]:
        """Plain dict consumed by ``resolve``; unset fields are left out."""
        return self.model_dump(mode="json", exclude_none=True)
