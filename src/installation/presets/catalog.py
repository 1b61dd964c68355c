"""Style preset catalog for the installation resolver.

Merge precedence (low -> high):
1) global defaults
2) style base overrides
3) preset overrides
4) optional preset variant overrides

Explicit request values remain the highest-precedence layer and are applied
later by the resolver.
"""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Mapping

PresetDict = dict[str, Any]

DEFAULT_STYLE = "flat"


@dataclass(frozen=True)
class PresetDefinition:
    base: Mapping[str, Any] = field(default_factory=dict)
    variants: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)


@dataclass(frozen=True)
class StyleDefinition:
    default_preset_id: str = "default"
    base: Mapping[str, Any] = field(default_factory=dict)
    presets: Mapping[str, PresetDefinition] = field(default_factory=dict)


@dataclass(frozen=True)
class PresetLayer:
    layer_id: str
    values: Mapping[str, Any]


_GLOBAL_DEFAULTS: PresetDict = {
    "shape": "rectangle",
    "surface_kind": "flat",
    "density": {
        "points_per_reference_area": 120.0,
        "reference_area_units": 1.0,
        "level": "high",
    },
    "footprints": {
        "rectangle": {
            "length": 2.45,
            "width": 0.9,
            "margin_x": 0.0,
            "margin_z": 0.0,
            "top_curve": "flat",
            "top_sag": 0.08,
            "bottom_profile": "flat",
            "bottom_max_rise": 0.10,
            "split_left": 0.33,
            "split_right": 0.66,
        },
        "circle": {"diameter": 1.0},
        "oval": {"major_axis": 1.0, "minor_axis": 0.5},
        "helix": {
            "diameter": 1.0,
            "height": 1.0,
            "helix_count": 3,
            "ref_diameter": 1.0,
            "ref_height": 1.0,
            "ref_helix_length": 5.4,
            "ref_points_per_helix": 50.0,
        },
    },
    "surfaces": {
        "flat": {"ceiling_y": 5.0, "additional_length": 0.0},
        "projected_sphere": {
            "center": [0.0, 0.0, 0.0],
            "radius": 2.0,
            "use_bottom_half": True,
            "hang_direction": [0.0, -1.0, 0.0],
            "height_offset": 0.0,
        },
        "cone": {
            "ceiling_height": 5.0,
            "apex": [0.0, 0.0, 0.0],
            "base_radius": 1.0,
            "height": 1.0,
            "random_variation_ratio": 0.0,
        },
        "hyperbolic_paraboloid": {
            "ceiling_height": 5.0,
            "surface_center": [0.0, 0.0],
            "a": 1.0,
            "b": 1.0,
            "amplitude": 0.5,
            "random_variation_ratio": 0.0,
        },
    },
    "generator": {
        "grid_sizing": "auto_match",
        "snapping": "snap_to_top",
        "vertical_alignment": 0.5,
        "top_to_bottom": True,
        "left_to_right": True,
        "accept_tolerance": 0.02,
        "max_auto_iters": 12,
        "min_cols": 4,
        "max_cols": 200,
    },
    "layout": {
        "base_area": 1.0,
        "base_spots": 14.0,
        "base_points": 120.0,
    },
    "pricing": {
        "price_per_area": 20000.0,
        "length_per_point": 1.5,
        "price_per_length": 3.0,
        "strand_count": 1,
    },
    "hangers": {
        "threshold_length": 0.01,
        "hang_direction": [0.0, -1.0, 0.0],
    },
}

_STYLE_DEFINITIONS: dict[str, StyleDefinition] = {
    "flat": StyleDefinition(
        default_preset_id="flat_ceiling_v1",
        base={"surface_kind": "flat"},
        presets={
            "flat_ceiling_v1": PresetDefinition(
                base={"surfaces": {"flat": {"ceiling_y": 3.0}}},
                variants={
                    "drop": {"surfaces": {"flat": {"additional_length": 0.25}}},
                },
            ),
        },
    ),
    "sphere": StyleDefinition(
        default_preset_id="sphere_bowl_v1",
        base={"surface_kind": "projected_sphere"},
        presets={
            "sphere_bowl_v1": PresetDefinition(
                base={
                    "shape": "circle",
                    "footprints": {"circle": {"diameter": 2.0}},
                    "surfaces": {
                        "projected_sphere": {
                            "center": [0.0, 0.0, 0.0],
                            "radius": 2.0,
                            "use_bottom_half": True,
                        }
                    },
                },
                variants={
                    "dome": {"surfaces": {"projected_sphere": {"use_bottom_half": False}}},
                },
            ),
        },
    ),
    "cone": StyleDefinition(
        default_preset_id="cone_v1",
        base={"surface_kind": "cone"},
        presets={
            "cone_v1": PresetDefinition(
                base={
                    "shape": "oval",
                    "surfaces": {"cone": {"base_radius": 1.0, "height": 1.5, "random_variation_ratio": 0.05}},
                },
            ),
        },
    ),
    "saddle": StyleDefinition(
        default_preset_id="saddle_v1",
        base={"surface_kind": "hyperbolic_paraboloid"},
        presets={
            "saddle_v1": PresetDefinition(
                base={
                    "surfaces": {
                        "hyperbolic_paraboloid": {"a": 1.2, "b": 0.8, "amplitude": 0.4, "random_variation_ratio": 0.02}
                    },
                },
            ),
        },
    ),
}


def _deep_merge(base: Mapping[str, Any], patch: Mapping[str, Any]) -> PresetDict:
    merged: PresetDict = deepcopy(dict(base))
    for key, value in patch.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = deepcopy(value)
    return merged


def _normalize_style(style: str | None) -> str:
    return str(style or "").strip().lower() or DEFAULT_STYLE


def known_styles() -> tuple[str, ...]:
    return tuple(sorted(_STYLE_DEFINITIONS))


def default_preset_id(style: str | None) -> str:
    style_definition = _STYLE_DEFINITIONS.get(_normalize_style(style))
    if style_definition is None:
        return "default"
    return str(style_definition.default_preset_id or "").strip() or "default"


def get_preset_layers(
    style: str | None,
    preset_id: str | None,
    variant_id: str | None = None,
) -> tuple[PresetLayer, ...]:
    normalized_style = _normalize_style(style)
    layers: list[PresetLayer] = [PresetLayer(layer_id="global", values=_GLOBAL_DEFAULTS)]

    style_definition = _STYLE_DEFINITIONS.get(normalized_style)
    if style_definition is None:
        return tuple(layers)

    if style_definition.base:
        layers.append(PresetLayer(layer_id=f"style:{normalized_style}", values=style_definition.base))

    selected_id = str(preset_id or "").strip() or default_preset_id(normalized_style)
    selected = style_definition.presets.get(selected_id)
    if selected is None:
        selected_id = default_preset_id(normalized_style)
        selected = style_definition.presets.get(selected_id)
    if selected is None:
        return tuple(layers)

    if selected.base:
        layers.append(PresetLayer(layer_id=f"preset:{selected_id}", values=selected.base))

    normalized_variant = str(variant_id or "").strip().lower()
    variant_patch = selected.variants.get(normalized_variant) if normalized_variant else None
    if variant_patch:
        layers.append(PresetLayer(layer_id=f"variant:{selected_id}:{normalized_variant}", values=variant_patch))

    return tuple(layers)


def resolved_preset_id(style: str | None, preset_id: str | None) -> str:
    """Preset id the layers actually used, after the unknown-id fallback."""
    style_definition = _STYLE_DEFINITIONS.get(_normalize_style(style))
    if style_definition is None:
        return "default"
    candidate = str(preset_id or "").strip()
    if candidate in style_definition.presets:
        return candidate
    return default_preset_id(style)


def get_preset(style: str | None, preset_id: str | None, variant_id: str | None = None) -> PresetDict:
    """Return merged preset defaults for style/preset_id."""
    merged: PresetDict = {}
    for layer in get_preset_layers(style=style, preset_id=preset_id, variant_id=variant_id):
        merged = _deep_merge(merged, layer.values)
    return merged
