"""Target surface length handlers."""

from src.installation.surfaces.cone import calculate_cone_length, cone_base_length
from src.installation.surfaces.flat import calculate_flat_length
from src.installation.surfaces.hyperbolic_paraboloid import calculate_saddle_length, saddle_height
from src.installation.surfaces.projected_sphere import (
    calculate_projected_sphere_length,
    intersect_ray_sphere,
    pick_hemisphere_hit,
)

__all__ = [
    "calculate_cone_length",
    "calculate_flat_length",
    "calculate_projected_sphere_length",
    "calculate_saddle_length",
    "cone_base_length",
    "intersect_ray_sphere",
    "pick_hemisphere_hit",
    "saddle_height",
]
