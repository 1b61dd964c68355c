"""Footprint shape handlers."""

from src.installation.footprints.ellipse import (
    circle_area,
    circle_bounds,
    circle_vertical_bounds,
    oval_area,
    oval_bounds,
    oval_vertical_bounds,
)
from src.installation.footprints.helix import (
    helix_bounds,
    helix_length,
    helix_strand_points,
    helix_vertical_bounds,
)
from src.installation.footprints.rectangle import (
    rectangle_area,
    rectangle_bounds,
    rectangle_vertical_bounds,
)

__all__ = [
    "circle_area",
    "circle_bounds",
    "circle_vertical_bounds",
    "helix_bounds",
    "helix_length",
    "helix_strand_points",
    "helix_vertical_bounds",
    "oval_area",
    "oval_bounds",
    "oval_vertical_bounds",
    "rectangle_area",
    "rectangle_bounds",
    "rectangle_vertical_bounds",
]
