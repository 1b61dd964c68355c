"""Ray/sphere projection surface.

Each point casts a ray along the hang direction; the hanger ends where the
ray first meets the requested hemisphere of the sphere.
"""

from __future__ import annotations

import math

from src.installation.geom_utils import vec_add, vec_dot, vec_normalize, vec_scale, vec_sub
from src.installation.plan_types import Point
from src.installation.spec.types import ProjectedSphereSurface

MIN_SPHERE_RADIUS = 1e-5
HEMISPHERE_EPSILON = 1e-6


def intersect_ray_sphere(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    center: tuple[float, float, float],
    radius: float,
) -> tuple[float, float] | None:
    """Return both ray parameters ``(t0, t1)`` with ``t0 <= t1``, or None on a miss."""
    r = max(MIN_SPHERE_RADIUS, radius)
    offset = vec_sub(origin, center)
    a = vec_dot(direction, direction)
    if a <= 0.0:
        return None
    b = 2.0 * vec_dot(direction, offset)
    c = vec_dot(offset, offset) - r * r
    discriminant = b * b - 4.0 * a * c
    if discriminant < 0.0:
        return None
    root = math.sqrt(discriminant)
    inv_2a = 0.5 / a
    return ((-b - root) * inv_2a, (-b + root) * inv_2a)


def _on_hemisphere(position: tuple[float, float, float], center_y: float, bottom: bool) -> bool:
    if bottom:
        return position[1] <= center_y + HEMISPHERE_EPSILON
    return position[1] >= center_y - HEMISPHERE_EPSILON


def pick_hemisphere_hit(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    center: tuple[float, float, float],
    roots: tuple[float, float],
    use_bottom_half: bool,
) -> float | None:
    """Smaller forward root on the requested hemisphere wins, then the larger one."""
    for t in roots:
        if t < 0.0:
            continue
        hit = vec_add(origin, vec_scale(direction, t))
        if _on_hemisphere(hit, center[1], use_bottom_half):
            return t
    return None


def calculate_projected_sphere_length(surface: ProjectedSphereSurface, point: Point, rng=None) -> float:
    """Distance along the hang direction to the sphere, or 0.0 when unattachable."""
    del rng
    direction = vec_normalize(surface.hang_direction)
    roots = intersect_ray_sphere(point.position, direction, surface.center, surface.radius)
    if roots is None:
        return 0.0
    chosen = pick_hemisphere_hit(point.position, direction, surface.center, roots, surface.use_bottom_half)
    if chosen is None or chosen <= 0.0:
        return 0.0
    return max(0.0, chosen + surface.height_offset)
