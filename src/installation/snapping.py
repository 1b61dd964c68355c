"""Row snapping rule shared by every footprint shape."""

from __future__ import annotations

from src.installation.geom_utils import clamp, lerp
from src.installation.spec.types import SnapMode


def normalized_row(row_index: int, total_rows: int, top_to_bottom: bool) -> float:
    """Row position in [0, 1] measured from the traversal start edge."""
    if total_rows > 1:
        value = clamp(row_index / float(total_rows - 1), 0.0, 1.0)
    else:
        value = 0.0
    if not top_to_bottom:
        value = 1.0 - value
    return value


def snap_position(
    mode: SnapMode | str,
    raw_position: tuple[float, float, float],
    bounds: tuple[float, float],
    row_index: int,
    total_rows: int,
    vertical_alignment: float = 0.5,
    top_to_bottom: bool = True,
) -> tuple[float, float, float]:
    """Return ``raw_position`` with its vertical (z) coordinate snapped into ``bounds``.

    snap_to_top spreads rows downward from the top edge, snap_to_bottom upward
    from the bottom edge, vertical_alignment centres the row stack on the
    ``vertical_alignment`` fraction of the column, none keeps the raw grid z.
    The result always lies within ``[min(bounds), max(bounds)]``.
    """
    x, y, z = raw_position
    low = min(bounds[0], bounds[1])
    high = max(bounds[0], bounds[1])
    column_height = high - low
    norm = normalized_row(row_index, total_rows, top_to_bottom)

    mode_value = SnapMode(mode)
    if mode_value == SnapMode.snap_to_top:
        z = high - norm * column_height
    elif mode_value == SnapMode.snap_to_bottom:
        z = low + norm * column_height
    elif mode_value == SnapMode.vertical_alignment:
        base = lerp(low, high, clamp(vertical_alignment, 0.0, 1.0))
        z = base + (0.5 - norm) * column_height
    return (x, y, clamp(z, low, high))
