"""Plan result dataclasses shared by the generator, hanger builder and report."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class Point:
    """Generated anchor point; rejected candidates keep ``accepted=False``."""

    position: Tuple[float, float, float]
    accepted: bool
    row_index: int
    total_rows: int
    u: float
    column_index: int = 0
    name: str = ""
    column_bounds: Tuple[float, float] = (0.0, 0.0)


@dataclass
class Hanger:
    """One straight hanger from an anchor point down to the target surface."""

    name: str
    label: str
    grid_point: str
    anchor: Tuple[float, float, float]
    end: Tuple[float, float, float]
    length: float
    column_index: int
    row_index: int


@dataclass
class BuildStatistics:
    created: int = 0
    total_grid_points: int = 0
    skipped: int = 0


@dataclass
class HangerPlan:
    """Container for evaluated points and hangers handed to an external builder."""

    points: List[Point] = field(default_factory=list)
    hangers: List[Hanger] = field(default_factory=list)
    stats: BuildStatistics = field(default_factory=BuildStatistics)
    metadata: Dict[str, str] = field(default_factory=dict)
