"""
solver.py
=========
Entry points of the coverage analyses.

- ``compute_row_exclusion(sensors, row)``: positions on one row that cannot
  hold an undiscovered beacon.
- ``find_gap_point(sensors, bound)``: the single uncovered position inside
  ``[0, bound]^2``, or None.
- ``solve(sensors, row, bound)``: both, bundled in a ``Solution``.

Gap strategies
--------------
"boundary"  crossings of shared boundary lines only (fast, bound-independent)
"sweep"     row-by-row scan of the square (exact, linear in bound)
"auto"      "boundary", then "sweep" if the crossings give nothing
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from sensor_coverage.coverage_core.model import (
    STRATEGIES,
    GapPoint,
    Sensor,
    Solution,
)
from sensor_coverage.coverage_algorithms.boundary_lines import (
    extract_shared_boundaries,
)
from sensor_coverage.coverage_algorithms.gap_search import (
    AmbiguousGapError,
    search_boundary_intersections,
    sweep_gap_points,
)
from sensor_coverage.coverage_algorithms.row_exclusion import compute_row_exclusion


def find_gap_points(
    sensors: Iterable[Sensor],
    bound: int,
    *,
    strategy: str = "auto",
    n_jobs: int = 1,
) -> List[GapPoint]:
    """
    Uncovered positions inside the bound found by ``strategy``.

    The sweep stops after two points, so for "sweep" (and an "auto" run
    that falls back to it) the list is truncated at two.
    """
    if strategy not in STRATEGIES:
        raise ValueError(
            f"Unknown gap strategy {strategy!r}; expected one of {STRATEGIES}"
        )
    sensors = list(sensors)
    if bound < 0:
        return []

    if strategy in ("auto", "boundary"):
        rising, falling = extract_shared_boundaries(sensors)
        points = search_boundary_intersections(
            rising, falling, sensors, bound, n_jobs=n_jobs
        )
        if points or strategy == "boundary":
            return points

    return sweep_gap_points(sensors, bound, limit=2, n_jobs=n_jobs)


def find_gap_point(
    sensors: Iterable[Sensor],
    bound: int,
    *,
    strategy: str = "auto",
    n_jobs: int = 1,
    allow_ambiguous: bool = False,
) -> Optional[GapPoint]:
    """
    The uncovered position inside ``[0, bound] x [0, bound]``.

    Returns None when no uncovered position is found. When several are
    found, raises ``AmbiguousGapError`` unless ``allow_ambiguous`` is set,
    in which case the first one found is returned.
    """
    points = find_gap_points(sensors, bound, strategy=strategy, n_jobs=n_jobs)
    if not points:
        return None
    if len(points) > 1 and not allow_ambiguous:
        raise AmbiguousGapError(points)
    return points[0]


def solve(
    sensors: Iterable[Sensor],
    row: int,
    bound: int,
    *,
    strategy: str = "auto",
    n_jobs: int = 1,
    allow_ambiguous: bool = False,
) -> Solution:
    sensors = list(sensors)
    return Solution(
        row=row,
        excluded=compute_row_exclusion(sensors, row),
        bound=bound,
        gap=find_gap_point(
            sensors,
            bound,
            strategy=strategy,
            n_jobs=n_jobs,
            allow_ambiguous=allow_ambiguous,
        ),
    )


__all__ = [
    "STRATEGIES",
    "AmbiguousGapError",
    "compute_row_exclusion",
    "find_gap_points",
    "find_gap_point",
    "solve",
]
