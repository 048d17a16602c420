"""
gap_search.py
=============
Locate uncovered positions inside the square ``[0, bound] x [0, bound]``.

Two searches are provided:

- ``search_boundary_intersections``: crosses every shared rising line with
  every shared falling line, keeps integer crossings inside the square and
  verifies each one against all diamonds. Cost is O(R x F) pair checks,
  independent of ``bound``.
- ``sweep_gap_points``: walks the rows of the square and looks for holes in
  the merged row coverage. Exact for any sensor set, but linear in
  ``bound`` in the worst case; fully covered rows are skipped in bulk. Used
  when the crossings yield nothing.

Both accept ``n_jobs`` to fan chunks out with ``joblib``. Chunk results are
concatenated in chunk order, so the output matches a sequential run.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
from joblib import Parallel, cpu_count, delayed

from sensor_coverage.coverage_core.model import (
    BoundaryLine,
    GapPoint,
    Point,
    Sensor,
    SensorArrays,
)


class AmbiguousGapError(RuntimeError):
    """
    Raised when more than one uncovered position lies inside the bound.

    A well-formed sensor report leaves exactly one hole; several holes mean
    the input (or the chosen bound) does not describe a single gap.

    Attributes
    ----------
    points : list of GapPoint
        The distinct uncovered positions found (possibly truncated).
    """

    def __init__(self, points: Sequence[GapPoint]) -> None:
        self.points = list(points)
        shown = ", ".join(f"({p.x}, {p.y})" for p in self.points[:5])
        super().__init__(
            f"Found {len(self.points)} uncovered positions, expected one: {shown}"
        )


def _chunks(items: Sequence, n: int) -> List[Sequence]:
    n = max(1, min(n, len(items)))
    size = -(-len(items) // n)
    return [items[i : i + size] for i in range(0, len(items), size)]


def _resolve_jobs(n_jobs: int, work: int) -> int:
    if n_jobs < 0:
        # joblib convention: -1 means all CPUs, -2 all but one, ...
        n_jobs = max(1, cpu_count() + 1 + n_jobs)
    return max(1, min(n_jobs, work))


def _unique(points: Iterable[GapPoint]) -> List[GapPoint]:
    seen = set()
    out: List[GapPoint] = []
    for p in points:
        if p not in seen:
            seen.add(p)
            out.append(p)
    return out


# -----------------------------------------------------------------------------
# Boundary crossings
# -----------------------------------------------------------------------------


def boundary_candidates(
    rising: Iterable[BoundaryLine],
    falling: Sequence[BoundaryLine],
    bound: int,
) -> List[Point]:
    """Integer crossings of rising x falling lines inside the square."""
    out: List[Point] = []
    for r in rising:
        for f in falling:
            point = r.intersect(f)
            if point is None:
                continue
            x, y = point
            if 0 <= x <= bound and 0 <= y <= bound:
                out.append(point)
    return out


def _verified_crossings(
    rising: Sequence[BoundaryLine],
    falling: Sequence[BoundaryLine],
    arrays: SensorArrays,
    bound: int,
) -> List[GapPoint]:
    candidates = boundary_candidates(rising, falling, bound)
    if not candidates:
        return []
    covered = arrays.covered_mask(candidates)
    return [
        GapPoint(int(x), int(y))
        for (x, y), hit in zip(candidates, covered)
        if not hit
    ]


def search_boundary_intersections(
    rising: Sequence[BoundaryLine],
    falling: Sequence[BoundaryLine],
    sensors: Iterable[Sensor],
    bound: int,
    n_jobs: int = 1,
) -> List[GapPoint]:
    """
    Verified uncovered crossings of shared boundary lines.

    Parameters
    ----------
    rising, falling : sequence of BoundaryLine
        Shared lines from ``extract_shared_boundaries``.
    sensors : iterable of Sensor
        Sensor set used to verify that a crossing is not covered.
    bound : int
        Inclusive upper edge of the search square (lower edge is 0).
    n_jobs : int, default 1
        Number of joblib workers over chunks of ``rising``.

    Returns
    -------
    list of GapPoint
        Distinct free points in discovery order; empty when none.
    """
    rising = list(rising)
    falling = list(falling)
    if not rising or not falling:
        return []
    arrays = SensorArrays.from_sensors(sensors)
    jobs = _resolve_jobs(n_jobs, len(rising))
    if jobs == 1:
        return _unique(_verified_crossings(rising, falling, arrays, bound))

    parts = Parallel(n_jobs=jobs)(
        delayed(_verified_crossings)(chunk, falling, arrays, bound)
        for chunk in _chunks(rising, jobs)
    )
    return _unique(p for part in parts for p in part)


# -----------------------------------------------------------------------------
# Row sweep
# -----------------------------------------------------------------------------


def _row_spans(arrays: SensorArrays, row: int) -> List[Tuple[int, int]]:
    """Footprints of the sensors on ``row``, sorted by start."""
    if not len(arrays):
        return []
    reach = arrays.radii - np.abs(arrays.ys - row)
    hit = reach >= 0
    starts = arrays.xs[hit] - reach[hit]
    ends = arrays.xs[hit] + reach[hit]
    order = np.argsort(starts, kind="stable")
    return list(zip(starts[order].tolist(), ends[order].tolist()))


def _row_holes(
    spans: Sequence[Tuple[int, int]], row: int, bound: int, limit: int
) -> List[GapPoint]:
    """Uncovered x positions of one row within [0, bound], at most ``limit``."""
    out: List[GapPoint] = []
    cursor = 0  # first x not yet known to be covered
    for start, end in spans:
        if cursor > bound:
            break
        if start > cursor:
            for x in range(cursor, min(start, bound + 1)):
                out.append(GapPoint(x, row))
                if len(out) >= limit:
                    return out
        cursor = max(cursor, end + 1)
    for x in range(cursor, bound + 1):
        out.append(GapPoint(x, row))
        if len(out) >= limit:
            break
    return out


def covered_rows_ahead(spans: Sequence[Tuple[int, int]], bound: int) -> int:
    """
    Number of rows after the current one that are certainly covered on
    ``[0, bound]``, given the sorted footprints ``spans`` of a covered row.

    Each footprint edge moves by at most one column per row. A chain of
    footprints covering ``[0, bound]`` therefore keeps covering it for as
    many rows as its smallest slack: the overhang past 0 and past ``bound``,
    and half the overlap (plus one) at every junction.
    """
    skip: Optional[int] = None
    edge = -1  # last column covered by the chain
    i = 0
    while edge < bound:
        best: Optional[Tuple[int, int]] = None
        while i < len(spans) and spans[i][0] <= edge + 1:
            if best is None or spans[i][1] > best[1]:
                best = spans[i]
            i += 1
        if best is None or best[1] <= edge:
            return 0
        if edge < 0:
            slack = -best[0]
        else:
            slack = (edge - best[0] + 1) // 2
        skip = slack if skip is None else min(skip, slack)
        edge = best[1]
    if skip is None:
        return 0
    return max(0, min(skip, edge - bound))


def _sweep_rows(
    arrays: SensorArrays, rows: range, bound: int, limit: int
) -> List[GapPoint]:
    found: List[GapPoint] = []
    row = rows.start
    while row < rows.stop:
        spans = _row_spans(arrays, row)
        holes = _row_holes(spans, row, bound, limit - len(found))
        if holes:
            found.extend(holes)
            if len(found) >= limit:
                break
            row += 1
        else:
            row += 1 + covered_rows_ahead(spans, bound)
    return found


def sweep_gap_points(
    sensors: Iterable[Sensor],
    bound: int,
    limit: int = 2,
    n_jobs: int = 1,
) -> List[GapPoint]:
    """
    Uncovered positions found by scanning rows 0..bound, in (y, x) order.

    Fully covered rows let the scan jump over the following rows that are
    certainly covered too (``covered_rows_ahead``), so large covered areas
    cost far fewer row checks than ``bound``. The scan stops once ``limit``
    points are known; the default of 2 is enough to tell "exactly one gap"
    from "several gaps".
    """
    if bound < 0 or limit <= 0:
        return []
    arrays = SensorArrays.from_sensors(sensors)
    rows = range(0, bound + 1)
    jobs = _resolve_jobs(n_jobs, len(rows))
    if jobs == 1:
        return _sweep_rows(arrays, rows, bound, limit)

    parts = Parallel(n_jobs=jobs)(
        delayed(_sweep_rows)(arrays, chunk, bound, limit)
        for chunk in _chunks(rows, jobs)
    )
    return [p for part in parts for p in part][:limit]


__all__ = [
    "AmbiguousGapError",
    "boundary_candidates",
    "covered_rows_ahead",
    "search_boundary_intersections",
    "sweep_gap_points",
]
