"""
row_exclusion.py
================
Coverage of a single horizontal row.

Each diamond crosses row ``y`` (if at all) in one closed interval. The
intervals are sorted and merged, the merged lengths are summed, and known
beacons sitting on the row are taken out: those positions do contain a
beacon, so they are not "positions that cannot contain one".

Merge rule
----------
Two sorted intervals are merged only when they overlap
(``next.start <= current.end``). Touching intervals
(``next.start == current.end + 1``) stay separate; their lengths still sum
to the right count.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence

import numpy as np

from sensor_coverage.coverage_core.model import Interval, Sensor, SensorArrays


def _row_intervals_arrays(arrays: SensorArrays, row: int) -> List[Interval]:
    if len(arrays) == 0:
        return []
    reach = arrays.radii - np.abs(arrays.ys - int(row))
    hit = reach >= 0
    starts = arrays.xs[hit] - reach[hit]
    ends = arrays.xs[hit] + reach[hit]
    return [(int(a), int(b)) for a, b in zip(starts, ends)]


def row_intervals(sensors: Iterable[Sensor], row: int) -> List[Interval]:
    """
    Footprint of every sensor on ``row`` as inclusive (start, end) intervals.

    Sensors farther than their radius from the row contribute nothing. The
    intervals are returned in sensor order, unmerged.
    """
    return _row_intervals_arrays(SensorArrays.from_sensors(sensors), row)


def merge_intervals(intervals: Iterable[Interval]) -> List[Interval]:
    """Sort by start and coalesce overlapping intervals."""
    merged: List[Interval] = []
    for start, end in sorted(intervals, key=lambda iv: iv[0]):
        if merged and start <= merged[-1][1]:
            prev_start, prev_end = merged[-1]
            merged[-1] = (prev_start, max(prev_end, end))
        else:
            merged.append((start, end))
    return merged


def _beacons_on_row(sensors: Sequence[Sensor], row: int) -> int:
    min_x = min(s.x - s.radius for s in sensors)
    max_x = max(s.x + s.radius for s in sensors)
    beacons = {
        s.beacon
        for s in sensors
        if s.beacon[1] == row and min_x <= s.beacon[0] <= max_x
    }
    return len(beacons)


def compute_row_exclusion(sensors: Iterable[Sensor], row: int) -> int:
    """
    Number of positions on ``row`` that cannot contain an undiscovered beacon.

    Parameters
    ----------
    sensors : iterable of Sensor
        The fixed sensor set.
    row : int
        The y coordinate of the analysed row.

    Returns
    -------
    int
        Size of the union of the row footprints, minus the distinct known
        beacons on that row. 0 when no sensor reaches the row.
    """
    sensors = list(sensors)
    if not sensors:
        return 0
    merged = merge_intervals(row_intervals(sensors, row))
    if not merged:
        return 0
    covered = sum(end - start + 1 for start, end in merged)
    return covered - _beacons_on_row(sensors, row)


__all__ = ["row_intervals", "merge_intervals", "compute_row_exclusion"]
