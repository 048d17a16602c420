"""
boundary_lines.py
=================
Diagonal lines running one unit outside each diamond.

A lone uncovered position squeezed between diamonds sits on the outer
boundary of the diamonds around it. Each such boundary is part of one of
four diagonal lines per sensor; a line generated by two or more sensors is
a "shared" boundary, and the gap is expected at the crossing of a shared
rising line and a shared falling line.

For a sensor at (x, y) with radius r:

    rising-top      y =  x + (y - x - r - 1)
    falling-top     y = -x + (y + x - r - 1)
    rising-bottom   y =  x + (y - x + r + 1)
    falling-bottom  y = -x + (y + x + r + 1)
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, List, Tuple

from sensor_coverage.coverage_core.model import BoundaryLine, Orientation, Sensor


def sensor_boundary_lines(sensor: Sensor) -> List[BoundaryLine]:
    x, y = sensor.position
    r = sensor.radius
    return [
        BoundaryLine(Orientation.RISING, y - x - r - 1),
        BoundaryLine(Orientation.FALLING, y + x - r - 1),
        BoundaryLine(Orientation.RISING, y - x + r + 1),
        BoundaryLine(Orientation.FALLING, y + x + r + 1),
    ]


def count_boundary_lines(sensors: Iterable[Sensor]) -> Counter:
    """Multiplicity of each distinct boundary line over all sensors."""
    counts: Counter = Counter()
    for sensor in sensors:
        counts.update(sensor_boundary_lines(sensor))
    return counts


def extract_shared_boundaries(
    sensors: Iterable[Sensor],
    min_multiplicity: int = 2,
) -> Tuple[List[BoundaryLine], List[BoundaryLine]]:
    """
    Boundary lines generated at least ``min_multiplicity`` times.

    Returns
    -------
    (rising, falling)
        Two lists sorted by intercept. Either may be empty, in which case no
        gap can be located from boundary crossings.
    """
    counts = count_boundary_lines(sensors)
    shared = [line for line, n in counts.items() if n >= min_multiplicity]
    rising = sorted(
        (ln for ln in shared if ln.orientation is Orientation.RISING),
        key=lambda ln: ln.intercept,
    )
    falling = sorted(
        (ln for ln in shared if ln.orientation is Orientation.FALLING),
        key=lambda ln: ln.intercept,
    )
    return rising, falling


__all__ = [
    "sensor_boundary_lines",
    "count_boundary_lines",
    "extract_shared_boundaries",
]
