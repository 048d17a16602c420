"""
model.py
========
Data models shared by the coverage analyses.

A sensor covers every grid position whose Manhattan distance to the sensor
is at most the distance to its closest beacon (a "diamond"). The records in
this module are frozen: a sensor list is built once per run and consumed
read-only by the row analysis and by the gap search.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

Point = Tuple[int, int]
Interval = Tuple[int, int]

# Multiplier of the x coordinate in the tuning frequency.
TUNING_MULTIPLIER = 4_000_000

# Gap search strategies: "auto" tries shared-boundary crossings, then the row
# sweep when they give nothing.
STRATEGIES = ("auto", "boundary", "sweep")


def manhattan(a: Point, b: Point) -> int:
    """L1 distance between two grid points."""
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


@dataclass(frozen=True)
class Sensor:
    # Sensor location (x, y).
    position: Point
    # Closest beacon reported by the sensor.
    beacon: Point
    # Coverage radius, always manhattan(position, beacon).
    radius: int = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "radius", manhattan(self.position, self.beacon))

    @classmethod
    def new(cls, position: Point, beacon: Point) -> "Sensor":
        return cls(position=tuple(position), beacon=tuple(beacon))

    @property
    def x(self) -> int:
        return self.position[0]

    @property
    def y(self) -> int:
        return self.position[1]

    def covers(self, point: Point) -> bool:
        return manhattan(self.position, point) <= self.radius


class Orientation(Enum):
    """Slope of a diagonal boundary line."""

    RISING = "rising"  # y = x + intercept
    FALLING = "falling"  # y = -x + intercept


@dataclass(frozen=True)
class BoundaryLine:
    """A diagonal line lying one unit outside a diamond edge."""

    orientation: Orientation
    intercept: int

    def intersect(self, other: "BoundaryLine") -> Optional[Point]:
        """
        Integer intersection with a line of the opposite orientation.

        Returns None when the lines meet at a half-integer coordinate,
        i.e. when the intercept difference is odd.

        Raises
        ------
        ValueError
            If both lines have the same orientation.
        """
        if self.orientation is other.orientation:
            raise ValueError("Cannot intersect two parallel boundary lines")
        if self.orientation is Orientation.RISING:
            rising, falling = self, other
        else:
            rising, falling = other, self
        # x + q_r = -x + q_f  ->  x = (q_f - q_r) / 2
        diff = falling.intercept - rising.intercept
        if diff % 2 != 0:
            return None
        x = diff // 2
        return (x, x + rising.intercept)


@dataclass(frozen=True)
class GapPoint:
    x: int
    y: int

    @property
    def tuning_frequency(self) -> int:
        return int(self.x) * TUNING_MULTIPLIER + int(self.y)

    def as_tuple(self) -> Point:
        return (self.x, self.y)


@dataclass(frozen=True)
class Solution:
    """Results of one run over a fixed sensor set."""

    row: int
    excluded: int
    bound: int
    gap: Optional[GapPoint] = None


@dataclass(frozen=True)
class SensorArrays:
    """
    Column view of a sensor list as int64 arrays.

    Used by the vectorised coverage checks. int64 keeps every sum of
    coordinates and radii well inside range for inputs in the millions.
    """

    xs: np.ndarray
    ys: np.ndarray
    radii: np.ndarray
    beacon_xs: np.ndarray
    beacon_ys: np.ndarray

    @classmethod
    def from_sensors(cls, sensors: Iterable[Sensor]) -> "SensorArrays":
        sensors = list(sensors)
        return cls(
            xs=np.array([s.x for s in sensors], dtype=np.int64),
            ys=np.array([s.y for s in sensors], dtype=np.int64),
            radii=np.array([s.radius for s in sensors], dtype=np.int64),
            beacon_xs=np.array([s.beacon[0] for s in sensors], dtype=np.int64),
            beacon_ys=np.array([s.beacon[1] for s in sensors], dtype=np.int64),
        )

    def __len__(self) -> int:
        return int(self.xs.size)

    def covered_mask(self, points: Sequence[Point]) -> np.ndarray:
        """Boolean mask, True where a point is inside at least one diamond."""
        pts = np.asarray(points, dtype=np.int64).reshape(-1, 2)
        if pts.shape[0] == 0 or len(self) == 0:
            return np.zeros(pts.shape[0], dtype=bool)
        dist = np.abs(pts[:, 0:1] - self.xs[None, :]) + np.abs(
            pts[:, 1:2] - self.ys[None, :]
        )
        return (dist <= self.radii[None, :]).any(axis=1)


__all__ = [
    "Point",
    "Interval",
    "TUNING_MULTIPLIER",
    "STRATEGIES",
    "manhattan",
    "Sensor",
    "Orientation",
    "BoundaryLine",
    "GapPoint",
    "Solution",
    "SensorArrays",
]
