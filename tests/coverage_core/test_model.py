import dataclasses

import numpy as np
import pytest

from sensor_coverage.coverage_core.model import (
    BoundaryLine,
    GapPoint,
    Orientation,
    Sensor,
    SensorArrays,
    TUNING_MULTIPLIER,
    manhattan,
)


def test_manhattan():
    assert manhattan((0, 0), (3, -4)) == 7
    assert manhattan((-2, 15), (2, 18)) == 7
    assert manhattan((5, 5), (5, 5)) == 0


def test_sensor_radius_is_distance_to_beacon():
    s = Sensor.new((8, 7), (2, 10))
    assert s.radius == 9
    assert s.x == 8 and s.y == 7
    # direct construction computes the same radius
    assert Sensor(position=(8, 7), beacon=(2, 10)) == s


def test_sensor_is_frozen():
    s = Sensor.new((0, 0), (1, 1))
    with pytest.raises(dataclasses.FrozenInstanceError):
        s.radius = 10  # type: ignore[misc]


def test_sensor_covers_diamond_only():
    s = Sensor.new((0, 0), (2, 0))
    assert s.covers((0, 0))
    assert s.covers((1, 1))
    assert s.covers((0, -2))
    assert s.covers((2, 0))  # its own beacon
    assert not s.covers((2, 1))
    assert not s.covers((-3, 0))


def test_boundary_line_intersection():
    r = BoundaryLine(Orientation.RISING, -3)
    f = BoundaryLine(Orientation.FALLING, 25)
    assert r.intersect(f) == (14, 11)
    # symmetric
    assert f.intersect(r) == (14, 11)


def test_boundary_line_odd_difference_has_no_integer_point():
    r = BoundaryLine(Orientation.RISING, 0)
    f = BoundaryLine(Orientation.FALLING, 5)
    assert r.intersect(f) is None
    assert f.intersect(r) is None


def test_boundary_line_negative_odd_difference_is_rejected():
    # floor division alone would silently give x = -3 here
    r = BoundaryLine(Orientation.RISING, 4)
    f = BoundaryLine(Orientation.FALLING, -1)
    assert r.intersect(f) is None


def test_parallel_lines_raise():
    a = BoundaryLine(Orientation.RISING, 1)
    b = BoundaryLine(Orientation.RISING, 2)
    with pytest.raises(ValueError):
        a.intersect(b)


def test_boundary_lines_hash_by_value():
    a = BoundaryLine(Orientation.FALLING, 7)
    b = BoundaryLine(Orientation.FALLING, 7)
    assert a == b
    assert len({a, b}) == 1
    assert a != BoundaryLine(Orientation.RISING, 7)


def test_tuning_frequency_exceeds_32_bits():
    assert GapPoint(14, 11).tuning_frequency == 56_000_011
    p = GapPoint(4_000_000, 4_000_000)
    assert p.tuning_frequency == 4_000_000 * TUNING_MULTIPLIER + 4_000_000
    assert p.tuning_frequency > 2**32
    assert p.as_tuple() == (4_000_000, 4_000_000)


def test_sensor_arrays_covered_mask():
    sensors = [Sensor.new((0, 0), (1, 0)), Sensor.new((10, 10), (10, 13))]
    arrays = SensorArrays.from_sensors(sensors)
    assert len(arrays) == 2
    assert arrays.radii.dtype == np.int64
    mask = arrays.covered_mask([(0, 0), (1, 1), (10, 13), (5, 5)])
    assert mask.tolist() == [True, False, True, False]


def test_sensor_arrays_empty_inputs():
    empty = SensorArrays.from_sensors([])
    assert empty.covered_mask([(0, 0)]).tolist() == [False]
    arrays = SensorArrays.from_sensors([Sensor.new((0, 0), (1, 0))])
    assert arrays.covered_mask([]).shape == (0,)
