from sensor_coverage.coverage_algorithms.row_exclusion import (
    compute_row_exclusion,
    merge_intervals,
    row_intervals,
)
from sensor_coverage.coverage_core.model import Sensor


def test_sample_row_10(sample_sensors):
    assert compute_row_exclusion(sample_sensors, 10) == 26


def test_sample_row_intervals_shape(sample_sensors):
    ivs = row_intervals(sample_sensors, 10)
    # sensor (8, 7) r=9 reaches row 10 with half-width 6
    assert (2, 14) in ivs
    for start, end in ivs:
        assert start <= end


def test_sensor_out_of_reach_contributes_nothing():
    s = Sensor.new((0, 0), (0, 3))
    assert row_intervals([s], 4) == []
    assert row_intervals([s], 3) == [(0, 0)]
    assert row_intervals([s], -1) == [(-2, 2)]


def test_merge_overlapping_and_contained():
    merged = merge_intervals([(5, 9), (0, 3), (2, 6), (7, 8)])
    assert merged == [(0, 9)]


def test_touching_intervals_stay_separate():
    assert merge_intervals([(4, 6), (0, 3)]) == [(0, 3), (4, 6)]


def test_touching_intervals_still_count_once_each():
    # footprints on row 0: [-1, 1] and [2, 4], adjacent but not overlapping
    sensors = [Sensor.new((0, 0), (1, 0)), Sensor.new((3, 0), (3, 1))]
    # 3 + 3 covered, minus beacon (1, 0); beacon (3, 1) is not on the row
    assert compute_row_exclusion(sensors, 0) == 5


def test_no_sensor_reaches_row():
    sensors = [Sensor.new((0, 0), (1, 1))]
    assert compute_row_exclusion(sensors, 100) == 0
    assert compute_row_exclusion([], 0) == 0


def test_shared_beacon_is_subtracted_once():
    sensors = [Sensor.new((0, 0), (2, 0)), Sensor.new((4, 0), (2, 0))]
    # union [-2, 6] = 9 positions, one distinct beacon
    assert compute_row_exclusion(sensors, 0) == 8


def test_large_coordinates():
    s = Sensor.new((2_000_000, 2_000_000), (2_000_000, 3_000_000))
    assert compute_row_exclusion([s], 2_000_000) == 2 * 1_000_000 + 1
    assert compute_row_exclusion([s], 3_000_000) == 0  # only the beacon itself
