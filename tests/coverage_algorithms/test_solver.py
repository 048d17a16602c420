import pytest

from sensor_coverage.coverage_algorithms.solver import (
    AmbiguousGapError,
    compute_row_exclusion,
    find_gap_point,
    find_gap_points,
    solve,
)
from sensor_coverage.coverage_core.model import GapPoint, Sensor, Solution


def test_sample_gap_point(sample_sensors):
    gap = find_gap_point(sample_sensors, 20)
    assert gap == GapPoint(14, 11)
    assert gap.tuning_frequency == 56_000_011


@pytest.mark.parametrize("strategy", ["auto", "boundary", "sweep"])
def test_every_strategy_agrees_on_sample(sample_sensors, strategy):
    assert find_gap_point(sample_sensors, 20, strategy=strategy) == GapPoint(14, 11)


def test_idempotent(sample_sensors):
    first = find_gap_point(sample_sensors, 20)
    assert find_gap_point(sample_sensors, 20) == first
    assert find_gap_point(list(reversed(sample_sensors)), 20) == first


def test_single_sensor_covering_bound_has_no_gap():
    big = Sensor.new((10, 10), (10, 40))
    assert find_gap_point([big], 20) is None
    assert find_gap_point([big], 20, strategy="boundary") is None


def test_degenerate_bound_zero():
    far = Sensor.new((10, 10), (10, 11))
    assert find_gap_point([far], 0) == GapPoint(0, 0)
    assert find_gap_point([], 0) == GapPoint(0, 0)


def test_boundary_only_misses_unshared_gap():
    # no shared boundary lines: only the sweep can find the origin
    far = Sensor.new((10, 10), (10, 11))
    assert find_gap_point([far], 0, strategy="boundary") is None
    assert find_gap_point([far], 0, strategy="sweep") == GapPoint(0, 0)


def test_several_gaps_are_ambiguous():
    with pytest.raises(AmbiguousGapError) as excinfo:
        find_gap_point([], 3)
    assert excinfo.value.points == [GapPoint(0, 0), GapPoint(1, 0)]
    assert find_gap_point([], 3, allow_ambiguous=True) == GapPoint(0, 0)


def test_negative_bound_has_no_gap(sample_sensors):
    assert find_gap_points(sample_sensors, -1) == []
    assert find_gap_point(sample_sensors, -1) is None


def test_unknown_strategy(sample_sensors):
    with pytest.raises(ValueError):
        find_gap_points(sample_sensors, 20, strategy="spiral")


def test_solve_bundles_both_results(sample_sensors):
    sol = solve(sample_sensors, 10, 20)
    assert sol == Solution(row=10, excluded=26, bound=20, gap=GapPoint(14, 11))
    assert sol.excluded == compute_row_exclusion(sample_sensors, 10)


def test_solve_accepts_generators(sample_sensors):
    sol = solve((s for s in sample_sensors), 10, 20)
    assert sol.excluded == 26
    assert sol.gap == GapPoint(14, 11)


def test_auto_fallback_on_a_covered_full_size_square():
    # no shared lines, so "auto" falls back to the sweep over 4_000_001 rows
    big = Sensor.new((2_000_000, 2_000_000), (2_000_000, 6_000_000))
    assert find_gap_point([big], 4_000_000) is None
