from __future__ import annotations

from pathlib import Path

import pytest

from sensor_coverage.coverage_core.model import Sensor

# ---------- Shared data ----------

SAMPLE_PAIRS = [
    ((2, 18), (-2, 15)),
    ((9, 16), (10, 16)),
    ((13, 2), (15, 3)),
    ((12, 14), (10, 16)),
    ((10, 20), (10, 16)),
    ((14, 17), (10, 16)),
    ((8, 7), (2, 10)),
    ((2, 0), (2, 10)),
    ((0, 11), (2, 10)),
    ((20, 14), (25, 17)),
    ((17, 20), (21, 22)),
    ((16, 7), (15, 3)),
    ((14, 3), (15, 3)),
    ((20, 1), (15, 3)),
]


def format_sensor_line(position, beacon) -> str:
    return (
        f"Sensor at x={position[0]}, y={position[1]}: "
        f"closest beacon is at x={beacon[0]}, y={beacon[1]}"
    )


# ---------- Shared fixtures ----------


@pytest.fixture
def sample_sensors() -> list[Sensor]:
    """The standard 14-sensor sample report."""
    return [Sensor.new(p, b) for p, b in SAMPLE_PAIRS]


@pytest.fixture
def sample_text() -> str:
    return "\n".join(format_sensor_line(p, b) for p, b in SAMPLE_PAIRS) + "\n"


@pytest.fixture
def sample_file(tmp_path: Path, sample_text: str) -> Path:
    p = tmp_path / "sample.txt"
    p.write_text(sample_text, encoding="utf-8")
    return p


@pytest.fixture
def repo_root() -> Path:
    return Path(__file__).resolve().parents[1]
