"""
Reader for sensor reports.

Each non-blank line of a report describes one sensor and its closest beacon:

    Sensor at x=2, y=18: closest beacon is at x=-2, y=15

Coordinates are signed 32-bit integers. Blank lines are ignored. Any
other line is malformed: parsing stops at the first one and raises
``SensorParseError`` so that no analysis runs on a partial sensor set.

The lines are matched in one pass with ``pandas.Series.str.extract``.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable, List, Optional

import pandas as pd

from sensor_coverage.coverage_core.model import Sensor

__all__ = [
    "SENSOR_LINE_RE",
    "SensorParseError",
    "parse_sensor_lines",
    "read_sensors",
]

SENSOR_LINE_RE = re.compile(
    r"^\s*Sensor at x=(?P<sx>-?\d+), y=(?P<sy>-?\d+): "
    r"closest beacon is at x=(?P<bx>-?\d+), y=(?P<by>-?\d+)\s*$"
)

# Coordinates are signed 32-bit integers.
COORD_MIN = -(2**31)
COORD_MAX = 2**31 - 1


class SensorParseError(ValueError):
    """
    Raised when a line does not match the sensor report format.

    Attributes
    ----------
    lineno : Optional[int]
        1-based line number of the offending line, when known.
    line : str
        The offending line, without its trailing newline.
    reason : Optional[str]
        What is wrong with a line that matches the format, if anything.
    """

    def __init__(
        self, line: str, lineno: Optional[int] = None, reason: Optional[str] = None
    ) -> None:
        self.line = line
        self.lineno = lineno
        self.reason = reason
        where = f"line {lineno}" if lineno is not None else "input"
        msg = f"Malformed sensor report at {where}: {line!r}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


def _in_range(fields: pd.DataFrame) -> pd.Series:
    # Compared as Python ints: long digit runs overflow int64.
    return (
        fields.astype(object)
        .apply(lambda col: col.map(lambda s: COORD_MIN <= int(s) <= COORD_MAX))
        .all(axis=1)
    )


def parse_sensor_lines(lines: Iterable[str]) -> List[Sensor]:
    """
    Parse report lines into sensors, in input order.

    Raises
    ------
    SensorParseError
        For the first non-blank line that does not match the format or
        carries a coordinate outside the signed 32-bit range.
    """
    text = pd.Series([ln.rstrip("\r\n") for ln in lines], dtype="string")
    if text.empty:
        return []
    text.index = pd.RangeIndex(1, len(text) + 1)  # 1-based line numbers
    text = text[text.str.strip() != ""]
    if text.empty:
        return []

    fields = text.str.extract(SENSOR_LINE_RE)
    unmatched = fields.isna().any(axis=1)
    first_unmatched = int(unmatched.idxmax()) if unmatched.any() else None

    # Only lines before the first unmatched one can be reported first.
    head = fields if first_unmatched is None else fields.loc[: first_unmatched - 1]
    if not head.empty:
        in_range = _in_range(head)
        if not in_range.all():
            lineno = int((~in_range).idxmax())
            raise SensorParseError(
                str(text.loc[lineno]),
                lineno,
                reason=f"coordinate outside [{COORD_MIN}, {COORD_MAX}]",
            )
    if first_unmatched is not None:
        raise SensorParseError(str(text.loc[first_unmatched]), first_unmatched)

    coords = fields.apply(pd.to_numeric).astype("int64")
    return [
        Sensor.new((int(sx), int(sy)), (int(bx), int(by)))
        for sx, sy, bx, by in coords[["sx", "sy", "bx", "by"]].itertuples(
            index=False, name=None
        )
    ]


def read_sensors(path: str | Path) -> List[Sensor]:
    """
    Read and parse a sensor report file (UTF-8).

    Undecodable bytes raise ``SensorParseError`` for the line that holds
    them; a missing file raises ``FileNotFoundError``.
    """
    with open(path, "rb") as f:
        raw = f.read()
    try:
        content = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        lineno = raw.count(b"\n", 0, e.start) + 1
        line = raw.split(b"\n")[lineno - 1].rstrip(b"\r")
        line = line.decode("utf-8", errors="replace")
        raise SensorParseError(line, lineno, reason="not valid UTF-8") from e
    return parse_sensor_lines(content.splitlines())
