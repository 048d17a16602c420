"""
Results TSV writer for coverage runs.

The output is a text file with:
  1) A commented metadata block (lines starting with '#').
  2) A single header line with the column names.
  3) One data line per run.

Header
------
All field separators are tabs. The header is:

  input\trow\texcluded\tbound\tgap_x\tgap_y\ttuning_frequency

Conventions
-----------
- input: path of the sensor report, as given
- row: analysed row (y coordinate)
- excluded: positions on the row that cannot contain a beacon
- bound: inclusive edge of the gap search square [0, bound]^2
- gap_x, gap_y, tuning_frequency: the uncovered position, or "NaN" when
  none was found

Append mode
-----------
When appending, the on-disk header must match the expected one exactly;
otherwise ``SchemaMismatchError`` is raised and nothing is written.
Overwrites go through a temporary file and ``os.replace``.

Quickstart
----------
>>> md = Metadata(software_version="0.1.0")
>>> rows = [ResultRow(input="data/sample.txt", solution=solution)]
>>> write_results_tsv("results.tsv", md, rows, append=False)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional, TextIO

from sensor_coverage.coverage_core.model import Solution

__all__ = [
    "Metadata",
    "ResultRow",
    "SchemaMismatchError",
    "write_results_tsv",
]


# =============================================================================
# Exceptions
# =============================================================================


class SchemaMismatchError(ValueError):
    """
    Raised when appending to an existing file whose column header line does not
    match the expected TSV schema.

    The exception message includes the file path, the expected header and the
    header found on disk.
    """

    pass


# =============================================================================
# Data models
# =============================================================================


@dataclass(frozen=True)
class Metadata:
    """
    File-level metadata written as commented header lines.

    Attributes
    ----------
    software_version : str
        Version string of the tool that produced the file.
    description : Optional[str], default None
        Free-form note written under the title line.
    created_at_iso : Optional[str], default None
        ISO 8601 creation instant. If None, the current UTC time is used.
    """

    software_version: str
    description: Optional[str] = None
    created_at_iso: Optional[str] = None


@dataclass(frozen=True)
class ResultRow:
    """One run: the report it was computed from and its solution."""

    input: str
    solution: Solution


# =============================================================================
# Public API
# =============================================================================


def write_results_tsv(
    path: str,
    metadata: Metadata,
    rows: Iterable[ResultRow],
    append: bool = True,
) -> None:
    """
    Write (or append) a results TSV with a commented metadata block and a
    fixed column header.

    Parameters
    ----------
    path : str
        Output file path.
    metadata : Metadata
        File-level metadata, written only when the file is created.
    rows : Iterable[ResultRow]
        Runs to write.
    append : bool, default True
        If True and the file exists, validate its header and append.
        If False, create/overwrite the file atomically.

    Raises
    ------
    SchemaMismatchError
        When appending to a file whose header differs from the schema.
    ValueError
        If the file exists but contains no header line.
    """
    creating_new = not os.path.exists(path)

    if not append:
        tmp_path = f"{path}.tmp"
        with open(tmp_path, "w", encoding="utf-8", newline="") as f:
            _write_metadata_block(f, metadata)
            _write_column_header(f)
            for r in rows:
                f.write(_row_to_tsv(r))
        os.replace(tmp_path, path)
        return

    if not creating_new:
        _check_header_or_raise(path)
    mode = "w" if creating_new else "a"
    with open(path, mode, encoding="utf-8", newline="") as f:
        if creating_new:
            _write_metadata_block(f, metadata)
            _write_column_header(f)
        for r in rows:
            f.write(_row_to_tsv(r))


# =============================================================================
# Internal helpers
# =============================================================================


def _write_metadata_block(f: TextIO, md: Metadata) -> None:
    created = md.created_at_iso or datetime.now(timezone.utc).strftime(
        "%Y-%m-%dT%H:%M:%SZ"
    )
    f.write("# Sensor coverage results\n")
    if md.description:
        f.write(f"# {md.description}\n")

    f.write("# input: sensor report path\n")
    f.write("# row: analysed row (y)\n")
    f.write("# excluded: positions on row that cannot contain a beacon\n")
    f.write("# bound: gap search square is [0, bound] x [0, bound]\n")
    f.write("# gap_x, gap_y: uncovered position (NaN if none)\n")
    f.write("# tuning_frequency: gap_x * 4000000 + gap_y (NaN if none)\n")

    f.write(f"# Generated with software version: {md.software_version}\n")
    f.write(f"# Created at: {created}\n")
    f.write("\n")


def _write_column_header(f: TextIO) -> None:
    f.write("\t".join(_expected_columns()) + "\n")


def _fmt_int_or_nan(x: Optional[int]) -> str:
    return "NaN" if x is None else str(int(x))


def _row_to_tsv(r: ResultRow) -> str:
    sol = r.solution
    gap = sol.gap
    fields = [
        r.input,
        str(sol.row),
        str(sol.excluded),
        str(sol.bound),
        _fmt_int_or_nan(gap.x if gap else None),
        _fmt_int_or_nan(gap.y if gap else None),
        _fmt_int_or_nan(gap.tuning_frequency if gap else None),
    ]
    return "\t".join(fields) + "\n"


def _expected_columns() -> List[str]:
    return [
        "input",
        "row",
        "excluded",
        "bound",
        "gap_x",
        "gap_y",
        "tuning_frequency",
    ]


def _check_header_or_raise(path: str) -> None:
    """
    Ensure the existing file at `path` has the expected column schema.

    Comment lines ('#') and blank lines are skipped; the first remaining line
    is the header.
    """
    expected_cols = _expected_columns()

    header_line: Optional[str] = None
    with open(path, "r", encoding="utf-8", newline="") as f:
        for raw in f:
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            header_line = line
            break

    if header_line is None:
        raise ValueError(f"File '{path}' appears to contain no column header")

    if header_line.split("\t") != expected_cols:
        raise SchemaMismatchError(
            "Existing file schema does not match expected header.\n"
            f"Path:     {path}\n"
            f"Expected: {chr(9).join(expected_cols)}\n"
            f"Found:    {header_line}\n"
            "Hint: If you intend to replace the file, "
            "call write_results_tsv(..., append=False)."
        )
