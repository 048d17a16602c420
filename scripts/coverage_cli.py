#!/usr/bin/env python3
"""
Count excluded positions on a row and locate the uncovered position of a
sensor report.

The driver reads a sensor report, resolves the run parameters (defaults,
optional TOML run file, command-line flags, then --set overrides), runs both
analyses and prints the results. Every printed line is also appended to a
timestamped run log under --log-dir.

-------------------------------------------------------------------------------
Command-line usage examples
-------------------------------------------------------------------------------
1) Sample report:
   python scripts/coverage_cli.py data/sample.txt -r 10 -m 20

2) Full-size report with the default row (2000000) and bound (4000000):
   python scripts/coverage_cli.py data/input.txt

3) Parameters from a run file, one value overridden:
   python scripts/coverage_cli.py --config config/sample.toml --set gap.bound=25

4) Append results to a TSV and save a coverage plot:
   python scripts/coverage_cli.py data/sample.txt -r 10 -m 20 \
       --out output/results.tsv --plot output/sample.png

5) Exhaustive row sweep on four workers:
   python scripts/coverage_cli.py data/sample.txt -r 10 -m 20 \
       --strategy sweep --jobs 4

-------------------------------------------------------------------------------
Exit codes
-------------------------------------------------------------------------------
0  success (also when no uncovered position exists in the bound)
2  unreadable or malformed input, invalid configuration, TSV schema mismatch
3  several uncovered positions found (report does not describe one gap)
"""

from __future__ import annotations

import argparse
import os
import sys
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

import matplotlib.pyplot as plt
from matplotlib.patches import Polygon, Rectangle

from sensor_coverage.coverage_algorithms.gap_search import AmbiguousGapError
from sensor_coverage.coverage_algorithms.solver import STRATEGIES, solve
from sensor_coverage.coverage_core.config_loader import (
    ConfigError,
    build_solver_options,
    dump_effective_config,
    load_run_config,
)
from sensor_coverage.coverage_core.model import Sensor, Solution
from sensor_coverage.coverage_io.report import (
    Metadata,
    ResultRow,
    SchemaMismatchError,
    write_results_tsv,
)
from sensor_coverage.coverage_io.sensors import SensorParseError, read_sensors

SOFTWARE_VERSION = "dev"

EXIT_INPUT_ERROR = 2
EXIT_AMBIGUOUS = 3


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="coverage_cli",
        description="Row exclusion count and gap search over a sensor report.",
    )
    p.add_argument(
        "input",
        nargs="?",
        default=None,
        help="Sensor report (default: data/input.txt, or input.path from --config).",
    )
    p.add_argument(
        "-r",
        "--row",
        type=int,
        default=None,
        help="Row analysed by the exclusion count (default: 2000000).",
    )
    p.add_argument(
        "-m",
        "--max",
        dest="bound",
        type=int,
        default=None,
        help="Gap search square is [0, MAX] x [0, MAX] (default: 4000000).",
    )
    p.add_argument(
        "--strategy",
        choices=STRATEGIES,
        default=None,
        help="Gap search strategy (default: auto).",
    )
    p.add_argument(
        "--jobs",
        type=int,
        default=None,
        help="joblib workers for the gap search; -1 uses all CPUs (default: 1).",
    )
    p.add_argument("--config", help="TOML run file.")
    p.add_argument(
        "--set",
        action="append",
        default=[],
        help="Override config key=value (repeatable), e.g. gap.bound=20.",
    )
    p.add_argument(
        "--dump-effective-config",
        action="store_true",
        help="Print final merged config and exit.",
    )
    p.add_argument("--out", default=None, help="Append results to this TSV file.")
    p.add_argument("--plot", default=None, help="Save a coverage plot (PNG).")
    p.add_argument(
        "--log-dir",
        default=None,
        help="Directory where the run log will be created (default: logs).",
    )
    return p


def _cli_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Config fragment holding only the flags given explicitly."""
    out: Dict[str, Any] = {}
    pairs = [
        ("input", "path", args.input),
        ("row", "y", args.row),
        ("gap", "bound", args.bound),
        ("gap", "strategy", args.strategy),
        ("gap", "n_jobs", args.jobs),
        ("output", "out_tsv", args.out),
        ("output", "plot", args.plot),
        ("output", "log_dir", args.log_dir),
    ]
    for table, key, value in pairs:
        if value is not None:
            out.setdefault(table, {})[key] = value
    return out


def _init_logger(log_dir: str) -> Tuple[str, Callable[[str], None]]:
    os.makedirs(log_dir, exist_ok=True)
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%SZ")
    path = os.path.join(log_dir, f"run_{stamp}.log")

    def _log(msg: str) -> None:
        with open(path, "a", encoding="utf-8") as f:
            f.write(msg.rstrip() + "\n")

    return path, _log


def _log_header(log, paths: Dict[str, Any], cfg: Dict[str, Any]) -> None:
    now = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    log(f"[{now}] Run started")
    log(f"Working directory: {os.getcwd()}")
    if paths.get("config_path"):
        log(f"Run config: {paths['config_path']}")
    log("")
    log("----- Effective configuration -----")
    log(dump_effective_config(cfg).rstrip())
    log("-----------------------------------")
    log("")


def _fail(msg: str, log=None) -> None:
    print(f"ERROR: {msg}", file=sys.stderr)
    if log is not None:
        log(f"ERROR: {msg}")


def _plot_coverage(
    sensors: List[Sensor], solution: Solution, out_plot: str
) -> None:
    fig, ax = plt.subplots(figsize=(7, 7))
    for s in sensors:
        x, y = s.position
        r = s.radius
        ax.add_patch(
            Polygon(
                [(x - r, y), (x, y - r), (x + r, y), (x, y + r)],
                closed=True,
                alpha=0.25,
                edgecolor="tab:blue",
                facecolor="tab:blue",
            )
        )
    ax.scatter(
        [s.x for s in sensors], [s.y for s in sensors],
        s=12, c="tab:blue", label="sensor",
    )
    ax.scatter(
        [s.beacon[0] for s in sensors], [s.beacon[1] for s in sensors],
        s=12, c="tab:orange", marker="D", label="beacon",
    )
    ax.add_patch(
        Rectangle(
            (0, 0), solution.bound, solution.bound,
            fill=False, linestyle="--", edgecolor="gray", label="search bound",
        )
    )
    ax.axhline(solution.row, color="tab:green", linewidth=1.0,
               label=f"row y={solution.row}")
    if solution.gap is not None:
        ax.scatter([solution.gap.x], [solution.gap.y], s=60, c="tab:red",
                   marker="x", label=f"gap ({solution.gap.x}, {solution.gap.y})")
    ax.set_aspect("equal")
    ax.autoscale_view()
    ax.invert_yaxis()  # y grows downwards in sensor reports
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    ax.legend(loc="upper right", fontsize=8)
    fig.suptitle(
        f"{len(sensors)} sensors, {solution.excluded} excluded on row {solution.row}",
        fontsize=9,
    )
    os.makedirs(os.path.dirname(out_plot) or ".", exist_ok=True)
    fig.savefig(out_plot, dpi=150, bbox_inches="tight")
    plt.close(fig)


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        cfg, paths = load_run_config(
            config_path=args.config,
            overrides=_cli_overrides(args),
            set_overrides=args.set,
        )
        opts = build_solver_options(cfg)
    except (ConfigError, FileNotFoundError) as e:
        _fail(str(e))
        return EXIT_INPUT_ERROR

    if args.dump_effective_config:
        print(dump_effective_config(cfg).rstrip())
        return 0

    out_cfg = cfg.get("output", {})
    log_path, log = _init_logger(str(out_cfg.get("log_dir") or "logs"))
    _log_header(log, paths, cfg)

    def say(msg: str) -> None:
        print(msg)
        log(msg)

    print(f"Log file: {log_path}")

    input_path = str(cfg.get("input", {}).get("path", ""))
    try:
        sensors = read_sensors(input_path)
    except (OSError, SensorParseError) as e:
        _fail(f"{input_path}: {e}", log)
        return EXIT_INPUT_ERROR
    say(f"[INFO] Loaded {len(sensors)} sensors from {input_path}")

    try:
        solution = solve(
            sensors,
            opts.row,
            opts.bound,
            strategy=opts.strategy,
            n_jobs=opts.n_jobs,
            allow_ambiguous=opts.allow_ambiguous,
        )
    except AmbiguousGapError as e:
        _fail(str(e), log)
        return EXIT_AMBIGUOUS

    say("==> Solving part one...")
    say(
        f"On the row y={solution.row}, there are {solution.excluded} "
        "positions that cannot contain a beacon."
    )
    say("==> Solving part two...")

    if solution.gap is None:
        say(f"[WARN] No uncovered position found within [0, {solution.bound}]")
    else:
        say(f"Distress beacon is at ({solution.gap.x}, {solution.gap.y})")
        say(f"Tuning frequency is {solution.gap.tuning_frequency}")

    out_tsv = out_cfg.get("out_tsv") or ""
    if out_tsv:
        os.makedirs(os.path.dirname(out_tsv) or ".", exist_ok=True)
        md = Metadata(
            software_version=SOFTWARE_VERSION,
            description=f"Strategy: {opts.strategy}",
        )
        try:
            write_results_tsv(
                out_tsv, md, [ResultRow(input=input_path, solution=solution)]
            )
        except (SchemaMismatchError, ValueError) as e:
            _fail(str(e), log)
            return EXIT_INPUT_ERROR
        say(f"[INFO] Results appended to {out_tsv}")

    out_plot = out_cfg.get("plot") or ""
    if out_plot:
        _plot_coverage(sensors, solution, out_plot)
        say(f"[INFO] Saved plot: {out_plot}")

    say("Done.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
