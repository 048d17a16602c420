"""
config_loader.py
================
Run configuration: built-in defaults, an optional TOML run file, explicit
command-line values and ``--set key=value`` overrides, merged in that order.

Example run file::

    [input]
    path = "data/sample.txt"

    [row]
    y = 10

    [gap]
    bound = 20
    strategy = "auto"   # auto | boundary | sweep
    n_jobs = 1

    [output]
    out_tsv = "output/results.tsv"
"""

import copy
import os
import tomllib
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

import tomli_w

from sensor_coverage.coverage_core.model import STRATEGIES

DEFAULTS: Dict[str, Any] = {
    "input": {"path": "data/input.txt"},
    "row": {"y": 2_000_000},
    "gap": {
        "bound": 4_000_000,
        "strategy": "auto",
        "n_jobs": 1,
        "allow_ambiguous": False,
    },
    "output": {"out_tsv": "", "plot": "", "log_dir": "logs"},
}


class ConfigError(ValueError):
    """Raised for malformed overrides or invalid configuration values."""


# Validated knobs handed to the solver.
@dataclass(frozen=True)
class SolverOptions:
    # Row analysed by the exclusion count.
    row: int
    # Inclusive edge of the gap search square.
    bound: int
    # One of STRATEGIES.
    strategy: str = "auto"
    # joblib workers (1 = sequential, -1 = all CPUs).
    n_jobs: int = 1
    # Return the first gap instead of failing when several are found.
    allow_ambiguous: bool = False


def load_toml(path: str) -> Dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def merge_dicts(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(a)
    for k, v in b.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = merge_dicts(out[k], v)
        else:
            out[k] = v
    return out


def parse_scalar(s: str):
    sl = s.lower()
    if sl in ("true", "false"):
        return sl == "true"
    try:
        if "." in s:
            return float(s)
        return int(s)
    except ValueError:
        return s


def apply_sets(cfg: Dict[str, Any], sets: Iterable[str]) -> Dict[str, Any]:
    for item in sets:
        if "=" not in item:
            raise ConfigError(f"--set requires key=value, got: {item}")
        key, val = item.split("=", 1)
        path = key.strip().split(".")
        if not all(path):
            raise ConfigError(f"--set has an empty key component: {item}")
        cursor = cfg
        for p in path[:-1]:
            if p not in cursor or not isinstance(cursor[p], dict):
                cursor[p] = {}
            cursor = cursor[p]
        cursor[path[-1]] = parse_scalar(val.strip())
    return cfg


def load_run_config(
    config_path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
    set_overrides: Iterable[str] = (),
) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Compose defaults, the run file, ``overrides`` and --set entries.
    Returns (effective_cfg, summary) where summary holds the resolved
    ``config_path`` (or None).
    """
    summary: Dict[str, Any] = {"config_path": None}
    cfg = copy.deepcopy(DEFAULTS)

    if config_path:
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Config file not found: {config_path}")
        try:
            file_cfg = load_toml(config_path)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML config: {config_path}\n{e}") from e
        cfg = merge_dicts(cfg, file_cfg)
        summary["config_path"] = os.path.abspath(config_path)

    if overrides:
        cfg = merge_dicts(cfg, overrides)

    cfg = apply_sets(cfg, set_overrides)
    return cfg, summary


def build_solver_options(cfg: Dict[str, Any]) -> SolverOptions:
    gap = cfg.get("gap", {})
    try:
        opts = SolverOptions(
            row=int(cfg.get("row", {}).get("y", DEFAULTS["row"]["y"])),
            bound=int(gap.get("bound", DEFAULTS["gap"]["bound"])),
            strategy=str(gap.get("strategy", "auto")),
            n_jobs=int(gap.get("n_jobs", 1)),
            allow_ambiguous=bool(gap.get("allow_ambiguous", False)),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid numeric configuration value: {e}") from e

    if opts.bound < 0:
        raise ConfigError(f"gap.bound must be >= 0, got {opts.bound}")
    if opts.strategy not in STRATEGIES:
        raise ConfigError(
            f"gap.strategy must be one of {', '.join(STRATEGIES)}, "
            f"got {opts.strategy!r}"
        )
    if opts.n_jobs == 0:
        raise ConfigError("gap.n_jobs must be non-zero (use -1 for all CPUs)")
    return opts


def dump_effective_config(cfg: Dict[str, Any]) -> str:
    return tomli_w.dumps(cfg)
