"""Configuration, table and text-input helpers for the command-line glue layer.

Package and vehicle tables are read through pandas from CSV or Parquet; the
plain-text format is the one typed at the CLI prompt::

    100 3
    PKG1 5 5 OFR001
    PKG2 15 5 OFR002
    PKG3 10 100 OFR003
    2 70 200
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

import pandas as pd
import yaml

from ..config.config import DEFAULTS
from ..engine.models import Package, Vehicle
from ..pricing.cost import is_non_negative_number, is_positive_number, validate_package_data

PACKAGE_COLUMNS = ("id", "weight", "distance")
VEHICLE_COLUMNS = ("id", "max_speed", "max_carriable_weight")


def load_config(path_yaml: Path) -> Dict:
    """Parse a run configuration from YAML, or JSON by ``.json`` suffix.

    Blank files give ``{}``. The top level must be a mapping, and every key
    under ``params`` must name a run parameter from ``DEFAULTS``; anything
    else raises ``ValueError`` before a run starts.
    """

    path = Path(path_yaml)
    if not path.exists():
        raise FileNotFoundError(path)

    text = path.read_text(encoding="utf-8").strip()
    if not text:
        return {}
    cfg = json.loads(text) if path.suffix.lower() == ".json" else yaml.safe_load(text)
    cfg = cfg or {}

    if not isinstance(cfg, dict):
        raise ValueError(f"{path.name}: configuration must be a mapping")
    params = cfg.get("params") or {}
    if not isinstance(params, dict):
        raise ValueError(f"{path.name}: 'params' must be a mapping")
    unknown = sorted(set(params) - set(DEFAULTS))
    if unknown:
        raise ValueError(f"{path.name}: unknown parameter(s): {', '.join(unknown)}")
    return cfg


def _read_frame(path_like: Path) -> pd.DataFrame:
    """Return a Pandas ``DataFrame`` from CSV or Parquet input."""

    path = Path(path_like)
    if not path.exists():
        raise FileNotFoundError(path)
    if path.suffix.lower() in {".parquet", ".pq"}:
        df = pd.read_parquet(path)
    else:
        df = pd.read_csv(path, dtype={"id": str, "offer_code": str, "name": str})
    if df.empty:
        raise ValueError(f"empty table: {path}")
    return df


def _require(df: pd.DataFrame, columns: Sequence[str], what: str) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(f"{what} table is missing column(s): {', '.join(missing)}")


def _text_or_none(value):
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def load_packages(path_table: Path) -> List[Package]:
    """Load packages from a CSV/Parquet table (``id, weight, distance[, offer_code]``)."""

    df = _read_frame(path_table)
    _require(df, PACKAGE_COLUMNS, "package")

    ids = df["id"].astype(str).str.strip().tolist()
    weights = df["weight"].to_numpy(dtype=float)
    distances = df["distance"].to_numpy(dtype=float)
    codes = df["offer_code"].tolist() if "offer_code" in df.columns else [None] * len(ids)

    return [
        Package(pid, float(w), float(d), _text_or_none(code))
        for pid, w, d, code in zip(ids, weights, distances, codes)
    ]


def load_vehicles(path_table: Path) -> List[Vehicle]:
    """Load the fleet from a CSV/Parquet table.

    ``name`` defaults to ``""`` and ``available_time`` to ``0``.
    """

    df = _read_frame(path_table)
    _require(df, VEHICLE_COLUMNS, "vehicle")

    n = len(df.index)
    ids = df["id"].astype(int).tolist()
    speeds = df["max_speed"].to_numpy(dtype=float)
    caps = df["max_carriable_weight"].to_numpy(dtype=float)
    names = df["name"].fillna("").astype(str).tolist() if "name" in df.columns else [""] * n
    avail = (
        df["available_time"].fillna(0.0).to_numpy(dtype=float)
        if "available_time" in df.columns
        else [0.0] * n
    )

    return [
        Vehicle(int(vid), name.strip(), float(s), float(c), float(t))
        for vid, name, s, c, t in zip(ids, names, speeds, caps, avail)
    ]


def _number(token: str, what: str, lineno: int) -> float:
    try:
        return float(token)
    except ValueError:
        raise ValueError(f"line {lineno}: {what} must be a number, got {token!r}") from None


def parse_cli_input(text: str) -> Tuple[float, List[Package], List[Vehicle]]:
    """Parse the CLI text format into ``(base_delivery_cost, packages, vehicles)``.

    Vehicles are numbered from 1 and share the speed and capacity given on the
    last line.
    """

    lines = [ln.split() for ln in text.strip().splitlines() if ln.strip()]
    if not lines:
        raise ValueError("empty input")

    head = lines[0]
    if len(head) != 2:
        raise ValueError("line 1: expected '<base_delivery_cost> <no_of_packages>'")
    base = _number(head[0], "base delivery cost", 1)
    count = int(_number(head[1], "package count", 1))
    if count < 0:
        raise ValueError("line 1: package count must be >= 0")
    if len(lines) < count + 2:
        raise ValueError(
            f"expected {count} package line(s) followed by '<no_of_vehicles> <max_speed> <max_carriable_weight>'"
        )

    packages = []
    for lineno, tokens in enumerate(lines[1 : count + 1], start=2):
        if len(tokens) not in (3, 4):
            raise ValueError(f"line {lineno}: expected '<pkg_id> <weight> <distance> [offer_code]'")
        code = tokens[3] if len(tokens) == 4 else None
        packages.append(
            Package(
                tokens[0],
                _number(tokens[1], "weight", lineno),
                _number(tokens[2], "distance", lineno),
                code,
            )
        )

    tail = lines[count + 1]
    lineno = count + 2
    if len(tail) != 3:
        raise ValueError(f"line {lineno}: expected '<no_of_vehicles> <max_speed> <max_carriable_weight>'")
    n_vehicles = int(_number(tail[0], "vehicle count", lineno))
    speed = _number(tail[1], "max speed", lineno)
    max_weight = _number(tail[2], "max carriable weight", lineno)
    vehicles = [Vehicle(i, "", speed, max_weight) for i in range(1, n_vehicles + 1)]

    return base, packages, vehicles


def load_text_input(path: Path) -> Tuple[float, List[Package], List[Vehicle]]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)
    return parse_cli_input(path.read_text(encoding="utf-8"))


def validate_inputs(packages: Sequence[Package], vehicles: Sequence[Vehicle], base_delivery_cost) -> None:
    """Raise ``ValueError`` listing every problem found in the problem instance."""

    errors = []
    if not is_positive_number(base_delivery_cost):
        errors.append("base delivery cost must be a positive number")

    seen = set()
    for pkg in packages:
        check = validate_package_data(pkg)
        errors.extend(f"{pkg.id or '<missing id>'}: {msg}" for msg in check.errors)
        if pkg.id in seen:
            errors.append(f"duplicate package id: {pkg.id}")
        seen.add(pkg.id)

    seen_vehicles = set()
    for v in vehicles:
        if v.id in seen_vehicles:
            errors.append(f"duplicate vehicle id: {v.id}")
        seen_vehicles.add(v.id)
        if not is_positive_number(v.max_speed):
            errors.append(f"vehicle {v.id}: max speed must be positive")
        if not is_positive_number(v.max_carriable_weight):
            errors.append(f"vehicle {v.id}: max carriable weight must be positive")
        if not is_non_negative_number(v.available_time):
            errors.append(f"vehicle {v.id}: available time must be a finite number >= 0")

    if errors:
        raise ValueError("invalid input: " + "; ".join(errors))


__all__ = [
    "load_config",
    "load_packages",
    "load_text_input",
    "load_vehicles",
    "parse_cli_input",
    "validate_inputs",
]
