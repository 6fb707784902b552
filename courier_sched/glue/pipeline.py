"""Command line pipeline: load a problem, quote it, schedule it, export it."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..config.config import DEFAULTS
from ..engine.models import Package, Vehicle
from ..engine.scheduler import run_schedule
from ..logging.setup import setup_logging
from ..logging.trace import StepTrace, save_plan_json, save_shipments_csv
from ..reporting.report import DeliveryPlan, build_report, format_cli_output
from .io import (
    load_config,
    load_packages,
    load_text_input,
    load_vehicles,
    parse_cli_input,
    validate_inputs,
)

log = logging.getLogger(__name__)


def _resolve(base: Path, maybe_path: Optional[str]) -> Optional[Path]:
    if maybe_path is None:
        return None
    return (base / maybe_path).resolve()


def assemble_problem(cfg: Dict[str, Any], base_dir: Path) -> Tuple[float, List[Package], List[Vehicle]]:
    """Load packages, vehicles and base cost following the configuration contract.

    Either ``dataset.input`` (CLI text format) or both ``dataset.packages`` and
    ``dataset.vehicles`` tables must be given. A top-level
    ``base_delivery_cost`` overrides the one in a text input.
    """

    dataset = cfg.get("dataset", {})
    text_path = dataset.get("input")

    if text_path is not None:
        base, packages, vehicles = load_text_input(_resolve(base_dir, text_path))
    else:
        packages_path = dataset.get("packages")
        vehicles_path = dataset.get("vehicles")
        if packages_path is None or vehicles_path is None:
            raise ValueError("dataset.input or both dataset.packages and dataset.vehicles must be provided")
        packages = load_packages(_resolve(base_dir, packages_path))
        vehicles = load_vehicles(_resolve(base_dir, vehicles_path))
        base = None

    if "base_delivery_cost" in cfg:
        base = float(cfg["base_delivery_cost"])
    if base is None:
        raise ValueError("base_delivery_cost must be provided")

    return base, packages, vehicles


def build_params(cfg: Dict[str, Any]) -> Dict[str, Any]:
    params = DEFAULTS.copy()
    params.update(cfg.get("params", {}))
    if "log_level" in cfg:
        params["log_level"] = str(cfg["log_level"])
    return params


def plan_deliveries(
    packages: Sequence[Package],
    vehicles: Sequence[Vehicle],
    base_delivery_cost: float,
    params: Optional[Dict[str, Any]] = None,
) -> DeliveryPlan:
    """Validate, schedule and report one problem instance."""

    validate_inputs(packages, vehicles, base_delivery_cost)
    schedule = run_schedule(packages, vehicles, params)
    plan = build_report(packages, vehicles, base_delivery_cost, schedule)
    log.info(
        "planned %d package(s) on %d vehicle(s): total cost %g, %d step(s)",
        len(packages),
        plan.metrics.vehicles_used,
        plan.metrics.total_cost,
        len(plan.steps),
    )
    return plan


def export_plan(plan: DeliveryPlan, outdir: Path, params: Dict[str, Any], extra=None) -> None:
    outdir.mkdir(parents=True, exist_ok=True)
    trace = StepTrace()
    trace.extend(plan.steps)

    save_plan_json(outdir / "plan.json", plan, params, extra=extra)
    save_shipments_csv(outdir / "shipments.csv", plan.shipments)
    trace.save_csv(outdir / "steps.csv")


def run_pipeline(
    cfg: Dict[str, Any],
    *,
    base_dir: Path,
    outdir: Path,
) -> Dict[str, Any]:
    """Plan the problem described by ``cfg`` and write artefacts into ``outdir``."""

    base, packages, vehicles = assemble_problem(cfg, base_dir)
    params = build_params(cfg)
    plan = plan_deliveries(packages, vehicles, base, params)

    meta = {
        "config_version": cfg.get("version", "dev"),
        "base_delivery_cost": base,
    }
    export_plan(plan, outdir, params, extra=meta)

    return {
        "plan": plan,
        "params": params,
        "meta": meta,
    }


def load_and_run(config_path: Path, outdir: Path) -> Dict[str, Any]:
    """Convenience wrapper combining ``load_config`` and :func:`run_pipeline`."""

    cfg = load_config(config_path)
    base_dir = Path(config_path).resolve().parent
    return run_pipeline(cfg, base_dir=base_dir, outdir=outdir)


def build_arg_parser():
    import argparse

    ap = argparse.ArgumentParser(description="Delivery cost and vehicle scheduling")
    src = ap.add_mutually_exclusive_group(required=True)
    src.add_argument("--config", help="Path to YAML/JSON configuration")
    src.add_argument("--input", help="Problem in the CLI text format ('-' reads stdin)")
    ap.add_argument("--outdir", default=None, help="Write plan.json, shipments.csv and steps.csv here")
    ap.add_argument("--narrative", action="store_true", help="Print the step-by-step planning text")
    ap.add_argument("--log-level", default=None, help="Logging level (default from config)")
    return ap


def main(argv: Optional[list[str]] = None) -> DeliveryPlan:
    ap = build_arg_parser()
    args = ap.parse_args(argv)

    if args.config is not None:
        cfg_path = Path(args.config).resolve()
        cfg = load_config(cfg_path)
        params = build_params(cfg)
        setup_logging(args.log_level or params["log_level"])
        base, packages, vehicles = assemble_problem(cfg, cfg_path.parent)
    else:
        params = DEFAULTS.copy()
        setup_logging(args.log_level or params["log_level"])
        text = sys.stdin.read() if args.input == "-" else Path(args.input).read_text(encoding="utf-8")
        base, packages, vehicles = parse_cli_input(text)

    plan = plan_deliveries(packages, vehicles, base, params)
    if args.outdir is not None:
        export_plan(plan, Path(args.outdir).resolve(), params, extra={"base_delivery_cost": base})

    if args.narrative:
        print(plan.planning_text)
        print()
    print(format_cli_output(plan.results))
    return plan


__all__ = [
    "assemble_problem",
    "build_arg_parser",
    "build_params",
    "export_plan",
    "load_and_run",
    "main",
    "plan_deliveries",
    "run_pipeline",
]
