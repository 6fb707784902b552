import csv
import json
from pathlib import Path

import pytest

from courier_sched.glue.pipeline import (
    assemble_problem,
    build_params,
    load_and_run,
    main,
    plan_deliveries,
    run_pipeline,
)
from courier_sched.glue.io import parse_cli_input

SAMPLE = """100 5
PKG1 50 30 OFR001
PKG2 75 125 OFR008
PKG3 175 100 OFR003
PKG4 110 60 OFR002
PKG5 155 95 NA
2 70 200
"""


def _write_dataset(tmp_path: Path):
    (tmp_path / "dataset").mkdir()
    packages = tmp_path / "dataset" / "packages.csv"
    packages.write_text(
        """id,weight,distance,offer_code
PKG1,50,30,OFR001
PKG2,75,125,OFR002
PKG3,175,100,OFR003
""",
        encoding="utf-8",
    )
    vehicles = tmp_path / "dataset" / "vehicles.csv"
    vehicles.write_text(
        """id,name,max_speed,max_carriable_weight
1,,70,200
2,,70,200
""",
        encoding="utf-8",
    )
    return packages, vehicles


def _cfg(tmp_path, packages, vehicles):
    return {
        "base_delivery_cost": 100,
        "dataset": {
            "packages": str(packages.relative_to(tmp_path)),
            "vehicles": str(vehicles.relative_to(tmp_path)),
        },
    }


def test_assemble_problem(tmp_path):
    packages, vehicles = _write_dataset(tmp_path)
    base, pkgs, fleet = assemble_problem(_cfg(tmp_path, packages, vehicles), base_dir=tmp_path)
    assert base == 100.0
    assert [p.id for p in pkgs] == ["PKG1", "PKG2", "PKG3"]
    assert [v.id for v in fleet] == [1, 2]


def test_assemble_problem_from_text(tmp_path):
    (tmp_path / "input.txt").write_text(SAMPLE, encoding="utf-8")
    base, pkgs, fleet = assemble_problem({"dataset": {"input": "input.txt"}}, base_dir=tmp_path)
    assert base == 100.0 and len(pkgs) == 5 and len(fleet) == 2


def test_assemble_problem_requires_dataset(tmp_path):
    with pytest.raises(ValueError, match="dataset"):
        assemble_problem({"base_delivery_cost": 100}, base_dir=tmp_path)
    packages, vehicles = _write_dataset(tmp_path)
    cfg = _cfg(tmp_path, packages, vehicles)
    del cfg["base_delivery_cost"]
    with pytest.raises(ValueError, match="base_delivery_cost"):
        assemble_problem(cfg, base_dir=tmp_path)


def test_build_params_override():
    cfg = {"log_level": "DEBUG", "params": {"concurrency_threshold": 4}}
    params = build_params(cfg)
    assert params["concurrency_threshold"] == 4
    assert params["log_level"] == "DEBUG"
    assert params["max_combination_size"] == 5


def test_plan_deliveries_rejects_bad_input():
    base, pkgs, fleet = parse_cli_input("100 1\nPKG1 0 5\n1 70 200\n")
    with pytest.raises(ValueError, match="weight"):
        plan_deliveries(pkgs, fleet, base)


def test_run_pipeline(tmp_path):
    packages, vehicles = _write_dataset(tmp_path)
    outdir = tmp_path / "out"

    result = run_pipeline(_cfg(tmp_path, packages, vehicles), base_dir=tmp_path, outdir=outdir)
    assert result["plan"].is_complete
    assert (outdir / "plan.json").exists()
    assert (outdir / "shipments.csv").exists()
    assert (outdir / "steps.csv").exists()

    with open(outdir / "plan.json", encoding="utf-8") as f:
        data = json.load(f)
    assert data["steps"] == 6
    assert data["base_delivery_cost"] == 100.0
    assert [r["id"] for r in data["results"]] == ["PKG1", "PKG2", "PKG3"]
    assert data["results"][2]["estimated_delivery_time"] == 1.43
    assert data["unassigned_packages"] == []

    with open(outdir / "shipments.csv", newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert sorted(r["package_id"] for r in rows) == ["PKG1", "PKG2", "PKG3"]

    with open(outdir / "steps.csv", newline="", encoding="utf-8") as f:
        steps = list(csv.DictReader(f))
    assert [s["round"] for s in steps][0] == "COMBO_SEED"
    assert steps[-1]["round"] == "SUMMARY"


def test_load_and_run(tmp_path):
    packages, vehicles = _write_dataset(tmp_path)
    cfg_path = tmp_path / "run.yaml"
    cfg_path.write_text(
        "base_delivery_cost: 100\n"
        "dataset:\n"
        "  packages: dataset/packages.csv\n"
        "  vehicles: dataset/vehicles.csv\n",
        encoding="utf-8",
    )
    result = load_and_run(cfg_path, tmp_path / "out")
    assert len(result["plan"].results) == 3


def test_main_text_input(tmp_path, capsys):
    path = tmp_path / "input.txt"
    path.write_text(SAMPLE, encoding="utf-8")

    plan = main(["--input", str(path), "--outdir", str(tmp_path / "out"), "--log-level", "WARNING"])
    out = capsys.readouterr().out.splitlines()
    assert out == [
        "PKG1 0 750 4",
        "PKG2 0 1475 1.79",
        "PKG3 0 2350 1.43",
        "PKG4 105 1395 1.79",
        "PKG5 0 2125 4.21",
    ]
    assert plan.is_complete
    assert (tmp_path / "out" / "plan.json").exists()


def test_main_narrative(tmp_path, capsys):
    packages, vehicles = _write_dataset(tmp_path)
    cfg_path = tmp_path / "run.json"
    cfg_path.write_text(json.dumps(_cfg(tmp_path, packages, vehicles)), encoding="utf-8")

    main(["--config", str(cfg_path), "--narrative", "--log-level", "WARNING"])
    out = capsys.readouterr().out
    assert out.startswith("STEP 01: Multiple Vehicle Management")
    assert "STEP 06: Delivery Summary" in out
    assert out.rstrip().endswith("PKG3 0 2350 1.43")
