import csv
import json
from dataclasses import asdict, is_dataclass
from enum import Enum


class StepTrace:
    def __init__(self):
        self.rows = []

    def append(self, step):
        self.rows.append(
            (
                int(step.step),
                step.kind.name,
                int(step.packages_remaining),
                int(step.vehicles_available),
                float(step.current_time),
                len(step.vehicle_assignments),
                " ".join(p.id for p in step.assigned_packages),
            )
        )

    def extend(self, steps):
        for step in steps:
            self.append(step)

    def save_csv(self, path):
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(
                [
                    "step",
                    "round",
                    "packages_remaining",
                    "vehicles_available",
                    "current_time",
                    "assignments",
                    "assigned_packages",
                ]
            )
            for row in self.rows:
                w.writerow(row)


def _jsonable(obj):
    if isinstance(obj, Enum):
        return obj.name
    if is_dataclass(obj):
        return asdict(obj)
    raise TypeError(f"not JSON serialisable: {type(obj).__name__}")


def save_plan_json(path, plan, params, *, extra=None):
    data = {
        "results": [asdict(r) for r in plan.results],
        "vehicles": [asdict(v) for v in plan.vehicles],
        "metrics": asdict(plan.metrics),
        "unassigned_packages": [p.id for p in plan.unassigned_packages],
        "warnings": [str(w) for w in plan.warnings],
        "steps": len(plan.steps),
        "params": params,
    }
    if extra:
        data.update(extra)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, default=_jsonable)


def save_shipments_csv(path, shipments):
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["shipment_id", "vehicle_id", "package_id", "delivery_time", "return_time"])
        for s, shipment in enumerate(shipments):
            for pkg in shipment.packages:
                w.writerow(
                    [s, shipment.vehicle_id, pkg.id, float(shipment.delivery_time), float(shipment.return_time)]
                )
