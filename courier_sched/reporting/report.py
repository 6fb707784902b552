"""Fold a finished schedule back into per-package quotes and fleet metrics."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np

from ..engine.models import (
    Assignment,
    CostResult,
    DuplicateAssignmentWarning,
    Package,
    ScheduleResult,
    Shipment,
    Step,
    Vehicle,
)
from ..engine.stats import extremes, fleet_utilisation, operation_time, usage_extremes, vehicle_usage
from ..pricing.cost import calculate_cost


@dataclass
class ScheduleMetrics:
    total_original_cost: float = 0.0
    total_discount: float = 0.0
    total_cost: float = 0.0
    utilisation: float = 0.0  # percent
    vehicles_used: int = 0
    trips: int = 0
    operation_time: float = 0.0  # hour the last vehicle is back
    heaviest_package: Optional[str] = None
    lightest_package: Optional[str] = None
    longest_distance_package: Optional[str] = None
    shortest_distance_package: Optional[str] = None
    most_utilised_vehicle: Optional[str] = None
    least_utilised_vehicle: Optional[str] = None


@dataclass
class DeliveryPlan:
    results: List[CostResult]
    steps: List[Step]
    vehicles: List[Vehicle]
    planning_text: str
    metrics: ScheduleMetrics
    shipments: List[Shipment] = field(default_factory=list)
    unassigned_packages: List[Package] = field(default_factory=list)
    warnings: List[DuplicateAssignmentWarning] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return not self.unassigned_packages


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def quote_packages(packages: Sequence[Package], base_delivery_cost: float) -> List[CostResult]:
    """Whole-unit quotes in input order; delivery times are filled in later."""

    results = []
    for pkg in packages:
        cost = calculate_cost(pkg, base_delivery_cost)
        results.append(
            CostResult(
                id=pkg.id,
                discount=round_half_up(cost.discount),
                total_cost=round_half_up(cost.total_cost),
                original_cost=round_half_up(cost.original_cost),
            )
        )
    return results


def apply_delivery_times(results: Sequence[CostResult], shipments: Sequence[Shipment]) -> None:
    by_id = {r.id: r for r in results}
    for shipment in shipments:
        for pkg in shipment.packages:
            result = by_id.get(pkg.id)
            if result is not None:
                result.estimated_delivery_time = round(shipment.delivery_time, 2)


def planning_text(steps: Sequence[Step]) -> str:
    return "\n\n".join(s.description.strip() for s in steps)


def compute_metrics(
    results: Sequence[CostResult],
    assignments: Sequence[Assignment],
    vehicles: Sequence[Vehicle],
) -> ScheduleMetrics:
    metrics = ScheduleMetrics()
    if results:
        metrics.total_original_cost = float(np.sum([r.original_cost for r in results]))
        metrics.total_discount = float(np.sum([r.discount for r in results]))
        metrics.total_cost = float(np.sum([r.total_cost for r in results]))

    usage = vehicle_usage(assignments, vehicles)
    metrics.utilisation = fleet_utilisation(assignments, vehicles)
    metrics.vehicles_used = len(usage)
    metrics.trips = len(assignments)
    metrics.operation_time = operation_time(assignments)

    carried = [p for a in assignments for p in a.packages]
    heavy, light = extremes(carried, "weight")
    far, near = extremes(carried, "distance")
    most, least = usage_extremes(usage)
    metrics.heaviest_package = heavy.id if heavy else None
    metrics.lightest_package = light.id if light else None
    metrics.longest_distance_package = far.id if far else None
    metrics.shortest_distance_package = near.id if near else None
    metrics.most_utilised_vehicle = most.name if most else None
    metrics.least_utilised_vehicle = least.name if least else None
    return metrics


def build_report(
    packages: Sequence[Package],
    vehicles: Sequence[Vehicle],
    base_delivery_cost: float,
    schedule: ScheduleResult,
) -> DeliveryPlan:
    """Merge cost quotes with a completed :class:`ScheduleResult`.

    ``vehicles`` is the caller's fleet; the plan carries the scheduler's
    updated copies from ``schedule.vehicles``.
    """

    results = quote_packages(packages, base_delivery_cost)
    apply_delivery_times(results, schedule.shipments)
    fleet = schedule.vehicles or list(vehicles)
    return DeliveryPlan(
        results=results,
        steps=list(schedule.steps),
        vehicles=list(fleet),
        planning_text=planning_text(schedule.steps),
        metrics=compute_metrics(results, schedule.assignments, fleet),
        shipments=list(schedule.shipments),
        unassigned_packages=list(schedule.unassigned_packages),
        warnings=list(schedule.warnings),
    )


def _num(value) -> str:
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")


def format_cli_output(results: Sequence[CostResult]) -> str:
    """``"<id> <discount> <total> <eta>"`` per package."""

    return "\n".join(
        f"{r.id} {_num(r.discount)} {_num(r.total_cost)} {_num(r.estimated_delivery_time)}" for r in results
    )


def generate_delivery_report(
    packages: Sequence[Package],
    vehicles: Sequence[Vehicle],
    base_delivery_cost: float,
    results: Sequence[CostResult],
    assignments: Sequence[Assignment] = (),
) -> str:
    by_id = {r.id: r for r in results}
    lines = ["=== DELIVERY SERVICE REPORT ===", "", "SUMMARY:"]
    lines.append(f"Total Packages: {len(packages)}")
    lines.append(f"Total Vehicles: {len(vehicles)}")
    lines.append(f"Base Delivery Cost: ${_num(base_delivery_cost)}")

    lines += ["", "PACKAGE DETAILS:"]
    for pkg in packages:
        r = by_id.get(pkg.id)
        if r is None:
            continue
        lines.append(
            f"{pkg.id}: Weight={pkg.weight:g}kg, Distance={pkg.distance:g}km, "
            f"Cost=${_num(r.total_cost)}, Time={r.estimated_delivery_time:.2f}hrs"
        )

    usage = {u.vehicle_id: u for u in vehicle_usage(assignments, vehicles)}
    lines += ["", "VEHICLE UTILIZATION:"]
    for v in vehicles:
        u = usage.get(v.id)
        count = u.packages if u else 0
        weight = u.total_weight if u else 0.0
        efficiency = u.utilisation if u else 0.0
        lines.append(
            f"Vehicle {v.id}: {count} packages, {weight:g}kg/{v.max_carriable_weight:g}kg, "
            f"Efficiency: {efficiency:.1f}%"
        )

    original = sum(r.original_cost for r in results)
    discount = sum(r.discount for r in results)
    final = sum(r.total_cost for r in results)
    lines += ["", "COST BREAKDOWN:"]
    lines.append(f"Original Cost: ${_num(original)}")
    lines.append(f"Total Discount: ${_num(discount)}")
    lines.append(f"Final Cost: ${_num(final)}")
    lines.append(f"Savings: ${_num(original - final)}")
    return "\n".join(lines) + "\n"


__all__ = [
    "DeliveryPlan",
    "ScheduleMetrics",
    "apply_delivery_times",
    "build_report",
    "compute_metrics",
    "format_cli_output",
    "generate_delivery_report",
    "planning_text",
    "quote_packages",
    "round_half_up",
]
