"""Strategy-driven trip scheduler.

Packages are ordered once by a :class:`PackageStrategy`; then, while any
remain, the first free vehicle takes one trip picked by
:func:`~courier_sched.operators.packing.select_trip`. Each extra drop on a
trip adds ``stop_overhead_hours`` to the one-way time. When no vehicle is
free the clock jumps to the next return.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence

from ..config.config import DEFAULTS
from ..config.enums import TIME_EPS, PackageStrategy
from ..operators.packing import order_by_strategy, order_vehicles, select_trip
from ..reporting import narrative
from .models import Assignment, Package, PackageTime, Shipment, Vehicle
from .timing import delivery_time, one_way_time, round_trip
from .validator import ValidationResult, validate_assignments

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class TripStep:
    step: int
    description: str
    packages_remaining: int
    vehicles_available: int
    current_time: float
    assignment: Assignment


@dataclass
class TripSchedule:
    shipments: List[Shipment]
    steps: List[TripStep]
    assignments: List[Assignment]
    vehicles: List[Vehicle]
    total_time: float = 0.0  # hour the last vehicle is back
    unassigned_packages: List[Package] = field(default_factory=list)
    validation: ValidationResult = field(default_factory=lambda: ValidationResult(is_valid=True))

    @property
    def total_trips(self) -> int:
        return len(self.assignments)


@dataclass(frozen=True)
class ScheduleSummary:
    total_packages: int
    total_vehicles: int
    estimated_total_time: float
    estimated_trips: int
    average_packages_per_trip: float
    utilization_rate: float  # percent, capped at 100


def _trip_params(params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    merged = DEFAULTS.copy()
    if params:
        merged.update(params)
    merged["strategy"] = PackageStrategy(merged["strategy"])
    if int(merged["max_packages_per_trip"]) < 1:
        raise ValueError("max_packages_per_trip must be >= 1")
    if float(merged["stop_overhead_hours"]) < 0:
        raise ValueError("stop_overhead_hours must be >= 0")
    return merged


def schedule_deliveries(
    packages: Sequence[Package],
    vehicles: Sequence[Vehicle],
    params: Optional[Dict[str, Any]] = None,
) -> TripSchedule:
    """Schedule ``packages`` one trip at a time.

    The time cut of :func:`~courier_sched.engine.timing.delivery_time` is
    decided by fleet size. Packages heavier than every vehicle are set aside
    up front and reported as unassigned. The caller's vehicles are not mutated.
    """

    cfg = _trip_params(params)
    strategy = cfg["strategy"]
    overhead = float(cfg["stop_overhead_hours"])
    max_packages = int(cfg["max_packages_per_trip"])
    threshold = int(cfg["concurrency_threshold"])
    reduction = float(cfg["concurrency_reduction_hours"])

    fleet = [replace(v) for v in vehicles]
    largest = max((v.max_carriable_weight for v in fleet), default=0.0)
    pending = order_by_strategy([p for p in packages if p.weight <= largest], strategy)
    unassignable = [p for p in packages if p.weight > largest]
    for pkg in unassignable:
        log.warning("package %s (%gkg) exceeds every vehicle capacity; left unassigned", pkg.id, pkg.weight)

    clock = 0.0
    assignments: List[Assignment] = []
    steps: List[TripStep] = []
    while pending:
        free = [v for v in fleet if v.available_time <= clock + TIME_EPS]
        picked = None
        for vehicle in order_vehicles(free):
            trip = select_trip(pending, vehicle.max_carriable_weight, max_packages)
            if trip:
                picked = (vehicle, trip)
                break
        if picked is None:
            later = [v.available_time for v in fleet if v.available_time > clock + TIME_EPS]
            if not later:
                break
            clock = min(later)
            continue

        vehicle, trip = picked
        farthest = max(p.distance for p in trip)
        base = delivery_time(farthest, vehicle.max_speed, len(fleet), threshold=threshold, reduction=reduction)
        one_way = base + (len(trip) - 1) * overhead
        back = round_trip(one_way)
        assignment = Assignment(
            vehicle_id=vehicle.id,
            name=vehicle.display_name,
            packages=tuple(trip),
            total_weight=sum(p.weight for p in trip),
            max_distance=farthest,
            delivery_time=one_way,
            return_time=back,
            departure_time=clock,
            available_after=clock + back,
            vehicle_speed=vehicle.max_speed,
            per_package_times=tuple(
                PackageTime(p.id, p.distance, round(p.distance / vehicle.max_speed, 2)) for p in trip
            ),
        )
        vehicle.available_time = assignment.available_after
        assignments.append(assignment)

        taken = set(assignment.package_ids)
        pending = [p for p in pending if p.id not in taken]

        step_no = len(steps) + 1
        text = narrative.describe_strategy_trip(
            step_no,
            strategy.value,
            overhead,
            assignment,
            vehicle,
            one_way_time(farthest, vehicle.max_speed),
            len(fleet) >= threshold,
        )
        steps.append(
            TripStep(
                step=step_no,
                description=text,
                packages_remaining=len(pending),
                vehicles_available=sum(1 for v in fleet if v.available_time <= clock + TIME_EPS),
                current_time=clock,
                assignment=assignment,
            )
        )
        log.debug("trip %d: %s -> %s", step_no, assignment.name, "+".join(assignment.package_ids))

    check = validate_assignments(assignments)
    for msg in check.errors:
        log.warning(msg)

    shipments = [
        Shipment(
            packages=a.packages,
            vehicle_id=a.vehicle_id,
            delivery_time=a.departure_time + a.delivery_time,
            return_time=a.available_after,
        )
        for a in assignments
    ]
    return TripSchedule(
        shipments=shipments,
        steps=steps,
        assignments=assignments,
        vehicles=fleet,
        total_time=max((a.available_after for a in assignments), default=0.0),
        unassigned_packages=unassignable + pending,
        validation=check,
    )


def get_schedule_summary(
    packages: Sequence[Package],
    vehicles: Sequence[Vehicle],
    params: Optional[Dict[str, Any]] = None,
) -> ScheduleSummary:
    """Headline figures of :func:`schedule_deliveries` for the same inputs."""

    result = schedule_deliveries(packages, vehicles, params)
    total_weight = sum(p.weight for p in packages)
    capacity = sum(v.max_carriable_weight for v in vehicles)
    rate = 100.0 * total_weight / capacity if capacity > 0 else 0.0
    trips = result.total_trips

    return ScheduleSummary(
        total_packages=len(packages),
        total_vehicles=len(vehicles),
        estimated_total_time=result.total_time,
        estimated_trips=trips,
        average_packages_per_trip=len(packages) / trips if trips else 0.0,
        utilization_rate=min(rate, 100.0),
    )


__all__ = [
    "ScheduleSummary",
    "TripSchedule",
    "TripStep",
    "get_schedule_summary",
    "schedule_deliveries",
]
