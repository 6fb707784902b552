"""Single-trip route planning and first-fit fleet assignment.

A lighter alternative to :class:`~courier_sched.engine.scheduler.RoundScheduler`:
each vehicle gets at most one trip, built nearest-first, and whatever no
vehicle can take is returned as unassigned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from .models import Package, Vehicle
from .timing import one_way_time
from .validator import ValidationResult, validate_assignments

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Route:
    vehicle_id: int
    packages: Tuple[Package, ...]
    total_distance: float  # farthest drop-off; the trip ends there
    total_weight: float
    estimated_time: float  # one way, hours

    @property
    def package_ids(self) -> Tuple[str, ...]:
        return tuple(p.id for p in self.packages)


@dataclass
class FleetAssignment:
    assignments: List[Route]
    unassigned_packages: List[Package] = field(default_factory=list)
    validation: ValidationResult = field(default_factory=lambda: ValidationResult(is_valid=True))


def calculate_optimal_route(packages: Sequence[Package], vehicle: Vehicle) -> Route:
    """Nearest package first, skipping any that would overload ``vehicle``."""

    route = []
    load = 0.0
    farthest = 0.0
    for pkg in sorted(packages, key=lambda p: p.distance):
        if load + pkg.weight <= vehicle.max_carriable_weight:
            route.append(pkg)
            load += pkg.weight
            farthest = max(farthest, pkg.distance)

    return Route(
        vehicle_id=vehicle.id,
        packages=tuple(route),
        total_distance=farthest,
        total_weight=load,
        estimated_time=one_way_time(farthest, vehicle.max_speed) if route else 0.0,
    )


def schedule_vehicle_assignments(packages: Sequence[Package], vehicles: Sequence[Vehicle]) -> FleetAssignment:
    """First-fit: smallest vehicle first, one route each.

    Vehicles with equal capacity keep input order. A vehicle whose route comes
    out empty gets no entry.
    """

    remaining = list(packages)
    routes = []
    for vehicle in sorted(vehicles, key=lambda v: v.max_carriable_weight):
        route = calculate_optimal_route(remaining, vehicle)
        if not route.packages:
            continue
        routes.append(route)
        taken = set(route.package_ids)
        remaining = [p for p in remaining if p.id not in taken]

    check = validate_assignments(routes)
    for msg in check.errors:
        log.warning(msg)
    if remaining:
        log.info("%d package(s) left unassigned: %s", len(remaining), ", ".join(p.id for p in remaining))

    return FleetAssignment(assignments=routes, unassigned_packages=remaining, validation=check)


__all__ = [
    "FleetAssignment",
    "Route",
    "calculate_optimal_route",
    "schedule_vehicle_assignments",
]
