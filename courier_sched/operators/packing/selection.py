"""Greedy orderings shared by the scheduler rounds."""

from __future__ import annotations

from typing import Collection, List, Optional, Sequence

from ...engine.models import Package, Vehicle


def order_heaviest_first(packages: Sequence[Package]) -> List[Package]:
    # sorted() is stable: equal weights keep input order
    return sorted(packages, key=lambda p: -p.weight)


def next_heaviest(
    packages: Sequence[Package],
    capacity: float = float("inf"),
    exclude: Collection[str] = (),
) -> Optional[Package]:
    """Heaviest package not in ``exclude`` that weighs at most ``capacity``."""

    for pkg in order_heaviest_first(packages):
        if pkg.id in exclude:
            continue
        if pkg.weight <= capacity:
            return pkg
    return None


def order_vehicles(vehicles: Sequence[Vehicle]) -> List[Vehicle]:
    """Earliest ``available_time`` first, lower id on ties."""
    return sorted(vehicles, key=lambda v: (v.available_time, v.id))


def first_available(vehicles: Sequence[Vehicle], min_capacity: float = 0.0) -> Optional[Vehicle]:
    for vehicle in order_vehicles(vehicles):
        if vehicle.max_carriable_weight >= min_capacity:
            return vehicle
    return None
