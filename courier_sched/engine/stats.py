"""Fleet usage aggregates used by the summary round and the reporter."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .models import Assignment, Package, Vehicle


@dataclass(frozen=True)
class VehicleUsage:
    vehicle_id: int
    name: str
    trips: int
    packages: int
    total_weight: float
    capacity: float
    utilisation: float  # percent of capacity offered over all trips


def vehicle_usage(assignments: Sequence[Assignment], vehicles: Sequence[Vehicle]) -> List[VehicleUsage]:
    """One row per vehicle that made at least one trip, ordered by vehicle id."""

    by_id = {v.id: v for v in vehicles}
    rows = []
    for vid in sorted({a.vehicle_id for a in assignments}):
        trips = [a for a in assignments if a.vehicle_id == vid]
        vehicle = by_id.get(vid)
        capacity = vehicle.max_carriable_weight if vehicle is not None else 0.0
        name = vehicle.display_name if vehicle is not None else trips[0].name
        weight = float(np.sum([a.total_weight for a in trips]))
        offered = capacity * len(trips)
        rows.append(
            VehicleUsage(
                vehicle_id=vid,
                name=name,
                trips=len(trips),
                packages=sum(len(a.packages) for a in trips),
                total_weight=weight,
                capacity=capacity,
                utilisation=100.0 * weight / offered if offered > 0 else 0.0,
            )
        )
    return rows


def fleet_utilisation(assignments: Sequence[Assignment], vehicles: Sequence[Vehicle]) -> float:
    """Carried weight as a percentage of the capacity of every trip made."""

    usage = vehicle_usage(assignments, vehicles)
    offered = sum(u.capacity * u.trips for u in usage)
    if offered <= 0:
        return 0.0
    return 100.0 * sum(u.total_weight for u in usage) / offered


def extremes(packages: Sequence[Package], attr: str) -> Tuple[Optional[Package], Optional[Package]]:
    """(largest, smallest) package by ``attr``; first occurrence wins ties."""

    if not packages:
        return None, None
    values = np.array([getattr(p, attr) for p in packages], dtype=np.float64)
    return packages[int(np.argmax(values))], packages[int(np.argmin(values))]


def usage_extremes(usage: Sequence[VehicleUsage]) -> Tuple[Optional[VehicleUsage], Optional[VehicleUsage]]:
    if not usage:
        return None, None
    values = np.array([u.utilisation for u in usage], dtype=np.float64)
    return usage[int(np.argmax(values))], usage[int(np.argmin(values))]


def operation_time(assignments: Sequence[Assignment]) -> float:
    """Hour the last vehicle is back."""
    if not assignments:
        return 0.0
    return float(max(a.available_after for a in assignments))
