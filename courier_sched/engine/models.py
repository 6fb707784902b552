"""Records exchanged between the pricing, packing, scheduling and reporting layers.

Input and trace records are frozen; :class:`Vehicle` and the result
containers are not. Trace records only ever hold
tuples of frozen records, so a step keeps the values it was emitted with even
though the scheduler keeps moving ``Vehicle.available_time`` forward.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..config.enums import RoundKind


@dataclass(frozen=True)
class Package:
    id: str
    weight: float
    distance: float
    offer_code: Optional[str] = None


@dataclass(frozen=True)
class Offer:
    code: str
    discount_percent: float
    min_distance: float
    max_distance: float
    min_weight: float
    max_weight: float

    def applies_to(self, pkg: Package) -> bool:
        """Both ranges are inclusive at each end."""
        return (
            self.min_distance <= pkg.distance <= self.max_distance
            and self.min_weight <= pkg.weight <= self.max_weight
        )


@dataclass
class Vehicle:
    id: int
    name: str
    max_speed: float
    max_carriable_weight: float
    available_time: float = 0.0  # hours; only moves forward during a run

    @property
    def display_name(self) -> str:
        return self.name or f"Vehicle {self.id:02d}"


@dataclass(frozen=True)
class PackageTime:
    id: str
    distance: float
    delivery_time: float


@dataclass(frozen=True)
class Assignment:
    vehicle_id: int
    name: str
    packages: Tuple[Package, ...]
    total_weight: float
    max_distance: float
    delivery_time: float
    return_time: float
    departure_time: float
    available_after: float
    vehicle_speed: float
    per_package_times: Tuple[PackageTime, ...] = ()

    @property
    def package_ids(self) -> Tuple[str, ...]:
        return tuple(p.id for p in self.packages)


@dataclass(frozen=True)
class Combination:
    member_ids: Tuple[str, ...]
    weights: Tuple[float, ...]
    total_weight: float

    @property
    def count(self) -> int:
        return len(self.member_ids)


@dataclass(frozen=True)
class VehicleReturn:
    vehicle_id: int
    name: str
    returning_in: float
    available_after: float


@dataclass(frozen=True)
class Availability:
    vehicle_returns: Tuple[VehicleReturn, ...]
    first_available: Optional[VehicleReturn] = None


@dataclass(frozen=True)
class Step:
    step: int
    kind: RoundKind
    description: str
    packages_remaining: int
    vehicles_available: int
    current_time: float
    vehicle_assignments: Tuple[Assignment, ...] = ()
    unassigned_packages: Tuple[Package, ...] = ()
    assigned_packages: Tuple[Package, ...] = ()
    combos: Tuple[Combination, ...] = ()
    availability: Optional[Availability] = None
    heaviest: Optional[Package] = None


@dataclass(frozen=True)
class Shipment:
    packages: Tuple[Package, ...]
    vehicle_id: int
    delivery_time: float  # absolute hour of the farthest drop-off
    return_time: float    # absolute hour the vehicle is back


@dataclass(frozen=True)
class DuplicateAssignmentWarning:
    round_kind: RoundKind
    package_id: str
    vehicle_ids: Tuple[int, ...]

    def __str__(self) -> str:
        vehicles = ", ".join(str(v) for v in self.vehicle_ids)
        return f"Package {self.package_id} is assigned to multiple vehicles: {vehicles}"


@dataclass
class CostResult:
    id: str
    discount: float
    total_cost: float
    original_cost: float
    estimated_delivery_time: float = 0.0


@dataclass
class ScheduleResult:
    shipments: List[Shipment]
    steps: List[Step]
    vehicles: List[Vehicle]
    assignments: List[Assignment]
    unassigned_packages: List[Package] = field(default_factory=list)
    warnings: List[DuplicateAssignmentWarning] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return not self.unassigned_packages
