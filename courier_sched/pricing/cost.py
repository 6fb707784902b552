"""Per-package tariff, offer eligibility and input checks."""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from ..config.config import DISTANCE_RATE, WEIGHT_RATE
from ..config.offers import find_offer
from ..engine.models import Package


@dataclass(frozen=True)
class CostBreakdown:
    original_cost: float
    discount: float
    total_cost: float


@dataclass
class PackageValidation:
    is_valid: bool
    errors: List[str] = field(default_factory=list)


def validate_offer_code(pkg: Package) -> bool:
    """True when the package carries no code or its code applies to it."""

    if not pkg.offer_code:
        return True
    offer = find_offer(pkg.offer_code)
    if offer is None:
        return False
    return offer.applies_to(pkg)


def calculate_cost(pkg: Package, base_delivery_cost: float) -> CostBreakdown:
    """Quote one package.

    ``original = base + weight * WEIGHT_RATE + distance * DISTANCE_RATE``.
    The discount is taken only when the offer code is known and both of its
    ranges hold; anything else quotes the package undiscounted.
    """

    original = float(base_delivery_cost) + pkg.weight * WEIGHT_RATE + pkg.distance * DISTANCE_RATE
    offer = find_offer(pkg.offer_code)
    discount = 0.0
    if offer is not None and offer.applies_to(pkg):
        discount = original * offer.discount_percent / 100.0
    return CostBreakdown(original_cost=original, discount=discount, total_cost=original - discount)


def is_positive_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return value > 0


def is_non_negative_number(value) -> bool:
    """Finite real >= 0; rejects NaN and infinities."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return math.isfinite(value) and value >= 0


def validate_package_data(pkg: Package) -> PackageValidation:
    errors = []
    if not isinstance(pkg.id, str) or not pkg.id.strip():
        errors.append("Package ID is required")
    if not is_positive_number(pkg.weight):
        errors.append("Package weight must be a positive number")
    if not is_positive_number(pkg.distance):
        errors.append("Package distance must be a positive number")
    return PackageValidation(is_valid=not errors, errors=errors)


def calculate_total_delivery_cost(
    packages: Sequence[Package],
    base_delivery_cost: float,
    include_discounts: bool = True,
) -> Dict[str, object]:
    """Aggregate tariff components over ``packages`` with a per-package breakdown."""

    breakdown = []
    totals = {
        "total_base_cost": 0.0,
        "total_weight_cost": 0.0,
        "total_distance_cost": 0.0,
        "total_discount": 0.0,
        "total_final_cost": 0.0,
    }
    for pkg in packages:
        cost = calculate_cost(pkg, base_delivery_cost)
        weight_cost = pkg.weight * WEIGHT_RATE
        distance_cost = pkg.distance * DISTANCE_RATE
        discount = cost.discount if include_discounts else 0.0
        final = cost.original_cost - discount
        breakdown.append({
            "package_id": pkg.id,
            "base_cost": float(base_delivery_cost),
            "weight_cost": weight_cost,
            "distance_cost": distance_cost,
            "discount": discount,
            "final_cost": final,
        })
        totals["total_base_cost"] += float(base_delivery_cost)
        totals["total_weight_cost"] += weight_cost
        totals["total_distance_cost"] += distance_cost
        totals["total_discount"] += discount
        totals["total_final_cost"] += final

    totals["breakdown"] = breakdown
    return totals


__all__ = [
    "CostBreakdown",
    "PackageValidation",
    "calculate_cost",
    "calculate_total_delivery_cost",
    "is_non_negative_number",
    "is_positive_number",
    "validate_offer_code",
    "validate_package_data",
]
