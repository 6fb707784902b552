"""Duplicate-claim check over a set of assignments."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

from .models import Assignment


@dataclass
class ValidationResult:
    is_valid: bool
    duplicate_package_ids: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    # package id -> vehicle ids, in claim order, for every duplicated package
    conflicts: Dict[str, Tuple[int, ...]] = field(default_factory=dict)


def validate_assignments(assignments: Iterable[Assignment]) -> ValidationResult:
    """Report every package id held by more than one assignment.

    Any record with ``vehicle_id`` and ``package_ids`` works, so planned
    routes are checked the same way as scheduled trips.

    Diagnostic only: nothing is dropped or reordered here. Ids are reported in
    the order they were first claimed.
    """

    claims = defaultdict(list)
    for assignment in assignments:
        for pid in assignment.package_ids:
            claims[pid].append(assignment.vehicle_id)

    duplicates = [pid for pid, vehicle_ids in claims.items() if len(vehicle_ids) > 1]
    conflicts = {pid: tuple(claims[pid]) for pid in duplicates}
    errors = [
        "Package {} is assigned to multiple vehicles: {}".format(
            pid, ", ".join(str(v) for v in conflicts[pid])
        )
        for pid in duplicates
    ]
    return ValidationResult(
        is_valid=not duplicates,
        duplicate_package_ids=duplicates,
        errors=errors,
        conflicts=conflicts,
    )


__all__ = ["ValidationResult", "validate_assignments"]
