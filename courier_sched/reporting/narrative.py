"""Plain-text step descriptions for the CLI transcript.

Every function here is pure string formatting over records that are already
final; nothing in this module decides anything about the schedule.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

from ..config.enums import ROUND_TITLES, RoundKind
from ..engine.models import Assignment, Availability, Combination, Package, Step, Vehicle
from ..engine.stats import extremes, fleet_utilisation, operation_time, usage_extremes, vehicle_usage

RULE = "-" * 49


def format_time(hours: float) -> str:
    """``1.7857`` -> ``"1 hr 47 min"``; minutes are rounded half up."""

    whole = math.floor(hours)
    minutes = math.floor((hours - whole) * 60.0 + 0.5)
    if minutes == 60:
        whole += 1
        minutes = 0
    if whole == 0:
        return f"{minutes} min"
    if minutes == 0:
        return f"{whole} hr"
    return f"{whole} hr {minutes} min"


def kg(weight: float) -> str:
    return f"{weight:g}kg"


def hrs(hours: float) -> str:
    return f"{hours:.2f} hrs"


def step_header(
    step: int,
    kind: RoundKind,
    packages_remaining: int,
    vehicles_available: int,
    current_time: float,
) -> str:
    return (
        f"STEP {step:02d}: {ROUND_TITLES[kind]}\n"
        f"Packages Remaining: {packages_remaining:02d}\n"
        f"Vehicles Available: {vehicles_available:02d} | Current Time: {format_time(current_time)}\n"
    )


def _assignment_lines(assignments: Sequence[Assignment]):
    lines = []
    for a in assignments:
        lines.append(f"{a.name} -> {' + '.join(a.package_ids)} ({kg(a.total_weight)}, {a.max_distance:g}km)")
        lines.append(
            f"  Departs {hrs(a.departure_time)} | Delivery time: {hrs(a.delivery_time)}"
            f" | Return time: {hrs(a.return_time)} | Available after: {hrs(a.available_after)}"
        )
    return lines


def describe_combo_seed(
    header: str,
    combos: Sequence[Combination],
    assignments: Sequence[Assignment],
    preview: int = 3,
) -> str:
    lines = [header + RULE]
    if not combos:
        lines.append("(No valid combinations)")
    else:
        lines.append("Valid combinations for multiple vehicles:")
        for c in combos[:preview]:
            lines.append(f"{'+'.join(c.member_ids)} -> {c.count:02d} packages {kg(c.total_weight)}")
        if len(combos) > preview:
            lines.append(f"... and {len(combos) - preview} more")
    lines.append(RULE)
    if assignments:
        lines.extend(_assignment_lines(assignments))
    else:
        lines.append("No combination assigned")
    return "\n".join(lines) + "\n"


def describe_heaviest_single(
    header: str,
    heaviest: Optional[Package],
    assignments: Sequence[Assignment],
) -> str:
    lines = [header]
    if heaviest is not None:
        lines.append(f"Largest weight package: {heaviest.id} ({kg(heaviest.weight)})")
    if assignments:
        lines.extend(_assignment_lines(assignments))
    else:
        lines.append("No free vehicle could take a package")
    return "\n".join(lines) + "\n"


def describe_return_survey(
    header: str,
    vehicles: Sequence[Vehicle],
    current_time: float,
    next_free: Optional[Vehicle],
) -> str:
    lines = [header]
    for v in sorted(vehicles, key=lambda v: v.id):
        status = "Available" if v.available_time <= current_time else "Busy"
        lines.append(f"{v.display_name}: {status} - Returns in {hrs(max(0.0, v.available_time - current_time))}")
    if next_free is not None:
        lines.append(f"Fastest available: {next_free.display_name} (available at {hrs(next_free.available_time)})")
    else:
        lines.append("No vehicle is out on delivery")
    return "\n".join(lines) + "\n"


def describe_fill(header: str, assignments: Sequence[Assignment]) -> str:
    lines = [header]
    if assignments:
        lines.extend(_assignment_lines(assignments))
    else:
        lines.append("No returning vehicle could take another package")
    return "\n".join(lines) + "\n"


def describe_availability(header: str, availability: Availability, current_time: float) -> str:
    lines = [header + RULE]
    for r in availability.vehicle_returns:
        lines.append(f"{r.name}  Returning in  {hrs(r.returning_in)}")
    lines.append(RULE)
    first = availability.first_available
    if first is not None:
        lines.append(f"{first.name} will be available first after {hrs(first.returning_in)}")
        lines.append(
            f"(Current Time ({current_time:.2f}) + {first.returning_in:.2f} = {first.available_after:.2f} hrs)"
        )
    else:
        lines.append("No vehicle in the fleet")
    return "\n".join(lines) + "\n"


def describe_drain(
    header: str,
    availability: Optional[Availability],
    assignments: Sequence[Assignment],
    pending: Sequence[Package],
    unassignable: Sequence[Package],
    preview: int = 3,
) -> str:
    lines = [header + RULE]
    first = availability.first_available if availability is not None else None
    if first is not None:
        lines.append(f"First available vehicle: {first.name}")
        lines.append(f"Available After: {hrs(first.available_after)}")
        lines.append(RULE)
    if pending:
        lines.append("Pending packages, heaviest first:")
        for p in pending[:preview]:
            lines.append(f"  {p.id}: {kg(p.weight)}, {p.distance:g}km")
        if len(pending) > preview:
            lines.append(f"  ... and {len(pending) - preview} more")
        lines.append(RULE)
    for a in assignments:
        arrive = a.departure_time + a.delivery_time
        lines.append(
            f"{a.name}  Delivering {' + '.join(a.package_ids)}"
            f" ({a.departure_time:.2f} + {a.delivery_time:.2f})  {hrs(arrive)}"
        )
    for p in unassignable:
        lines.append(f"{p.id} ({kg(p.weight)}) exceeds every vehicle capacity; left unassigned")
    return "\n".join(lines) + "\n"


def describe_strategy_trip(
    step: int,
    strategy: str,
    stop_overhead: float,
    assignment: Assignment,
    vehicle: Vehicle,
    base_time: float,
    reduced: bool,
) -> str:
    stops = len(assignment.packages) - 1
    lines = [
        f"STEP {step:02d}: Delivery Scheduling",
        f"Strategy: {strategy} | Stop Overhead: {stop_overhead:g} hrs per extra package",
        f"Packages: {' + '.join(assignment.package_ids)}",
        f"{assignment.name}: {vehicle.max_speed:g} km/hr, {kg(vehicle.max_carriable_weight)} capacity",
        f"Max Distance: {assignment.max_distance:g} km | Base Time: {hrs(base_time)}",
        f"Stop Overhead: {stops * stop_overhead:g} hrs | Total Delivery: {hrs(assignment.delivery_time)}",
        f"Round Trip: {hrs(assignment.return_time)} | Available After: {hrs(assignment.available_after)}",
        "Optimization: " + ("3+ vehicles - 1 minute reduction applied" if reduced else "Standard timing"),
    ]
    return "\n".join(lines) + "\n"


def describe_summary(
    header: str,
    assignments: Sequence[Assignment],
    vehicles: Sequence[Vehicle],
    steps: Sequence[Step],
    current_time: float,
) -> str:
    packages = [p for a in assignments for p in a.packages]
    usage = vehicle_usage(assignments, vehicles)
    total_weight = sum(p.weight for p in packages)
    total_distance = sum(a.max_distance for a in assignments)
    by_id = {v.id: v for v in vehicles}

    lines = [header, "DELIVERY PLANNING COMPLETE", "", "CORE METRICS:", RULE]
    lines.append(f"Total Packages: {len(packages)}")
    lines.append(f"Total Vehicles Used: {len(usage)}")
    lines.append(f"Total Trips: {len(assignments)}")
    lines.append(f"Total Weight: {kg(total_weight)}")
    lines.append(f"Total Distance: {total_distance:g}km")
    lines.append(f"Total Time: {hrs(operation_time(assignments))}")
    lines.append(f"Scheduler Clock: {hrs(current_time)}")

    lines += ["", "VEHICLE ASSIGNMENTS:", RULE]
    for i, a in enumerate(assignments, start=1):
        cap = by_id[a.vehicle_id].max_carriable_weight if a.vehicle_id in by_id else 0.0
        pct = 100.0 * a.total_weight / cap if cap > 0 else 0.0
        lines.append(f"{i}. {a.name}: {' + '.join(a.package_ids)}")
        lines.append(f"   Total Weight: {kg(a.total_weight)} / {kg(cap)} | Max Distance: {a.max_distance:g}km")
        lines.append(
            f"   Delivery Time: {hrs(a.delivery_time)} | Return Time: {hrs(a.return_time)}"
            f" | Available After: {hrs(a.available_after)}"
        )
        lines.append(f"   Utilization: {pct:.1f}%")

    lines += ["", "UTILIZATION BY VEHICLE:", RULE]
    for u in usage:
        lines.append(f"{u.name}: {u.trips} trip(s), {u.packages} package(s), {kg(u.total_weight)}, {u.utilisation:.1f}%")
    lines.append(f"Overall Vehicle Utilization: {fleet_utilisation(assignments, vehicles):.1f}%")
    if assignments:
        lines.append(f"Average Packages per Trip: {len(packages) / len(assignments):.1f}")

    heaviest, lightest = extremes(packages, "weight")
    longest, shortest = extremes(packages, "distance")
    most, least = usage_extremes(usage)
    lines += ["", "PACKAGE DISTRIBUTION:", RULE]
    if heaviest is not None:
        lines.append(f"Heaviest: {heaviest.id} ({kg(heaviest.weight)}) | Lightest: {lightest.id} ({kg(lightest.weight)})")
        lines.append(f"Longest: {longest.id} ({longest.distance:g}km) | Shortest: {shortest.id} ({shortest.distance:g}km)")
    if most is not None:
        lines.append(
            f"Most Utilized: {most.name} ({most.utilisation:.1f}%) | Least Utilized: {least.name} ({least.utilisation:.1f}%)"
        )

    lines += ["", "STEP-BY-STEP EXECUTION SUMMARY:", RULE]
    for s in steps:
        lines.append(
            f"Step {s.step}: {s.packages_remaining} packages remaining, {s.vehicles_available} vehicles available"
        )
        if s.vehicle_assignments:
            lines.append(f"  -> {len(s.vehicle_assignments)} vehicle(s) assigned")
    return "\n".join(lines) + "\n"


__all__ = [
    "RULE",
    "describe_availability",
    "describe_combo_seed",
    "describe_drain",
    "describe_fill",
    "describe_heaviest_single",
    "describe_return_survey",
    "describe_strategy_trip",
    "describe_summary",
    "format_time",
    "hrs",
    "kg",
    "step_header",
]
