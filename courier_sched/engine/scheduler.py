"""Multi-round package-to-vehicle scheduler.

``RoundScheduler.run`` walks :class:`RoundKind` in order, calling one handler
per round. Handlers only *propose* assignments; :meth:`RoundScheduler._commit`
runs the duplicate check, drops ids that are already claimed, stamps the
timing and advances vehicle availability. The scheduler owns the fleet copy it
mutates; emitted :class:`Step` records only ever hold frozen assignment
snapshots.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, List, NamedTuple, Optional, Sequence, Tuple

from ..config.config import DEFAULTS
from ..config.enums import TIME_EPS, RoundKind
from ..operators.packing import (
    claim_unique_combinations,
    first_available,
    generate_combinations,
    next_heaviest,
    order_heaviest_first,
    order_vehicles,
    rank_combinations,
)
from ..reporting import narrative
from .models import (
    Assignment,
    Availability,
    DuplicateAssignmentWarning,
    Package,
    PackageTime,
    ScheduleResult,
    Shipment,
    Step,
    Vehicle,
    VehicleReturn,
)
from .timing import delivery_time, round_trip
from .validator import validate_assignments

log = logging.getLogger(__name__)


class _Proposal(NamedTuple):
    vehicle: Vehicle
    packages: Tuple[Package, ...]
    departure: float
    eligible: int  # vehicles eligible in the proposing round


class RoundScheduler:
    """Run one scheduling pass over private copies of ``vehicles``.

    Parameters
    ----------
    packages : sequence of Package
        Validated input packages, in input order.
    vehicles : sequence of Vehicle
        Fleet; copied, so the caller's records are never mutated.
    params : dict, optional
        Overrides for :data:`courier_sched.config.config.DEFAULTS`.
    """

    def __init__(
        self,
        packages: Sequence[Package],
        vehicles: Sequence[Vehicle],
        params: Optional[Dict[str, Any]] = None,
    ):
        self.params = DEFAULTS.copy()
        if params:
            self.params.update(params)
        self.packages = list(packages)
        self.vehicles = [replace(v) for v in vehicles]
        self.clock = 0.0

        self._pending: List[Package] = list(self.packages)
        self._claimed = set()
        self._loaded = set()  # ids of vehicles that carried at least one load
        self._assignments: List[Assignment] = []
        self._steps: List[Step] = []
        self._warnings: List[DuplicateAssignmentWarning] = []
        self._unassignable: List[Package] = []
        self._availability: Optional[Availability] = None

        self._handlers = {
            RoundKind.COMBO_SEED: self._combo_seed,
            RoundKind.HEAVIEST_SINGLE: self._heaviest_single,
            RoundKind.RETURN_SURVEY: self._return_survey,
            RoundKind.FILL_TO_CAPACITY: self._fill_to_capacity,
            RoundKind.AVAILABILITY_SURVEY: self._availability_survey,
            RoundKind.DRAIN: self._drain,
            RoundKind.SUMMARY: self._summary,
        }

    # ------------------------------------------------------------------ loop

    def run(self) -> ScheduleResult:
        step_no = 0
        for kind in RoundKind:
            if kind is RoundKind.DRAIN and not self._pending:
                continue
            if kind is RoundKind.SUMMARY and (self._pending or self._unassignable):
                break
            step_no += 1
            step = self._handlers[kind](step_no)
            self._steps.append(step)
            log.debug(
                "step %d %s: %d assigned, %d pending, clock %.4f",
                step_no,
                kind.name,
                len(step.vehicle_assignments),
                len(self._pending),
                self.clock,
            )

        unassigned = self._unassignable + self._pending
        if unassigned:
            log.warning(
                "%d package(s) left unassigned: %s",
                len(unassigned),
                ", ".join(p.id for p in unassigned),
            )

        return ScheduleResult(
            shipments=[
                Shipment(
                    packages=a.packages,
                    vehicle_id=a.vehicle_id,
                    delivery_time=a.departure_time + a.delivery_time,
                    return_time=a.available_after,
                )
                for a in self._assignments
            ],
            steps=list(self._steps),
            vehicles=self.vehicles,
            assignments=list(self._assignments),
            unassigned_packages=unassigned,
            warnings=list(self._warnings),
        )

    # ------------------------------------------------------------- helpers

    def _free_at(self, t: float) -> List[Vehicle]:
        return [v for v in order_vehicles(self.vehicles) if v.available_time <= t + TIME_EPS]

    def _draft(self, prop: _Proposal) -> Assignment:
        vehicle = prop.vehicle
        max_distance = max(p.distance for p in prop.packages)
        one_way = delivery_time(
            max_distance,
            vehicle.max_speed,
            prop.eligible,
            threshold=int(self.params["concurrency_threshold"]),
            reduction=float(self.params["concurrency_reduction_hours"]),
        )
        back = round_trip(one_way)
        return Assignment(
            vehicle_id=vehicle.id,
            name=vehicle.display_name,
            packages=tuple(prop.packages),
            total_weight=sum(p.weight for p in prop.packages),
            max_distance=max_distance,
            delivery_time=one_way,
            return_time=back,
            departure_time=prop.departure,
            available_after=prop.departure + back,
            vehicle_speed=vehicle.max_speed,
            per_package_times=tuple(
                PackageTime(p.id, p.distance, round(p.distance / vehicle.max_speed, 2))
                for p in prop.packages
            ),
        )

    def _commit(self, kind: RoundKind, proposals: Sequence[_Proposal]) -> List[Assignment]:
        """Validate, de-duplicate and apply one round's proposals."""

        check = validate_assignments(self._assignments + [self._draft(p) for p in proposals])
        for pid in check.duplicate_package_ids:
            warning = DuplicateAssignmentWarning(kind, pid, check.conflicts[pid])
            log.warning("%s (round %s)", warning, kind.name)
            self._warnings.append(warning)

        committed = []
        for prop in proposals:
            keep = tuple(p for p in prop.packages if p.id not in self._claimed)
            if not keep:
                continue
            assignment = self._draft(prop._replace(packages=keep))
            self._claimed.update(assignment.package_ids)
            self._loaded.add(prop.vehicle.id)
            prop.vehicle.available_time = max(prop.vehicle.available_time, assignment.available_after)
            self._assignments.append(assignment)
            committed.append(assignment)

        if committed:
            self._pending = [p for p in self._pending if p.id not in self._claimed]
        return committed

    def _step(self, step_no, kind, description, pending_before, **fields) -> Step:
        assignments = tuple(fields.pop("vehicle_assignments", ()))
        return Step(
            step=step_no,
            kind=kind,
            description=description,
            packages_remaining=len(pending_before),
            vehicles_available=fields.pop("vehicles_available"),
            current_time=fields.pop("current_time", self.clock),
            vehicle_assignments=assignments,
            unassigned_packages=tuple(pending_before),
            assigned_packages=tuple(p for a in assignments for p in a.packages),
            **fields,
        )

    def _header(self, step_no, kind, pending_before, n_free, t=None) -> str:
        return narrative.step_header(
            step_no, kind, len(pending_before), n_free, self.clock if t is None else t
        )

    # ------------------------------------------------------------ handlers

    def _combo_seed(self, step_no: int) -> Step:
        kind = RoundKind.COMBO_SEED
        before = list(self._pending)
        free = self._free_at(self.clock)
        seeds = free[1:] if len(free) > 1 else free

        ranked = []
        claims = []
        if seeds:
            max_load = max(v.max_carriable_weight for v in seeds)
            ranked = rank_combinations(
                generate_combinations(
                    before,
                    max_load,
                    min_size=int(self.params["min_combination_size"]),
                    max_size=int(self.params["max_combination_size"]),
                )
            )
            claims = claim_unique_combinations(ranked, seeds)

        by_id = {p.id: p for p in before}
        proposals = [
            _Proposal(vehicle, tuple(by_id[pid] for pid in combo.member_ids), self.clock, len(free))
            for vehicle, combo in claims
        ]
        committed = self._commit(kind, proposals)

        text = narrative.describe_combo_seed(
            self._header(step_no, kind, before, len(free)),
            ranked,
            committed,
            preview=int(self.params["combo_preview"]),
        )
        return self._step(
            step_no, kind, text, before,
            vehicles_available=len(free),
            vehicle_assignments=committed,
            combos=tuple(ranked),
        )

    def _heaviest_single(self, step_no: int) -> Step:
        kind = RoundKind.HEAVIEST_SINGLE
        before = list(self._pending)
        free = self._free_at(self.clock)
        candidates = [v for v in free if v.id not in self._loaded]

        taken = set()
        proposals = []
        for vehicle in candidates:
            pkg = next_heaviest(self._pending, vehicle.max_carriable_weight, exclude=taken)
            if pkg is None:
                continue
            taken.add(pkg.id)
            proposals.append(_Proposal(vehicle, (pkg,), self.clock, len(candidates)))
        committed = self._commit(kind, proposals)

        heaviest = order_heaviest_first(before)[0] if before else None
        text = narrative.describe_heaviest_single(
            self._header(step_no, kind, before, len(free)), heaviest, committed
        )
        return self._step(
            step_no, kind, text, before,
            vehicles_available=len(free),
            vehicle_assignments=committed,
            heaviest=heaviest,
        )

    def _return_survey(self, step_no: int) -> Step:
        kind = RoundKind.RETURN_SURVEY
        before = list(self._pending)
        loaded = [v for v in order_vehicles(self.vehicles) if v.id in self._loaded]
        next_free = loaded[0] if loaded else None
        if next_free is not None:
            self.clock = max(self.clock, next_free.available_time)
        self._commit(kind, [])

        free = self._free_at(self.clock)
        text = narrative.describe_return_survey(
            self._header(step_no, kind, before, len(free)), self.vehicles, self.clock, next_free
        )
        return self._step(
            step_no, kind, text, before,
            vehicles_available=len(free),
            availability=self._snapshot_availability(),
        )

    def _fill_to_capacity(self, step_no: int) -> Step:
        kind = RoundKind.FILL_TO_CAPACITY
        before = list(self._pending)
        free = self._free_at(self.clock)
        ready = [
            v
            for v in order_vehicles(self.vehicles)
            if v.id in self._loaded and abs(v.available_time - self.clock) <= TIME_EPS
        ]

        taken = set()
        proposals = []
        for vehicle in ready:
            pkg = next_heaviest(self._pending, vehicle.max_carriable_weight, exclude=taken)
            if pkg is None:
                continue
            taken.add(pkg.id)
            proposals.append(_Proposal(vehicle, (pkg,), self.clock, len(ready)))
        committed = self._commit(kind, proposals)

        text = narrative.describe_fill(self._header(step_no, kind, before, len(free)), committed)
        return self._step(
            step_no, kind, text, before,
            vehicles_available=len(free),
            vehicle_assignments=committed,
        )

    def _snapshot_availability(self) -> Availability:
        returns = tuple(
            VehicleReturn(
                vehicle_id=v.id,
                name=v.display_name,
                returning_in=max(0.0, v.available_time - self.clock),
                available_after=max(self.clock, v.available_time),
            )
            for v in sorted(self.vehicles, key=lambda v: v.id)
        )
        first = None
        ordered = order_vehicles(self.vehicles)
        if ordered:
            first = next(r for r in returns if r.vehicle_id == ordered[0].id)
        return Availability(vehicle_returns=returns, first_available=first)

    def _availability_survey(self, step_no: int) -> Step:
        kind = RoundKind.AVAILABILITY_SURVEY
        before = list(self._pending)
        self._commit(kind, [])
        self._availability = self._snapshot_availability()

        free = self._free_at(self.clock)
        text = narrative.describe_availability(
            self._header(step_no, kind, before, len(free)), self._availability, self.clock
        )
        return self._step(
            step_no, kind, text, before,
            vehicles_available=len(free),
            availability=self._availability,
        )

    def _drain(self, step_no: int) -> Step:
        kind = RoundKind.DRAIN
        before = list(self._pending)
        start = self.clock
        n_free = len(self._free_at(start))

        committed = []
        set_aside = []
        while self._pending:
            remaining = len(self._pending)
            pkg = order_heaviest_first(self._pending)[0]
            vehicle = first_available(self.vehicles, pkg.weight)
            if vehicle is None:
                log.warning("package %s (%gkg) exceeds every vehicle capacity", pkg.id, pkg.weight)
                set_aside.append(pkg)
                self._pending = [p for p in self._pending if p is not pkg]
            else:
                departure = max(self.clock, vehicle.available_time)
                self.clock = departure
                eligible = sum(1 for v in self.vehicles if v.available_time <= departure + TIME_EPS)
                committed.extend(self._commit(kind, [_Proposal(vehicle, (pkg,), departure, eligible)]))
            if len(self._pending) >= remaining:
                log.warning("drain made no progress with %d package(s) pending; stopping", remaining)
                break
        self._unassignable.extend(set_aside)

        ordered = order_heaviest_first(before)
        text = narrative.describe_drain(
            self._header(step_no, kind, before, n_free, t=start),
            self._availability,
            committed,
            ordered,
            set_aside,
            preview=int(self.params["pending_preview"]),
        )
        return self._step(
            step_no, kind, text, before,
            vehicles_available=n_free,
            current_time=start,
            vehicle_assignments=committed,
            availability=self._availability,
            heaviest=ordered[0] if ordered else None,
        )

    def _summary(self, step_no: int) -> Step:
        kind = RoundKind.SUMMARY
        self._commit(kind, [])
        free = self._free_at(self.clock)
        text = narrative.describe_summary(
            self._header(step_no, kind, [], len(free)),
            self._assignments,
            self.vehicles,
            self._steps,
            self.clock,
        )
        step = self._step(
            step_no, kind, text, [],
            vehicles_available=len(free),
            vehicle_assignments=self._assignments,
        )
        log.info(
            "schedule complete: %d package(s), %d trip(s), clock %.2f",
            len(self.packages),
            len(self._assignments),
            self.clock,
        )
        return step


def run_schedule(
    packages: Sequence[Package],
    vehicles: Sequence[Vehicle],
    params: Optional[Dict[str, Any]] = None,
) -> ScheduleResult:
    return RoundScheduler(packages, vehicles, params).run()


__all__ = ["RoundScheduler", "run_schedule"]
