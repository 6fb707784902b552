"""Single-trip packing for the strategy scheduler.

Every picker returns the packages for one trip, never more than
``max_packages`` of them and never heavier in total than ``capacity``.
"""

from __future__ import annotations

from typing import List, Sequence

from ...config.enums import PackageStrategy
from ...engine.models import Package

_STRATEGY_KEYS = {
    PackageStrategy.WEIGHT: lambda p: -p.weight,
    PackageStrategy.DISTANCE: lambda p: -p.distance,
    PackageStrategy.BALANCED: lambda p: -(p.weight * p.distance),
}


def order_by_strategy(packages: Sequence[Package], strategy) -> List[Package]:
    """Descending by the strategy's key; ties keep input order.

    ``strategy`` is a :class:`PackageStrategy` or its value; an unknown name
    raises ``ValueError``.
    """
    return sorted(packages, key=_STRATEGY_KEYS[PackageStrategy(strategy)])


def pack_with_anchor(packages: Sequence[Package], capacity: float, max_packages: int) -> List[Package]:
    """Heaviest package first, then every lighter one that still fits."""

    trip: List[Package] = []
    load = 0.0
    for pkg in sorted(packages, key=lambda p: -p.weight):
        if len(trip) >= max_packages:
            break
        if load + pkg.weight <= capacity:
            trip.append(pkg)
            load += pkg.weight
    return trip


def median_distance(packages: Sequence[Package]) -> float:
    # upper median, so an even split puts the middle pair on the near side
    distances = sorted(p.distance for p in packages)
    return distances[len(distances) // 2]


def pack_with_clustering(packages: Sequence[Package], capacity: float, max_packages: int) -> List[Package]:
    """Pack the near half (distance <= median) first, the far half if nothing near fits."""

    mid = median_distance(packages)
    near = pack_with_anchor([p for p in packages if p.distance <= mid], capacity, max_packages)
    if near:
        return near
    return pack_with_anchor([p for p in packages if p.distance > mid], capacity, max_packages)


def select_trip(packages: Sequence[Package], capacity: float, max_packages: int) -> List[Package]:
    """Pick one trip from ``packages`` (already in strategy order).

    Packages heavier than ``capacity`` are ignored. The picker depends on how
    many remain: one goes alone, two travel together when they fit, up to
    four are anchor-packed, up to six go in one trip only if all fit (else the
    heaviest goes alone), and more are clustered by distance.
    """

    fitting = [p for p in packages if p.weight <= capacity]
    n = len(fitting)
    if n == 0:
        return []
    if n == 1:
        return fitting[:1]
    if n == 2:
        if max_packages >= 2 and fitting[0].weight + fitting[1].weight <= capacity:
            return fitting[:2]
        return fitting[:1]
    if n <= 4:
        return pack_with_anchor(fitting, capacity, max_packages)
    if n <= 6:
        trip = pack_with_anchor(fitting, capacity, max_packages)
        if len(trip) == n:
            return trip
        return pack_with_anchor(fitting, capacity, 1)
    return pack_with_clustering(fitting, capacity, max_packages)
