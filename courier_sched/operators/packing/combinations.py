"""Bounded subset enumeration for multi-package loads.

The search walks subsets of each size lexicographically by input index and
drops a prefix as soon as its weight passes the budget. Weights are strictly
positive, so no extension of such a prefix can fit either.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

import numpy as np
from numba import njit

from ...engine.models import Combination, Package, Vehicle


@njit(cache=True)
def _walk_subsets(weights, size, max_load, out_idx, out_w, fill):
    """Count (and optionally record) index subsets of ``size`` within ``max_load``.

    Parameters
    ----------
    weights : ndarray (n,)
        Package weights in input order.
    size : int
        Subset size.
    max_load : float
        Inclusive weight budget.
    out_idx : ndarray (k, size)
        Member indices, written only when ``fill`` is true.
    out_w : ndarray (k,)
        Subset totals, written only when ``fill`` is true.
    fill : bool
        ``False`` runs the counting pass used to size the buffers.

    Returns
    -------
    int
        Number of feasible subsets.
    """

    n = weights.shape[0]
    if size <= 0 or size > n:
        return 0

    idx = np.zeros(size, dtype=np.int64)
    partial = np.zeros(size + 1, dtype=np.float64)
    count = 0
    depth = 0
    while depth >= 0:
        i = idx[depth]
        if i > n - (size - depth):
            depth -= 1
            if depth >= 0:
                idx[depth] += 1
            continue
        w = partial[depth] + weights[i]
        if w > max_load:
            idx[depth] += 1
            continue
        if depth == size - 1:
            if fill:
                for k in range(size):
                    out_idx[count, k] = idx[k]
                out_w[count] = w
            count += 1
            idx[depth] += 1
        else:
            partial[depth + 1] = w
            depth += 1
            idx[depth] = i + 1
    return count


def _subsets_of_size(weights: np.ndarray, size: int, max_load: float) -> Tuple[np.ndarray, np.ndarray]:
    probe_idx = np.zeros((0, size), dtype=np.int64)
    probe_w = np.zeros(0, dtype=np.float64)
    count = _walk_subsets(weights, size, max_load, probe_idx, probe_w, False)
    out_idx = np.zeros((count, size), dtype=np.int64)
    out_w = np.zeros(count, dtype=np.float64)
    if count:
        _walk_subsets(weights, size, max_load, out_idx, out_w, True)
    return out_idx, out_w


def generate_combinations(
    packages: Sequence[Package],
    max_load: float,
    min_size: int = 2,
    max_size: int = 5,
) -> List[Combination]:
    """All package subsets of ``min_size..min(max_size, n)`` members weighing at most ``max_load``.

    Output order is size ascending, then lexicographic by input position.
    """

    pkgs = list(packages)
    weights = np.array([p.weight for p in pkgs], dtype=np.float64)
    upper = min(int(max_size), len(pkgs))

    combos = []
    for size in range(max(int(min_size), 1), upper + 1):
        members, totals = _subsets_of_size(weights, size, float(max_load))
        for row, total in zip(members, totals):
            chosen = [pkgs[int(k)] for k in row]
            combos.append(
                Combination(
                    member_ids=tuple(p.id for p in chosen),
                    weights=tuple(p.weight for p in chosen),
                    total_weight=float(total),
                )
            )
    return combos


def rank_combinations(combos: Iterable[Combination]) -> List[Combination]:
    """Heaviest total first; ties keep generation order."""

    combos = list(combos)
    if not combos:
        return []
    totals = np.array([c.total_weight for c in combos], dtype=np.float64)
    order = np.argsort(-totals, kind="stable")
    return [combos[int(i)] for i in order]


def claim_unique_combinations(
    ranked: Sequence[Combination],
    vehicles: Sequence[Vehicle],
) -> List[Tuple[Vehicle, Combination]]:
    """Give each vehicle, in order, the best ranked combination it can carry.

    A package id claimed by an earlier vehicle removes every combination that
    contains it from consideration for later vehicles.
    """

    claimed = set()
    claims = []
    for vehicle in vehicles:
        for combo in ranked:
            if any(pid in claimed for pid in combo.member_ids):
                continue
            if combo.total_weight <= vehicle.max_carriable_weight:
                claims.append((vehicle, combo))
                claimed.update(combo.member_ids)
                break
    return claims
