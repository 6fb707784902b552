"""Capacity packing and greedy selection helpers."""

from .combinations import claim_unique_combinations, generate_combinations, rank_combinations
from .selection import first_available, next_heaviest, order_heaviest_first, order_vehicles
from .trips import order_by_strategy, pack_with_anchor, pack_with_clustering, select_trip

__all__ = [
    "claim_unique_combinations",
    "first_available",
    "generate_combinations",
    "next_heaviest",
    "order_by_strategy",
    "order_heaviest_first",
    "order_vehicles",
    "pack_with_anchor",
    "pack_with_clustering",
    "rank_combinations",
    "select_trip",
]
