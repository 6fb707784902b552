"""Static discount catalog looked up by offer code."""

from __future__ import annotations

from typing import Optional

from ..engine.models import Offer

OFFERS = (
    Offer("OFR001", 10.0, min_distance=0.0, max_distance=200.0, min_weight=70.0, max_weight=200.0),
    Offer("OFR002", 7.0, min_distance=50.0, max_distance=150.0, min_weight=100.0, max_weight=250.0),
    Offer("OFR003", 5.0, min_distance=50.0, max_distance=250.0, min_weight=10.0, max_weight=150.0),
)


def find_offer(code: Optional[str]) -> Optional[Offer]:
    """Return the offer registered under ``code``; unknown codes give ``None``."""

    if not code:
        return None
    for offer in OFFERS:
        if offer.code == code:
            return offer
    return None
