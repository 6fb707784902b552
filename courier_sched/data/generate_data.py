import numpy as np

from ..config.offers import OFFERS
from ..engine.models import Package, Vehicle


def generate_problem(
    n_packages=20,
    n_vehicles=3,
    seed=0,
    max_speed=70.0,
    max_carriable_weight=200.0,
    offer_rate=0.6,
):
    """Random instance with a homogeneous fleet; every package fits a vehicle."""
    rng = np.random.default_rng(seed)

    # weights 10..max capacity, distances 5..250 km
    weights = rng.integers(10, int(max_carriable_weight) + 1, size=n_packages)
    distances = rng.integers(5, 251, size=n_packages)

    codes = [o.code for o in OFFERS] + ["OFR999"]  # one unknown code on purpose
    has_code = rng.random(n_packages) < offer_rate
    picks = rng.integers(0, len(codes), size=n_packages)

    packages = [
        Package(
            f"PKG{i + 1}",
            float(weights[i]),
            float(distances[i]),
            codes[picks[i]] if has_code[i] else None,
        )
        for i in range(n_packages)
    ]
    vehicles = [
        Vehicle(i + 1, "", float(max_speed), float(max_carriable_weight))
        for i in range(n_vehicles)
    ]
    base_delivery_cost = 100.0
    return base_delivery_cost, packages, vehicles
