import numpy as np
import pytest

from courier_sched.config.config import DEFAULTS
from courier_sched.data.generate_data import generate_problem
from courier_sched.engine.scheduler import run_schedule
from courier_sched.engine.validator import validate_assignments
from courier_sched.glue.pipeline import plan_deliveries


@pytest.mark.parametrize("seed, n_packages, n_vehicles", [(0, 5, 2), (1, 12, 3), (2, 30, 4), (3, 8, 1)])
def test_schedule_invariants(seed, n_packages, n_vehicles):
    base, pkgs, fleet = generate_problem(n_packages, n_vehicles, seed=seed)
    res = run_schedule(pkgs, fleet, DEFAULTS.copy())

    assert res.is_complete
    assert len(res.steps) in (6, 7)
    assert validate_assignments(res.assignments).is_valid
    assert res.warnings == []

    shipped = sorted(p.id for s in res.shipments for p in s.packages)
    assert shipped == sorted(p.id for p in pkgs)

    caps = {v.id: v.max_carriable_weight for v in fleet}
    for a in res.assignments:
        assert a.total_weight <= caps[a.vehicle_id]
        assert a.max_distance == max(p.distance for p in a.packages)

    # each vehicle leaves only once it is back from its previous trip
    for vid in caps:
        trips = [a for a in res.assignments if a.vehicle_id == vid]
        departs = np.array([a.departure_time for a in trips])
        backs = np.array([a.available_after for a in trips])
        if len(trips) > 1:
            assert np.all(departs[1:] >= backs[:-1] - 1e-9)
        assert np.all(np.diff(backs) >= -1e-9)


def test_generate_problem_is_reproducible():
    a = generate_problem(10, 2, seed=7)
    b = generate_problem(10, 2, seed=7)
    assert a == b
    base, pkgs, fleet = a
    assert base == 100.0
    assert all(p.weight <= 200 for p in pkgs)


def test_plan_generated_problem():
    base, pkgs, fleet = generate_problem(15, 3, seed=5)
    plan = plan_deliveries(pkgs, fleet, base)
    assert plan.is_complete
    assert all(r.estimated_delivery_time > 0 for r in plan.results)
    assert plan.metrics.total_cost <= plan.metrics.total_original_cost
