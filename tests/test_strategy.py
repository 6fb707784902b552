import logging

import pytest

from courier_sched.engine.models import Package, Vehicle
from courier_sched.engine.strategy import get_schedule_summary, schedule_deliveries
from courier_sched.operators.packing import order_by_strategy, pack_with_anchor, select_trip


def _five():
    return [
        Package("PKG1", 50, 30, "OFR001"),
        Package("PKG2", 75, 125, "OFR002"),
        Package("PKG3", 175, 100, "OFR003"),
        Package("PKG4", 110, 60, "OFR002"),
        Package("PKG5", 155, 95, None),
    ]


def _fleet(n, speed=70.0, capacity=200.0):
    return [Vehicle(i + 1, "", speed, capacity) for i in range(n)]


def _ids(pkgs):
    return [p.id for p in pkgs]


@pytest.mark.parametrize(
    "strategy, expected",
    [
        ("weight", ["B", "C", "A"]),
        ("distance", ["A", "C", "B"]),
        ("balanced", ["C", "A", "B"]),
    ],
)
def test_order_by_strategy(strategy, expected):
    pkgs = [Package("A", 10, 100), Package("B", 50, 10), Package("C", 30, 40)]
    assert _ids(order_by_strategy(pkgs, strategy)) == expected


def test_unknown_strategy_rejected():
    with pytest.raises(ValueError):
        order_by_strategy(_five(), "fastest")
    with pytest.raises(ValueError):
        schedule_deliveries(_five(), _fleet(2), {"strategy": "fastest"})


def test_pack_with_anchor_respects_limits():
    pkgs = [Package("A", 40, 1), Package("B", 100, 1), Package("C", 30, 1), Package("D", 20, 1)]
    assert _ids(pack_with_anchor(pkgs, 160, 10)) == ["B", "A", "D"]
    assert _ids(pack_with_anchor(pkgs, 160, 2)) == ["B", "A"]
    assert pack_with_anchor(pkgs, 10, 10) == []


def test_select_trip_by_count():
    two = [Package("A", 120, 1), Package("B", 90, 1)]
    assert _ids(select_trip(two, 200, 10)) == ["A"]
    assert _ids(select_trip(two, 210, 10)) == ["A", "B"]
    assert _ids(select_trip(two, 210, 1)) == ["A"]

    # five that all fit go together; otherwise only the heaviest goes
    small = [Package(f"S{i}", 10, 1) for i in range(5)]
    assert len(select_trip(small, 50, 10)) == 5
    assert _ids(select_trip(small + [Package("H", 45, 1)], 50, 10)) == ["H"]

    # packages over capacity are never picked
    assert _ids(select_trip([Package("BIG", 300, 1), Package("A", 20, 1)], 200, 10)) == ["A"]
    assert select_trip([], 200, 10) == []


def test_select_trip_clusters_near_packages():
    pkgs = [Package(f"P{i}", 10, 10 * i) for i in range(1, 8)]
    assert _ids(select_trip(pkgs, 35, 10)) == ["P1", "P2", "P3"]
    assert _ids(select_trip(pkgs, 35, 2)) == ["P1", "P2"]


def test_schedule_by_weight():
    res = schedule_deliveries(_five(), _fleet(2), {"strategy": "weight"})

    assert [(s.vehicle_id, _ids(s.packages)) for s in res.shipments] == [
        (1, ["PKG3"]),
        (2, ["PKG5"]),
        (2, ["PKG4", "PKG2"]),
        (1, ["PKG1"]),
    ]
    assert res.total_trips == 4
    assert res.unassigned_packages == []
    assert res.validation.is_valid

    combined = res.assignments[2]
    assert combined.departure_time == pytest.approx(190 / 70)
    assert combined.delivery_time == pytest.approx(125 / 70 + 0.5)
    assert combined.return_time == pytest.approx(2 * (125 / 70 + 0.5))
    assert res.shipments[2].delivery_time == pytest.approx(5.0)

    last = res.assignments[3]
    assert last.departure_time == pytest.approx(200 / 70)
    assert res.total_time == pytest.approx(440 / 70 + 1.0)

    assert [s.step for s in res.steps] == [1, 2, 3, 4]
    assert [s.packages_remaining for s in res.steps] == [4, 3, 1, 0]
    assert res.steps[0].vehicles_available == 1
    assert res.steps[2].description.startswith("STEP 03: Delivery Scheduling\n")
    assert "Packages: PKG4 + PKG2" in res.steps[2].description
    assert "Stop Overhead: 0.5 hrs | Total Delivery: 2.29 hrs" in res.steps[2].description
    assert "Optimization: Standard timing" in res.steps[2].description


def test_fleet_size_triggers_time_cut():
    res = schedule_deliveries([Package("PKG1", 50, 30)], _fleet(3))
    trip = res.assignments[0]
    assert trip.delivery_time == pytest.approx(30 / 70 - 1 / 60)
    assert trip.return_time == pytest.approx(2 * (30 / 70 - 1 / 60))
    assert "1 minute reduction applied" in res.steps[0].description


def test_stop_overhead_from_params():
    pkgs = [Package("A", 20, 70), Package("B", 30, 35)]
    res = schedule_deliveries(pkgs, _fleet(1), {"stop_overhead_hours": 0.25})
    [trip] = res.assignments
    assert trip.package_ids == ("A", "B")
    assert trip.delivery_time == pytest.approx(1.25)


def test_oversize_package_set_aside(caplog):
    pkgs = [Package("BIG", 500, 10), Package("PKG1", 50, 30)]
    with caplog.at_level(logging.WARNING):
        res = schedule_deliveries(pkgs, _fleet(2))

    assert _ids(res.unassigned_packages) == ["BIG"]
    assert [_ids(s.packages) for s in res.shipments] == [["PKG1"]]
    assert "BIG" in caplog.text


def test_small_vehicle_waits_for_large_one():
    fleet = [Vehicle(1, "", 70, 200), Vehicle(2, "", 70, 50)]
    pkgs = [Package("H1", 150, 70), Package("H2", 150, 70)]
    res = schedule_deliveries(pkgs, fleet, {"strategy": "weight"})

    assert [(a.vehicle_id, a.package_ids) for a in res.assignments] == [(1, ("H1",)), (1, ("H2",))]
    assert res.assignments[1].departure_time == pytest.approx(2.0)
    assert res.unassigned_packages == []


def test_no_vehicles():
    res = schedule_deliveries(_five(), [])
    assert res.shipments == []
    assert res.total_time == 0.0
    assert len(res.unassigned_packages) == 5


def test_caller_fleet_untouched():
    fleet = _fleet(2)
    schedule_deliveries(_five(), fleet)
    assert [v.available_time for v in fleet] == [0.0, 0.0]


def test_bad_trip_params():
    with pytest.raises(ValueError, match="max_packages_per_trip"):
        schedule_deliveries(_five(), _fleet(1), {"max_packages_per_trip": 0})
    with pytest.raises(ValueError, match="stop_overhead_hours"):
        schedule_deliveries(_five(), _fleet(1), {"stop_overhead_hours": -1})


def test_schedule_summary():
    summary = get_schedule_summary(_five(), _fleet(2), {"strategy": "weight"})
    assert summary.total_packages == 5
    assert summary.total_vehicles == 2
    assert summary.estimated_trips == 4
    assert summary.estimated_total_time == pytest.approx(440 / 70 + 1.0)
    assert summary.average_packages_per_trip == pytest.approx(1.25)
    assert summary.utilization_rate == 100.0

    light = get_schedule_summary([Package("PKG1", 50, 30)], _fleet(2))
    assert light.utilization_rate == pytest.approx(12.5)

    empty = get_schedule_summary([Package("PKG1", 50, 30)], [])
    assert empty.estimated_trips == 0
    assert empty.average_packages_per_trip == 0.0
    assert empty.utilization_rate == 0.0
