import pytest

from courier_sched.config.offers import OFFERS, find_offer
from courier_sched.engine.models import Package
from courier_sched.pricing.cost import (
    calculate_cost,
    calculate_total_delivery_cost,
    validate_offer_code,
    validate_package_data,
)


@pytest.mark.parametrize(
    "pkg, original, discount",
    [
        (Package("PKG1", 50, 30, "OFR001"), 750.0, 0.0),    # weight below 70
        (Package("PKG2", 75, 125, "OFR008"), 1475.0, 0.0),  # unknown code
        (Package("PKG3", 175, 100, "OFR003"), 2350.0, 0.0),  # weight above 150
        (Package("PKG4", 110, 60, "OFR002"), 1500.0, 105.0),
        (Package("PKG5", 155, 95, None), 2125.0, 0.0),
        (Package("PKG6", 75, 125, "OFR002"), 1475.0, 0.0),
    ],
)
def test_calculate_cost(pkg, original, discount):
    cost = calculate_cost(pkg, 100)
    assert cost.original_cost == pytest.approx(original)
    assert cost.discount == pytest.approx(discount)
    assert cost.total_cost == pytest.approx(original - discount)


def test_offer_ranges_are_inclusive():
    # OFR001 lower weight bound and upper distance bound
    cost = calculate_cost(Package("A", 70, 200, "OFR001"), 100)
    assert cost.original_cost == pytest.approx(1800.0)
    assert cost.discount == pytest.approx(180.0)

    # OFR003 upper weight bound and lower distance bound
    cost = calculate_cost(Package("B", 150, 50, "OFR003"), 100)
    assert cost.discount == pytest.approx(92.5)

    # just outside
    assert calculate_cost(Package("C", 150.5, 50, "OFR003"), 100).discount == 0.0
    assert calculate_cost(Package("D", 150, 49.9, "OFR003"), 100).discount == 0.0


def test_calculate_cost_is_pure():
    pkg = Package("PKG4", 110, 60, "OFR002")
    assert calculate_cost(pkg, 100) == calculate_cost(pkg, 100)


def test_offer_catalog():
    assert [o.code for o in OFFERS] == ["OFR001", "OFR002", "OFR003"]
    assert find_offer("OFR002").discount_percent == 7.0
    assert find_offer("OFR999") is None
    assert find_offer("") is None
    assert find_offer(None) is None


def test_validate_offer_code():
    assert validate_offer_code(Package("A", 10, 10))
    assert validate_offer_code(Package("A", 110, 60, "OFR002"))
    assert not validate_offer_code(Package("A", 50, 30, "OFR001"))
    assert not validate_offer_code(Package("A", 50, 30, "NOPE"))


def test_validate_package_data():
    ok = validate_package_data(Package("PKG1", 50, 30, "BAD"))
    assert ok.is_valid and ok.errors == []

    bad = validate_package_data(Package("", 0, -5))
    assert not bad.is_valid
    assert bad.errors == [
        "Package ID is required",
        "Package weight must be a positive number",
        "Package distance must be a positive number",
    ]

    assert not validate_package_data(Package("X", "10", 5)).is_valid
    assert not validate_package_data(Package("X", True, 5)).is_valid
    assert not validate_package_data(Package("X", 10, float("nan"))).is_valid


def test_total_delivery_cost():
    pkgs = [Package("PKG4", 110, 60, "OFR002"), Package("PKG1", 50, 30, "OFR001")]

    totals = calculate_total_delivery_cost(pkgs, 100)
    assert totals["total_base_cost"] == pytest.approx(200.0)
    assert totals["total_weight_cost"] == pytest.approx(1600.0)
    assert totals["total_distance_cost"] == pytest.approx(450.0)
    assert totals["total_discount"] == pytest.approx(105.0)
    assert totals["total_final_cost"] == pytest.approx(2145.0)
    assert [row["package_id"] for row in totals["breakdown"]] == ["PKG4", "PKG1"]
    assert totals["breakdown"][0]["final_cost"] == pytest.approx(1395.0)

    plain = calculate_total_delivery_cost(pkgs, 100, include_discounts=False)
    assert plain["total_discount"] == 0.0
    assert plain["total_final_cost"] == pytest.approx(2250.0)
