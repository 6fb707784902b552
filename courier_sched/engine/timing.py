"""Trip timing rules shared by every round."""

from __future__ import annotations


def one_way_time(distance, max_speed):
    return float(distance) / float(max_speed)


def delivery_time(distance, max_speed, eligible, threshold=3, reduction=1.0 / 60.0):
    """One-way time to ``distance``, cut by ``reduction`` hours (floored at 0)
    when ``eligible`` vehicles in the round reach ``threshold``."""

    t = one_way_time(distance, max_speed)
    if eligible >= threshold:
        t = max(0.0, t - reduction)
    return t


def round_trip(one_way):
    return 2.0 * one_way
