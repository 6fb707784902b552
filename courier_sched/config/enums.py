# Round kinds driving the scheduler loop, in execution order
from enum import Enum

class RoundKind(Enum):
    COMBO_SEED = 1
    HEAVIEST_SINGLE = 2
    RETURN_SURVEY = 3
    FILL_TO_CAPACITY = 4
    AVAILABILITY_SURVEY = 5
    DRAIN = 6
    SUMMARY = 7

# trace titles per round
ROUND_TITLES = {
    RoundKind.COMBO_SEED: "Multiple Vehicle Management",
    RoundKind.HEAVIEST_SINGLE: "Largest Weight Assignment",
    RoundKind.RETURN_SURVEY: "Fastest Available Vehicles",
    RoundKind.FILL_TO_CAPACITY: "Assign to Returning Vehicles",
    RoundKind.AVAILABILITY_SURVEY: "All Vehicle Assignments",
    RoundKind.DRAIN: "Remaining Package Assignment",
    RoundKind.SUMMARY: "Delivery Summary",
}

# float tolerance for clock comparisons (hours)
TIME_EPS = 1e-9


# package orderings accepted by the trip scheduler
class PackageStrategy(Enum):
    WEIGHT = "weight"
    DISTANCE = "distance"
    BALANCED = "balanced"   # weight x distance
