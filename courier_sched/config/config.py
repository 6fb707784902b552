# Tariff constants (policy, not per-call parameters)
WEIGHT_RATE = 10.0      # currency per kg
DISTANCE_RATE = 5.0     # currency per km

# Simple parameter defaults (extend freely)
DEFAULTS = {
    "min_combination_size": 2,
    "max_combination_size": 5,      # subset cap for the capacity packer
    "concurrency_threshold": 3,     # eligible vehicles needed for the time cut
    "concurrency_reduction_hours": 1.0 / 60.0,
    "combo_preview": 3,             # combinations listed in the round-1 trace
    "pending_preview": 3,           # pending packages listed in the drain trace
    "strategy": "balanced",         # package order for the trip scheduler
    "stop_overhead_hours": 0.5,     # added per extra drop on a trip
    "max_packages_per_trip": 10,
    "log_level": "INFO",
}
