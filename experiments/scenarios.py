"""
experiments/scenarios.py

Holds scenario definitions (config overrides) to replay during experiments.
Add layout, timing and capacity variations here.
"""

from __future__ import annotations

BASELINE = {
    "name": "baseline",
    "overrides": {},  # override config keys here per scenario
}

RUSH_HOUR = {
    "name": "rush_hour",
    "overrides": {
        "timing": {
            "spawn_interval_ms": 4000,
        },
    },
}

SLOW_KITCHEN = {
    "name": "slow_kitchen",
    "overrides": {
        "timing": {
            "order_ack_ms": 1500,
            "prep_ms": 4000,
        },
    },
}

# A third seat below the pair, with a matching cap.
THREE_SEATS = {
    "name": "three_seats",
    "overrides": {
        "seats": [[80, 460], [160, 460], [120, 490]],
        "customers": {
            "cap": 3,
        },
        "timing": {
            "spawn_interval_ms": 6000,
        },
    },
}

# More customers than seats: exercises the table retry path.
OVERBOOKED = {
    "name": "overbooked",
    "overrides": {
        "customers": {
            "cap": 3,
        },
        "timing": {
            "spawn_interval_ms": 3000,
            "eating_ms": 8000,
        },
    },
}

SCENARIOS = [BASELINE, RUSH_HOUR, SLOW_KITCHEN, THREE_SEATS, OVERBOOKED]
