# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# metrics.py
# -----------------------------------------------------------------------------
# Purpose:
#   Collect and summarize session KPIs: customers through the door, orders,
#   seatings, deliveries, coins, waits and a coin time series.
#
# Design notes:
#   - Keep side-effect methods (note_*) for instrumentation from the
#     orchestrator; the simulation itself owns the coin counter.
#   - Summaries return JSON-serializable dicts for easy tabulation.
#
# Usage:
#   M = Metrics(cfg); M.summary(now)
# -----------------------------------------------------------------------------

from __future__ import annotations
from collections import defaultdict
from typing import Dict, List


class Metrics:
    def __init__(self, cfg: dict):
        self.cfg = cfg
        self.spawned = 0
        self.orders_taken = 0
        self.seatings = 0
        self.seat_failures = 0
        self.stranded = 0
        self.deliveries = 0
        self.departures = 0
        self.coins = 0
        self.food_counts = defaultdict(int)      # orders per menu item
        self.served_waits: List[float] = []      # spawn -> served, ms
        self.order_spot_waits: List[float] = []  # reached order spot -> ordered, ms
        self.time_series: List[Dict[str, float]] = []

    def note_spawn(self, customer, t: float):
        self.spawned += 1

    def note_order(self, customer, t: float):
        self.orders_taken += 1
        if customer.order is not None:
            self.food_counts[customer.order.food_kind] += 1
        if customer.t_waiting is not None:
            self.order_spot_waits.append(max(t - customer.t_waiting, 0.0))

    def note_seated(self, customer, t: float):
        self.seatings += 1

    def note_seat_failure(self, customer, t: float):
        self.seat_failures += 1

    def note_stranded(self, customer, t: float):
        self.stranded += 1

    def note_delivery(self, customer, coins: int, t: float):
        self.deliveries += 1
        self.coins = coins
        self.served_waits.append(max(t - customer.spawned_at, 0.0))
        self._record_time_series(t)

    def note_departure(self, customer, t: float):
        self.departures += 1

    def _record_time_series(self, t: float):
        """Cumulative point (coins, deliveries) at time t for plotting."""
        self.time_series.append({
            "time_seconds": t / 1000.0,
            "coins_total": self.coins,
            "deliveries_total": self.deliveries,
        })

    @staticmethod
    def _mean_seconds(samples: List[float]) -> float:
        return (sum(samples) / len(samples) / 1000.0) if samples else 0.0

    def summary(self, now: float) -> Dict:
        minutes = now / 60000.0
        return {
            "session_minutes": minutes,
            "customers_spawned": self.spawned,
            "orders_taken": self.orders_taken,
            "seatings": self.seatings,
            "seat_failures": self.seat_failures,
            "stranded_customers": self.stranded,
            "deliveries": self.deliveries,
            "departures": self.departures,
            "coins": self.coins,
            "coins_per_minute": (self.coins / minutes) if minutes > 0 else 0.0,
            "orders_by_food": dict(self.food_counts),
            "avg_spawn_to_served_seconds": self._mean_seconds(self.served_waits),
            "avg_order_spot_wait_seconds": self._mean_seconds(self.order_spot_waits),
            "time_series": list(self.time_series),
        }
