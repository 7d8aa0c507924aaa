# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# spawning.py
# -----------------------------------------------------------------------------
# Purpose:
#   Create customers at the entry point: stable ids (c1, c2, ...), cycling
#   appearances, the active-customer cap and the spawn interval.
#
# Design notes:
#   - A spawn refused by the cap does not reset last_spawn, so the next
#     customer walks in on the first tick after a departure once the interval
#     has already elapsed.
#
# Usage:
#   spawner = Spawner(cfg)
#   if spawner.is_due(clock.now): spawner.try_spawn(customers, clock.now)
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
from typing import List, Optional

from .customers import Customer

logger = logging.getLogger(__name__)


class Spawner:
    def __init__(self, cfg: dict, start: float = 0.0):
        cust_cfg = cfg["customers"]
        self.cap = int(cust_cfg.get("cap", 2))
        self.appearances: List[str] = list(cust_cfg.get("appearances", [])) or [""]
        self.entry = tuple(cfg["positions"]["customer_entry"])
        self.interval = float(cfg["timing"]["spawn_interval_ms"])
        self.counter = 1
        self.last_spawn = start

    def next_appearance(self) -> str:
        return self.appearances[(self.counter - 1) % len(self.appearances)]

    def is_due(self, now: float) -> bool:
        return now - self.last_spawn > self.interval

    def try_spawn(self, customers: List[Customer], now: float) -> Optional[Customer]:
        """Append a new customer at the entry point unless the cap is reached."""
        if len(customers) >= self.cap:
            return None
        cust = Customer(
            f"c{self.counter}",
            float(self.entry[0]),
            float(self.entry[1]),
            appearance=self.next_appearance(),
            spawned_at=now,
        )
        customers.append(cust)
        self.counter += 1
        self.last_spawn = now
        logger.info("customer %s spawned", cust.id)
        return cust
