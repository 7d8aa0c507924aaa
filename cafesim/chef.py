# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# chef.py
# -----------------------------------------------------------------------------
# Purpose:
#   The player-controlled chef and its order lifecycle:
#   IDLE -> TAKING_ORDER -> PREPARING_FOOD -> READY_TO_SERVE -> IDLE.
#
# Design notes:
#   - take_order() schedules "chef_prepare" on the simulation clock; when it
#     fires, handle_timer() moves to PREPARING_FOOD and chains "chef_ready".
#     Both actions carry the order they were scheduled for and are ignored if
#     the chef is no longer bound to that order.
#   - Rejections (busy chef, wrong customer) are plain False returns.
#
# Usage:
#   from cafesim.chef import Chef
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from .entities import ChefState, Order, Point

if TYPE_CHECKING:
    from .clock import SimulationClock
    from .customers import Customer

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Chef:
    x: float
    y: float
    state: ChefState = ChefState.IDLE
    current_order: Optional[Order] = None
    order_ack_ms: float = 500.0
    prep_ms: float = 1000.0

    @classmethod
    def from_cfg(cls, cfg: dict) -> "Chef":
        x, y = cfg["positions"]["chef_station"]
        timing = cfg["timing"]
        return cls(
            float(x), float(y),
            order_ack_ms=timing.get("order_ack_ms", 500.0),
            prep_ms=timing.get("prep_ms", 1000.0),
        )

    @property
    def position(self) -> Point:
        return (self.x, self.y)

    def take_order(self, order: Order, clock: "SimulationClock") -> bool:
        if self.state is not ChefState.IDLE or self.current_order is not None:
            logger.debug("chef busy (%s); order for %s refused", self.state.value, order.customer_id)
            return False
        self.current_order = order
        self.state = ChefState.TAKING_ORDER
        clock.schedule(self.order_ack_ms, "chef_prepare", {"order": order})
        return True

    def handle_timer(self, kind: str, order: Order, clock: "SimulationClock"):
        """Apply a deferred transition scheduled by take_order()."""
        if order is not self.current_order:
            logger.debug("stale %s timer for %s ignored", kind, order.customer_id)
            return
        if kind == "chef_prepare" and self.state is ChefState.TAKING_ORDER:
            self.state = ChefState.PREPARING_FOOD
            clock.schedule(self.prep_ms, "chef_ready", {"order": order})
        elif kind == "chef_ready" and self.state is ChefState.PREPARING_FOOD:
            self.state = ChefState.READY_TO_SERVE
            order.is_prepared = True
            logger.info("%s is ready for %s", order.food_kind, order.customer_id)

    def serve_food(self, customer: "Customer", now: float) -> bool:
        order = self.current_order
        if order is None or order.customer_id != customer.id:
            return False
        order.is_served = True
        customer.start_eating(now)
        self.current_order = None
        self.state = ChefState.IDLE
        return True

    def move(self, dx: float, dy: float):
        self.x += dx
        self.y += dy
