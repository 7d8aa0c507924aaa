# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# customers.py
# -----------------------------------------------------------------------------
# Purpose:
#   Customer record and its per-tick state machine:
#   ENTERING -> WAITING_TO_ORDER -> ORDERING -> MOVING_TO_TABLE -> SITTING
#   -> EATING -> LEAVING.
#
# Design notes:
#   - update() only performs the local transitions (arrivals and the end of
#     the eating period). WAITING_TO_ORDER -> ORDERING, ORDERING ->
#     MOVING_TO_TABLE and SITTING -> EATING are driven by the orchestrator,
#     the table registry and the chef respectively.
#   - A LEAVING customer keeps walking to the entry point; removal is decided
#     by the orchestrator.
#
# Usage:
#   from cafesim.customers import Customer
# -----------------------------------------------------------------------------

from __future__ import annotations
import random
from dataclasses import dataclass
from typing import Optional, Sequence

from .entities import CustomerState, FoodItem, Order, Point, distance, move_towards


@dataclass(eq=False)
class Customer:
    id: str
    x: float
    y: float
    appearance: str = ""
    spawned_at: float = 0.0

    target_x: float = 0.0
    target_y: float = 0.0
    state: CustomerState = CustomerState.ENTERING
    order: Optional[Order] = None
    assigned_seat: Optional[Point] = None
    eating_started_at: Optional[float] = None

    # timestamps for metrics
    t_waiting: Optional[float] = None
    t_ordered: Optional[float] = None
    t_served: Optional[float] = None

    def __post_init__(self):
        self.target_x, self.target_y = self.x, self.y

    @property
    def position(self) -> Point:
        return (self.x, self.y)

    def place_order(self, menu: Sequence[FoodItem], rng: random.Random | None = None) -> Order:
        """Pick one menu item uniformly at random and bind a new Order to this customer."""
        if self.order is not None and not self.order.is_complete:
            raise RuntimeError(f"customer {self.id} already holds an uncompleted order")
        if not menu:
            raise ValueError("menu is empty")
        rng = rng or random
        food = menu[rng.randrange(len(menu))]
        self.order = Order(self.id, food)
        return self.order

    def move_towards(self, target: Point, speed: float) -> bool:
        self.target_x, self.target_y = target
        (self.x, self.y), arrived = move_towards(self.position, target, speed)
        return arrived

    def has_reached_target(self, epsilon: float) -> bool:
        return distance(self.position, (self.target_x, self.target_y)) < epsilon

    def begin_ordering(self, now: float):
        self.state = CustomerState.ORDERING
        self.t_ordered = now

    def start_eating(self, now: float):
        self.state = CustomerState.EATING
        self.eating_started_at = now
        self.t_served = now

    def is_done_eating(self, now: float, eating_ms: float) -> bool:
        if self.state is not CustomerState.EATING or self.eating_started_at is None:
            return False
        return now - self.eating_started_at >= eating_ms

    def update(self, now: float, cfg: dict):
        """Advance this customer's local transitions by one tick."""
        speed = cfg["customers"]["speed"]
        eps = cfg["customers"].get("arrival_epsilon", 5.0)

        if self.state is CustomerState.ENTERING:
            spot = tuple(cfg["positions"]["customer_order"])
            arrived = self.move_towards(spot, speed)
            if arrived or self.has_reached_target(eps):
                self.state = CustomerState.WAITING_TO_ORDER
                self.t_waiting = now

        elif self.state is CustomerState.MOVING_TO_TABLE:
            if self.assigned_seat is not None:
                arrived = self.move_towards(self.assigned_seat, speed)
                if arrived or self.has_reached_target(eps):
                    self.state = CustomerState.SITTING

        elif self.state is CustomerState.EATING:
            if self.is_done_eating(now, cfg["timing"]["eating_ms"]):
                self.state = CustomerState.LEAVING
                if self.order is not None:
                    self.order.is_complete = True

        elif self.state is CustomerState.LEAVING:
            self.move_towards(tuple(cfg["positions"]["customer_entry"]), speed)
