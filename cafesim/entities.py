# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# entities.py
# -----------------------------------------------------------------------------
# Purpose:
#   Value objects shared by the cafe model: lifecycle states for customers and
#   the chef, menu items, the Order record, and the planar movement helpers.
#
# Design notes:
#   - An Order is created once by its customer and then referenced (never
#     copied) by the chef, so progress flags set by either side are visible
#     to both.
#   - Points are plain (x, y) tuples; entities keep their own x/y floats.
#
# Usage:
#   from cafesim.entities import Order, CustomerState, move_towards
# -----------------------------------------------------------------------------

from __future__ import annotations
import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

Point = Tuple[float, float]


class CustomerState(Enum):
    ENTERING = "entering"
    WAITING_TO_ORDER = "waiting_to_order"
    ORDERING = "ordering"
    MOVING_TO_TABLE = "moving_to_table"
    SITTING = "sitting"
    EATING = "eating"
    LEAVING = "leaving"


class ChefState(Enum):
    IDLE = "idle"
    TAKING_ORDER = "taking_order"
    PREPARING_FOOD = "preparing_food"
    READY_TO_SERVE = "ready_to_serve"


@dataclass(frozen=True)
class FoodItem:
    name: str
    image: str = ""                  # sprite path, only meaningful to the renderer


@dataclass(eq=False)
class Order:
    customer_id: str
    food: FoodItem
    is_prepared: bool = False
    is_served: bool = False
    is_complete: bool = False        # set once the customer finishes eating

    @property
    def food_kind(self) -> str:
        return self.food.name

    def __setattr__(self, name, value):
        # customer_id is bound at creation and never re-pointed
        if name == "customer_id" and "customer_id" in self.__dict__:
            raise AttributeError("Order.customer_id cannot change after creation")
        super().__setattr__(name, value)


def distance(a: Point, b: Point) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def move_towards(pos: Point, target: Point, speed: float) -> Tuple[Point, bool]:
    """Advance `pos` one step of length `speed` toward `target`.

    Returns the new position and whether the target was reached. When the
    remaining distance is shorter than one step the position snaps exactly
    onto the target, so repeated calls never overshoot.
    """
    dx = target[0] - pos[0]
    dy = target[1] - pos[1]
    dist = math.hypot(dx, dy)
    if dist < speed:
        return (float(target[0]), float(target[1])), True
    ratio = speed / dist
    return (pos[0] + dx * ratio, pos[1] + dy * ratio), False
