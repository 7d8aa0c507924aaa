# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# snapshot.py
# -----------------------------------------------------------------------------
# Purpose:
#   Read-only views of the cafe handed to the render collaborator once per
#   frame. Views are frozen copies; drawing code never touches live entities.
#
# Usage:
#   snap = sim.snapshot(); for c in snap.customers: ...
# -----------------------------------------------------------------------------

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple

from .entities import ChefState, CustomerState, Point


@dataclass(frozen=True)
class ChefView:
    position: Point
    state: ChefState
    carrying: Optional[str]          # food kind shown at prep station / in hands


@dataclass(frozen=True)
class CustomerView:
    id: str
    position: Point
    state: CustomerState
    appearance: str
    order_icon: Optional[str]        # food kind shown above the customer


@dataclass(frozen=True)
class SeatView:
    index: int
    position: Point
    occupied: bool
    occupant_id: Optional[str]


@dataclass(frozen=True)
class CafeSnapshot:
    time_ms: float
    coins: int
    chef: ChefView
    customers: Tuple[CustomerView, ...]
    seats: Tuple[SeatView, ...]


def chef_view(chef) -> ChefView:
    carrying = None
    if chef.current_order is not None and chef.state in (ChefState.PREPARING_FOOD, ChefState.READY_TO_SERVE):
        carrying = chef.current_order.food_kind
    return ChefView(chef.position, chef.state, carrying)


def customer_view(cust) -> CustomerView:
    icon = None
    order = cust.order
    if order is not None and not order.is_complete and cust.state in (
        CustomerState.WAITING_TO_ORDER, CustomerState.EATING
    ):
        icon = order.food_kind
    return CustomerView(cust.id, cust.position, cust.state, cust.appearance, icon)


def seat_view(seat) -> SeatView:
    occupant = seat.occupant.id if seat.occupant is not None else None
    return SeatView(seat.index, seat.position, seat.occupied, occupant)
