# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# tables.py
# -----------------------------------------------------------------------------
# Purpose:
#   Fixed set of seats and the registry that binds customers to them.
#
# Design notes:
#   - The registry is the only writer of seat occupancy and of a customer's
#     assigned_seat, which keeps the two sides of the binding consistent:
#     seat.occupant is customer  <=>  customer.assigned_seat == seat.position
#     and seat.occupied.
#   - There is no reservation queue. A failed assign() changes nothing; the
#     caller decides when to retry.
#   - A customer holds at most one seat: assign() refuses (returns False) a
#     customer who is already bound to a seat.
#
# Usage:
#   from cafesim.tables import make_tables
#   tables = make_tables(cfg)
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import List, Optional, TYPE_CHECKING

from .entities import CustomerState, Point

if TYPE_CHECKING:
    from .customers import Customer

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Seat:
    index: int
    position: Point
    occupied: bool = False
    occupant: Optional["Customer"] = None


class TableRegistry:
    """Seats scanned in a fixed order (seat 1 first)."""
    def __init__(self, positions: List[Point]):
        self.seats: List[Seat] = [
            Seat(i + 1, (float(p[0]), float(p[1]))) for i, p in enumerate(positions)
        ]

    def __len__(self):
        return len(self.seats)

    def free_count(self) -> int:
        return sum(1 for s in self.seats if not s.occupied)

    def seat_of(self, customer: "Customer") -> Optional[Seat]:
        for seat in self.seats:
            if seat.occupant is customer:
                return seat
        return None

    def assign(self, customer: "Customer") -> bool:
        """Bind the first free seat to `customer`; False if every seat is taken."""
        if self.seat_of(customer) is not None:
            return False
        for seat in self.seats:
            if not seat.occupied:
                seat.occupied = True
                seat.occupant = customer
                customer.assigned_seat = seat.position
                customer.state = CustomerState.MOVING_TO_TABLE
                logger.info("%s assigned to seat %d", customer.id, seat.index)
                return True
        return False

    def release(self, customer: "Customer") -> int:
        """Free every seat bound to `customer`. Returns the number freed (0 is fine)."""
        freed = 0
        for seat in self.seats:
            if seat.occupant is customer:
                seat.occupied = False
                seat.occupant = None
                freed += 1
                logger.info("seat %d is now available", seat.index)
        if freed:
            customer.assigned_seat = None
        return freed


def make_tables(cfg: dict) -> TableRegistry:
    """Build the registry from `cfg["seats"]`, a list of [x, y] pairs in scan order."""
    return TableRegistry([tuple(p) for p in cfg["seats"]])
