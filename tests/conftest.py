"""Shared fixtures for the cafe simulation tests."""

from __future__ import annotations
import random

import pytest

from cafesim.clock import SimulationClock
from cafesim.config import apply_overrides, load_cfg
from cafesim.entities import CustomerState
from cafesim.simulation import CafeSimulation


class FixedRandom(random.Random):
    """Always picks the first menu entry."""
    def randrange(self, *args, **kwargs):
        return 0


@pytest.fixture
def cfg():
    return load_cfg()


@pytest.fixture
def quiet_cfg(cfg):
    # 100 ms ticks and no automatic spawns; tests add customers themselves
    return apply_overrides(cfg, {
        "sim": {"tick_ms": 100, "first_spawn_delay_ms": None},
        "timing": {"spawn_interval_ms": 10 ** 9},
    })


@pytest.fixture
def clock():
    return SimulationClock()


@pytest.fixture
def sim(quiet_cfg):
    return CafeSimulation(quiet_cfg, rng=FixedRandom())


def place_at_order_spot(sim, cust):
    cust.x, cust.y = sim.cfg["positions"]["customer_order"]
    return cust


def tick_until(sim, predicate, limit=2000, intent=None):
    """Tick until predicate() holds; returns the number of ticks taken."""
    for n in range(1, limit + 1):
        if intent is None:
            sim.tick()
        else:
            sim.tick(intent)
        if predicate():
            return n
    raise AssertionError(f"condition not reached within {limit} ticks")


def assert_seating_consistent(sim):
    for seat in sim.tables.seats:
        if seat.occupant is not None:
            assert seat.occupied
            assert seat.occupant.assigned_seat == seat.position
        else:
            assert not seat.occupied
    for cust in sim.customers:
        bound = [s for s in sim.tables.seats if s.occupant is cust]
        if cust.assigned_seat is None:
            assert bound == []
        else:
            assert len(bound) == 1 and bound[0].position == cust.assigned_seat
        assert isinstance(cust.state, CustomerState)
