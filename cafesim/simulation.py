# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# simulation.py
# -----------------------------------------------------------------------------
# Purpose:
#   CafeSimulation owns every entity of one cafe session (chef, customers,
#   tables, clock, coins) and advances them one tick at a time.
#   run_session() plays a whole session headlessly and returns metrics.
#
# Design notes:
#   - One tick, in order: advance the clock and apply due pending actions,
#     move the chef from input, update customers, match orders, serve,
#     remove departed customers, spawn.
#   - Every mutation happens inside tick(); there are no background timers.
#     Seats and the chef's order slot are only written from these passes.
#
# Usage:
#   from cafesim.simulation import CafeSimulation, run_session
#   sim = CafeSimulation(cfg); sim.tick(ChefIntent(down=True))
#   results = run_session(cfg, expand_script(steps))
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
import math
import random
from collections import deque
from typing import Deque, Dict, Iterable, List, Optional

from .chef import Chef
from .clock import PendingAction, SimulationClock
from .config import menu_items, validate_cfg
from .customers import Customer
from .entities import ChefState, CustomerState
from .inputs import IDLE, ChefIntent
from .metrics import Metrics
from .policies import clamp_to_canvas, has_exited, next_table_retry, within_serving_distance
from .snapshot import CafeSnapshot, chef_view, customer_view, seat_view
from .spawning import Spawner
from .tables import make_tables

logger = logging.getLogger(__name__)


class CafeSimulation:
    def __init__(self, cfg: Dict, clock: SimulationClock | None = None, rng: random.Random | None = None):
        validate_cfg(cfg)
        self.cfg = cfg
        self.clock = clock or SimulationClock()
        self.rng = rng or random.Random(cfg["sim"].get("seed", 0))
        self.tick_ms = float(cfg["sim"]["tick_ms"])
        self.menu = menu_items(cfg)
        self.reward = int(cfg["economy"].get("coin_per_delivery", 1))

        self.chef = Chef.from_cfg(cfg)
        self.customers: List[Customer] = []
        self.tables = make_tables(cfg)
        self.spawner = Spawner(cfg, start=self.clock.now)
        self.M = Metrics(cfg)
        self.coins = 0
        self.ticks = 0
        # customers whose table retries ran out, oldest first
        self.stranded: Deque[Customer] = deque()

        first = cfg["sim"].get("first_spawn_delay_ms")
        if first is not None:
            self.clock.schedule(first, "first_spawn")

    @property
    def now(self) -> float:
        return self.clock.now

    # ------------------------------------------------------------------ tick
    def tick(self, intent: ChefIntent = IDLE, dt: Optional[float] = None):
        self.clock.advance(self.tick_ms if dt is None else dt)
        for act in self.clock.pop_due():
            self._on_action(act)
        self._move_chef(intent)
        if intent.spawn:
            self.spawn_customer()
        self._update_customers()
        self._match_orders()
        self._serve()
        self._remove_departed()
        if self.spawner.is_due(self.now):
            self.spawn_customer()
        self.ticks += 1

    def run(self, ticks: int, inputs: Iterable[ChefIntent] | None = None):
        """Run `ticks` ticks, feeding one intent per tick (IDLE once inputs run out)."""
        it = iter(inputs) if inputs is not None else iter(())
        for _ in range(ticks):
            self.tick(next(it, IDLE))

    # --------------------------------------------------------------- actions
    def _on_action(self, act: PendingAction):
        if act.kind == "first_spawn":
            self.spawn_customer()
        elif act.kind in ("chef_prepare", "chef_ready"):
            self.chef.handle_timer(act.kind, act.data["order"], self.clock)
        elif act.kind == "assign_table":
            self._try_assign(act.data["customer"], act.data["attempt"])
        else:
            logger.warning("unknown pending action %r dropped", act.kind)

    def _try_assign(self, cust: Customer, attempt: int):
        if not self._is_active(cust) or cust.state is not CustomerState.ORDERING:
            return
        if self.tables.assign(cust):
            self.M.note_seated(cust, self.now)
            logger.info("%s moving to table", cust.id)
            return
        self.M.note_seat_failure(cust, self.now)
        delay = next_table_retry(attempt, self.cfg)
        if delay is None:
            self.stranded.append(cust)
            self.M.note_stranded(cust, self.now)
            logger.info("no table for %s after %d attempts; waiting for a seat to free up", cust.id, attempt)
        else:
            logger.debug("no table available for %s (attempt %d)", cust.id, attempt)
            self.clock.schedule(delay, "assign_table", {"customer": cust, "attempt": attempt + 1})

    def _seat_stranded(self):
        while self.stranded and self.tables.free_count() > 0:
            cust = self.stranded.popleft()
            if self._is_active(cust) and cust.state is CustomerState.ORDERING:
                if self.tables.assign(cust):
                    self.M.note_seated(cust, self.now)

    def _is_active(self, cust: Customer) -> bool:
        return any(c is cust for c in self.customers)

    # ---------------------------------------------------------------- passes
    def _move_chef(self, intent: ChefIntent):
        dx, dy = intent.delta(self.cfg["chef"]["speed"])
        self.chef.move(dx, dy)
        self.chef.x, self.chef.y = clamp_to_canvas(self.chef.position, self.cfg)
        if intent.moving:
            logger.debug("chef moved to (%.0f, %.0f)", self.chef.x, self.chef.y)

    def _update_customers(self):
        for cust in reversed(self.customers):
            cust.update(self.now, self.cfg)

    def _match_orders(self):
        for cust in self.customers:
            if cust.state is not CustomerState.WAITING_TO_ORDER:
                continue
            if self.chef.state is not ChefState.IDLE or self.chef.current_order is not None:
                break
            order = cust.place_order(self.menu, self.rng)
            self.chef.take_order(order, self.clock)
            cust.begin_ordering(self.now)
            self.M.note_order(cust, self.now)
            logger.info("%s ordered %s", cust.id, order.food_kind)
            self.clock.schedule(
                self.cfg["timing"].get("table_assign_delay_ms", 1500.0),
                "assign_table", {"customer": cust, "attempt": 1},
            )

    def _serve(self):
        chef = self.chef
        for cust in self.customers:
            if cust.state is not CustomerState.SITTING or chef.state is not ChefState.READY_TO_SERVE:
                continue
            if chef.current_order is None or chef.current_order.customer_id != cust.id:
                continue
            if not within_serving_distance(chef.position, cust.position, self.cfg):
                continue
            if chef.serve_food(cust, self.now):
                self.coins += self.reward
                self.M.note_delivery(cust, self.coins, self.now)
                logger.info("served %s! coins: %d", cust.id, self.coins)

    def _remove_departed(self):
        freed = 0
        for i in range(len(self.customers) - 1, -1, -1):
            cust = self.customers[i]
            if cust.state is CustomerState.LEAVING and has_exited(cust.position, self.cfg):
                freed += self.tables.release(cust)
                del self.customers[i]
                self.M.note_departure(cust, self.now)
                logger.info("%s has left the cafe", cust.id)
        if freed:
            self._seat_stranded()

    def spawn_customer(self) -> Optional[Customer]:
        cust = self.spawner.try_spawn(self.customers, self.now)
        if cust is not None:
            self.M.note_spawn(cust, self.now)
        return cust

    # --------------------------------------------------------------- queries
    def customer(self, cid: str) -> Optional[Customer]:
        for cust in self.customers:
            if cust.id == cid:
                return cust
        return None

    def snapshot(self) -> CafeSnapshot:
        return CafeSnapshot(
            time_ms=self.now,
            coins=self.coins,
            chef=chef_view(self.chef),
            customers=tuple(customer_view(c) for c in self.customers),
            seats=tuple(seat_view(s) for s in self.tables.seats),
        )

    def summary(self) -> Dict:
        return self.M.summary(self.now)


def run_session(cfg: Dict, inputs: Iterable[ChefIntent] | None = None) -> Dict:
    """Play `sim.session_minutes` of simulated time and return the metrics summary."""
    sim = CafeSimulation(cfg)
    ticks = int(math.ceil(cfg["sim"]["session_minutes"] * 60000.0 / sim.tick_ms))
    sim.run(ticks, inputs)
    return sim.summary()
