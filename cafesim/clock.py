# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# clock.py
# -----------------------------------------------------------------------------
# Purpose:
#   Simulation clock plus the list of pending (time-stamped) actions that
#   replace fire-and-forget timers: chef acknowledgment/preparation delays,
#   table-assignment attempts and the first customer spawn.
#
# Design notes:
#   - Time only moves when the tick loop calls advance(); nothing fires on its
#     own. The orchestrator pops due actions at the start of each tick, so a
#     delayed effect always happens inside a regular tick.
#   - Actions due at the same instant pop in scheduling order (seq tie-break).
#   - There is no cancel(): an action, once scheduled, is always delivered.
#     Handlers are expected to ignore actions that have gone stale.
#
# Usage:
#   from cafesim.clock import SimulationClock
#   clock.schedule(500, "chef_prepare", {"order": order})
# -----------------------------------------------------------------------------

from __future__ import annotations
import heapq
from typing import List


class PendingAction:
    """Minimal pending-action record for the clock's heap."""
    __slots__ = ("t", "seq", "kind", "data")
    def __init__(self, t: float, seq: int, kind: str, data: dict):
        self.t = t; self.seq = seq; self.kind = kind; self.data = data
    def __lt__(self, other: "PendingAction"):
        return (self.t, self.seq) < (other.t, other.seq)
    def __repr__(self):
        return f"PendingAction(t={self.t:.1f}, kind={self.kind!r})"


class SimulationClock:
    """Simulated time in milliseconds and the heap of pending actions.

    Attributes
    ----------
    now : float
        Current simulation time (ms). Starts at `start`.
    pending : list[PendingAction]
        Min-heap ordered by (due time, scheduling order).
    """
    def __init__(self, start: float = 0.0):
        self.now: float = float(start)
        self.pending: List[PendingAction] = []
        self._seq = 0

    def advance(self, dt: float) -> float:
        if dt < 0:
            raise ValueError(f"clock cannot run backwards (dt={dt})")
        self.now += dt
        return self.now

    def schedule(self, delay: float, kind: str, data: dict | None = None) -> PendingAction:
        """Register `kind` to become due `delay` ms from now."""
        self._seq += 1
        act = PendingAction(self.now + max(0.0, delay), self._seq, kind, data or {})
        heapq.heappush(self.pending, act)
        return act

    def pop_due(self) -> List[PendingAction]:
        """Remove and return every action whose due time is <= now, in order."""
        due: List[PendingAction] = []
        while self.pending and self.pending[0].t <= self.now:
            due.append(heapq.heappop(self.pending))
        return due

    def __len__(self):
        return len(self.pending)
