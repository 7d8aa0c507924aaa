# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# inputs.py
# -----------------------------------------------------------------------------
# Purpose:
#   Per-tick input from the player: directional intent for the chef plus an
#   optional manual-spawn trigger. Also expands recorded input scripts for
#   headless runs.
#
# Usage:
#   from cafesim.inputs import ChefIntent, intent_from_keys, expand_script
# -----------------------------------------------------------------------------

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Tuple


@dataclass(frozen=True)
class ChefIntent:
    up: bool = False
    down: bool = False
    left: bool = False
    right: bool = False
    spawn: bool = False

    def delta(self, speed: float) -> Tuple[float, float]:
        dx = (speed if self.right else 0.0) - (speed if self.left else 0.0)
        dy = (speed if self.down else 0.0) - (speed if self.up else 0.0)
        return dx, dy

    @property
    def moving(self) -> bool:
        return self.up or self.down or self.left or self.right


IDLE = ChefIntent()

KEYMAP = {"w": "up", "s": "down", "a": "left", "d": "right", " ": "spawn", "space": "spawn"}


def intent_from_keys(keys: Iterable[str]) -> ChefIntent:
    """Translate pressed keys (WASD in either case, space) into an intent."""
    flags: Dict[str, bool] = {}
    for key in keys:
        field_name = KEYMAP.get(key.lower())
        if field_name:
            flags[field_name] = True
    return ChefIntent(**flags)


def expand_script(steps: List[Dict]) -> Iterator[ChefIntent]:
    """
    Yield one intent per tick from recorded steps such as
    {"ticks": 58, "down": True}. A step without movement keys idles the chef.
    """
    for step in steps:
        ticks = int(step.get("ticks", 1))
        if ticks < 0:
            raise ValueError(f"negative tick count in input step {step}")
        intent = ChefIntent(
            up=bool(step.get("up", False)),
            down=bool(step.get("down", False)),
            left=bool(step.get("left", False)),
            right=bool(step.get("right", False)),
            spawn=bool(step.get("spawn", False)),
        )
        for _ in range(ticks):
            yield intent
