# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# policies.py
# -----------------------------------------------------------------------------
# Purpose:
#   Small decision rules used by the orchestrator: chef bounds, serving
#   distance, exit detection, and the table-assignment retry cadence.
#
# Design notes:
#   - Keep pure functions to ease testing (inputs -> decision).
#
# Usage:
#   from cafesim.policies import clamp_to_canvas, within_serving_distance
# -----------------------------------------------------------------------------

from __future__ import annotations
from typing import Optional

from .entities import Point, distance


def clamp_to_canvas(pos: Point, cfg: dict) -> Point:
    """Keep a character's centre at least half a sprite away from every edge."""
    canvas = cfg["canvas"]
    sprites = cfg.get("sprites", {})
    half_w = sprites.get("character_width", 0) / 2.0
    half_h = sprites.get("character_height", 0) / 2.0
    x = max(half_w, min(canvas["width"] - half_w, pos[0]))
    y = max(half_h, min(canvas["height"] - half_h, pos[1]))
    return (x, y)


def within_serving_distance(chef_pos: Point, customer_pos: Point, cfg: dict) -> bool:
    return distance(chef_pos, customer_pos) <= cfg["chef"]["serving_distance"]


def has_exited(pos: Point, cfg: dict) -> bool:
    exit_pt = tuple(cfg["positions"]["customer_entry"])
    return distance(pos, exit_pt) <= cfg["customers"].get("exit_tolerance", 10.0)


def next_table_retry(attempt: int, cfg: dict) -> Optional[float]:
    """
    Delay (ms) before table-assignment attempt `attempt + 1`, or None once the
    retry budget is spent. Attempt 1 is the initial try after ordering.
    """
    timing = cfg["timing"]
    limit = int(timing.get("table_retry_limit", 0))
    if attempt > limit:
        return None
    return float(timing.get("table_retry_ms", 1000.0))
