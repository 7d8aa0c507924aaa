# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# config.py
# -----------------------------------------------------------------------------
# Purpose:
#   Load the YAML cafe configuration, merge scenario overrides and check the
#   values the simulation relies on.
#
# Design notes:
#   - The config stays a plain nested dict, read with cfg["section"]["key"]
#     and .get() for optional keys. The simulation never mutates it.
#
# Usage:
#   from cafesim.config import load_cfg, apply_overrides
#   cfg = apply_overrides(load_cfg(), {"timing": {"eating_ms": 5000}})
# -----------------------------------------------------------------------------

from __future__ import annotations
import copy, os
from typing import Dict, List

import yaml

from .entities import FoodItem

DEFAULT_CFG_PATH = os.path.join(os.path.dirname(__file__), "data", "baseline.yaml")

REQUIRED_SECTIONS = ("sim", "canvas", "positions", "seats", "menu", "timing", "customers", "chef", "economy")
REQUIRED_POSITIONS = ("chef_station", "customer_order", "customer_entry")


def load_cfg(path: str | None = None) -> Dict:
    with open(path or DEFAULT_CFG_PATH, "r") as f:
        cfg = yaml.safe_load(f)
    validate_cfg(cfg)
    return cfg


def apply_overrides(cfg: Dict, overrides: Dict) -> Dict:
    """Apply scenario overrides (recursive merge) on top of the base config."""
    new = copy.deepcopy(cfg)

    def _merge(dst: Dict, src: Dict):
        for key, val in src.items():
            if isinstance(val, dict) and isinstance(dst.get(key), dict):
                _merge(dst[key], val)
            else:
                dst[key] = copy.deepcopy(val)

    _merge(new, overrides)
    return new


def validate_cfg(cfg: Dict):
    """Raise ValueError naming the first missing or out-of-range setting."""
    if not isinstance(cfg, dict):
        raise ValueError("config must be a mapping")
    for section in REQUIRED_SECTIONS:
        if section not in cfg:
            raise ValueError(f"config is missing section '{section}'")
    for name in REQUIRED_POSITIONS:
        pos = cfg["positions"].get(name)
        if pos is None or len(pos) != 2:
            raise ValueError(f"positions.{name} must be an [x, y] pair")
    if not cfg["seats"]:
        raise ValueError("seats must list at least one seat position")
    if not cfg["menu"]:
        raise ValueError("menu must list at least one food item")
    for section in ("customers", "chef"):
        if cfg[section].get("speed", 0) <= 0:
            raise ValueError(f"{section}.speed must be positive")
    if cfg["chef"].get("serving_distance", -1) < 0:
        raise ValueError("chef.serving_distance must not be negative")
    if cfg["sim"].get("tick_ms", 0) <= 0:
        raise ValueError("sim.tick_ms must be positive")
    if int(cfg["customers"].get("cap", 0)) < 1:
        raise ValueError("customers.cap must be at least 1")
    for key, val in cfg["timing"].items():
        if val is not None and val < 0:
            raise ValueError(f"timing.{key} must not be negative")
    if "eating_ms" not in cfg["timing"] or "spawn_interval_ms" not in cfg["timing"]:
        raise ValueError("timing needs eating_ms and spawn_interval_ms")


def menu_items(cfg: Dict) -> List[FoodItem]:
    """Menu entries as FoodItem; bare strings are accepted as names."""
    items = []
    for entry in cfg["menu"]:
        if isinstance(entry, str):
            items.append(FoodItem(entry))
        else:
            items.append(FoodItem(entry["name"], entry.get("image", "")))
    return items
