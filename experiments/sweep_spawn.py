"""
experiments/sweep_spawn.py

Coordinate-ascent style search over the spawn interval and the number of
seats. Walks one decision dimension at a time while holding the other fixed,
scoring each candidate by coins per minute averaged across seeds, and prints a
ready-to-paste scenario block for the best configuration found.
"""

from __future__ import annotations
import copy, os, sys
from typing import Dict, List, Tuple
try:
    # When executed as a module: python -m experiments.sweep_spawn
    from .run_experiments import run_replications  # type: ignore
    from .scenarios import SCENARIOS  # type: ignore
except ImportError:  # pragma: no cover - fallback for "python file.py"
    ROOT = os.path.dirname(os.path.dirname(__file__))
    if ROOT not in sys.path:
        sys.path.insert(0, ROOT)
    from experiments.run_experiments import run_replications  # type: ignore
    from experiments.scenarios import SCENARIOS  # type: ignore

from cafesim.config import load_cfg, apply_overrides

# Spawn interval bounds (ms) and step.
SPAWN_RANGE = (3000, 12000)
SPAWN_STEP = 1000
# Candidate seat rows: seats are added left to right below the counter.
SEAT_LAYOUTS: List[List[List[int]]] = [
    [[80, 460]],
    [[80, 460], [160, 460]],
    [[80, 460], [160, 460], [120, 490]],
]
COORDINATE_PASSES = 2
SEARCH_ITERATIONS = 3
SEARCH_START_SEED = 100
SELECTED_SCENARIOS = ["baseline"]


def evaluate(cfg: Dict, iterations: int, start_seed: int) -> float:
    results = run_replications(cfg, iterations, start_seed)
    return sum(r.get("coins_per_minute", 0.0) for r in results) / len(results)


def _with_seats(cfg: Dict, layout: List[List[int]]) -> Dict:
    cand = copy.deepcopy(cfg)
    cand["seats"] = copy.deepcopy(layout)
    # one active customer per seat
    cand["customers"]["cap"] = len(layout)
    return cand


def coord_ascent(base_cfg: Dict, passes: int, iterations: int, start_seed: int) -> Tuple[float, Dict]:
    current = copy.deepcopy(base_cfg)
    best = evaluate(current, iterations, start_seed)
    for _ in range(passes):
        # Sweep spawn interval
        best_val = current["timing"]["spawn_interval_ms"]
        for val in range(SPAWN_RANGE[0], SPAWN_RANGE[1] + 1, SPAWN_STEP):
            cand = copy.deepcopy(current)
            cand["timing"]["spawn_interval_ms"] = val
            score = evaluate(cand, iterations, start_seed)
            if score > best:
                best, best_val = score, val
        current["timing"]["spawn_interval_ms"] = best_val

        # Sweep seat layouts
        best_layout = current["seats"]
        for layout in SEAT_LAYOUTS:
            cand = _with_seats(current, layout)
            score = evaluate(cand, iterations, start_seed)
            if score > best:
                best, best_layout = score, layout
        current = _with_seats(current, best_layout)
    return best, current


def format_as_scenario(name: str, cfg: Dict):
    """Emit a scenario block mirroring scenarios.py style."""
    print(f'{name.upper()} = {{')
    print(f'    "name": "{name}",')
    print('    "overrides": {')
    print(f'        "seats": {cfg["seats"]},')
    print('        "customers": {')
    print(f'            "cap": {cfg["customers"]["cap"]},')
    print("        },")
    print('        "timing": {')
    print(f'            "spawn_interval_ms": {cfg["timing"]["spawn_interval_ms"]},')
    print("        },")
    print("    },")
    print("}")


def search(
    passes: int = COORDINATE_PASSES,
    iterations: int = SEARCH_ITERATIONS,
    start_seed: int = SEARCH_START_SEED,
    scenario_names: List[str] = SELECTED_SCENARIOS,
):
    base = load_cfg()
    sc_index = {sc["name"]: sc for sc in SCENARIOS}
    targets = scenario_names or [sc["name"] for sc in SCENARIOS]
    for sc_name in targets:
        sc = sc_index.get(sc_name)
        if sc is None:
            print(f"[warn] scenario '{sc_name}' not found; skipping.")
            continue
        print(f"\n=== Searching scenario: {sc['name']} ===")
        base_cfg = apply_overrides(base, sc["overrides"])
        best, best_cfg = coord_ascent(base_cfg, passes, iterations, start_seed)
        print(f"  Best avg coins/minute (over {iterations} seeds): {best:.2f}")
        format_as_scenario(f"{sc['name']}_tuned", best_cfg)


if __name__ == "__main__":
    search()
