"""
experiments/run_experiments.py

Experiment harness that loads the baseline config, applies scenario overrides,
replays the recorded chef input script over several seeded sessions, and
reports KPIs with confidence intervals. A coins-over-time plot is written per
scenario so layouts and timings can be compared at a glance.
"""

from __future__ import annotations
import argparse, copy, logging, math, os, sys
from typing import Dict, List, Callable
from scipy import stats
from statistics import mean, stdev
try:
    # When executed as a module: python -m experiments.run_experiments
    from .scenarios import SCENARIOS  # type: ignore
except ImportError:  # pragma: no cover
    # When run as a script in VSCode/terminal
    ROOT = os.path.dirname(os.path.dirname(__file__))
    if ROOT not in sys.path:
        sys.path.insert(0, ROOT)
    from experiments.scenarios import SCENARIOS  # type: ignore

from cafesim.config import load_cfg, apply_overrides
from cafesim.inputs import expand_script
from cafesim.simulation import run_session

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def mean_ci(values: List[float], confidence_level: float) -> tuple[float, float]:
    """Return (mean, half-width) using a t-distribution critical value with df = n-1."""
    if not values:
        return 0.0, 0.0
    mu = mean(values)
    n = len(values)
    if n < 2:
        return mu, 0.0
    level = min(max(confidence_level, 0.0), 0.999999)
    alpha = 1.0 - level
    tcrit = stats.t.ppf(1 - alpha / 2.0, n - 1)
    half = tcrit * (stdev(values) / math.sqrt(n))
    return mu, half


def series(results: List[Dict], getter: Callable[[Dict], float]) -> List[float]:
    return [float(getter(r)) for r in results]


def run_replications(cfg: Dict, replications: int, base_seed: int) -> List[Dict]:
    """Replay the configured input script once per seed."""
    steps = cfg.get("experiments", {}).get("script", [])
    results = []
    for rep in range(replications):
        run_cfg = copy.deepcopy(cfg)
        run_cfg["sim"]["seed"] = base_seed + rep
        res = run_session(run_cfg, expand_script(steps))
        res["seed"] = run_cfg["sim"]["seed"]
        results.append(res)
    return results


def coins_on_grid(results: List[Dict], session_seconds: float, interval_seconds: float) -> List[Dict[str, float]]:
    """
    Average cumulative coins across replications on a fixed time grid. Each
    replication's series is a step function, so the value at a grid point is
    the last recorded total at or before it.
    """
    if not results:
        return []
    if interval_seconds <= 0:
        interval_seconds = 15.0
    n_points = int(math.ceil(session_seconds / interval_seconds)) + 1
    grid = [i * interval_seconds for i in range(n_points)]
    out = []
    for t in grid:
        totals = []
        for res in results:
            val = 0.0
            for pt in res.get("time_series", []):
                if pt["time_seconds"] > t:
                    break
                val = pt["coins_total"]
            totals.append(val)
        out.append({"time_seconds": t, "coins_total": sum(totals) / len(totals)})
    return out


def plot_coins(curves: List[Dict], out_name: str = "coins_by_time.png"):
    """
    Persist a PNG with one cumulative-coins curve per scenario.
    """
    if not curves:
        return None
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
    plt.figure(figsize=(9, 5))
    for entry in curves:
        pts = entry.get("series", [])
        if not pts:
            continue
        x = [pt["time_seconds"] for pt in pts]
        y = [pt["coins_total"] for pt in pts]
        plt.step(x, y, where="post", linewidth=1.5, label=entry.get("name", "scenario"))
    plt.xlabel("Time (seconds)")
    plt.ylabel("Coins earned (mean over replications)")
    plt.title("Coins over time across scenarios")
    plt.grid(True, linestyle="--", alpha=0.4)
    plt.legend()
    out_dir = os.path.join(ROOT, "experiments", "output")
    os.makedirs(out_dir, exist_ok=True)
    out_path = os.path.join(out_dir, out_name)
    plt.tight_layout()
    plt.savefig(out_path, dpi=160)
    plt.close()
    return out_path


def main(argv: List[str] | None = None):
    """Entry point: drive all scenarios and replications, then report KPIs."""
    parser = argparse.ArgumentParser(description="Replay cafe sessions across scenarios.")
    parser.add_argument("--config", default=None, help="YAML config (defaults to the packaged baseline)")
    parser.add_argument("--scenario", action="append", help="run only the named scenario(s)")
    parser.add_argument("--no-plot", action="store_true", help="skip the matplotlib figure")
    parser.add_argument("-v", "--verbose", action="store_true", help="log simulation events")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING, format="%(message)s")

    cfg = load_cfg(args.config)
    exp_cfg = cfg.get("experiments", {})
    replications = max(1, int(exp_cfg.get("replications", 1)))
    confidence = float(exp_cfg.get("confidence_level", 0.95))
    interval_seconds = float(exp_cfg.get("time_series_interval_seconds", 15.0))
    level_pct = confidence * 100.0
    default_seed = cfg["sim"].get("seed", 0)

    selected = [sc for sc in SCENARIOS if not args.scenario or sc["name"] in args.scenario]
    if args.scenario:
        known = {sc["name"] for sc in SCENARIOS}
        for name in args.scenario:
            if name not in known:
                print(f"[warn] scenario '{name}' not found; skipping.")

    curves = []
    for sc in selected:
        sc_cfg = apply_overrides(cfg, sc["overrides"])
        seed = sc_cfg["sim"].get("seed", default_seed)
        results = run_replications(sc_cfg, replications, seed)

        coins = mean_ci(series(results, lambda r: r.get("coins", 0)), confidence)
        cpm = mean_ci(series(results, lambda r: r.get("coins_per_minute", 0.0)), confidence)
        spawned = mean_ci(series(results, lambda r: r.get("customers_spawned", 0)), confidence)
        served_wait = mean_ci(series(results, lambda r: r.get("avg_spawn_to_served_seconds", 0.0)), confidence)
        spot_wait = mean_ci(series(results, lambda r: r.get("avg_order_spot_wait_seconds", 0.0)), confidence)
        failures = mean_ci(series(results, lambda r: r.get("seat_failures", 0)), confidence)
        stranded = mean_ci(series(results, lambda r: r.get("stranded_customers", 0)), confidence)
        by_food: Dict[str, int] = {}
        for res in results:
            for food, n in res.get("orders_by_food", {}).items():
                by_food[food] = by_food.get(food, 0) + n

        print(f"Scenario: {sc['name']} (replications={replications}, {level_pct:.1f}% CI, seeds {seed}-{seed + replications - 1})")
        print(f"  Coins/session: {coins[0]:.2f} ± {coins[1]:.2f}")
        print(f"  Coins/minute: {cpm[0]:.2f} ± {cpm[1]:.2f}")
        print(f"  Customers spawned: {spawned[0]:.2f} ± {spawned[1]:.2f}")
        print(f"  Avg spawn-to-served: {served_wait[0]:.1f} ± {served_wait[1]:.1f} s")
        print(f"  Avg wait at order spot: {spot_wait[0]:.1f} ± {spot_wait[1]:.1f} s")
        print(f"  Failed seat attempts: {failures[0]:.2f} ± {failures[1]:.2f}")
        print(f"  Stranded customers: {stranded[0]:.2f} ± {stranded[1]:.2f}")
        print(f"  Orders by food (all replications): {by_food}")
        print("-")

        session_seconds = sc_cfg["sim"]["session_minutes"] * 60.0
        curves.append({"name": sc["name"], "series": coins_on_grid(results, session_seconds, interval_seconds)})

    if not args.no_plot:
        out = plot_coins(curves)
        if out:
            print(f"\nCoins-by-time plot saved to: {out}")


if __name__ == "__main__":
    main()
