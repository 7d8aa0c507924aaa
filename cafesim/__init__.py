"""
cafesim package initializer.

This package contains the tick-driven cafe simulation: customers and the chef
as state machines, the table registry, the simulation clock with its pending
actions, configuration loading, metric collection and render snapshots.
"""
__all__ = [
    "entities", "clock", "customers", "chef", "tables", "spawning",
    "policies", "inputs", "metrics", "snapshot", "config", "simulation",
]
