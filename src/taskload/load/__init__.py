"""Load test engine: ramp-up, sustain, ramp-down and analysis of one load test."""

from taskload.load.engine import (
    ActorPool,
    LatencyApproximation,
    LoadTestEngine,
    LoadTestRun,
    recommended_max_actors,
    scaling_recommendations,
)

__all__ = [
    "ActorPool",
    "LatencyApproximation",
    "LoadTestEngine",
    "LoadTestRun",
    "recommended_max_actors",
    "scaling_recommendations",
]
