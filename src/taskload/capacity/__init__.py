"""Capacity planning: resource projection, cost and 12-month growth plans."""

from taskload.capacity.planner import (
    CapacityPlanner,
    calculate_scaling_timeline,
    determine_scaling_strategy,
)
from taskload.capacity.scenarios import create_growth_scenarios

__all__ = [
    "CapacityPlanner",
    "calculate_scaling_timeline",
    "determine_scaling_strategy",
    "create_growth_scenarios",
]
