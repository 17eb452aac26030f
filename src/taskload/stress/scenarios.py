"""Built-in stress scenarios."""

from __future__ import annotations

from taskload.models.load_test import LoadTestConfig, PerformanceThresholds, TaskTypeDistribution
from taskload.models.stress import StressScenario, StressSuite

DEFAULT_MIX = TaskTypeDistribution(harvesting=40, crafting=35, combat=25)
CRAFTING_HEAVY_MIX = TaskTypeDistribution(harvesting=20, crafting=60, combat=20)


def _scenario(
    name: str,
    description: str,
    actors: int,
    duration: float,
    tasks: int,
    max_response_time_ms: float,
    max_error_rate: float,
    max_memory_usage_mb: float,
    ramp_up: float,
    ramp_down: float,
    expected_failure_threshold: float,
    mix: TaskTypeDistribution = DEFAULT_MIX,
) -> StressScenario:
    return StressScenario(
        name=name,
        description=description,
        config=LoadTestConfig(
            concurrent_actors=actors,
            test_duration=duration,
            tasks_per_actor=tasks,
            task_type_distribution=mix,
            thresholds=PerformanceThresholds(
                max_response_time_ms=max_response_time_ms,
                max_error_rate=max_error_rate,
                max_memory_usage_mb=max_memory_usage_mb,
            ),
            ramp_up_time=ramp_up,
            ramp_down_time=ramp_down,
        ),
        expected_failure_threshold=expected_failure_threshold,
    )


def create_standard_stress_scenarios() -> list[StressScenario]:
    """Six scenarios from normal operation to memory pressure."""
    return [
        _scenario("Baseline Load", "Normal operating conditions",
                  100, 60, 5, 1000, 0.01, 500, 10, 5, 0.005),
        _scenario("High Load", "Peak usage conditions",
                  500, 120, 10, 2000, 0.02, 1000, 20, 10, 0.015),
        _scenario("Extreme Load", "Beyond normal capacity",
                  1000, 180, 15, 5000, 0.05, 2000, 30, 15, 0.03),
        _scenario("Burst Load", "Sudden spike in concurrent users",
                  750, 90, 20, 3000, 0.03, 1500, 5, 5, 0.025),
        _scenario("Queue Saturation", "Maximum queue utilization",
                  300, 240, 50, 2000, 0.02, 800, 15, 10, 0.02),
        _scenario("Memory Stress", "High memory utilization scenario",
                  400, 300, 30, 2500, 0.025, 1200, 20, 15, 0.02,
                  mix=CRAFTING_HEAVY_MIX),
    ]


def create_comprehensive_stress_suite() -> StressSuite:
    """The standard scenarios, two at a time."""
    return StressSuite(
        name="Comprehensive Task Queue Stress Test",
        scenarios=create_standard_stress_scenarios(),
        max_concurrent_tests=2,
    )
