"""Stress test orchestration and analysis."""

from taskload.stress.analysis import (
    analyze_stress_results,
    calculate_stability_score,
    estimate_recovery_time,
    find_breaking_point,
    generate_stress_recommendations,
    identify_bottlenecks,
    merge_overall_metrics,
)
from taskload.stress.runner import StressTestRunner, create_scenario_batches
from taskload.stress.scenarios import (
    create_comprehensive_stress_suite,
    create_standard_stress_scenarios,
)

__all__ = [
    "StressTestRunner",
    "create_scenario_batches",
    "create_standard_stress_scenarios",
    "create_comprehensive_stress_suite",
    "analyze_stress_results",
    "find_breaking_point",
    "calculate_stability_score",
    "identify_bottlenecks",
    "estimate_recovery_time",
    "generate_stress_recommendations",
    "merge_overall_metrics",
]
