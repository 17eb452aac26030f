"""Pure functions deriving system-wide characteristics from stress results.

All functions take the scenario results of one suite and never mutate
them. An empty result list yields a breaking point, stability score and
recovery estimate of 0.
"""

from __future__ import annotations

from collections.abc import Sequence

from taskload.models.load_test import LoadTestResult
from taskload.models.stress import OverallMetrics, StressAnalysis

HIGH_ERROR_RATE = 0.02
SLOW_RESPONSE_MS = 2000
MIN_RECOVERY_MS = 5000
RECOVERY_MS_PER_MEMORY_RATIO = 10000
SLOW_RECOVERY_MS = 30000
TARGET_BREAKING_POINT = 500
TARGET_STABILITY = 70

BOTTLENECK_RECOMMENDATIONS = {
    "Response Time": "Optimize database queries and add caching layers",
    "Memory Usage": "Implement memory pooling and garbage collection optimization",
    "Error Rate": "Add retry mechanisms with exponential backoff",
    "Processing Speed": "Consider async processing for non-critical operations",
}


def breaches_thresholds(result: LoadTestResult) -> bool:
    """True when any configured threshold is exceeded."""
    thresholds = result.config.thresholds
    return (
        result.error_rate > thresholds.max_error_rate
        or result.average_response_time > thresholds.max_response_time_ms
        or result.peak_memory_usage > thresholds.max_memory_usage_mb
    )


def find_breaking_point(results: Sequence[LoadTestResult]) -> int:
    """Smallest tested actor count breaching a threshold.

    Falls back to the highest tested count when nothing breaches.
    """
    ordered = sorted(results, key=lambda result: result.config.concurrent_actors)
    for result in ordered:
        if breaches_thresholds(result):
            return result.config.concurrent_actors
    return ordered[-1].config.concurrent_actors if ordered else 0


def scenario_stability(result: LoadTestResult) -> float:
    """Score one scenario out of 100, penalising errors and overruns."""
    thresholds = result.config.thresholds
    score = 100.0

    score -= min(50.0, result.error_rate * 1000)

    response_time_ratio = result.average_response_time / thresholds.max_response_time_ms
    if response_time_ratio > 1:
        score -= min(30.0, (response_time_ratio - 1) * 30)

    memory_ratio = result.peak_memory_usage / thresholds.max_memory_usage_mb
    if memory_ratio > 1:
        score -= min(20.0, (memory_ratio - 1) * 20)

    return max(0.0, score)


def calculate_stability_score(results: Sequence[LoadTestResult]) -> int:
    """Mean scenario stability, rounded, in [0, 100]."""
    if not results:
        return 0
    return round(sum(scenario_stability(result) for result in results) / len(results))


def identify_bottlenecks(results: Sequence[LoadTestResult]) -> list[str]:
    """Union of per-scenario bottlenecks plus suite-wide flags, first-seen order."""
    bottlenecks: dict[str, None] = {}
    for result in results:
        bottlenecks.update(dict.fromkeys(result.bottleneck_components))

    high_error = [result for result in results if result.error_rate > HIGH_ERROR_RATE]
    if len(high_error) > len(results) / 2:
        bottlenecks["Error Handling"] = None

    slow = [result for result in results if result.average_response_time > SLOW_RESPONSE_MS]
    if len(slow) > len(results) / 2:
        bottlenecks["Processing Speed"] = None

    return list(bottlenecks)


def estimate_recovery_time(results: Sequence[LoadTestResult]) -> float:
    """Recovery estimate in ms from the scenario with the highest memory peak."""
    if not results:
        return 0.0
    worst = max(results, key=lambda result: result.peak_memory_usage)
    memory_ratio = worst.peak_memory_usage / worst.config.thresholds.max_memory_usage_mb
    return max(float(MIN_RECOVERY_MS), memory_ratio * RECOVERY_MS_PER_MEMORY_RATIO)


def generate_stress_recommendations(analysis: StressAnalysis) -> list[str]:
    recommendations: list[str] = []

    if analysis.breaking_point < TARGET_BREAKING_POINT:
        recommendations.append("Consider horizontal scaling to support more concurrent users")
        recommendations.append("Implement load balancing across multiple server instances")

    if analysis.stability_score < TARGET_STABILITY:
        recommendations.append("Improve error handling and recovery mechanisms")
        recommendations.append("Add circuit breakers to prevent cascade failures")

    for bottleneck in analysis.critical_bottlenecks:
        recommendation = BOTTLENECK_RECOMMENDATIONS.get(bottleneck)
        if recommendation:
            recommendations.append(recommendation)

    if analysis.recovery_time_ms > SLOW_RECOVERY_MS:
        recommendations.append("Implement faster resource cleanup and recovery procedures")
        recommendations.append("Add health checks and automatic recovery mechanisms")

    return recommendations


def analyze_stress_results(results: Sequence[LoadTestResult]) -> StressAnalysis:
    """Combine the individual analyses into one StressAnalysis."""
    return StressAnalysis(
        breaking_point=find_breaking_point(results),
        stability_score=calculate_stability_score(results),
        critical_bottlenecks=identify_bottlenecks(results),
        recovery_time_ms=estimate_recovery_time(results),
    )


def merge_overall_metrics(overall: OverallMetrics, result: LoadTestResult) -> None:
    """Fold one scenario result into the running suite totals.

    The average response time is weighted by request count.
    """
    previous_requests = overall.total_requests
    overall.total_requests += result.total_requests
    overall.total_failures += result.failed_requests
    overall.peak_memory_usage = max(overall.peak_memory_usage, result.peak_memory_usage)
    overall.peak_cpu_usage = max(overall.peak_cpu_usage, result.peak_cpu_usage)

    if overall.total_requests > 0:
        overall.average_response_time = (
            overall.average_response_time * previous_requests
            + result.average_response_time * result.total_requests
        ) / overall.total_requests
