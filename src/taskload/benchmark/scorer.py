"""Performance benchmark scoring.

Turns load test results (and optionally a stress report) into a versioned
BenchmarkSuite of thresholded, trend-annotated metrics with one weighted
overall score. Keeps the suite history used for trends and previous
scores, and baselines keyed by (version, environment).

Example:
    benchmark = PerformanceBenchmark()
    suite = benchmark.create_benchmark_suite(results, stress_report, "2.1.0", "staging")
    benchmark.set_baseline("2.1.0", suite)
    changes = benchmark.compare_to_baseline(later_suite, "2.1.0")
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from uuid import uuid4

from taskload.benchmark.metrics import collect_metric_values, metric_weight
from taskload.benchmark.trend import TREND_WINDOW, classify_trend, lower_is_better
from taskload.errors import BaselineNotFoundError
from taskload.models.benchmark import (
    BenchmarkMetric,
    BenchmarkSuite,
    MetricStatus,
    OptimizationRecommendation,
    OptimizationValidation,
    PerformanceBaseline,
)
from taskload.models.load_test import LoadTestResult
from taskload.models.stress import StressReport
from taskload.simulation.clock import Clock, SystemClock

logger = logging.getLogger(__name__)

STATUS_POINTS = {
    MetricStatus.PASS: 100,
    MetricStatus.WARNING: 70,
    MetricStatus.FAIL: 30,
}

# Relative change (%) in the wrong direction that counts as a regression
REGRESSION_TOLERANCE = 5.0


def calculate_overall_score(metrics: Sequence[BenchmarkMetric]) -> int:
    """Weighted mean of status points, rounded; 0 without metrics."""
    total_weight = 0.0
    weighted_points = 0.0
    for metric in metrics:
        weight = metric_weight(metric.name)
        weighted_points += STATUS_POINTS[metric.status] * weight
        total_weight += weight
    return round(weighted_points / total_weight) if total_weight > 0 else 0


def percent_change(value: float, reference: float) -> float | None:
    """Relative change in percent, None when the reference is zero."""
    if reference == 0:
        return None
    return (value - reference) / reference * 100


class PerformanceBenchmark:
    """Benchmark scorer with suite history and baselines."""

    def __init__(self, clock: Clock | None = None) -> None:
        self.clock = clock or SystemClock()
        self._history: list[BenchmarkSuite] = []
        self._baselines: dict[tuple[str, str], PerformanceBaseline] = {}

    def create_benchmark_suite(
        self,
        results: Sequence[LoadTestResult],
        stress_report: StressReport | None = None,
        version: str = "1.0.0",
        environment: str = "test",
    ) -> BenchmarkSuite:
        """Score the results and append the suite to the history."""
        metrics: list[BenchmarkMetric] = []
        for definition, raw_value in collect_metric_values(results, stress_report):
            value = definition.rounded(raw_value)
            metrics.append(
                BenchmarkMetric(
                    name=definition.name,
                    value=value,
                    unit=definition.unit,
                    threshold=definition.threshold,
                    status=definition.classify(value),
                    trend=classify_trend(
                        definition.name, self._recent_values(definition.name), value
                    ),
                )
            )

        suite = BenchmarkSuite(
            id=f"benchmark-{uuid4().hex[:12]}",
            name=f"Performance Benchmark {version}",
            timestamp=datetime.fromtimestamp(self.clock.time(), tz=timezone.utc),
            version=version,
            environment=environment,
            metrics=metrics,
            overall_score=calculate_overall_score(metrics),
            previous_score=self._previous_score(version, environment),
        )
        self._history.append(suite)

        logger.info(
            f"Benchmark {suite.name} ({environment}) scored {suite.overall_score}/100 "
            f"from {len(metrics)} metrics"
        )
        return suite

    def _recent_values(self, name: str) -> list[float]:
        values: list[float] = []
        for suite in self._history[-TREND_WINDOW:]:
            metric = suite.get_metric(name)
            if metric is not None:
                values.append(metric.value)
        return values

    def _previous_score(self, version: str, environment: str) -> int | None:
        for suite in reversed(self._history):
            if suite.environment == environment and suite.version != version:
                return suite.overall_score
        return None

    def set_baseline(self, version: str, suite: BenchmarkSuite) -> PerformanceBaseline:
        """Snapshot the suite's metric values under (version, environment)."""
        baseline = PerformanceBaseline(
            version=version,
            environment=suite.environment,
            timestamp=suite.timestamp,
            metrics={metric.name: metric.value for metric in suite.metrics},
        )
        self._baselines[(version, suite.environment)] = baseline
        logger.info(f"Baseline set for version {version} in {suite.environment}")
        return baseline

    def has_baseline(self, version: str, environment: str) -> bool:
        return (version, environment) in self._baselines

    def compare_to_baseline(self, suite: BenchmarkSuite, baseline_version: str) -> dict[str, float]:
        """Percentage change of each metric against the stored baseline.

        Metrics absent from the baseline or with a zero baseline value are
        left out.

        Raises:
            BaselineNotFoundError: If no baseline exists for the version in
                the suite's environment
        """
        baseline = self._baselines.get((baseline_version, suite.environment))
        if baseline is None:
            raise BaselineNotFoundError(baseline_version, suite.environment)

        comparison: dict[str, float] = {}
        for metric in suite.metrics:
            reference = baseline.metrics.get(metric.name)
            if reference is None:
                continue
            change = percent_change(metric.value, reference)
            if change is not None:
                comparison[metric.name] = change
        return comparison

    def validate_optimization(
        self,
        optimization_name: str,
        before: BenchmarkSuite,
        after: BenchmarkSuite,
    ) -> OptimizationValidation:
        """Compare two suites metric by metric and recommend an outcome.

        - rollback: regressions and score improvement below 5 points
        - investigate: improvement below 2 points or more than 2 regressions
        - deploy: otherwise
        """
        improvement: dict[str, float] = {}
        regressions: list[str] = []

        for metric in after.metrics:
            reference = before.get_metric(metric.name)
            if reference is None:
                continue
            change = percent_change(metric.value, reference.value)
            if change is None:
                continue
            improvement[metric.name] = change

            lower = lower_is_better(metric.name)
            regressed = change > REGRESSION_TOLERANCE if lower else change < -REGRESSION_TOLERANCE
            if regressed:
                direction = "increase" if lower else "decrease"
                regressions.append(f"{metric.name}: {change:.1f}% {direction}")

        overall_improvement = after.overall_score - before.overall_score

        if regressions and overall_improvement < 5:
            recommendation = OptimizationRecommendation.ROLLBACK
        elif overall_improvement < 2 or len(regressions) > 2:
            recommendation = OptimizationRecommendation.INVESTIGATE
        else:
            recommendation = OptimizationRecommendation.DEPLOY

        logger.info(
            f"Optimization {optimization_name}: {overall_improvement:+d} points, "
            f"{len(regressions)} regression(s), recommendation {recommendation.value}"
        )

        return OptimizationValidation(
            optimization_name=optimization_name,
            before_metrics=before,
            after_metrics=after,
            improvement=improvement,
            regressions=regressions,
            overall_improvement=overall_improvement,
            recommendation=recommendation,
        )

    def generate_performance_report(self, suite: BenchmarkSuite) -> str:
        """Markdown rendering of a suite."""
        from taskload.reporting import render_benchmark_suite

        return render_benchmark_suite(suite)

    def get_benchmark_history(self) -> list[BenchmarkSuite]:
        return list(self._history)

    def get_baselines(self) -> dict[tuple[str, str], PerformanceBaseline]:
        return dict(self._baselines)
