"""Tests for benchmark metric definitions, categories and trends."""

import pytest

from taskload.benchmark.metrics import (
    AVERAGE_RESPONSE_TIME,
    ERROR_RATE,
    METRIC_DEFINITIONS,
    REQUESTS_PER_SECOND,
    SUCCESS_RATE,
    metric_category,
    metric_weight,
)
from taskload.benchmark.trend import classify_trend, lower_is_better, normalized_slope
from taskload.models.benchmark import MetricStatus, MetricTrend


class TestMetricDefinition:
    """Tests for threshold classification."""

    @pytest.mark.parametrize(
        ("value", "status"),
        [
            (500, MetricStatus.PASS),
            (1000, MetricStatus.PASS),
            (1500, MetricStatus.WARNING),
            (2000, MetricStatus.WARNING),
            (2001, MetricStatus.FAIL),
        ],
    )
    def test_lower_is_better(self, value: float, status: MetricStatus) -> None:
        """Bounds are inclusive for lower-is-better metrics."""
        assert AVERAGE_RESPONSE_TIME.classify(value) is status

    @pytest.mark.parametrize(
        ("value", "status"),
        [
            (150, MetricStatus.PASS),
            (100, MetricStatus.PASS),
            (75, MetricStatus.WARNING),
            (50, MetricStatus.WARNING),
            (49.99, MetricStatus.FAIL),
        ],
    )
    def test_higher_is_better(self, value: float, status: MetricStatus) -> None:
        """Bounds are inclusive for higher-is-better metrics."""
        assert REQUESTS_PER_SECOND.classify(value) is status

    def test_threshold_is_pass_bound(self) -> None:
        """The reported threshold is the pass bound."""
        assert SUCCESS_RATE.threshold == 99
        assert ERROR_RATE.threshold == 1

    def test_rounding(self) -> None:
        """Values are rounded to the metric's precision."""
        assert AVERAGE_RESPONSE_TIME.rounded(123.456) == 123.0
        assert ERROR_RATE.rounded(0.12345) == 0.123

    def test_sixteen_definitions(self) -> None:
        """Every metric has a definition keyed by its name."""
        assert len(METRIC_DEFINITIONS) == 16
        assert all(name == d.name for name, d in METRIC_DEFINITIONS.items())


class TestCategoriesAndWeights:
    """Tests for report categories and score weights."""

    @pytest.mark.parametrize(
        ("name", "category"),
        [
            ("P95 Response Time", "Response Times"),
            ("Requests Per Second", "Throughput"),
            ("Task Processing Rate", "Throughput"),
            ("Peak Memory Usage", "Resource Usage"),
            ("Average CPU Usage", "Resource Usage"),
            ("Error Rate", "Reliability"),
            ("Success Rate", "Reliability"),
            ("Concurrent User Limit", "Scalability"),
            ("Recovery Time", "Scalability"),
            ("Maximum Queue Length", "Queue Performance"),
            ("Total Tasks Processed", "Queue Performance"),
            ("Something Else", "Other"),
        ],
    )
    def test_category(self, name: str, category: str) -> None:
        """Each metric lands in its report section."""
        assert metric_category(name) == category

    def test_weights(self) -> None:
        """Latency and errors weigh most, resources next."""
        assert metric_weight("Average Response Time") == 2.0
        assert metric_weight("Error Rate") == 2.0
        assert metric_weight("Peak CPU Usage") == 1.5
        assert metric_weight("Peak Memory Usage") == 1.5
        assert metric_weight("Requests Per Second") == 1.0


class TestTrend:
    """Tests for trend classification."""

    def test_lower_is_better(self) -> None:
        """Latency, errors, resources and recovery are lower-is-better."""
        assert lower_is_better("P99 Response Time")
        assert lower_is_better("Error Rate")
        assert lower_is_better("Recovery Time")
        assert not lower_is_better("Success Rate")
        assert not lower_is_better("Requests Per Second")

    def test_normalized_slope(self) -> None:
        """The slope is relative to the mean."""
        assert normalized_slope([10, 20, 30]) == pytest.approx(0.5)
        assert normalized_slope([5]) == 0.0
        assert normalized_slope([0, 0, 0]) == 0.0

    def test_short_history_is_stable(self) -> None:
        """Fewer than two historical values is always stable."""
        assert classify_trend("Error Rate", [], 10) is MetricTrend.STABLE
        assert classify_trend("Error Rate", [1], 10) is MetricTrend.STABLE

    def test_small_changes_are_stable(self) -> None:
        """Changes within the band are stable."""
        assert classify_trend("Average Response Time", [100, 101], 100) is MetricTrend.STABLE

    def test_direction_depends_on_metric(self) -> None:
        """Rising values degrade latency but improve throughput."""
        assert classify_trend("Average Response Time", [100, 110], 121) is MetricTrend.DEGRADING
        assert classify_trend("Requests Per Second", [100, 110], 121) is MetricTrend.IMPROVING
        assert classify_trend("Average Response Time", [121, 110], 100) is MetricTrend.IMPROVING

    def test_window_uses_latest_values(self) -> None:
        """Only the last three historical values count."""
        history = [1000, 1000, 100, 100, 100]

        assert classify_trend("Average Response Time", history, 100) is MetricTrend.STABLE
