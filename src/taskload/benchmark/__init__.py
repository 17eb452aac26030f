"""Benchmark scoring, trends, baselines and optimization validation."""

from taskload.benchmark.metrics import (
    METRIC_DEFINITIONS,
    MetricDefinition,
    collect_metric_values,
    metric_category,
    metric_weight,
)
from taskload.benchmark.scorer import (
    PerformanceBenchmark,
    calculate_overall_score,
    percent_change,
)
from taskload.benchmark.trend import classify_trend, lower_is_better, normalized_slope

__all__ = [
    "METRIC_DEFINITIONS",
    "MetricDefinition",
    "collect_metric_values",
    "metric_category",
    "metric_weight",
    "PerformanceBenchmark",
    "calculate_overall_score",
    "percent_change",
    "classify_trend",
    "lower_is_better",
    "normalized_slope",
]
