"""Trend classification of a metric across recent benchmark suites."""

from __future__ import annotations

from collections.abc import Sequence
from statistics import fmean, linear_regression

from taskload.models.benchmark import MetricTrend

LOWER_IS_BETTER_KEYWORDS = ("response time", "error rate", "memory", "cpu", "recovery time")
STABLE_BAND = 0.05
TREND_WINDOW = 3


def lower_is_better(name: str) -> bool:
    """True for metrics where a smaller value is an improvement."""
    lowered = name.lower()
    return any(keyword in lowered for keyword in LOWER_IS_BETTER_KEYWORDS)


def normalized_slope(values: Sequence[float]) -> float:
    """OLS slope of values against their index, divided by their mean."""
    if len(values) < 2:
        return 0.0
    mean = fmean(values)
    if mean == 0:
        return 0.0
    slope, _ = linear_regression(range(len(values)), values)
    return slope / mean


def classify_trend(name: str, history: Sequence[float], current: float) -> MetricTrend:
    """Classify a metric from up to TREND_WINDOW historical values plus the current one.

    Fewer than two historical values is always stable.
    """
    recent = list(history[-TREND_WINDOW:])
    if len(recent) < 2:
        return MetricTrend.STABLE

    slope = normalized_slope([*recent, current])
    if abs(slope) < STABLE_BAND:
        return MetricTrend.STABLE

    improving = slope < 0 if lower_is_better(name) else slope > 0
    return MetricTrend.IMPROVING if improving else MetricTrend.DEGRADING
