"""Benchmark suite, baseline and optimization validation models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import Field

from taskload.models import StrictModel


class MetricStatus(str, Enum):
    """Threshold verdict of a benchmark metric."""

    PASS = "pass"
    WARNING = "warning"
    FAIL = "fail"


class MetricTrend(str, Enum):
    """Direction of a metric across recent suites."""

    IMPROVING = "improving"
    STABLE = "stable"
    DEGRADING = "degrading"


class OptimizationRecommendation(str, Enum):
    """Verdict of an optimization validation."""

    DEPLOY = "deploy"
    INVESTIGATE = "investigate"
    ROLLBACK = "rollback"


class BenchmarkMetric(StrictModel):
    """A single thresholded, trend-annotated measurement."""

    name: str
    value: float
    unit: str
    threshold: float
    status: MetricStatus
    trend: MetricTrend = MetricTrend.STABLE


class BenchmarkSuite(StrictModel):
    """Versioned, environment-scoped set of metrics with one weighted score."""

    id: str
    name: str
    timestamp: datetime
    version: str
    environment: str
    metrics: list[BenchmarkMetric] = Field(default_factory=list)
    overall_score: int = Field(default=0, ge=0, le=100, alias="overallScore")
    previous_score: int | None = Field(default=None, alias="previousScore")

    def get_metric(self, name: str) -> BenchmarkMetric | None:
        """Return the metric with the given name, if present."""
        for metric in self.metrics:
            if metric.name == name:
                return metric
        return None


class PerformanceBaseline(StrictModel):
    """Snapshot of metric values keyed by version and environment."""

    version: str
    environment: str
    timestamp: datetime
    metrics: dict[str, float] = Field(default_factory=dict)


class OptimizationValidation(StrictModel):
    """Before/after comparison of two benchmark suites."""

    optimization_name: str = Field(..., alias="optimizationName")
    before_metrics: BenchmarkSuite = Field(..., alias="beforeMetrics")
    after_metrics: BenchmarkSuite = Field(..., alias="afterMetrics")
    improvement: dict[str, float] = Field(
        default_factory=dict, description="Percentage change per metric"
    )
    regressions: list[str] = Field(default_factory=list)
    overall_improvement: int = Field(default=0, alias="overallImprovement")
    recommendation: OptimizationRecommendation
