"""Stress suite configuration and report models."""

from __future__ import annotations

from datetime import datetime

from pydantic import ConfigDict, Field, field_validator

from taskload.models import StrictModel
from taskload.models.load_test import LoadTestConfig, LoadTestResult


class StressScenario(StrictModel):
    """A named load test configuration run as part of a stress suite."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    description: str = ""
    config: LoadTestConfig
    expected_failure_threshold: float = Field(
        default=0.0, ge=0, le=1, alias="expectedFailureThreshold"
    )


class StressSuite(StrictModel):
    """Ordered scenarios executed in batches of ``max_concurrent_tests``."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    scenarios: list[StressScenario] = Field(default_factory=list)
    max_concurrent_tests: int = Field(default=1, ge=1, alias="maxConcurrentTests")

    @field_validator("scenarios")
    @classmethod
    def _unique_scenario_names(cls, value: list[StressScenario]) -> list[StressScenario]:
        # Reports key scenario results by name
        seen: set[str] = set()
        for scenario in value:
            if scenario.name in seen:
                raise ValueError(f"Duplicate stress scenario name: {scenario.name}")
            seen.add(scenario.name)
        return value


class OverallMetrics(StrictModel):
    """Totals merged across every completed scenario of a suite."""

    total_requests: int = Field(default=0, alias="totalRequests")
    total_failures: int = Field(default=0, alias="totalFailures")
    average_response_time: float = Field(default=0.0, alias="averageResponseTime")
    peak_memory_usage: float = Field(default=0.0, alias="peakMemoryUsage")
    peak_cpu_usage: float = Field(default=0.0, alias="peakCpuUsage")


class StressAnalysis(StrictModel):
    """System-wide characteristics derived from a suite's scenario results."""

    breaking_point: int = Field(default=0, ge=0, alias="breakingPoint")
    stability_score: int = Field(default=0, ge=0, le=100, alias="stabilityScore")
    critical_bottlenecks: list[str] = Field(default_factory=list, alias="criticalBottlenecks")
    recovery_time_ms: float = Field(default=0.0, ge=0, alias="recoveryTimeMs")


class StressReport(StrictModel):
    """Outcome of one stress suite execution."""

    suite_id: str = Field(..., alias="suiteId")
    suite_name: str = Field(..., alias="suiteName")
    start_time: datetime = Field(..., alias="startTime")
    end_time: datetime | None = Field(default=None, alias="endTime")
    scenario_results: dict[str, LoadTestResult] = Field(
        default_factory=dict, alias="scenarioResults"
    )
    overall_metrics: OverallMetrics = Field(default_factory=OverallMetrics, alias="overallMetrics")
    stress_analysis: StressAnalysis = Field(default_factory=StressAnalysis, alias="stressAnalysis")
    recommendations: list[str] = Field(default_factory=list)
