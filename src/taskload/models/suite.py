"""Comprehensive suite configuration and report models."""

from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, ConfigDict, Field

from taskload.models import StrictModel
from taskload.models.benchmark import BenchmarkSuite
from taskload.models.capacity import CapacityPlan, GrowthScenario
from taskload.models.load_test import LoadTestConfig, LoadTestResult
from taskload.models.stress import StressReport, StressSuite


class LoadTestSuite(StrictModel):
    """Everything the comprehensive runner executes in one pass."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    description: str = ""
    load_tests: list[LoadTestConfig] = Field(default_factory=list, alias="loadTests")
    stress_suite: StressSuite = Field(
        ...,
        validation_alias=AliasChoices("stressSuite", "stressTests"),
        serialization_alias="stressSuite",
    )
    benchmark_baseline: str | None = Field(
        default=None,
        alias="benchmarkBaseline",
        description="Baseline version the new benchmark is compared against",
    )
    capacity_scenarios: list[GrowthScenario] = Field(
        default_factory=list, alias="capacityScenarios"
    )


class ComprehensiveTestReport(StrictModel):
    """Composed output of load, stress, benchmark and capacity phases."""

    suite_id: str = Field(..., alias="suiteId")
    suite_name: str = Field(..., alias="suiteName")
    start_time: datetime = Field(..., alias="startTime")
    end_time: datetime | None = Field(default=None, alias="endTime")

    load_test_results: list[LoadTestResult] = Field(default_factory=list, alias="loadTestResults")
    stress_report: StressReport | None = Field(default=None, alias="stressReport")
    benchmark_suite: BenchmarkSuite | None = Field(default=None, alias="benchmarkSuite")
    baseline_comparison: dict[str, float] | None = Field(
        default=None, alias="baselineComparison"
    )
    capacity_plans: list[CapacityPlan] = Field(default_factory=list, alias="capacityPlans")

    performance_score: int = Field(default=0, ge=0, le=100, alias="performanceScore")
    scalability_score: int = Field(default=0, ge=0, le=100, alias="scalabilityScore")
    reliability_score: int = Field(default=0, ge=0, le=100, alias="reliabilityScore")

    immediate_actions: list[str] = Field(default_factory=list, alias="immediateActions")
    short_term_recommendations: list[str] = Field(
        default_factory=list, alias="shortTermRecommendations"
    )
    long_term_recommendations: list[str] = Field(
        default_factory=list, alias="longTermRecommendations"
    )
