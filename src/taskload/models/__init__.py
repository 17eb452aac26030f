"""Domain models for load simulation, stress analysis and capacity planning.

All models use Pydantic v2. Configuration inputs are frozen and accept the
camelCase keys used in suite files; results are plain mutable models filled
in by the component that produces them.
"""

from pydantic import BaseModel


class StrictModel(BaseModel):
    """Base model for all taskload domain models.

    Unknown fields are rejected; fields may be populated either by their
    Python name or by their camelCase alias.
    """

    model_config = {
        "extra": "forbid",
        "populate_by_name": True,
        "validate_default": True,
    }


# Import order matters due to forward references - StrictModel must be defined first
# ruff: noqa: E402
from taskload.models.benchmark import (
    BenchmarkMetric,
    BenchmarkSuite,
    MetricStatus,
    MetricTrend,
    OptimizationRecommendation,
    OptimizationValidation,
    PerformanceBaseline,
)
from taskload.models.capacity import (
    ArchitecturalAlternative,
    CapacityModel,
    CapacityPlan,
    CostModel,
    GrowthScenario,
    Milestone,
    OverheadFactors,
    ResourceRequirement,
    RiskAssessment,
    ScalingFactors,
    ScalingProjection,
    ScalingStrategy,
)
from taskload.models.load_test import (
    LoadTestConfig,
    LoadTestResult,
    PerformanceThresholds,
    TaskType,
    TaskTypeDistribution,
)
from taskload.models.stress import (
    OverallMetrics,
    StressAnalysis,
    StressReport,
    StressScenario,
    StressSuite,
)
from taskload.models.suite import ComprehensiveTestReport, LoadTestSuite

__all__ = [
    "StrictModel",
    # Load tests
    "TaskType",
    "TaskTypeDistribution",
    "PerformanceThresholds",
    "LoadTestConfig",
    "LoadTestResult",
    # Stress
    "StressScenario",
    "StressSuite",
    "OverallMetrics",
    "StressAnalysis",
    "StressReport",
    # Benchmark
    "MetricStatus",
    "MetricTrend",
    "BenchmarkMetric",
    "BenchmarkSuite",
    "PerformanceBaseline",
    "OptimizationRecommendation",
    "OptimizationValidation",
    # Capacity
    "ResourceRequirement",
    "ScalingFactors",
    "OverheadFactors",
    "CapacityModel",
    "CostModel",
    "GrowthScenario",
    "ScalingStrategy",
    "ScalingProjection",
    "RiskAssessment",
    "Milestone",
    "ArchitecturalAlternative",
    "CapacityPlan",
    # Suites
    "LoadTestSuite",
    "ComprehensiveTestReport",
]
