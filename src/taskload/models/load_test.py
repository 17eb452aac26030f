"""Load test configuration and result models.

Configuration models are frozen once constructed and accept the camelCase
keys used by suite files. Response-time thresholds and latencies are in
milliseconds, memory in MB, durations in seconds and error rates are
fractions (0.01 == 1%).
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import AliasChoices, ConfigDict, Field, computed_field

from taskload.models import StrictModel


class TaskType(str, Enum):
    """Synthetic task kinds an actor can queue."""

    HARVESTING = "harvesting"
    CRAFTING = "crafting"
    COMBAT = "combat"


class TaskTypeDistribution(StrictModel):
    """Relative weights of each task type in an actor's workload."""

    model_config = ConfigDict(frozen=True)

    harvesting: float = Field(default=1.0, ge=0)
    crafting: float = Field(default=1.0, ge=0)
    combat: float = Field(default=1.0, ge=0)

    def weights(self) -> dict[TaskType, float]:
        return {
            TaskType.HARVESTING: self.harvesting,
            TaskType.CRAFTING: self.crafting,
            TaskType.COMBAT: self.combat,
        }

    def normalized(self) -> dict[TaskType, float]:
        """Return weights summing to 1, uniform when every weight is zero."""
        weights = self.weights()
        total = sum(weights.values())
        if total <= 0:
            return {task_type: 1 / len(weights) for task_type in weights}
        return {task_type: weight / total for task_type, weight in weights.items()}


class PerformanceThresholds(StrictModel):
    """Limits a load test is judged against."""

    model_config = ConfigDict(frozen=True)

    max_response_time_ms: float = Field(
        default=1000.0, gt=0, alias="maxResponseTimeMs"
    )
    max_error_rate: float = Field(default=0.01, gt=0, le=1, alias="maxErrorRate")
    max_memory_usage_mb: float = Field(
        default=1024.0,
        gt=0,
        validation_alias=AliasChoices("maxMemoryUsageMb", "maxMemoryUsageMB"),
        serialization_alias="maxMemoryUsageMb",
    )


class LoadTestConfig(StrictModel):
    """Parameters of a single load test invocation."""

    model_config = ConfigDict(frozen=True)

    concurrent_actors: int = Field(
        ...,
        ge=0,
        validation_alias=AliasChoices("concurrentActors", "concurrentPlayers"),
        serialization_alias="concurrentActors",
        description="Number of simulated actors kept alive during sustain",
    )
    test_duration: float = Field(
        default=60.0, ge=0, alias="testDuration", description="Sustain phase length (s)"
    )
    tasks_per_actor: int = Field(
        default=5,
        ge=0,
        validation_alias=AliasChoices("tasksPerActor", "tasksPerPlayer"),
        serialization_alias="tasksPerActor",
    )
    task_type_distribution: TaskTypeDistribution = Field(
        default_factory=TaskTypeDistribution, alias="taskTypeDistribution"
    )
    thresholds: PerformanceThresholds = Field(default_factory=PerformanceThresholds)
    ramp_up_time: float = Field(default=10.0, ge=0, alias="rampUpTime")
    ramp_down_time: float = Field(default=5.0, ge=0, alias="rampDownTime")


class LoadTestResult(StrictModel):
    """Outcome of one load test. Finalized by the engine's analyze phase."""

    test_id: str = Field(..., alias="testId")
    start_time: datetime = Field(..., alias="startTime")
    end_time: datetime | None = Field(default=None, alias="endTime")
    duration_seconds: float = Field(default=0.0, alias="durationSeconds")
    config: LoadTestConfig

    # Request totals
    total_requests: int = Field(default=0, alias="totalRequests")
    successful_requests: int = Field(default=0, alias="successfulRequests")
    failed_requests: int = Field(default=0, alias="failedRequests")

    # Latency (ms); percentiles are approximations derived from the average
    average_response_time: float = Field(default=0.0, alias="averageResponseTime")
    p95_response_time: float = Field(default=0.0, alias="p95ResponseTime")
    p99_response_time: float = Field(default=0.0, alias="p99ResponseTime")

    # Simulated resource figures
    peak_memory_usage: float = Field(default=0.0, alias="peakMemoryUsage")
    average_cpu_usage: float = Field(default=0.0, alias="averageCpuUsage")
    peak_cpu_usage: float = Field(default=0.0, alias="peakCpuUsage")

    # Queue statistics
    average_queue_length: float = Field(default=0.0, alias="averageQueueLength")
    max_queue_length: int = Field(default=0, alias="maxQueueLength")
    total_tasks_processed: int = Field(default=0, alias="totalTasksProcessed")
    task_processing_rate: float = Field(default=0.0, alias="taskProcessingRate")

    # Errors
    errors_by_type: dict[str, int] = Field(default_factory=dict, alias="errorsByType")
    critical_errors: list[str] = Field(default_factory=list, alias="criticalErrors")

    # Capacity insight
    recommended_max_actors: int = Field(default=0, alias="recommendedMaxActors")
    bottleneck_components: list[str] = Field(default_factory=list, alias="bottleneckComponents")
    scaling_recommendations: list[str] = Field(
        default_factory=list, alias="scalingRecommendations"
    )

    @computed_field(alias="errorRate")  # type: ignore[prop-decorator]
    @property
    def error_rate(self) -> float:
        """Failed over total requests, 0 when nothing was issued."""
        if self.total_requests == 0:
            return 0.0
        return self.failed_requests / self.total_requests
