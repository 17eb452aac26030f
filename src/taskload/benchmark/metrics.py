"""Benchmark metric definitions and the values derived from test results.

Each metric has a pass bound (its reported threshold) and a looser warning
bound. Status is classified from the rounded value that is reported, so a
metric's status is always consistent with the value shown next to it.
Rates are expressed as percentages here, matching their bounds.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from taskload.models.benchmark import MetricStatus
from taskload.models.load_test import LoadTestResult
from taskload.models.stress import StressReport


@dataclass(frozen=True)
class MetricDefinition:
    """Name, unit and pass/warning bounds of one benchmark metric."""

    name: str
    unit: str
    pass_bound: float
    warning_bound: float
    higher_is_better: bool = False
    precision: int = 0

    @property
    def threshold(self) -> float:
        return self.pass_bound

    def rounded(self, value: float) -> float:
        return float(round(value, self.precision))

    def classify(self, value: float) -> MetricStatus:
        if self.higher_is_better:
            if value >= self.pass_bound:
                return MetricStatus.PASS
            if value >= self.warning_bound:
                return MetricStatus.WARNING
            return MetricStatus.FAIL

        if value <= self.pass_bound:
            return MetricStatus.PASS
        if value <= self.warning_bound:
            return MetricStatus.WARNING
        return MetricStatus.FAIL


AVERAGE_RESPONSE_TIME = MetricDefinition("Average Response Time", "ms", 1000, 2000)
P95_RESPONSE_TIME = MetricDefinition("P95 Response Time", "ms", 2000, 3000)
P99_RESPONSE_TIME = MetricDefinition("P99 Response Time", "ms", 5000, 8000)
REQUESTS_PER_SECOND = MetricDefinition(
    "Requests Per Second", "req/s", 100, 50, higher_is_better=True, precision=2
)
TASK_PROCESSING_RATE = MetricDefinition(
    "Task Processing Rate", "tasks/s", 50, 25, higher_is_better=True, precision=2
)
PEAK_MEMORY_USAGE = MetricDefinition("Peak Memory Usage", "MB", 1000, 1500)
AVERAGE_CPU_USAGE = MetricDefinition("Average CPU Usage", "%", 70, 85, precision=1)
PEAK_CPU_USAGE = MetricDefinition("Peak CPU Usage", "%", 90, 95, precision=1)
ERROR_RATE = MetricDefinition("Error Rate", "%", 1, 2, precision=3)
SUCCESS_RATE = MetricDefinition("Success Rate", "%", 99, 95, higher_is_better=True, precision=2)
CONCURRENT_USER_LIMIT = MetricDefinition(
    "Concurrent User Limit", "users", 500, 250, higher_is_better=True
)
SYSTEM_STABILITY = MetricDefinition("System Stability", "score", 80, 60, higher_is_better=True)
RECOVERY_TIME = MetricDefinition("Recovery Time", "seconds", 30, 60)
AVERAGE_QUEUE_LENGTH = MetricDefinition("Average Queue Length", "tasks", 10, 20, precision=1)
MAXIMUM_QUEUE_LENGTH = MetricDefinition("Maximum Queue Length", "tasks", 50, 75)
TOTAL_TASKS_PROCESSED = MetricDefinition(
    "Total Tasks Processed", "tasks", 1000, 500, higher_is_better=True
)

METRIC_DEFINITIONS: dict[str, MetricDefinition] = {
    definition.name: definition
    for definition in (
        AVERAGE_RESPONSE_TIME,
        P95_RESPONSE_TIME,
        P99_RESPONSE_TIME,
        REQUESTS_PER_SECOND,
        TASK_PROCESSING_RATE,
        PEAK_MEMORY_USAGE,
        AVERAGE_CPU_USAGE,
        PEAK_CPU_USAGE,
        ERROR_RATE,
        SUCCESS_RATE,
        CONCURRENT_USER_LIMIT,
        SYSTEM_STABILITY,
        RECOVERY_TIME,
        AVERAGE_QUEUE_LENGTH,
        MAXIMUM_QUEUE_LENGTH,
        TOTAL_TASKS_PROCESSED,
    )
}

MetricValues = list[tuple[MetricDefinition, float]]


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def response_time_values(results: Sequence[LoadTestResult]) -> MetricValues:
    if not results:
        return []
    return [
        (AVERAGE_RESPONSE_TIME, _mean([r.average_response_time for r in results])),
        (P95_RESPONSE_TIME, _mean([r.p95_response_time for r in results])),
        (P99_RESPONSE_TIME, _mean([r.p99_response_time for r in results])),
    ]


def throughput_values(results: Sequence[LoadTestResult]) -> MetricValues:
    if not results:
        return []
    total_requests = sum(r.total_requests for r in results)
    total_duration = sum(r.duration_seconds for r in results)
    requests_per_second = total_requests / total_duration if total_duration > 0 else 0.0
    return [
        (REQUESTS_PER_SECOND, requests_per_second),
        (TASK_PROCESSING_RATE, _mean([r.task_processing_rate for r in results])),
    ]


def resource_values(results: Sequence[LoadTestResult]) -> MetricValues:
    if not results:
        return []
    return [
        (PEAK_MEMORY_USAGE, max(r.peak_memory_usage for r in results)),
        (AVERAGE_CPU_USAGE, _mean([r.average_cpu_usage for r in results])),
        (PEAK_CPU_USAGE, max(r.peak_cpu_usage for r in results)),
    ]


def reliability_values(results: Sequence[LoadTestResult]) -> MetricValues:
    if not results:
        return []
    total_requests = sum(r.total_requests for r in results)
    total_errors = sum(r.failed_requests for r in results)
    if total_requests > 0:
        error_rate = total_errors / total_requests * 100
        success_rate = (total_requests - total_errors) / total_requests * 100
    else:
        error_rate = 0.0
        success_rate = 0.0
    return [(ERROR_RATE, error_rate), (SUCCESS_RATE, success_rate)]


def scalability_values(report: StressReport) -> MetricValues:
    analysis = report.stress_analysis
    return [
        (CONCURRENT_USER_LIMIT, float(analysis.breaking_point)),
        (SYSTEM_STABILITY, float(analysis.stability_score)),
        (RECOVERY_TIME, analysis.recovery_time_ms / 1000),
    ]


def queue_values(results: Sequence[LoadTestResult]) -> MetricValues:
    if not results:
        return []
    return [
        (AVERAGE_QUEUE_LENGTH, _mean([r.average_queue_length for r in results])),
        (MAXIMUM_QUEUE_LENGTH, float(max(r.max_queue_length for r in results))),
        (TOTAL_TASKS_PROCESSED, float(sum(r.total_tasks_processed for r in results))),
    ]


def collect_metric_values(
    results: Sequence[LoadTestResult], stress_report: StressReport | None = None
) -> MetricValues:
    """Raw values for every metric group, in report order.

    Scalability metrics are present only when a stress report is given.
    """
    values = [
        *response_time_values(results),
        *throughput_values(results),
        *resource_values(results),
        *reliability_values(results),
    ]
    if stress_report is not None:
        values.extend(scalability_values(stress_report))
    values.extend(queue_values(results))
    return values


def metric_weight(name: str) -> float:
    """Weight of a metric in the overall score."""
    if "Response Time" in name or "Error Rate" in name:
        return 2.0
    if "CPU" in name or "Memory" in name:
        return 1.5
    return 1.0


def metric_category(name: str) -> str:
    """Report section a metric belongs to."""
    if "Response Time" in name:
        return "Response Times"
    if "Error" in name or "Success" in name:
        return "Reliability"
    if "Rate" in name or "Per Second" in name:
        return "Throughput"
    if "Memory" in name or "CPU" in name:
        return "Resource Usage"
    if "User" in name or "Stability" in name or "Recovery" in name:
        return "Scalability"
    if "Queue" in name or "Task" in name:
        return "Queue Performance"
    return "Other"
