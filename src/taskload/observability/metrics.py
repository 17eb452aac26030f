"""Prometheus metrics for simulated load.

Provides metrics collection and exposure:
- Simulated request metrics (count by outcome, latency)
- Active actor gauge
- Load test and stress suite counters

The figures describe the simulation itself; they are not host telemetry.

Usage:
    from taskload.observability.metrics import get_metrics

    metrics = get_metrics()
    metrics.requests_total.labels(outcome="success").inc()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from taskload.config import settings

logger = logging.getLogger(__name__)


class NoOpMetric:
    """No-op metric for when metrics are disabled."""

    def labels(self, **kwargs: Any) -> "NoOpMetric":
        """Return self for chaining."""
        return self

    def inc(self, amount: float = 1) -> None:
        pass

    def dec(self, amount: float = 1) -> None:
        pass

    def set(self, value: float) -> None:
        pass

    def observe(self, value: float) -> None:
        pass


_NOOP = NoOpMetric()


@dataclass
class MetricsRegistry:
    """Registry for Prometheus metrics."""

    requests_total: Any = _NOOP
    request_duration_seconds: Any = _NOOP
    actors_active: Any = _NOOP
    load_tests_total: Any = _NOOP
    stress_suites_total: Any = _NOOP

    _initialized: bool = field(default=False, repr=False)
    _registry: Any = field(default=None, repr=False)

    def initialize(self) -> None:
        """Initialize Prometheus metrics."""
        if self._initialized:
            return

        if not settings.enable_metrics:
            logger.info("Metrics are disabled")
            self._initialized = True
            return

        from prometheus_client import REGISTRY, Counter, Gauge, Histogram

        self._registry = REGISTRY

        self.requests_total = Counter(
            "taskload_simulated_requests_total",
            "Simulated backend requests issued by actors",
            ["outcome"],
        )

        self.request_duration_seconds = Histogram(
            "taskload_simulated_request_duration_seconds",
            "Simulated backend request latency in seconds",
            buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
        )

        self.actors_active = Gauge(
            "taskload_actors_active",
            "Actors currently alive across all running load tests",
        )

        self.load_tests_total = Counter(
            "taskload_load_tests_total",
            "Load tests executed",
            ["status"],
        )

        self.stress_suites_total = Counter(
            "taskload_stress_suites_total",
            "Stress suites executed",
        )

        self._initialized = True
        logger.info("Prometheus metrics initialized")

    def generate_latest(self) -> bytes:
        """Generate Prometheus metrics in exposition format."""
        if not settings.enable_metrics or self._registry is None:
            return b"# Metrics disabled\n"

        from prometheus_client import generate_latest

        return generate_latest(self._registry)


# Global metrics registry
metrics_registry = MetricsRegistry()


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry.

    Initializes metrics on first access.
    """
    if not metrics_registry._initialized:
        metrics_registry.initialize()
    return metrics_registry
