"""Observability for taskload.

Provides structured logging and Prometheus metrics:
- JSON or console logging with test/suite/scenario correlation
- Counters and gauges describing the simulated load
"""

from taskload.observability.logging import (
    LogContext,
    configure_logging,
    get_logger,
    scenario_var,
    suite_id_var,
    test_id_var,
)
from taskload.observability.metrics import (
    MetricsRegistry,
    NoOpMetric,
    get_metrics,
    metrics_registry,
)

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "LogContext",
    "test_id_var",
    "suite_id_var",
    "scenario_var",
    # Metrics
    "MetricsRegistry",
    "NoOpMetric",
    "metrics_registry",
    "get_metrics",
]
