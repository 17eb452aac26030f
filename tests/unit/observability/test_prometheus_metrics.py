"""Tests for the Prometheus metrics registry."""

import pytest

from taskload.config import settings
from taskload.observability.metrics import (
    MetricsRegistry,
    NoOpMetric,
    get_metrics,
    metrics_registry,
)


class TestNoOpMetric:
    """Tests for NoOpMetric."""

    def test_chaining(self) -> None:
        """Every metric method is accepted and does nothing."""
        metric = NoOpMetric()

        assert metric.labels(outcome="success") is metric
        metric.inc()
        metric.dec(2)
        metric.set(5)
        metric.observe(0.1)


class TestMetricsRegistry:
    """Tests for MetricsRegistry."""

    def test_disabled(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Disabled metrics keep no-op placeholders."""
        monkeypatch.setattr(settings, "enable_metrics", False)
        registry = MetricsRegistry()

        registry.initialize()

        assert isinstance(registry.requests_total, NoOpMetric)
        assert isinstance(registry.actors_active, NoOpMetric)
        assert registry.generate_latest() == b"# Metrics disabled\n"

    def test_global_registry(self) -> None:
        """get_metrics initializes and returns the shared registry."""
        metrics = get_metrics()

        assert metrics is metrics_registry
        assert metrics._initialized is True
        assert get_metrics() is metrics

    def test_exposition(self) -> None:
        """Enabled metrics appear in the exposition output."""
        if not settings.enable_metrics or get_metrics()._registry is None:
            pytest.skip("metrics disabled in this environment")
        metrics = get_metrics()
        metrics.load_tests_total.labels(status="completed").inc()

        output = metrics.generate_latest().decode()

        assert "taskload_load_tests_total" in output
        assert "taskload_actors_active" in output
