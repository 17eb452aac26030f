"""Global pytest configuration and fixtures.

Every fixture runs on a VirtualClock with seeded randomness and a
noise-free resource model, so no test waits on the wall clock and simulated
memory/CPU figures are exact.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from taskload.load.engine import LoadTestEngine
from taskload.models.load_test import LoadTestConfig, PerformanceThresholds
from taskload.simulation.backend import InMemoryTaskBackend
from taskload.simulation.clock import VirtualClock
from taskload.simulation.resources import NoNoise, ResourceModel


@pytest.fixture
def clock() -> VirtualClock:
    return VirtualClock()


@pytest.fixture
def backend(clock: VirtualClock) -> InMemoryTaskBackend:
    return InMemoryTaskBackend(clock=clock, latency_ms=10.0, seed=1)


@pytest.fixture
def engine(backend: InMemoryTaskBackend, clock: VirtualClock) -> LoadTestEngine:
    return LoadTestEngine(
        backend,
        clock=clock,
        resource_model=ResourceModel(noise=NoNoise()),
        seed=7,
        sample_interval=1.0,
        activity_pause=0.5,
    )


@pytest.fixture
def make_config() -> Callable[..., LoadTestConfig]:
    """Factory for short load test configs; keyword overrides win."""

    def factory(**overrides: Any) -> LoadTestConfig:
        values: dict[str, Any] = {
            "concurrent_actors": 10,
            "test_duration": 3.0,
            "tasks_per_actor": 4,
            "ramp_up_time": 1.0,
            "ramp_down_time": 1.0,
            "thresholds": PerformanceThresholds(
                max_response_time_ms=1000,
                max_error_rate=0.05,
                max_memory_usage_mb=1024,
            ),
        }
        values.update(overrides)
        return LoadTestConfig(**values)

    return factory
