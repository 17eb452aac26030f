"""Simulated resource usage.

Memory and CPU figures reported by load tests come from this parametric
model, not from the operating system:

    memory_mb = 100 + 0.5 * actors + noise(0..20)
    cpu_pct   = min(100, 10 + 0.1 * actors + noise(0..10))

Noise is pluggable so tests can assert exact figures.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field


class NoiseStrategy(ABC):
    """Source of the random variation added to resource figures."""

    @abstractmethod
    def sample(self, upper: float) -> float:
        """Return a value in [0, upper)."""
        pass


class NoNoise(NoiseStrategy):
    """Deterministic figures: noise is always zero."""

    def sample(self, upper: float) -> float:
        return 0.0


class UniformNoise(NoiseStrategy):
    """Uniform noise in [0, upper) from a seeded generator."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def sample(self, upper: float) -> float:
        return self._rng.random() * upper


@dataclass
class ResourceModel:
    """Linear-in-actors resource model with bounded noise."""

    base_memory_mb: float = 100.0
    memory_per_actor_mb: float = 0.5
    memory_noise_mb: float = 20.0
    base_cpu_pct: float = 10.0
    cpu_per_actor_pct: float = 0.1
    cpu_noise_pct: float = 10.0
    noise: NoiseStrategy = field(default_factory=UniformNoise)

    def memory_usage(self, active_actors: int) -> float:
        """Simulated memory in MB for the given number of live actors."""
        return (
            self.base_memory_mb
            + active_actors * self.memory_per_actor_mb
            + self.noise.sample(self.memory_noise_mb)
        )

    def cpu_usage(self, active_actors: int) -> float:
        """Simulated CPU utilisation in percent, capped at 100."""
        return min(
            100.0,
            self.base_cpu_pct
            + active_actors * self.cpu_per_actor_pct
            + self.noise.sample(self.cpu_noise_pct),
        )
