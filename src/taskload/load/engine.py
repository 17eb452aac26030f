"""Load test engine.

Runs one load test as four phases over a pool of simulated actors:

    RampUp -> Sustain -> RampDown -> Analyze

- RampUp creates ceil(target / 10) actors per step, pausing
  ramp_up_time / 10 between steps
- Sustain ticks every active actor concurrently each round while a
  sampler collects aggregate metrics on a fixed interval
- RampDown retires actors in the same step cadence, ignoring cleanup
  failures
- Analyze derives percentiles, throughput, bottlenecks and the
  recommended maximum actor count

Every invocation owns a LoadTestRun, so phases can be driven one by one in
tests and several runs may share an engine. Failures inside a phase are
recorded on the result as critical errors; a result is always returned.

Cancellation is cooperative: stop_current_test() clears the running flag of
every active run, which is checked between ramp steps and between sustain
rounds only. Ramp-down always runs to release actor state.
"""

from __future__ import annotations

import asyncio
import logging
import math
import random
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from statistics import fmean
from uuid import uuid4

from taskload.config import settings
from taskload.models.load_test import LoadTestConfig, LoadTestResult
from taskload.observability.logging import LogContext
from taskload.observability.metrics import get_metrics
from taskload.simulation.actor import ActorSimulator, ActorState
from taskload.simulation.backend import TaskBackend
from taskload.simulation.clock import Clock, SystemClock
from taskload.simulation.resources import ResourceModel, UniformNoise

logger = logging.getLogger(__name__)

RAMP_STEPS = 10
QUEUE_LENGTH_WARNING = 100


@dataclass(frozen=True)
class LatencyApproximation:
    """Percentile proxies derived from the average response time.

    No latency histogram is collected; p95 and p99 are fixed multiples of
    the mean. Both factors must be >= 1 and ordered so that
    average <= p95 <= p99 always holds.
    """

    p95_factor: float = 1.5
    p99_factor: float = 2.0

    def __post_init__(self) -> None:
        if not 1.0 <= self.p95_factor <= self.p99_factor:
            raise ValueError(
                f"Latency factors must satisfy 1 <= p95 <= p99, "
                f"got p95={self.p95_factor} p99={self.p99_factor}"
            )

    def p95(self, average: float) -> float:
        return average * self.p95_factor

    def p99(self, average: float) -> float:
        return average * self.p99_factor


class ActorPool:
    """Arena of live actors keyed by id.

    Only the owning run mutates the pool; mutations take the lock so that
    concurrent ramp steps never interleave.
    """

    def __init__(self) -> None:
        self._actors: dict[str, ActorSimulator] = {}
        self.lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._actors)

    async def add(self, actor: ActorSimulator) -> None:
        async with self.lock:
            self._actors[actor.actor_id] = actor

    async def remove(self, actor_id: str) -> ActorSimulator | None:
        async with self.lock:
            return self._actors.pop(actor_id, None)

    def ids(self) -> list[str]:
        return list(self._actors)

    def all(self) -> list[ActorSimulator]:
        return list(self._actors.values())

    def active(self) -> list[ActorSimulator]:
        return [actor for actor in self._actors.values() if actor.state.is_active]


@dataclass
class LoadTestRun:
    """Mutable state of one load test invocation."""

    test_id: str
    config: LoadTestConfig
    result: LoadTestResult
    started_at: float
    pool: ActorPool = field(default_factory=ActorPool)
    cpu_samples: list[float] = field(default_factory=list)
    running: bool = True
    actors_created: int = 0


def recommended_max_actors(result: LoadTestResult, safety_margin: float = 0.8) -> int:
    """Scale the tested actor count by the tightest threshold headroom."""
    thresholds = result.config.thresholds
    response_time_factor = thresholds.max_response_time_ms / max(result.average_response_time, 1)
    error_rate_factor = thresholds.max_error_rate / max(result.error_rate, 0.001)
    memory_factor = thresholds.max_memory_usage_mb / max(result.peak_memory_usage, 1)

    limiting_factor = min(response_time_factor, error_rate_factor, memory_factor)
    return math.floor(result.config.concurrent_actors * limiting_factor * safety_margin)


def scaling_recommendations(result: LoadTestResult) -> list[str]:
    """Advisory strings keyed off every breached threshold."""
    thresholds = result.config.thresholds
    recommendations: list[str] = []

    if result.average_response_time > thresholds.max_response_time_ms:
        recommendations.append("Consider increasing server CPU allocation")
        recommendations.append("Implement response caching for frequently accessed data")

    if result.peak_memory_usage > thresholds.max_memory_usage_mb:
        recommendations.append("Increase server memory allocation")
        recommendations.append("Implement memory-efficient data structures")

    if result.error_rate > thresholds.max_error_rate:
        recommendations.append("Improve error handling and retry mechanisms")
        recommendations.append("Add circuit breakers for external dependencies")

    if result.max_queue_length > QUEUE_LENGTH_WARNING:
        recommendations.append("Consider implementing queue size limits per actor")
        recommendations.append("Add queue processing optimization")

    return recommendations


class LoadTestEngine:
    """Orchestrates simulated actors through the load test phases.

    Args:
        backend: Task backend the actors drive
        clock: Time source for every pause and measurement
        resource_model: Simulated memory/CPU model
        latency: Percentile approximation used by the analyze phase
        seed: Seed for actor behaviour and resource noise
        sample_interval: Seconds between metric samples during sustain
        activity_pause: Seconds between sustain rounds
        actor_queue_capacity: Maximum tasks in one actor's queue
        safety_margin: Multiplier applied to the recommended actor count
    """

    def __init__(
        self,
        backend: TaskBackend,
        clock: Clock | None = None,
        resource_model: ResourceModel | None = None,
        latency: LatencyApproximation | None = None,
        seed: int | None = None,
        sample_interval: float | None = None,
        activity_pause: float | None = None,
        actor_queue_capacity: int | None = None,
        safety_margin: float | None = None,
    ) -> None:
        seed = settings.random_seed if seed is None else seed
        self.backend = backend
        self.clock = clock or SystemClock()
        self.resource_model = resource_model or ResourceModel(noise=UniformNoise(seed))
        self.latency = latency or LatencyApproximation(
            p95_factor=settings.p95_latency_factor,
            p99_factor=settings.p99_latency_factor,
        )
        self.sample_interval = sample_interval or settings.sample_interval
        self.activity_pause = activity_pause or settings.activity_pause
        self.actor_queue_capacity = actor_queue_capacity or settings.actor_queue_capacity
        self.safety_margin = safety_margin or settings.capacity_safety_margin
        self._rng = random.Random(seed)
        self._active_runs: dict[str, LoadTestRun] = {}
        self._history: list[LoadTestResult] = []

    @property
    def is_running(self) -> bool:
        """True while at least one run is in progress."""
        return any(run.running for run in self._active_runs.values())

    def new_run(self, config: LoadTestConfig) -> LoadTestRun:
        """Create the state for a new invocation without starting it."""
        test_id = f"load-test-{uuid4().hex[:12]}"
        result = LoadTestResult(
            test_id=test_id,
            start_time=datetime.fromtimestamp(self.clock.time(), tz=timezone.utc),
            config=config,
        )
        return LoadTestRun(
            test_id=test_id,
            config=config,
            result=result,
            started_at=self.clock.monotonic(),
        )

    async def execute_load_test(self, config: LoadTestConfig) -> LoadTestResult:
        """Run all four phases and return the finalized result.

        Never raises for runtime failures: they are appended to
        ``critical_errors`` and the partial result is returned.
        """
        run = self.new_run(config)
        self._active_runs[run.test_id] = run
        metrics = get_metrics()

        with LogContext(test_id=run.test_id):
            logger.info(
                f"Starting load test {run.test_id} with "
                f"{config.concurrent_actors} concurrent actors"
            )
            try:
                try:
                    await self.ramp_up(run)
                    await self.sustain(run)
                except Exception as e:
                    self._record_failure(run, e)
                    self._collect_partial_metrics(run)

                try:
                    await self.ramp_down(run)
                except Exception as e:
                    self._record_failure(run, e)

                run.running = False
                self._finish_timing(run)

                try:
                    self.analyze(run)
                except Exception as e:
                    self._record_failure(run, e)
            finally:
                run.running = False
                self._active_runs.pop(run.test_id, None)
                self._history.append(run.result)

            status = "failed" if run.result.critical_errors else "completed"
            metrics.load_tests_total.labels(status=status).inc()
            logger.info(
                f"Load test {run.test_id} {status}: "
                f"{run.result.total_requests} requests, "
                f"recommended max actors {run.result.recommended_max_actors}"
            )

        return run.result

    async def ramp_up(self, run: LoadTestRun) -> None:
        """Create actors in RAMP_STEPS steps of ceil(target / RAMP_STEPS)."""
        target = run.config.concurrent_actors
        if target <= 0:
            return

        step = math.ceil(target / RAMP_STEPS)
        pause = run.config.ramp_up_time / RAMP_STEPS

        while run.actors_created < target and run.running:
            first = run.actors_created
            batch = range(first, min(first + step, target))
            run.actors_created = batch.stop
            await asyncio.gather(*(self._spawn_actor(run, index) for index in batch))

            if run.actors_created < target:
                await self.clock.sleep(pause)

        logger.info(f"Ramped up to {len(run.pool)} concurrent actors")

    async def sustain(self, run: LoadTestRun) -> None:
        """Tick every active actor each round until the duration elapses.

        A single actor's failure never affects the others in its round. A
        periodic sample that fails is logged and skipped. The sampler is
        cancelled when the loop ends, whatever the outcome, and one final
        sample is always taken.
        """
        deadline = self.clock.monotonic() + run.config.test_duration
        sampler = asyncio.create_task(self._sample_periodically(run))

        try:
            while run.running and self.clock.monotonic() < deadline:
                actors = run.pool.active()
                outcomes = await asyncio.gather(
                    *(actor.tick() for actor in actors), return_exceptions=True
                )
                failures = sum(1 for outcome in outcomes if isinstance(outcome, BaseException))
                if failures:
                    logger.debug(f"{failures} of {len(actors)} actor ticks failed")
                await self.clock.sleep(self.activity_pause)
        finally:
            sampler.cancel()
            try:
                await sampler
            except asyncio.CancelledError:
                pass
            self.collect_metrics(run)

        logger.info("Completed sustained load phase")

    async def ramp_down(self, run: LoadTestRun) -> None:
        """Retire every actor in the ramp-up step cadence."""
        actor_ids = run.pool.ids()
        if not actor_ids:
            return

        step = math.ceil(max(run.config.concurrent_actors, len(actor_ids)) / RAMP_STEPS)
        pause = run.config.ramp_down_time / RAMP_STEPS

        for start in range(0, len(actor_ids), step):
            batch = actor_ids[start : start + step]
            await asyncio.gather(*(self._retire_actor(run, actor_id) for actor_id in batch))

            if start + step < len(actor_ids):
                await self.clock.sleep(pause)

        logger.info("Ramped down all actors")

    def collect_metrics(self, run: LoadTestRun) -> None:
        """Fold the current actor counters and simulated resources into the result."""
        result = run.result
        actors = run.pool.all()

        total_requests = sum(actor.state.request_count for actor in actors)
        total_errors = sum(actor.state.error_count for actor in actors)
        total_response_time = sum(actor.state.response_time_sum for actor in actors)
        queue_lengths = [actor.state.queue_length for actor in actors]

        errors_by_type: Counter[str] = Counter()
        for actor in actors:
            errors_by_type.update(actor.state.errors_by_type)

        result.total_requests = total_requests
        result.failed_requests = total_errors
        result.successful_requests = total_requests - total_errors
        result.average_response_time = (
            total_response_time / total_requests if total_requests > 0 else 0.0
        )
        result.average_queue_length = (
            sum(queue_lengths) / len(queue_lengths) if queue_lengths else 0.0
        )
        result.max_queue_length = max([result.max_queue_length, *queue_lengths])
        result.total_tasks_processed = sum(actor.state.tasks_added for actor in actors)
        result.errors_by_type = dict(errors_by_type)

        memory = self.resource_model.memory_usage(len(actors))
        cpu = self.resource_model.cpu_usage(len(actors))
        run.cpu_samples.append(cpu)
        result.peak_memory_usage = max(result.peak_memory_usage, memory)
        result.peak_cpu_usage = max(result.peak_cpu_usage, cpu)
        result.average_cpu_usage = fmean(run.cpu_samples)

    def analyze(self, run: LoadTestRun) -> None:
        """Derive percentiles, throughput, bottlenecks and recommendations."""
        result = run.result
        thresholds = run.config.thresholds

        result.p95_response_time = self.latency.p95(result.average_response_time)
        result.p99_response_time = self.latency.p99(result.average_response_time)
        result.task_processing_rate = (
            result.total_requests / result.duration_seconds
            if result.duration_seconds > 0
            else 0.0
        )

        bottlenecks: list[str] = []
        if result.average_response_time > thresholds.max_response_time_ms:
            bottlenecks.append("Response Time")
        if result.error_rate > thresholds.max_error_rate:
            bottlenecks.append("Error Rate")
        if result.peak_memory_usage > thresholds.max_memory_usage_mb:
            bottlenecks.append("Memory Usage")
        result.bottleneck_components = bottlenecks

        result.recommended_max_actors = recommended_max_actors(result, self.safety_margin)
        result.scaling_recommendations = scaling_recommendations(result)

        logger.info(
            f"Load test analysis complete. Recommended max actors: "
            f"{result.recommended_max_actors}"
        )

    def stop_current_test(self) -> None:
        """Ask every active run to stop at its next round boundary."""
        for run in self._active_runs.values():
            run.running = False

    def get_test_results(self) -> list[LoadTestResult]:
        """Results of every finished invocation, oldest first."""
        return list(self._history)

    async def _spawn_actor(self, run: LoadTestRun, index: int) -> None:
        state = ActorState(
            id=f"{run.test_id}-actor-{index}",
            queue_capacity=self.actor_queue_capacity,
        )
        actor = ActorSimulator(
            state,
            self.backend,
            self.clock,
            distribution=run.config.task_type_distribution,
            rng=random.Random(self._rng.getrandbits(64)),
        )
        await run.pool.add(actor)
        get_metrics().actors_active.inc()
        await actor.populate(run.config.tasks_per_actor)

    async def _retire_actor(self, run: LoadTestRun, actor_id: str) -> None:
        actor = await run.pool.remove(actor_id)
        if actor is not None:
            await actor.stop()
            get_metrics().actors_active.dec()

    async def _sample_periodically(self, run: LoadTestRun) -> None:
        while True:
            await self.clock.sleep(self.sample_interval)
            try:
                self.collect_metrics(run)
            except Exception as e:
                logger.warning(f"Skipping metric sample for {run.test_id}: {e}")

    def _collect_partial_metrics(self, run: LoadTestRun) -> None:
        try:
            self.collect_metrics(run)
        except Exception as e:
            logger.error(f"Metric collection failed for {run.test_id}: {e}")
            run.result.critical_errors.append(f"Metric collection failed: {e}")

    def _finish_timing(self, run: LoadTestRun) -> None:
        run.result.end_time = datetime.fromtimestamp(self.clock.time(), tz=timezone.utc)
        run.result.duration_seconds = self.clock.monotonic() - run.started_at

    def _record_failure(self, run: LoadTestRun, error: Exception) -> None:
        logger.error(f"Load test {run.test_id} failed: {error}")
        run.result.critical_errors.append(f"Load test failed: {error}")
