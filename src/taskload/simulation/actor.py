"""Simulated actor: one synthetic concurrent user of the task backend.

Each actor owns a bounded local mirror of its backend queue and counters
that the load engine aggregates. Every backend call goes through
``ActorSimulator.measure`` which times it on the clock, counts it and
re-raises failures after recording them.
"""

from __future__ import annotations

import logging
import random
from collections import Counter
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar

from taskload.models.load_test import TaskType, TaskTypeDistribution
from taskload.observability.metrics import get_metrics
from taskload.simulation.backend import Task, TaskBackend
from taskload.simulation.clock import Clock

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Fixed descriptors sent with every add call
HARVESTING_ACTIVITY: dict[str, Any] = {
    "activity": {"id": "wood", "name": "Chop Wood"},
    "location": {"id": "forest", "name": "Forest"},
    "tools": [],
}
CRAFTING_RECIPE: dict[str, Any] = {
    "recipe": {"id": "sword", "name": "Iron Sword"},
    "craftingStation": {"id": "forge", "name": "Forge"},
}
COMBAT_ENEMY: dict[str, Any] = {"enemy": {"id": "goblin", "name": "Goblin"}, "equipment": []}
ACTOR_STATS: dict[str, Any] = {"level": 10, "health": 100, "attack": 12, "defense": 8}


class ActorAction(str, Enum):
    """Activities an actor picks from on each tick."""

    ADD_TASK = "add_task"
    INSPECT_QUEUE = "inspect_queue"
    REORDER_TASKS = "reorder_tasks"
    CANCEL_TASK = "cancel_task"


@dataclass
class ActorState:
    """Counters and local queue of one actor."""

    id: str
    queue_capacity: int = 50
    queue: list[Task] = field(default_factory=list)
    is_active: bool = True
    request_count: int = 0
    error_count: int = 0
    response_time_sum: float = 0.0  # ms
    tasks_added: int = 0
    errors_by_type: Counter[str] = field(default_factory=Counter)

    @property
    def queue_length(self) -> int:
        return len(self.queue)

    @property
    def is_full(self) -> bool:
        return len(self.queue) >= self.queue_capacity


class ActorSimulator:
    """Drives one actor's randomized activity against a backend."""

    def __init__(
        self,
        state: ActorState,
        backend: TaskBackend,
        clock: Clock,
        distribution: TaskTypeDistribution | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.state = state
        self.backend = backend
        self.clock = clock
        self.distribution = distribution or TaskTypeDistribution()
        self.rng = rng or random.Random()

    @property
    def actor_id(self) -> str:
        return self.state.id

    async def measure(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Time and count one backend call.

        The call is always counted as a request. A failure is additionally
        counted as an error, keyed by exception class, and then re-raised.
        """
        metrics = get_metrics()
        started = self.clock.monotonic()
        outcome = "success"
        try:
            return await operation()
        except Exception as exc:
            outcome = "error"
            self.state.error_count += 1
            self.state.errors_by_type[type(exc).__name__] += 1
            raise
        finally:
            elapsed = self.clock.monotonic() - started
            self.state.request_count += 1
            self.state.response_time_sum += elapsed * 1000
            metrics.requests_total.labels(outcome=outcome).inc()
            metrics.request_duration_seconds.observe(elapsed)

    async def tick(self) -> ActorAction | None:
        """Perform one uniformly chosen activity.

        Returns the action taken, or None when the actor is inactive.
        Backend failures propagate after being recorded.
        """
        if not self.state.is_active:
            return None

        action = self.rng.choice(list(ActorAction))
        if action is ActorAction.ADD_TASK:
            await self.add_task()
        elif action is ActorAction.INSPECT_QUEUE:
            await self.inspect_queue()
        elif action is ActorAction.REORDER_TASKS:
            await self.reorder_tasks()
        else:
            await self.cancel_task()
        return action

    def choose_task_type(self) -> TaskType:
        weights = self.distribution.normalized()
        return self.rng.choices(list(weights), weights=list(weights.values()))[0]

    async def add_task(self, task_type: TaskType | None = None) -> Task | None:
        """Queue one task. No-op (and no request) when the queue is full."""
        if self.state.is_full:
            return None

        task_type = task_type or self.choose_task_type()
        actor_id = self.state.id

        if task_type is TaskType.HARVESTING:
            task = await self.measure(
                lambda: self.backend.add_harvesting_task(actor_id, HARVESTING_ACTIVITY, ACTOR_STATS)
            )
        elif task_type is TaskType.CRAFTING:
            task = await self.measure(
                lambda: self.backend.add_crafting_task(
                    actor_id, CRAFTING_RECIPE, ACTOR_STATS, workstation_bonus=0.1, materials=[]
                )
            )
        else:
            task = await self.measure(
                lambda: self.backend.add_combat_task(
                    actor_id, COMBAT_ENEMY, ACTOR_STATS, level=1, combat_stats={}
                )
            )

        self.state.queue.append(task)
        self.state.tasks_added += 1
        return task

    async def inspect_queue(self) -> None:
        status = await self.measure(lambda: self.backend.get_queue_status(self.state.id))
        self.state.queue = list(status.queued_tasks)[: self.state.queue_capacity]

    async def reorder_tasks(self) -> None:
        """Swap up to three random pairs and push the new order."""
        if len(self.state.queue) < 2:
            return

        order = list(self.state.queue)
        for _ in range(min(3, len(order))):
            first = self.rng.randrange(len(order))
            second = self.rng.randrange(len(order))
            order[first], order[second] = order[second], order[first]

        await self.measure(
            lambda: self.backend.reorder_tasks(self.state.id, [task.id for task in order])
        )
        self.state.queue = order

    async def cancel_task(self) -> None:
        if not self.state.queue:
            return

        task = self.state.queue[self.rng.randrange(len(self.state.queue))]
        await self.measure(lambda: self.backend.remove_task(self.state.id, task.id))
        if task in self.state.queue:
            self.state.queue.remove(task)

    async def populate(self, count: int) -> int:
        """Seed the queue with an initial task mix.

        Each type gets ``floor(share * count)`` tasks and combat takes the
        remainder; the mix is shuffled and capped at queue capacity. Failed
        adds are recorded and skipped. Returns the number of tasks added.
        """
        added = 0
        for task_type in self._initial_mix(count):
            try:
                if await self.add_task(task_type) is not None:
                    added += 1
            except Exception as exc:
                logger.debug(f"Initial task for {self.state.id} failed: {exc}")
        return added

    def _initial_mix(self, count: int) -> list[TaskType]:
        shares = self.distribution.normalized()
        harvesting = int(shares[TaskType.HARVESTING] * count)
        crafting = int(shares[TaskType.CRAFTING] * count)
        combat = max(0, count - harvesting - crafting)

        mix = (
            [TaskType.HARVESTING] * harvesting
            + [TaskType.CRAFTING] * crafting
            + [TaskType.COMBAT] * combat
        )
        self.rng.shuffle(mix)
        return mix[: self.state.queue_capacity]

    async def stop(self) -> None:
        """Deactivate and ask the backend to drop all tasks, ignoring failures."""
        self.state.is_active = False
        try:
            await self.backend.stop_all_tasks(self.state.id)
        except Exception as exc:
            logger.debug(f"Ignoring cleanup failure for {self.state.id}: {exc}")
        self.state.queue.clear()
