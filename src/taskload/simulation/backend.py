"""Task-processing backend driven by simulated actors.

The backend is the only external collaborator of the load pipeline. This
module defines its interface and an in-memory reference simulation:

- TaskBackend: abstract interface (add/inspect/reorder/remove/stop)
- InMemoryTaskBackend: per-actor queues with optional simulated latency
  and injectable failures

The in-memory backend generates no network traffic; its latency is a
configured delay awaited through the clock.
"""

from __future__ import annotations

import itertools
import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from taskload.errors import BackendError, TaskNotFoundError
from taskload.models.load_test import TaskType
from taskload.simulation.clock import Clock, SystemClock

logger = logging.getLogger(__name__)


@dataclass
class Task:
    """A synthetic task held in an actor's queue."""

    id: str
    type: TaskType
    actor_id: str
    name: str = ""
    duration: float = 0.0
    priority: int = 0
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass
class QueueStatus:
    """Snapshot of one actor's queue as seen by the backend."""

    queued_tasks: list[Task] = field(default_factory=list)
    current_task: Task | None = None
    is_running: bool = False


class TaskBackend(ABC):
    """Abstract task-processing backend."""

    @abstractmethod
    async def add_harvesting_task(
        self,
        actor_id: str,
        activity: dict[str, Any],
        actor_stats: dict[str, Any],
    ) -> Task:
        """Queue a harvesting task for the actor."""
        pass

    @abstractmethod
    async def add_crafting_task(
        self,
        actor_id: str,
        recipe: dict[str, Any],
        actor_stats: dict[str, Any],
        workstation_bonus: float = 0.0,
        materials: list[dict[str, Any]] | None = None,
    ) -> Task:
        """Queue a crafting task for the actor."""
        pass

    @abstractmethod
    async def add_combat_task(
        self,
        actor_id: str,
        enemy: dict[str, Any],
        actor_stats: dict[str, Any],
        level: int = 1,
        combat_stats: dict[str, Any] | None = None,
    ) -> Task:
        """Queue a combat task for the actor."""
        pass

    @abstractmethod
    async def get_queue_status(self, actor_id: str) -> QueueStatus:
        """Return the actor's queue snapshot."""
        pass

    @abstractmethod
    async def remove_task(self, actor_id: str, task_id: str) -> None:
        """Remove a queued task."""
        pass

    @abstractmethod
    async def reorder_tasks(self, actor_id: str, ordered_task_ids: list[str]) -> None:
        """Replace the actor's queue order."""
        pass

    @abstractmethod
    async def stop_all_tasks(self, actor_id: str) -> None:
        """Stop and discard every task of the actor."""
        pass


class InMemoryTaskBackend(TaskBackend):
    """Reference backend simulation keeping one queue per actor.

    Args:
        clock: Clock used to await simulated latency
        latency_ms: Fixed delay added to every call
        jitter_ms: Upper bound of a uniform random delay added on top
        failure_rate: Probability (0..1) that a call raises BackendError
        max_queue_size: Queue length at which further adds are rejected
        seed: Seed for jitter and failure injection
    """

    def __init__(
        self,
        clock: Clock | None = None,
        latency_ms: float = 0.0,
        jitter_ms: float = 0.0,
        failure_rate: float = 0.0,
        max_queue_size: int = 50,
        seed: int | None = None,
    ) -> None:
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError(f"failure_rate must be within [0, 1], got {failure_rate}")
        self.clock = clock or SystemClock()
        self.latency_ms = latency_ms
        self.jitter_ms = jitter_ms
        self.failure_rate = failure_rate
        self.max_queue_size = max_queue_size
        self._rng = random.Random(seed)
        self._queues: dict[str, list[Task]] = {}
        self._task_ids = itertools.count(1)
        self.tasks_accepted = 0
        self.calls = 0

    async def _simulate_call(self, operation: str, actor_id: str) -> None:
        self.calls += 1
        delay_ms = self.latency_ms
        if self.jitter_ms > 0:
            delay_ms += self._rng.uniform(0, self.jitter_ms)
        if delay_ms > 0:
            await self.clock.sleep(delay_ms / 1000)
        if self.failure_rate > 0 and self._rng.random() < self.failure_rate:
            raise BackendError(f"Simulated {operation} failure for actor {actor_id}")

    def _enqueue(self, actor_id: str, task_type: TaskType, payload: dict[str, Any]) -> Task:
        queue = self._queues.setdefault(actor_id, [])
        if len(queue) >= self.max_queue_size:
            raise BackendError(f"Queue full for actor {actor_id}")
        task = Task(
            id=f"task-{next(self._task_ids)}",
            type=task_type,
            actor_id=actor_id,
            name=f"Simulated {task_type.value} task",
            duration=float(self._rng.randint(5, 35)),
            priority=self._rng.randint(0, 4),
            payload=payload,
        )
        queue.append(task)
        self.tasks_accepted += 1
        return task

    async def add_harvesting_task(
        self,
        actor_id: str,
        activity: dict[str, Any],
        actor_stats: dict[str, Any],
    ) -> Task:
        await self._simulate_call("add_harvesting_task", actor_id)
        return self._enqueue(actor_id, TaskType.HARVESTING, {"activity": activity})

    async def add_crafting_task(
        self,
        actor_id: str,
        recipe: dict[str, Any],
        actor_stats: dict[str, Any],
        workstation_bonus: float = 0.0,
        materials: list[dict[str, Any]] | None = None,
    ) -> Task:
        await self._simulate_call("add_crafting_task", actor_id)
        return self._enqueue(
            actor_id,
            TaskType.CRAFTING,
            {
                "recipe": recipe,
                "workstation_bonus": workstation_bonus,
                "materials": materials or [],
            },
        )

    async def add_combat_task(
        self,
        actor_id: str,
        enemy: dict[str, Any],
        actor_stats: dict[str, Any],
        level: int = 1,
        combat_stats: dict[str, Any] | None = None,
    ) -> Task:
        await self._simulate_call("add_combat_task", actor_id)
        return self._enqueue(
            actor_id,
            TaskType.COMBAT,
            {"enemy": enemy, "level": level, "combat_stats": combat_stats or {}},
        )

    async def get_queue_status(self, actor_id: str) -> QueueStatus:
        await self._simulate_call("get_queue_status", actor_id)
        queue = self._queues.get(actor_id, [])
        return QueueStatus(
            queued_tasks=list(queue),
            current_task=queue[0] if queue else None,
            is_running=bool(queue),
        )

    async def remove_task(self, actor_id: str, task_id: str) -> None:
        await self._simulate_call("remove_task", actor_id)
        queue = self._queues.get(actor_id, [])
        for index, task in enumerate(queue):
            if task.id == task_id:
                del queue[index]
                return
        raise TaskNotFoundError(actor_id, task_id)

    async def reorder_tasks(self, actor_id: str, ordered_task_ids: list[str]) -> None:
        await self._simulate_call("reorder_tasks", actor_id)
        queue = self._queues.get(actor_id, [])
        by_id = {task.id: task for task in queue}
        for task_id in ordered_task_ids:
            if task_id not in by_id:
                raise TaskNotFoundError(actor_id, task_id)
        reordered = [by_id[task_id] for task_id in ordered_task_ids]
        listed = set(ordered_task_ids)
        # Tasks missing from the new order keep their relative position at the end
        reordered.extend(task for task in queue if task.id not in listed)
        self._queues[actor_id] = reordered

    async def stop_all_tasks(self, actor_id: str) -> None:
        try:
            await self._simulate_call("stop_all_tasks", actor_id)
        finally:
            dropped = self._queues.pop(actor_id, [])
        if dropped:
            logger.debug(f"Stopped {len(dropped)} tasks for actor {actor_id}")

    def queue_length(self, actor_id: str) -> int:
        """Current queue length without a simulated call."""
        return len(self._queues.get(actor_id, []))
