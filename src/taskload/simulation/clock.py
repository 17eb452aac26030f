"""Clocks driving every timed pause in a simulation.

Provides:
- SystemClock: wall-clock time and asyncio.sleep
- VirtualClock: discrete-event virtual time for deterministic runs

Code under test must take every pause through its clock. Under a
VirtualClock a 60 second sustain phase completes as soon as the event loop
has nothing left to do but wait.

Example:
    clock = VirtualClock()
    engine = LoadTestEngine(backend, clock=clock)
    result = await engine.execute_load_test(config)
    assert clock.monotonic() >= config.test_duration
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import time
from abc import ABC, abstractmethod


class Clock(ABC):
    """Abstract time source."""

    @abstractmethod
    def monotonic(self) -> float:
        """Seconds on a monotonic scale, for measuring elapsed time."""
        pass

    @abstractmethod
    def time(self) -> float:
        """Seconds since the Unix epoch, for timestamps."""
        pass

    @abstractmethod
    async def sleep(self, seconds: float) -> None:
        """Suspend the caller for the given number of seconds."""
        pass


class SystemClock(Clock):
    """Real time."""

    def monotonic(self) -> float:
        return time.monotonic()

    def time(self) -> float:
        return time.time()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(max(0.0, seconds))


class VirtualClock(Clock):
    """Discrete-event clock that jumps straight to the next wake-up time.

    Sleepers are parked on a heap ordered by wake time. Once the event loop
    has run SETTLE_PASSES iterations without anybody new going to sleep,
    virtual time jumps to the earliest wake time and every sleeper due at
    that instant is resumed together. Concurrent sleepers therefore overlap
    in virtual time exactly as they would in real time.
    """

    SETTLE_PASSES = 16

    def __init__(self, start: float = 0.0, epoch: float = 1_700_000_000.0) -> None:
        self._now = start
        self._epoch = epoch
        self._sleepers: list[tuple[float, int, asyncio.Future[None]]] = []
        self._sequence = itertools.count()
        self._generation = 0
        self._watching = False

    def monotonic(self) -> float:
        return self._now

    def time(self) -> float:
        return self._epoch + self._now

    @property
    def pending(self) -> int:
        """Number of sleepers still waiting."""
        return sum(1 for _, _, future in self._sleepers if not future.done())

    async def sleep(self, seconds: float) -> None:
        loop = asyncio.get_running_loop()
        future: asyncio.Future[None] = loop.create_future()
        wake_at = self._now + max(0.0, seconds)
        heapq.heappush(self._sleepers, (wake_at, next(self._sequence), future))
        self._generation += 1

        if not self._watching:
            self._watching = True
            loop.call_soon(self._check, loop, self._generation, 0)

        await future

    def advance(self, seconds: float) -> None:
        """Move time forward manually and wake everybody now due."""
        self._now += max(0.0, seconds)
        self._wake_due()

    def _check(self, loop: asyncio.AbstractEventLoop, seen: int, passes: int) -> None:
        self._drop_finished()
        if not self._sleepers:
            self._watching = False
            return

        if self._generation != seen:
            loop.call_soon(self._check, loop, self._generation, 0)
            return

        if passes < self.SETTLE_PASSES:
            loop.call_soon(self._check, loop, seen, passes + 1)
            return

        self._now = max(self._now, self._sleepers[0][0])
        self._wake_due()
        self._generation += 1
        loop.call_soon(self._check, loop, self._generation, 0)

    def _wake_due(self) -> None:
        while self._sleepers and self._sleepers[0][0] <= self._now:
            _, _, future = heapq.heappop(self._sleepers)
            if not future.done():
                future.set_result(None)

    def _drop_finished(self) -> None:
        # Cancelled sleepers must not pull time forward
        while self._sleepers and self._sleepers[0][2].done():
            heapq.heappop(self._sleepers)
