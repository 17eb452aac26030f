"""Simulation substrate: clocks, task backend, resource model and actors.

Nothing in this package touches the network or the operating system;
resource figures are parametric simulations.
"""

from taskload.simulation.actor import ActorAction, ActorSimulator, ActorState
from taskload.simulation.backend import InMemoryTaskBackend, QueueStatus, Task, TaskBackend
from taskload.simulation.clock import Clock, SystemClock, VirtualClock
from taskload.simulation.resources import NoiseStrategy, NoNoise, ResourceModel, UniformNoise

__all__ = [
    "Clock",
    "SystemClock",
    "VirtualClock",
    "Task",
    "QueueStatus",
    "TaskBackend",
    "InMemoryTaskBackend",
    "NoiseStrategy",
    "NoNoise",
    "UniformNoise",
    "ResourceModel",
    "ActorAction",
    "ActorState",
    "ActorSimulator",
]
