"""Exception hierarchy for taskload.

Runtime load behaviour (actor failures, failed scenarios, analysis errors) is
recorded in the produced reports and never raised. Only caller misuse
surfaces as an exception:

- BaselineNotFoundError: comparing against a baseline that was never set
- SuiteAlreadyRunningError: starting a suite on a runner that is busy
"""

from __future__ import annotations


class TaskloadError(Exception):
    """Base class for all taskload errors."""


class BaselineNotFoundError(TaskloadError, LookupError):
    """No baseline registered for a version/environment pair."""

    def __init__(self, version: str, environment: str):
        self.version = version
        self.environment = environment
        super().__init__(f"Baseline not found for version {version} in {environment}")


class SuiteAlreadyRunningError(TaskloadError, RuntimeError):
    """A suite was started while another one is still running."""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"{kind} is already running")


class BackendError(TaskloadError):
    """A simulated task-backend call failed."""


class TaskNotFoundError(BackendError):
    """The referenced task does not exist in the actor's queue."""

    def __init__(self, actor_id: str, task_id: str):
        self.actor_id = actor_id
        self.task_id = task_id
        super().__init__(f"Task {task_id} not found for actor {actor_id}")
