from __future__ import annotations

from typing import Optional


# PUBLIC_INTERFACE
class TaskClientError(Exception):
    """Base class for failures surfaced to the presentation layer."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# PUBLIC_INTERFACE
class AuthRequired(TaskClientError):
    """An operation needing the network was called with no stored credential."""

    def __init__(self, message: str = "No authentication token") -> None:
        super().__init__(message)


# PUBLIC_INTERFACE
class NetworkFailure(TaskClientError):
    """Transport-level failure: unreachable host, reset connection, timeout."""


# PUBLIC_INTERFACE
class RemoteRejected(TaskClientError):
    """The remote service answered with an error payload."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


# PUBLIC_INTERFACE
class TaskNotFound(TaskClientError, LookupError):
    """A task id is not present in the local collection."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task {task_id} not found")
        self.task_id = task_id
