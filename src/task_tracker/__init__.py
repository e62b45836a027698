"""
Personal task-tracking client.

The task store keeps the server's task list in memory and derives the
visible list from the active filters and sort key. The reference FastAPI
service lives in `task_tracker.server`.
"""

from .auth import AuthSession, User
from .client import TaskClient, build_client
from .errors import AuthRequired, NetworkFailure, RemoteRejected, TaskClientError, TaskNotFound
from .filtering import filter_tasks
from .gateway import RemoteTaskGateway, normalize_task
from .models import FilterSet, Priority, SortKey, Task, TaskDraft, TaskPatch
from .sorting import advanced_sort, sort_tasks
from .store import TaskStore

__all__ = [
    "AuthRequired",
    "AuthSession",
    "FilterSet",
    "NetworkFailure",
    "Priority",
    "RemoteRejected",
    "RemoteTaskGateway",
    "SortKey",
    "Task",
    "TaskClient",
    "TaskClientError",
    "TaskDraft",
    "TaskNotFound",
    "TaskPatch",
    "TaskStore",
    "User",
    "advanced_sort",
    "build_client",
    "filter_tasks",
    "normalize_task",
    "sort_tasks",
]
