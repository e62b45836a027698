from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple, Union

from .models import Priority, SortKey, Task

PRIORITY_RANK = {Priority.HIGH: 3, Priority.MEDIUM: 2, Priority.LOW: 1}


def _instant(value: datetime) -> float:
    # Naive timestamps are read as UTC so mixed inputs stay comparable.
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def _deadline_key(task: Task) -> Tuple[bool, float]:
    if task.deadline is None:
        return (True, 0.0)
    return (False, _instant(task.deadline))


# PUBLIC_INTERFACE
def sort_tasks(tasks: Iterable[Task], key: Union[SortKey, str, None]) -> List[Task]:
    """
    Return a new list ordered by `key`; the input is never mutated.

    - priority: high, medium, low
    - deadline: earliest first, tasks without a deadline last
    - createdAt: newest first
    - title: case-insensitive ascending

    Ties keep their input order. An absent or unrecognized key returns the
    input order unchanged.
    """
    items = list(tasks)
    sort_key: Optional[SortKey] = SortKey.parse(key)

    if sort_key is SortKey.PRIORITY:
        return sorted(items, key=lambda t: -PRIORITY_RANK[t.priority])
    if sort_key is SortKey.DEADLINE:
        return sorted(items, key=_deadline_key)
    if sort_key is SortKey.CREATED_AT:
        return sorted(items, key=lambda t: -_instant(t.created_at))
    if sort_key is SortKey.TITLE:
        return sorted(items, key=lambda t: t.title.casefold())
    return items


# PUBLIC_INTERFACE
def advanced_sort(tasks: Iterable[Task]) -> List[Task]:
    """
    Multi-criteria ordering: open tasks before completed ones, then by
    deadline (earliest first, undated last), then by priority (high first).
    """
    return sorted(
        tasks,
        key=lambda t: (t.completed, _deadline_key(t), -PRIORITY_RANK[t.priority]),
    )
