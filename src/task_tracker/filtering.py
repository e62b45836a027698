from __future__ import annotations

from typing import Iterable, List

from .models import FilterInput, FilterSet, Task


# PUBLIC_INTERFACE
def filter_tasks(tasks: Iterable[Task], filters: FilterInput = None) -> List[Task]:
    """
    Return the tasks matching every present field of `filters`, in input order.

    Matching is exact: string equality for category, boolean equality for
    completed and enum equality for priority. With no constraints the input
    elements are returned unchanged in a new list. The input is never mutated.
    """
    items = list(tasks)
    constraints = FilterSet.coerce(filters).constraints()
    if not constraints:
        return items
    return [
        task
        for task in items
        if all(getattr(task, name) == value for name, value in constraints.items())
    ]
