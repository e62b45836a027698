from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Protocol, Tuple, Union

from .errors import TaskClientError, TaskNotFound
from .filtering import filter_tasks
from .models import FilterInput, FilterSet, SortKey, Task, TaskDraftInput, TaskPartial, TaskPatch
from .sorting import sort_tasks

logger = logging.getLogger(__name__)

VisibleListener = Callable[[Tuple[Task, ...]], None]


class TaskGateway(Protocol):
    """Remote persistence used by the store (see RemoteTaskGateway)."""

    async def list(self) -> List[Task]: ...

    async def create(self, draft: TaskDraftInput) -> Task: ...

    async def update(self, task_id: str, partial: TaskPartial) -> Task: ...

    async def delete(self, task_id: str) -> None: ...


class Identity(Protocol):
    """Auth collaborator: the current user plus change notifications."""

    @property
    def current_user(self) -> Optional[Any]: ...

    def subscribe(
        self, listener: Callable[[Optional[Any]], Awaitable[None]]
    ) -> Callable[[], None]: ...


# PUBLIC_INTERFACE
class TaskStore:
    """
    Client-side task state.

    Owns three pieces of state: the authoritative task collection, the active
    filters and the active sort key. After every change the visible list is
    recomputed as sort(filter(all, filters), sort) and pushed to subscribers
    as an immutable tuple.

    Operations are not serialized. Two mutations in flight at once both reach
    the server, and whichever response arrives last is written back last.
    A failed gateway call leaves the state untouched.
    """

    def __init__(self, gateway: TaskGateway, identity: Identity) -> None:
        self._gateway = gateway
        self._identity = identity
        self._all: Tuple[Task, ...] = ()
        self._filters = FilterSet()
        self._sort: Optional[SortKey] = None
        self._visible: Tuple[Task, ...] = ()
        self._refreshes_in_flight = 0
        self._generation = 0
        self._listeners: List[VisibleListener] = []
        self._unsubscribe_identity: Optional[Callable[[], None]] = identity.subscribe(
            self._on_identity_changed
        )

    # Read accessors

    def visible_tasks(self) -> Tuple[Task, ...]:
        return self._visible

    def all_tasks(self) -> Tuple[Task, ...]:
        return self._all

    def is_loading(self) -> bool:
        return self._refreshes_in_flight > 0

    def active_filters(self) -> FilterSet:
        return self._filters

    def active_sort(self) -> Optional[SortKey]:
        return self._sort

    def get_task(self, task_id: str) -> Optional[Task]:
        for task in self._all:
            if task.id == task_id:
                return task
        return None

    # Subscriptions

    def subscribe(self, listener: VisibleListener) -> Callable[[], None]:
        """Call `listener` with the new visible tuple after every recompute."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def close(self) -> None:
        """Stop following identity changes."""
        if self._unsubscribe_identity is not None:
            self._unsubscribe_identity()
            self._unsubscribe_identity = None

    def _replace_all(self, tasks: Iterable[Task]) -> None:
        self._all = tuple(tasks)
        self._recompute()

    def _recompute(self) -> None:
        self._visible = tuple(sort_tasks(filter_tasks(self._all, self._filters), self._sort))
        for listener in list(self._listeners):
            try:
                listener(self._visible)
            except Exception:
                logger.exception("Visible-list subscriber raised")

    async def _on_identity_changed(self, user: Optional[Any]) -> None:
        # Fetches started under the previous identity must not land.
        self._generation += 1
        try:
            await self.refresh()
        except TaskClientError as exc:
            logger.warning("Refresh after identity change failed: %s", exc.message)

    # Remote operations

    async def refresh(self) -> None:
        """
        Reload the collection from the server. Without an identity the
        collection is cleared instead and no request is made.
        """
        if self._identity.current_user is None:
            self._replace_all(())
            return

        generation = self._generation
        self._refreshes_in_flight += 1
        try:
            tasks = await self._gateway.list()
        except TaskClientError as exc:
            logger.error("Error fetching tasks: %s", exc.message)
            raise
        finally:
            self._refreshes_in_flight -= 1
        if generation != self._generation or self._identity.current_user is None:
            logger.debug("Discarding %d tasks fetched for a previous identity", len(tasks))
            return
        logger.info("Fetched %d tasks", len(tasks))
        self._replace_all(tasks)

    async def start(self) -> None:
        """
        Initial load for a store built around an identity that is already
        present. Later loads follow identity changes on their own.
        """
        await self.refresh()

    async def create_task(self, draft: TaskDraftInput) -> Task:
        try:
            task = await self._gateway.create(draft)
        except TaskClientError as exc:
            logger.error("Error creating task: %s", exc.message)
            raise
        logger.debug("Created task %s", task.id)
        self._replace_all(self._all + (task,))
        return task

    async def update_task(self, task_id: str, partial: TaskPartial) -> Task:
        """
        Update a task on the server and swap the returned record in by id.
        Unknown ids are not checked locally; the server decides.
        """
        try:
            updated = await self._gateway.update(task_id, partial)
        except TaskClientError as exc:
            logger.error("Error updating task %s: %s", task_id, exc.message)
            raise
        logger.debug("Updated task %s", task_id)
        self._replace_all(updated if task.id == task_id else task for task in self._all)
        return updated

    async def delete_task(self, task_id: str) -> None:
        try:
            await self._gateway.delete(task_id)
        except TaskClientError as exc:
            logger.error("Error deleting task %s: %s", task_id, exc.message)
            raise
        logger.debug("Deleted task %s", task_id)
        self._replace_all(task for task in self._all if task.id != task_id)

    async def toggle_completed(self, task_id: str) -> Task:
        """Flip the completion flag of a task already in the collection."""
        task = self.get_task(task_id)
        if task is None:
            raise TaskNotFound(task_id)
        return await self.update_task(task_id, TaskPatch(completed=not task.completed))

    # Local view operations

    def apply_filter(self, filters: FilterInput) -> None:
        self._filters = FilterSet.coerce(filters)
        self._recompute()

    def clear_filters(self) -> None:
        """Drop every filter; the active sort is kept."""
        self._filters = FilterSet()
        self._recompute()

    def apply_sort(self, key: Union[SortKey, str, None]) -> None:
        sort_key = SortKey.parse(key)
        if key is not None and sort_key is None:
            logger.warning("Ignoring unrecognized sort key %r", key)
        self._sort = sort_key
        self._recompute()
