from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

import httpx
from pydantic import ValidationError

from .credentials import CredentialStore
from .errors import AuthRequired, RemoteRejected
from .models import Task, TaskDraft, TaskDraftInput, TaskPartial, TaskPatch
from .transport import ServiceClient

logger = logging.getLogger(__name__)

# Primary key field used by the remote store
NATIVE_ID_FIELD = "_id"


# PUBLIC_INTERFACE
def normalize_task(record: Mapping[str, Any]) -> Task:
    """
    Convert one server record into a Task.

    The store-native primary key is mapped to `id`, ISO8601 date strings are
    parsed into datetimes, and fields unknown to the client are dropped.
    Raises pydantic.ValidationError for records missing required fields.
    """
    data = dict(record)
    if NATIVE_ID_FIELD in data:
        data["id"] = data.pop(NATIVE_ID_FIELD)
    return Task.model_validate(data)


def _as_draft(draft: TaskDraftInput) -> TaskDraft:
    if isinstance(draft, TaskDraft):
        return draft
    return TaskDraft.model_validate(dict(draft))


def _as_patch(partial: TaskPartial) -> TaskPatch:
    if isinstance(partial, TaskPatch):
        return partial
    fields = dict(partial)
    fields.pop("id", None)
    fields.pop(NATIVE_ID_FIELD, None)
    return TaskPatch.model_validate(fields)


# PUBLIC_INTERFACE
class RemoteTaskGateway(ServiceClient):
    """
    Remote persistence for the signed-in user's tasks.

    Every call needs a bearer token from the credential store and fails with
    AuthRequired before touching the network when there is none. Calls are
    never retried.
    """

    def __init__(
        self,
        base_url: str,
        credentials: CredentialStore,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ) -> None:
        super().__init__(base_url, client=client, timeout=timeout)
        self._credentials = credentials

    def _token(self) -> str:
        token = self._credentials.get_token()
        if not token:
            raise AuthRequired()
        return token

    def _record(self, data: Any, fallback: str) -> Task:
        if not isinstance(data, Mapping):
            raise RemoteRejected(fallback)
        try:
            return normalize_task(data)
        except ValidationError as exc:
            logger.warning("Malformed task record from server: %s", exc)
            raise RemoteRejected(fallback) from exc

    async def list(self) -> List[Task]:
        """Fetch every task owned by the current identity."""
        fallback = "Failed to fetch tasks"
        body = await self._send("GET", fallback=fallback, token=self._token())
        data = body.get("data")
        if not isinstance(data, list):
            raise RemoteRejected(fallback)
        return [self._record(item, fallback) for item in data]

    async def get(self, task_id: str) -> Task:
        fallback = "Failed to fetch task"
        body = await self._send("GET", f"/{task_id}", fallback=fallback, token=self._token())
        return self._record(body.get("data"), fallback)

    async def create(self, draft: TaskDraftInput) -> Task:
        """Create a task; id and createdAt come back from the server."""
        fallback = "Failed to create task"
        token = self._token()
        body = await self._send("POST", fallback=fallback, token=token, json=_as_draft(draft).to_wire())
        return self._record(body.get("data"), fallback)

    async def update(self, task_id: str, partial: TaskPartial) -> Task:
        """
        Send a partial update. The id travels only in the URL, never in the
        body, even when the caller's mapping contains one.
        """
        fallback = "Failed to update task"
        token = self._token()
        payload = _as_patch(partial).to_wire()
        body = await self._send("PUT", f"/{task_id}", fallback=fallback, token=token, json=payload)
        return self._record(body.get("data"), fallback)

    async def delete(self, task_id: str) -> None:
        await self._send("DELETE", f"/{task_id}", fallback="Failed to delete task", token=self._token())
