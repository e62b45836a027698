from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .auth import AuthSession
from .categories import CategoryCatalog
from .credentials import FileCredentialStore
from .gateway import RemoteTaskGateway
from .settings import Settings, get_settings
from .store import TaskStore


@dataclass
class TaskClient:
    """Everything the presentation layer needs, sharing one lifetime."""

    auth: AuthSession
    gateway: RemoteTaskGateway
    store: TaskStore
    categories: CategoryCatalog

    async def aclose(self) -> None:
        self.store.close()
        await self.gateway.aclose()
        await self.auth.aclose()


# PUBLIC_INTERFACE
def build_client(settings: Optional[Settings] = None) -> TaskClient:
    """
    Wire credentials, auth session, gateway and store from settings.

    The store follows the auth session: call `await client.auth.restore()`
    (or login) and the task list is fetched automatically.
    """
    s = settings or get_settings()
    credentials = FileCredentialStore(s.credentials_path)
    auth = AuthSession(s.auth_api_url, credentials, timeout=s.request_timeout)
    gateway = RemoteTaskGateway(s.tasks_api_url, credentials, timeout=s.request_timeout)
    store = TaskStore(gateway, auth)
    return TaskClient(
        auth=auth,
        gateway=gateway,
        store=store,
        categories=CategoryCatalog(s.categories_path),
    )
