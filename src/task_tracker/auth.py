from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, List, Mapping, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .credentials import CredentialStore
from .errors import RemoteRejected, TaskClientError
from .transport import ServiceClient

logger = logging.getLogger(__name__)

IdentityListener = Callable[[Optional["User"]], Awaitable[None]]


# PUBLIC_INTERFACE
class User(BaseModel):
    """The signed-in identity."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., alias="_id")
    email: str
    name: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


def _parse_user(data: Any, fallback: str) -> User:
    if not isinstance(data, Mapping):
        raise RemoteRejected(fallback)
    try:
        return User.model_validate(dict(data))
    except ValidationError as exc:
        raise RemoteRejected(fallback) from exc


# PUBLIC_INTERFACE
class AuthSession(ServiceClient):
    """
    Authentication collaborator for the task store.

    Holds the current identity, persists the bearer token in a credential
    store, and awaits every subscriber whenever the identity changes
    (signed out -> signed in, signed in -> signed out, or a different user).
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
        self._user: Optional[User] = None
        self._listeners: List[IdentityListener] = []

    @property
    def current_user(self) -> Optional[User]:
        return self._user

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        """Register an identity listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    async def _set_user(self, user: Optional[User]) -> None:
        previous = self._user
        self._user = user
        if previous == user:
            return
        logger.info("Identity changed: %s", user.email if user else "signed out")
        for listener in list(self._listeners):
            await listener(user)

    async def _authenticate(self, path: str, email: str, password: str, fallback: str) -> User:
        body = await self._send(
            "POST", path, fallback=fallback, json={"email": email, "password": password}
        )
        token = body.get("token")
        if not isinstance(token, str) or not token:
            raise RemoteRejected(fallback)
        user = _parse_user(body.get("user"), fallback)
        self._credentials.set_token(token)
        await self._set_user(user)
        return user

    async def register(self, email: str, password: str) -> User:
        return await self._authenticate("/register", email, password, "Registration failed")

    async def login(self, email: str, password: str) -> User:
        return await self._authenticate("/login", email, password, "Login failed")

    async def logout(self) -> None:
        self._credentials.clear()
        await self._set_user(None)

    async def restore(self) -> Optional[User]:
        """
        Resume a session from a stored token. Any failure discards the token
        and leaves the session signed out.
        """
        token = self._credentials.get_token()
        if not token:
            await self._set_user(None)
            return None
        try:
            body = await self._send("GET", "/me", fallback="Failed to restore session", token=token)
            user = _parse_user(body.get("user"), "Failed to restore session")
        except TaskClientError as exc:
            logger.info("Stored session rejected: %s", exc.message)
            self._credentials.clear()
            await self._set_user(None)
            return None
        await self._set_user(user)
        return user
