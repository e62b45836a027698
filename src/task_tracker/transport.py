from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .errors import NetworkFailure, RemoteRejected

logger = logging.getLogger(__name__)


def _error_message(body: Any, fallback: str) -> str:
    if isinstance(body, dict):
        for key in ("message", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return fallback


def read_envelope(response: httpx.Response, fallback: str) -> Dict[str, Any]:
    """
    Decode a service response into its JSON object.

    Raises RemoteRejected for HTTP errors, bodies flagged with success=false,
    and anything that is not a JSON object. Empty bodies (204) decode to {}.
    """
    if response.status_code == 204 or not response.content:
        body: Any = {}
    else:
        try:
            body = response.json()
        except ValueError:
            body = None

    if response.is_error:
        raise RemoteRejected(_error_message(body, fallback), response.status_code)
    if not isinstance(body, dict):
        raise RemoteRejected(fallback, response.status_code)
    if body.get("success") is False:
        raise RemoteRejected(_error_message(body, fallback), response.status_code)
    return body


class ServiceClient:
    """
    Thin async HTTP wrapper shared by the task gateway and the auth session.

    Owns its httpx.AsyncClient unless one is injected, in which case closing
    is left to the caller.
    """

    def __init__(
        self,
        base_url: str,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        if client is None:
            # httpx applies its own default timeout when none is configured
            client = httpx.AsyncClient(timeout=timeout) if timeout is not None else httpx.AsyncClient()
        self._client = client

    @property
    def base_url(self) -> str:
        return self._base_url

    async def _send(
        self,
        method: str,
        path: str = "",
        *,
        fallback: str,
        token: Optional[str] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        url = f"{self._base_url}{path}"
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        logger.debug("%s %s", method, url)
        try:
            response = await self._client.request(method, url, json=json, headers=headers)
        except httpx.RequestError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise NetworkFailure(f"{fallback}: {exc}") from exc
        return read_envelope(response, fallback)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
