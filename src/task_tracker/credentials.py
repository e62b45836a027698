from __future__ import annotations

import json
import logging
import os
from threading import RLock
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class CredentialStore(Protocol):
    """Storage for the bearer token issued by the auth service."""

    def get_token(self) -> Optional[str]: ...

    def set_token(self, token: str) -> None: ...

    def clear(self) -> None: ...


class MemoryCredentialStore:
    """Process-local token storage, suitable for tests and short-lived sessions."""

    def __init__(self, token: Optional[str] = None) -> None:
        self._token = token or None

    def get_token(self) -> Optional[str]:
        return self._token

    def set_token(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class FileCredentialStore:
    """
    Token storage backed by a small JSON file ({"token": "..."}).

    The parent directory is created on first write. A missing or unreadable
    file reads as "no token".
    """

    def __init__(self, path: str) -> None:
        self._path = path
        self._lock = RLock()

    def get_token(self) -> Optional[str]:
        with self._lock:
            if not os.path.exists(self._path):
                return None
            try:
                with open(self._path, "r", encoding="utf-8") as f:
                    data = json.load(f)
            except (OSError, ValueError) as exc:
                logger.warning("Ignoring unreadable credentials file %s: %s", self._path, exc)
                return None
            token = data.get("token") if isinstance(data, dict) else None
            return token if isinstance(token, str) and token else None

    def set_token(self, token: str) -> None:
        with self._lock:
            os.makedirs(os.path.dirname(self._path) or ".", exist_ok=True)
            with open(self._path, "w", encoding="utf-8") as f:
                json.dump({"token": token}, f)

    def clear(self) -> None:
        with self._lock:
            try:
                os.remove(self._path)
            except FileNotFoundError:
                pass
