from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - TASKS_API_URL: base URL of the remote task collection (default 'http://localhost:5000/api/tasks')
    - AUTH_API_URL: base URL of the authentication endpoints (default 'http://localhost:5000/api/auth')
    - REQUEST_TIMEOUT: per-request timeout in seconds; empty means the httpx default
    - CREDENTIALS_PATH: JSON file holding the bearer token. Default './data/credentials.json'
    - CATEGORIES_PATH: JSON file holding cached category suggestions. Default './data/categories.json'
    - LOG_LEVEL: logging level name (default 'INFO')
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins for the reference service; '*' by default
    """

    tasks_api_url: str
    auth_api_url: str
    request_timeout: Optional[float]
    credentials_path: str
    categories_path: str
    log_level: str
    cors_allow_origins: List[str]


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_timeout(value: str) -> Optional[float]:
    v = value.strip()
    if not v:
        return None
    try:
        timeout = float(v)
    except ValueError:
        return None
    return timeout if timeout > 0 else None


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    log_level = _get_env("LOG_LEVEL", "INFO").strip().upper()
    if log_level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        log_level = "INFO"

    return Settings(
        tasks_api_url=_get_env("TASKS_API_URL", "http://localhost:5000/api/tasks").strip().rstrip("/"),
        auth_api_url=_get_env("AUTH_API_URL", "http://localhost:5000/api/auth").strip().rstrip("/"),
        request_timeout=_parse_timeout(_get_env("REQUEST_TIMEOUT", "")),
        credentials_path=_get_env("CREDENTIALS_PATH", "./data/credentials.json").strip(),
        categories_path=_get_env("CATEGORIES_PATH", "./data/categories.json").strip(),
        log_level=log_level,
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
    )
