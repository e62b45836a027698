"""
Reference task service.

A FastAPI app implementing the remote contract the client talks to:
bearer-token auth under /api/auth and owner-scoped task CRUD under
/api/tasks, with records keyed by `_id` and wrapped in {"data": ...}.
"""

from .main import create_app

__all__ = ["create_app"]
