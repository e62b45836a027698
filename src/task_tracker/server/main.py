from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..settings import Settings, get_settings
from .repositories import InMemoryTaskRepository, InMemoryUserRepository, TaskRepository
from .routers import auth as auth_router
from .routers import tasks as tasks_router
from .utils import error_envelope

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "auth", "description": "Account registration, login and bearer token lookup."},
    {"name": "tasks", "description": "CRUD operations on the authenticated user's tasks."},
]


# PUBLIC_INTERFACE
def create_app(
    settings: Optional[Settings] = None,
    *,
    tasks: Optional[TaskRepository] = None,
    users: Optional[InMemoryUserRepository] = None,
) -> FastAPI:
    """
    Build the reference task service.

    Each app gets its own in-memory repositories unless they are passed in,
    so separate apps never share accounts or tasks.
    """
    s = settings or get_settings()
    app = FastAPI(
        title="Task Service",
        description="Reference implementation of the remote task store used by the task tracker client.",
        version="0.1.0",
        openapi_tags=openapi_tags,
    )
    app.state.tasks = tasks if tasks is not None else InMemoryTaskRepository()
    app.state.users = users if users is not None else InMemoryUserRepository()

    # Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
    allow_all = (s.cors_allow_origins == ["*"]) or (len(s.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else s.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """
        Render HTTP errors in the service's error envelope:
            {"success": false, "message": "<detail>"}
        """
        return JSONResponse(
            status_code=exc.status_code,
            content=error_envelope(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Return a consistent JSON structure for request validation errors.

        Response format:
            {
                "success": false,
                "message": "<first validation message>",
                "detail": [... pydantic/fastapi error details ...]
            }
        """
        errors = exc.errors()
        message = str(errors[0].get("msg")) if errors else "Request validation failed"
        logger.debug("Rejected %s %s: %s", request.method, request.url.path, message)
        content = error_envelope(message)
        content["detail"] = [{"loc": list(e.get("loc", ())), "msg": str(e.get("msg"))} for e in errors]
        return JSONResponse(status_code=400, content=content)

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health.
        """
        return {"message": "Healthy"}

    app.include_router(auth_router.router)
    app.include_router(tasks_router.router)
    return app


app = create_app()
