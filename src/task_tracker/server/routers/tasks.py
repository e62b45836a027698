from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request, status

from ..auth import get_current_user
from ..models import UserEntity
from ..repositories import TaskRepository
from ..schemas import TaskCreate, TaskUpdate
from ..utils import data_envelope, task_to_wire

router = APIRouter(
    prefix="/api/tasks",
    tags=["tasks"],
)


def _get_repo(request: Request) -> TaskRepository:
    """
    Dependency returning the task repository attached to the running app.
    """
    return request.app.state.tasks


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")


# PUBLIC_INTERFACE
@router.get(
    "",
    summary="List Tasks",
    description="List every task owned by the authenticated user, oldest first.",
    responses={
        200: {"description": "List retrieved successfully"},
        401: {"description": "Missing or invalid token"},
    },
)
def list_tasks(
    user: UserEntity = Depends(get_current_user),
    repo: TaskRepository = Depends(_get_repo),
) -> Dict[str, Any]:
    """
    List the caller's tasks.
    """
    return data_envelope(task_to_wire(t) for t in repo.list(user["id"]))


# PUBLIC_INTERFACE
@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description="Create a new task and return the created resource.",
    responses={
        201: {"description": "Task created successfully"},
        400: {"description": "Validation error"},
    },
)
def create_task(
    payload: TaskCreate,
    user: UserEntity = Depends(get_current_user),
    repo: TaskRepository = Depends(_get_repo),
) -> Dict[str, Any]:
    """
    Create a new task owned by the caller.
    """
    return data_envelope(task_to_wire(repo.create(user["id"], payload)))


# PUBLIC_INTERFACE
@router.get(
    "/{task_id}",
    summary="Get Task",
    description="Get a single task by ID.",
    responses={
        200: {"description": "Task found"},
        404: {"description": "Task not found"},
    },
)
def get_task(
    task_id: str,
    user: UserEntity = Depends(get_current_user),
    repo: TaskRepository = Depends(_get_repo),
) -> Dict[str, Any]:
    item = repo.get(user["id"], task_id)
    if not item:
        raise _not_found()
    return data_envelope(task_to_wire(item))


# PUBLIC_INTERFACE
@router.put(
    "/{task_id}",
    summary="Update Task",
    description="Update the provided fields of a task; omitted fields are left unchanged.",
    responses={
        200: {"description": "Task updated"},
        404: {"description": "Task not found"},
    },
)
def update_task(
    task_id: str,
    payload: TaskUpdate,
    user: UserEntity = Depends(get_current_user),
    repo: TaskRepository = Depends(_get_repo),
) -> Dict[str, Any]:
    """
    Partial update of a task.
    """
    updated = repo.update(user["id"], task_id, payload)
    if not updated:
        raise _not_found()
    return data_envelope(task_to_wire(updated))


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}",
    summary="Delete Task",
    description="Delete a task by ID.",
    responses={
        200: {"description": "Task deleted"},
        404: {"description": "Task not found"},
    },
)
def delete_task(
    task_id: str,
    user: UserEntity = Depends(get_current_user),
    repo: TaskRepository = Depends(_get_repo),
) -> Dict[str, Any]:
    """
    Delete a task. Returns an empty data object on success, 404 if not found.
    """
    if not repo.delete(user["id"], task_id):
        raise _not_found()
    return data_envelope({})
