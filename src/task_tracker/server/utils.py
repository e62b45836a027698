from __future__ import annotations

from typing import Any, Dict, Iterable, List, Union

from .models import TaskEntity, UserEntity
from .schemas import TaskOut, UserOut


def task_to_wire(entity: TaskEntity) -> Dict[str, Any]:
    return TaskOut(**entity).model_dump(mode="json", by_alias=True)  # type: ignore[arg-type]


def user_to_wire(entity: UserEntity) -> Dict[str, Any]:
    return UserOut(**entity).model_dump(mode="json", by_alias=True)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
def data_envelope(data: Union[Dict[str, Any], Iterable[Dict[str, Any]], None]) -> Dict[str, Any]:
    """
    Build the standard success envelope: {"success": true, "data": ...}.

    Iterables are materialized as a list (plus a "count"), single records
    are passed through.
    """
    if data is None or isinstance(data, dict):
        return {"success": True, "data": data}
    materialized: List[Dict[str, Any]] = list(data)
    return {"success": True, "count": len(materialized), "data": materialized}


def error_envelope(message: str) -> Dict[str, Any]:
    return {"success": False, "message": message}
