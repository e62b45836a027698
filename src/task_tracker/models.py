from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# PUBLIC_INTERFACE
class Priority(str, Enum):
    """Task priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# PUBLIC_INTERFACE
class SortKey(str, Enum):
    """The single ordering dimension applied to the visible task list."""

    PRIORITY = "priority"
    DEADLINE = "deadline"
    CREATED_AT = "createdAt"
    TITLE = "title"

    @classmethod
    def parse(cls, value: Union["SortKey", str, None]) -> Optional["SortKey"]:
        """Return the matching SortKey, or None for absent or unrecognized values."""
        if value is None or isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


def _strip_title(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    s = v.strip()
    if not s:
        raise ValueError("title must not be empty")
    return s


# PUBLIC_INTERFACE
class Task(BaseModel):
    """
    A task record as seen by the client.

    Instances are immutable; the store replaces records instead of editing them.
    Wire names (createdAt) are accepted as aliases.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., description="Server-assigned identifier")
    title: str = Field(..., description="Short title for the task")
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    completed: bool = Field(default=False, description="Completion status flag")
    priority: Priority = Field(default=Priority.MEDIUM, description="Task priority")
    deadline: Optional[datetime] = Field(default=None, description="Optional deadline")
    category: Optional[str] = Field(default=None, description="Free-form category label")
    created_at: datetime = Field(..., alias="createdAt", description="Creation timestamp")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        """Identifiers are opaque strings even when the server emits numbers."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


# PUBLIC_INTERFACE
class TaskDraft(BaseModel):
    """
    Fields supplied by the user when creating a task.

    id and createdAt are assigned by the server and are never part of a draft.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., description="Short title for the task")
    description: Optional[str] = None
    completed: bool = False
    priority: Priority = Priority.MEDIUM
    deadline: Optional[datetime] = None
    category: Optional[str] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Strip whitespace and reject empty titles."""
        return _strip_title(v)  # type: ignore[return-value]

    def to_wire(self) -> Dict[str, Any]:
        """JSON body for the create call; unset optional fields are omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# PUBLIC_INTERFACE
class TaskPatch(BaseModel):
    """
    A partial update. Only fields explicitly set are sent to the server,
    so an explicit None clears the corresponding value.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    description: Optional[str] = None
    completed: Optional[bool] = None
    priority: Optional[Priority] = None
    deadline: Optional[datetime] = None
    category: Optional[str] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        return _strip_title(v)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


# PUBLIC_INTERFACE
class FilterSet(BaseModel):
    """
    Sparse set of equality predicates. A field left as None places no
    constraint on that dimension; an empty FilterSet matches every task.
    """

    model_config = ConfigDict(frozen=True)

    category: Optional[str] = None
    completed: Optional[bool] = None
    priority: Optional[Priority] = None

    @field_validator("category")
    @classmethod
    def blank_category_is_unset(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v == "":
            return None
        return v

    @classmethod
    def coerce(cls, value: Union["FilterSet", Mapping[str, Any], None]) -> "FilterSet":
        """Accept a FilterSet, a plain mapping, or None."""
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        return cls.model_validate(dict(value))

    def constraints(self) -> Dict[str, Any]:
        """Return only the fields that actually constrain the result."""
        return self.model_dump(exclude_none=True)

    def is_empty(self) -> bool:
        return not self.constraints()


TaskDraftInput = Union[TaskDraft, Mapping[str, Any]]
TaskPartial = Union[TaskPatch, Mapping[str, Any]]
FilterInput = Union[FilterSet, Mapping[str, Any], None]
