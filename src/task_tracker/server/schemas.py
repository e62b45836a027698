from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models import Priority

# Shared type for incoming deadlines which can be a date, datetime, or ISO8601 string
DeadlineInput = Union[date, datetime, str]


def _parse_deadline(value: Optional[DeadlineInput]) -> Optional[datetime]:
    """
    Normalize deadline input into a datetime.
    - If value is a string, attempt to parse via datetime.fromisoformat; if time is missing, set to 00:00.
    - If value is a date (not datetime), convert to datetime at 00:00.
    - If value is a datetime, return as-is.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return value

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, 0, 0, 0)

    if isinstance(value, str):
        s = value.strip()
        # fromisoformat before 3.11 does not accept a trailing Z
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(s)
        except ValueError:
            try:
                d = date.fromisoformat(s)
                return datetime(d.year, d.month, d.day, 0, 0, 0)
            except ValueError as e:
                raise ValueError(
                    "Invalid deadline format. Use ISO8601 date or datetime string (e.g., '2025-01-31' or '2025-01-31T13:45:00')."
                ) from e

    raise ValueError("Invalid type for deadline; expected date, datetime, or ISO8601 string.")


def _validate_title(v: str) -> str:
    s = v.strip()
    if not (1 <= len(s) <= 200):
        raise ValueError("title length must be between 1 and 200 characters")
    return s


# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """
    Schema for creating a new task. id and createdAt are assigned by the service.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
                "completed": False,
                "priority": "high",
                "deadline": "2025-02-01",
                "category": "Shopping",
            }
        }
    )

    title: str = Field(..., description="Short title for the task", min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    completed: bool = Field(default=False, description="Completion status flag")
    priority: Priority = Field(default=Priority.MEDIUM, description="low, medium or high")
    deadline: Optional[datetime] = Field(
        default=None,
        description="Deadline of the task. Accepts ISO8601 date or datetime; dates are set to 00:00",
    )
    category: Optional[str] = Field(default=None, description="Free-form category label")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """
        Strip whitespace and enforce 1..200 length.
        """
        return _validate_title(v)

    @field_validator("deadline", mode="before")
    @classmethod
    def parse_deadline(cls, v: Optional[DeadlineInput]) -> Optional[datetime]:
        return _parse_deadline(v)


# PUBLIC_INTERFACE
class TaskUpdate(BaseModel):
    """
    Schema for updating an existing task.
    All fields are optional; only provided fields will be updated.
    """

    title: Optional[str] = Field(default=None, description="Short title for the task", min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    completed: Optional[bool] = Field(default=None, description="Completion status flag")
    priority: Optional[Priority] = Field(default=None, description="low, medium or high")
    deadline: Optional[datetime] = Field(default=None, description="Deadline; null clears it")
    category: Optional[str] = Field(default=None, description="Category; null clears it")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        """
        If title is provided, strip whitespace and enforce 1..200 length.
        """
        if v is None:
            return v
        return _validate_title(v)

    @field_validator("deadline", mode="before")
    @classmethod
    def parse_deadline(cls, v: Optional[DeadlineInput]) -> Optional[datetime]:
        return _parse_deadline(v)


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """
    Wire form of a task: primary key as `_id`, timestamps in camelCase.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "_id": "6f1c0a4e9b2d4f7c8e3a1b2c",
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
                "completed": False,
                "priority": "high",
                "deadline": "2025-02-01T00:00:00",
                "category": "Shopping",
                "createdAt": "2025-01-25T10:15:30.123456+00:00",
                "updatedAt": "2025-01-26T09:00:00.000001+00:00",
            }
        }
    )

    id: str = Field(..., serialization_alias="_id")
    title: str
    description: Optional[str] = None
    completed: bool
    priority: Priority
    deadline: Optional[datetime] = None
    category: Optional[str] = None
    created_at: datetime = Field(..., serialization_alias="createdAt")
    updated_at: datetime = Field(..., serialization_alias="updatedAt")


# PUBLIC_INTERFACE
class Credentials(BaseModel):
    """Body of the register and login calls."""

    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=6, max_length=128)
    name: Optional[str] = Field(default=None, max_length=100)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        s = v.strip().lower()
        if "@" not in s:
            raise ValueError("email must be a valid address")
        return s


# PUBLIC_INTERFACE
class UserOut(BaseModel):
    id: str = Field(..., serialization_alias="_id")
    email: str
    name: Optional[str] = None
