from __future__ import annotations

from datetime import datetime
from typing import Optional, TypedDict


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """
    Stored form of a task in the reference service.

    Fields:
    - id: Opaque string identifier (exposed on the wire as `_id`)
    - owner_id: Id of the user the task belongs to
    - title: Short title (1..200 chars, trimmed on input via schemas)
    - description: Optional detailed description
    - completed: Boolean completion flag
    - priority: 'low' | 'medium' | 'high'
    - deadline: Optional deadline
    - category: Optional free-form label
    - created_at: UTC creation timestamp
    - updated_at: UTC last update timestamp
    """

    id: str
    owner_id: str
    title: str
    description: Optional[str]
    completed: bool
    priority: str
    deadline: Optional[datetime]
    category: Optional[str]
    created_at: datetime
    updated_at: datetime


# PUBLIC_INTERFACE
class UserEntity(TypedDict):
    """Registered account; the password is kept only as a salted hash."""

    id: str
    email: str
    name: Optional[str]
    password_salt: str
    password_hash: str
    created_at: datetime
