from __future__ import annotations

import hashlib
import hmac
import secrets
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from threading import RLock
from typing import Dict, List, Optional

from .models import TaskEntity, UserEntity
from .schemas import Credentials, TaskCreate, TaskUpdate


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex[:24]


# PUBLIC_INTERFACE
class TaskRepository(ABC):
    """Abstract repository contract for task storage backends. Every call is scoped to one owner."""

    @abstractmethod
    def create(self, owner_id: str, data: TaskCreate) -> TaskEntity:
        """Create and return a new TaskEntity."""

    @abstractmethod
    def get(self, owner_id: str, task_id: str) -> Optional[TaskEntity]:
        """Return the owner's TaskEntity by id, or None if not found."""

    @abstractmethod
    def update(self, owner_id: str, task_id: str, data: TaskUpdate) -> Optional[TaskEntity]:
        """Update fields of an existing TaskEntity. Return updated entity or None if not found."""

    @abstractmethod
    def delete(self, owner_id: str, task_id: str) -> bool:
        """Delete a TaskEntity by id. Return True if deleted, False if not found."""

    @abstractmethod
    def list(self, owner_id: str) -> List[TaskEntity]:
        """Return every task of the owner in creation order."""


class InMemoryTaskRepository(TaskRepository):
    """
    Thread-safe in-memory repository suitable for testing and local development.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: Dict[str, TaskEntity] = {}

    def create(self, owner_id: str, data: TaskCreate) -> TaskEntity:
        now = _now()
        entity: TaskEntity = {
            "id": _new_id(),
            "owner_id": owner_id,
            "title": data.title,
            "description": data.description,
            "completed": data.completed,
            "priority": data.priority.value,
            "deadline": data.deadline,
            "category": data.category,
            "created_at": now,
            "updated_at": now,
        }
        with self._lock:
            self._items[entity["id"]] = entity
        return entity.copy()

    def _owned(self, owner_id: str, task_id: str) -> Optional[TaskEntity]:
        item = self._items.get(task_id)
        if item is None or item["owner_id"] != owner_id:
            return None
        return item

    def get(self, owner_id: str, task_id: str) -> Optional[TaskEntity]:
        with self._lock:
            item = self._owned(owner_id, task_id)
            return None if item is None else item.copy()

    def update(self, owner_id: str, task_id: str, data: TaskUpdate) -> Optional[TaskEntity]:
        with self._lock:
            existing = self._owned(owner_id, task_id)
            if existing is None:
                return None

            # Update only provided fields; explicit nulls clear the optional ones
            updated = existing.copy()
            provided = data.model_fields_set
            if data.title is not None:
                updated["title"] = data.title
            if data.completed is not None:
                updated["completed"] = data.completed
            if data.priority is not None:
                updated["priority"] = data.priority.value
            if "description" in provided:
                updated["description"] = data.description
            if "deadline" in provided:
                updated["deadline"] = data.deadline
            if "category" in provided:
                updated["category"] = data.category
            updated["updated_at"] = _now()

            self._items[task_id] = updated
            return updated.copy()

    def delete(self, owner_id: str, task_id: str) -> bool:
        with self._lock:
            if self._owned(owner_id, task_id) is None:
                return False
            del self._items[task_id]
            return True

    def list(self, owner_id: str) -> List[TaskEntity]:
        with self._lock:
            items = [t for t in self._items.values() if t["owner_id"] == owner_id]
            return [t.copy() for t in sorted(items, key=lambda t: t["created_at"])]


def _hash_password(password: str, salt: str) -> str:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), 100_000).hex()


class EmailAlreadyRegistered(Exception):
    pass


class InMemoryUserRepository:
    """
    Accounts and bearer tokens for the reference service.

    Tokens are random strings held in memory; they stay valid until the
    process exits.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._users: Dict[str, UserEntity] = {}
        self._by_email: Dict[str, str] = {}
        self._tokens: Dict[str, str] = {}

    def register(self, credentials: Credentials) -> UserEntity:
        salt = secrets.token_hex(8)
        with self._lock:
            if credentials.email in self._by_email:
                raise EmailAlreadyRegistered(credentials.email)
            user: UserEntity = {
                "id": _new_id(),
                "email": credentials.email,
                "name": credentials.name,
                "password_salt": salt,
                "password_hash": _hash_password(credentials.password, salt),
                "created_at": _now(),
            }
            self._users[user["id"]] = user
            self._by_email[user["email"]] = user["id"]
            return user.copy()

    def authenticate(self, email: str, password: str) -> Optional[UserEntity]:
        with self._lock:
            user_id = self._by_email.get(email)
            user = self._users.get(user_id) if user_id else None
        if user is None:
            return None
        expected = _hash_password(password, user["password_salt"])
        if not hmac.compare_digest(expected, user["password_hash"]):
            return None
        return user.copy()

    def issue_token(self, user_id: str) -> str:
        token = secrets.token_urlsafe(32)
        with self._lock:
            self._tokens[token] = user_id
        return token

    def user_for_token(self, token: str) -> Optional[UserEntity]:
        with self._lock:
            user_id = self._tokens.get(token)
            user = self._users.get(user_id) if user_id else None
            return None if user is None else user.copy()
