from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from ..auth import get_current_user, get_user_repository
from ..models import UserEntity
from ..repositories import EmailAlreadyRegistered, InMemoryUserRepository
from ..schemas import Credentials
from ..utils import user_to_wire

router = APIRouter(
    prefix="/api/auth",
    tags=["auth"],
)


def _session(users: InMemoryUserRepository, user: UserEntity) -> Dict[str, Any]:
    return {"success": True, "token": users.issue_token(user["id"]), "user": user_to_wire(user)}


# PUBLIC_INTERFACE
@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    responses={
        201: {"description": "Account created, token issued"},
        400: {"description": "Validation error or email already registered"},
    },
)
def register(
    payload: Credentials,
    users: InMemoryUserRepository = Depends(get_user_repository),
) -> Dict[str, Any]:
    """
    Create an account and return a bearer token for it.
    """
    try:
        user = users.register(payload)
    except EmailAlreadyRegistered:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists")
    return _session(users, user)


# PUBLIC_INTERFACE
@router.post(
    "/login",
    summary="Login",
    responses={
        200: {"description": "Token issued"},
        401: {"description": "Invalid credentials"},
    },
)
def login(
    payload: Credentials,
    users: InMemoryUserRepository = Depends(get_user_repository),
) -> Dict[str, Any]:
    user = users.authenticate(payload.email, payload.password)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return _session(users, user)


# PUBLIC_INTERFACE
@router.get("/me", summary="Current User")
def me(user: UserEntity = Depends(get_current_user)) -> Dict[str, Any]:
    """Return the account the bearer token belongs to."""
    return {"success": True, "user": user_to_wire(user)}
