from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .models import UserEntity
from .repositories import InMemoryUserRepository

_security = HTTPBearer(auto_error=False)


def get_user_repository(request: Request) -> InMemoryUserRepository:
    """Return the account store attached to the running app."""
    return request.app.state.users


# PUBLIC_INTERFACE
def get_current_user(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(_security),
    users: InMemoryUserRepository = Depends(get_user_repository),
) -> UserEntity:
    """
    Resolve the bearer token of the request to a user.

    Raises:
        HTTPException(401) if the token is missing or unknown.
    """
    if creds is None or not creds.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, no token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = users.user_for_token(creds.credentials)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, token failed",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
