"""FastAPI dependencies for authentication and database.

The principal is resolved once per request from the bearer token and handed to
endpoints as a parameter. Anonymous requests resolve to ``None``; endpoints
that need an account depend on one of the ``get_current_*`` variants.
"""

import logging
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from src.api.errors import NotAuthenticated, NotFound
from src.database import get_db
from src.models.user import User
from src.services.auth import decode_access_token
from src.services.repository import get_user

logger = logging.getLogger(__name__)

USER_NOT_FOUND = "user not found."

security = HTTPBearer(auto_error=False)


def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User | None:
    """Resolve the authenticated user, or None for an anonymous request."""
    if credentials is None:
        return None

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        logger.info("Ignoring invalid or expired bearer token")
        return None

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        return None

    return get_user(db, user_id)


def get_current_user(
    user: Annotated[User | None, Depends(get_optional_user)],
) -> User:
    """Require an authenticated user."""
    if user is None:
        raise NotAuthenticated()
    return user


def get_current_user_or_404(
    user: Annotated[User | None, Depends(get_optional_user)],
) -> User:
    """Require an authenticated user, reporting its absence as a missing user."""
    if user is None:
        raise NotFound(USER_NOT_FOUND)
    return user


def get_target_user(
    user_id: int,
    db: Annotated[Session, Depends(get_db)],
) -> User | None:
    """Resolve the user addressed by the ``user_id`` path parameter."""
    return get_user(db, user_id)
