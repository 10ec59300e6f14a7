"""Authentication dependencies for FastAPI routes."""

import secrets
from uuid import UUID

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from jobfinder.models.base import get_db
from jobfinder.models.user import User


class NotAuthenticatedException(Exception):
    """Raised when a page requires login but user is not authenticated."""
    pass


def get_caller_id(request: Request) -> UUID | None:
    """Return the signed-in user's id from the session, or None."""
    user_id = request.session.get("user_id")
    if not user_id:
        return None
    try:
        return UUID(str(user_id))
    except ValueError:
        return None


async def get_current_user(
    caller_id: UUID | None = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """Return the logged-in user or None."""
    if caller_id is None:
        return None
    return await db.get(User, caller_id)


async def require_user(user: User | None = Depends(get_current_user)) -> User:
    """Return the logged-in user or redirect to login."""
    if not user:
        raise NotAuthenticatedException()
    return user


def ensure_csrf_token(request: Request) -> str:
    """Get or create a CSRF token in the session."""
    token = request.session.get("csrf_token")
    if not token:
        token = secrets.token_urlsafe(32)
        request.session["csrf_token"] = token
    return token


def validate_csrf_token(request: Request, token: str) -> bool:
    """Validate a submitted CSRF token against the session token."""
    session_token = request.session.get("csrf_token")
    if not session_token or not token:
        return False
    return secrets.compare_digest(session_token, token)
