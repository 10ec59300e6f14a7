"""User provisioning from identity-provider profiles."""

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from jobfinder.exceptions import ValidationError
from jobfinder.models.user import User

logger = logging.getLogger(__name__)


async def upsert_user_from_profile(
    db: AsyncSession,
    *,
    provider_id: str | None,
    email: str | None,
    name: str | None,
    picture: str | None = None,
) -> User:
    """Create the user on first sign-in, refresh profile fields afterwards."""
    if not provider_id or not email:
        raise ValidationError("Sign-in profile is missing an id or email address", fields=["sub", "email"])

    email = email.strip().lower()
    now = datetime.now(timezone.utc)

    result = await db.execute(select(User).where(User.provider_id == provider_id))
    user = result.scalar_one_or_none()

    if user is None:
        user = User(
            provider_id=provider_id,
            email=email,
            display_name=name or email,
            avatar_url=picture or "",
            last_login_at=now,
        )
        db.add(user)
        await db.flush()
        logger.info(f"New user created: {email}")
    else:
        user.email = email
        if name:
            user.display_name = name
        user.avatar_url = picture or ""
        user.last_login_at = now
        await db.flush()
        logger.info(f"Existing user updated: {email}")

    return user
