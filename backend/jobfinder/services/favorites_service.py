"""Favorites service: list, add and remove a user's saved jobs.

Every operation takes the caller's user id explicitly. ``None`` means the
request carried no valid identity and fails with ``Unauthorized``.

Adding is idempotent: a second add of the same job id raises
``AlreadyExists`` carrying the stored row instead of creating a duplicate.
The ``(user_id, job_id)`` unique constraint backs this up when two adds
race; the loser of the race gets ``AlreadyExists`` as well.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from jobfinder.exceptions import AlreadyExists, NotFound, Unauthorized, ValidationError
from jobfinder.models.favorite_job import FavoriteJob
from jobfinder.models.user import User
from jobfinder.schemas.favorite import FavoriteJobCreate, Pagination

logger = logging.getLogger(__name__)

SortKey = Literal["savedAt", "title", "company"]
SortOrder = Literal["asc", "desc"]

# Wire name -> attribute on FavoriteJobCreate
REQUIRED_FIELDS = {
    "id": "job_id",
    "title": "title",
    "company": "company",
    "location": "location",
    "employmentType": "employment_type",
    "applyLink": "apply_link",
}

_SORT_COLUMNS = {
    "savedAt": FavoriteJob.saved_at,
    "title": func.lower(FavoriteJob.title),
    "company": func.lower(FavoriteJob.company),
}


@dataclass
class FavoritePage:
    items: list[FavoriteJob]
    pagination: Pagination


async def get_user(db: AsyncSession, caller_id: UUID | None) -> User:
    """Resolve the caller to a stored user."""
    if caller_id is None:
        raise Unauthorized("You must be signed in to manage favorites")
    user = await db.get(User, caller_id)
    if user is None:
        raise NotFound("User account not found in database")
    return user


async def _find_favorite(db: AsyncSession, user_id: UUID, job_id: str) -> FavoriteJob | None:
    result = await db.execute(
        select(FavoriteJob).where(FavoriteJob.user_id == user_id, FavoriteJob.job_id == job_id)
    )
    return result.scalar_one_or_none()


async def count_favorites(db: AsyncSession, user_id: UUID) -> int:
    return (await db.execute(
        select(func.count(FavoriteJob.id)).where(FavoriteJob.user_id == user_id)
    )).scalar() or 0


def missing_required_fields(payload: FavoriteJobCreate) -> list[str]:
    """Return wire names of required fields that are absent or blank."""
    missing = []
    for wire_name, attr in REQUIRED_FIELDS.items():
        value = getattr(payload, attr)
        if value is None or not value.strip():
            missing.append(wire_name)
    return missing


async def list_favorites(
    db: AsyncSession,
    caller_id: UUID | None,
    page: int = 1,
    page_size: int = 10,
    sort_by: SortKey = "savedAt",
    order: SortOrder = "desc",
) -> FavoritePage:
    """Return one page of the caller's favorites, sorted.

    Ties on the sort key keep insertion order regardless of direction, so
    walking every page yields each favorite exactly once.
    """
    if page < 1:
        raise ValidationError("page must be a positive integer", fields=["page"])
    if page_size < 1:
        raise ValidationError("limit must be a positive integer", fields=["limit"])
    if sort_by not in _SORT_COLUMNS:
        raise ValidationError(f"Unsupported sort key: {sort_by}", fields=["sortBy"])
    if order not in ("asc", "desc"):
        raise ValidationError(f"Unsupported sort order: {order}", fields=["order"])

    user = await get_user(db, caller_id)
    total = await count_favorites(db, user.id)

    sort_column = _SORT_COLUMNS[sort_by]
    sort_column = sort_column.asc() if order == "asc" else sort_column.desc()

    query = (
        select(FavoriteJob)
        .where(FavoriteJob.user_id == user.id)
        .order_by(sort_column, FavoriteJob.id.asc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    result = await db.execute(query)
    items = list(result.scalars().all())

    pagination = Pagination(
        current_page=page,
        total_pages=math.ceil(total / page_size),
        total_items=total,
        items_per_page=page_size,
        has_next_page=page * page_size < total,
        has_prev_page=page > 1,
    )
    return FavoritePage(items=items, pagination=pagination)


async def favorite_job_ids(db: AsyncSession, caller_id: UUID | None) -> set[str]:
    """All job ids the caller has favorited."""
    user = await get_user(db, caller_id)
    result = await db.execute(
        select(FavoriteJob.job_id).where(FavoriteJob.user_id == user.id)
    )
    return {row[0] for row in result}


async def add_favorite(db: AsyncSession, caller_id: UUID | None, payload: FavoriteJobCreate) -> FavoriteJob:
    """Save a job for the caller.

    Raises ``AlreadyExists`` (with the stored row) when the job is already a
    favorite, and ``ValidationError`` naming any missing required fields.
    """
    user = await get_user(db, caller_id)
    user_id = user.id

    job_id = (payload.job_id or "").strip()
    if job_id:
        existing = await _find_favorite(db, user_id, job_id)
        if existing:
            raise AlreadyExists("This job is already in your favorites", existing=existing)

    missing = missing_required_fields(payload)
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}", fields=missing)

    favorite = FavoriteJob(
        user_id=user_id,
        job_id=job_id,
        title=payload.title.strip(),
        company=payload.company.strip(),
        location=payload.location.strip(),
        employment_type=payload.employment_type,
        apply_link=payload.apply_link,
        company_logo=payload.company_logo or None,
        description=payload.description or "",
        salary=payload.salary or "",
        saved_at=datetime.now(timezone.utc),
    )
    db.add(favorite)

    try:
        await db.flush()
    except IntegrityError:
        # A concurrent request stored the same job between our check and flush
        await db.rollback()
        existing = await _find_favorite(db, user_id, job_id)
        if existing is None:
            raise
        raise AlreadyExists("This job is already in your favorites", existing=existing)

    logger.info(f"User {user_id} added favorite {job_id}")
    return favorite


async def remove_favorite(db: AsyncSession, caller_id: UUID | None, job_id: str | None) -> FavoriteJob:
    """Delete one favorite and return it."""
    user = await get_user(db, caller_id)

    job_id = (job_id or "").strip()
    if not job_id:
        raise ValidationError("Job ID is required", fields=["jobId"])

    favorite = await _find_favorite(db, user.id, job_id)
    if favorite is None:
        raise NotFound("Job not found in favorites")

    await db.delete(favorite)
    await db.flush()

    logger.info(f"User {user.id} removed favorite {job_id}")
    return favorite
