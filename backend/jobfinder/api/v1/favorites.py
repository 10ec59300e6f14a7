"""Favorites API endpoints."""

from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from jobfinder.dependencies.auth import get_caller_id
from jobfinder.exceptions import AlreadyExists
from jobfinder.models.base import get_db
from jobfinder.schemas.favorite import FavoriteJobCreate, serialize_favorite
from jobfinder.services import favorites_service

router = APIRouter(prefix="/favorites", tags=["favorites"])


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("")
async def list_favorites(
    db: AsyncSession = Depends(get_db),
    caller_id: UUID | None = Depends(get_caller_id),
    page: int = Query(1),
    limit: int = Query(10),
    sort_by: str = Query("savedAt", alias="sortBy"),
    order: str = Query("desc"),
):
    """Page through the caller's favorites."""
    result = await favorites_service.list_favorites(
        db, caller_id, page=page, page_size=limit, sort_by=sort_by, order=order
    )
    return {
        "success": True,
        "data": [serialize_favorite(f) for f in result.items],
        "pagination": result.pagination.model_dump(by_alias=True),
        "timestamp": _timestamp(),
    }


@router.get("/ids")
async def list_favorite_ids(
    db: AsyncSession = Depends(get_db),
    caller_id: UUID | None = Depends(get_caller_id),
):
    """Every favorited job id, for marking search results."""
    job_ids = await favorites_service.favorite_job_ids(db, caller_id)
    return {"success": True, "data": sorted(job_ids), "total": len(job_ids)}


@router.post("", status_code=201)
async def add_favorite(
    payload: FavoriteJobCreate,
    db: AsyncSession = Depends(get_db),
    caller_id: UUID | None = Depends(get_caller_id),
):
    """Save a job. Duplicates are answered with 409 and the stored record."""
    try:
        favorite = await favorites_service.add_favorite(db, caller_id, payload)
    except AlreadyExists as e:
        # Serialize while the session still holds the stored row
        body = e.to_dict()
        body["data"] = serialize_favorite(e.existing)
        return JSONResponse(status_code=409, content=body)

    total = await favorites_service.count_favorites(db, favorite.user_id)
    return JSONResponse(
        status_code=201,
        content={
            "success": True,
            "message": "Job added to favorites successfully",
            "data": serialize_favorite(favorite),
            "totalFavorites": total,
            "timestamp": _timestamp(),
        },
    )


@router.delete("")
async def remove_favorite(
    db: AsyncSession = Depends(get_db),
    caller_id: UUID | None = Depends(get_caller_id),
    job_id: str | None = Query(None, alias="jobId"),
):
    """Remove a job from the caller's favorites."""
    favorite = await favorites_service.remove_favorite(db, caller_id, job_id)
    removed = serialize_favorite(favorite)
    total = await favorites_service.count_favorites(db, favorite.user_id)
    return {
        "success": True,
        "message": "Job removed from favorites successfully",
        "data": removed,
        "totalFavorites": total,
        "timestamp": _timestamp(),
    }
