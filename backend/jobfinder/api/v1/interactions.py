"""HTMX endpoint for the favorite button on job cards."""

import logging
from pathlib import Path
from uuid import UUID

from fastapi import APIRouter, Depends, Request, HTTPException
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession

from jobfinder.dependencies.auth import get_caller_id, validate_csrf_token
from jobfinder.exceptions import AlreadyExists, JobFinderError, NotFound
from jobfinder.models.base import get_db
from jobfinder.schemas.favorite import FavoriteJobCreate
from jobfinder.services import favorites_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/interactions", tags=["interactions"])
templates = Jinja2Templates(directory=Path(__file__).resolve().parents[2] / "templates")

JOB_FIELDS = ("id", "title", "company", "location", "employmentType", "applyLink", "companyLogo", "description", "salary")


def _check_csrf(request: Request):
    """Validate CSRF token from X-CSRF-Token header."""
    token = request.headers.get("X-CSRF-Token", "")
    if not validate_csrf_token(request, token):
        raise HTTPException(status_code=403, detail="Invalid CSRF token")


async def _is_favorite(db: AsyncSession, caller_id: UUID, job_id: str) -> bool:
    """Re-read the stored state for one job after a failed toggle."""
    try:
        return job_id in await favorites_service.favorite_job_ids(db, caller_id)
    except JobFinderError as e:
        logger.warning(f"Could not reload favorites for {caller_id}: {e}")
        return False


@router.post("/favorite", response_class=HTMLResponse)
async def toggle_favorite(
    request: Request,
    caller_id: UUID | None = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
):
    """Favorite or unfavorite a job. Returns the updated heart button partial."""
    form = await request.form()
    job = {name: form.get(name) or None for name in JOB_FIELDS}
    want_favorite = form.get("favorite") == "true"
    ctx = {"request": request, "job": job, "is_favorite": False, "error": None, "signed_in": caller_id is not None}

    # Anonymous visitors get a sign-in prompt; nothing reaches the service
    if caller_id is None:
        return templates.TemplateResponse(request, "partials/favorite_button.html", ctx)

    _check_csrf(request)

    try:
        await favorites_service.get_user(db, caller_id)
        # AlreadyExists / NotFound mean the stored state already matches the request
        if want_favorite:
            try:
                await favorites_service.add_favorite(db, caller_id, FavoriteJobCreate.model_validate(job))
            except AlreadyExists:
                pass
        else:
            try:
                await favorites_service.remove_favorite(db, caller_id, job["id"])
            except NotFound:
                pass
        ctx["is_favorite"] = want_favorite
    except JobFinderError as e:
        logger.warning(f"Favorite toggle failed for {caller_id}/{job['id']}: {e}")
        await db.rollback()
        ctx["is_favorite"] = await _is_favorite(db, caller_id, job["id"] or "")
        ctx["error"] = e.message

    return templates.TemplateResponse(request, "partials/favorite_button.html", ctx)
