"""Web routes for HTML pages."""

import logging
from pathlib import Path
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Request, Query
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession

from jobfinder.api.v1.jobs import get_jsearch_client
from jobfinder.config import get_settings
from jobfinder.dependencies.auth import get_current_user, require_user, ensure_csrf_token
from jobfinder.exceptions import JobFinderError
from jobfinder.models.base import get_db
from jobfinder.models.user import User
from jobfinder.schemas.favorite import serialize_favorite
from jobfinder.services import favorites_service
from jobfinder.services.favorites_service import SortKey, SortOrder
from jobfinder.services.search_service import JSearchClient, search_jobs, split_employment_types

logger = logging.getLogger(__name__)

router = APIRouter()
templates = Jinja2Templates(directory=Path(__file__).resolve().parent.parent / "templates")

EMPLOYMENT_OPTIONS = [
    ("FULLTIME", "Full-time"),
    ("PARTTIME", "Part-time"),
    ("CONTRACTOR", "Contract"),
    ("INTERN", "Internship"),
]

EMPLOYMENT_BADGES = {
    "FULLTIME": "Full-time",
    "PARTTIME": "Part-time",
    "CONTRACTOR": "Contract",
    "INTERN": "Internship",
    "TEMPORARY": "Temporary",
}
templates.env.globals["employment_label"] = lambda value: EMPLOYMENT_BADGES.get(value, value or "Not specified")


async def _ctx(request: Request, db: AsyncSession, user: User | None, **extra) -> dict:
    """Build common template context with current_user, csrf_token and favorite ids."""
    csrf_token = ensure_csrf_token(request)

    # Heart state on every card comes from this one lookup
    favorite_ids = set()
    favorites_count = 0
    if user:
        favorite_ids = await favorites_service.favorite_job_ids(db, user.id)
        favorites_count = len(favorite_ids)

    return {
        "request": request,
        "current_user": user,
        "signed_in": user is not None,
        "csrf_token": csrf_token,
        "favorite_ids": favorite_ids,
        "favorites_count": favorites_count,
        **extra,
    }


async def _run_search(
    client: JSearchClient,
    query: str | None,
    location: str | None,
    employment_types: list[str],
) -> dict:
    """Search and return template variables; failures become an error message."""
    try:
        result = await search_jobs(client, query, location, employment_types)
    except JobFinderError as e:
        logger.warning(f"Search failed for '{query}': {e}")
        return {"jobs": [], "search_error": e.message, "has_searched": True}
    jobs = [job.model_dump(by_alias=True) for job in result.jobs]
    return {"jobs": jobs, "search_error": None, "has_searched": True}


@router.get("/", response_class=HTMLResponse)
async def home(
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User | None = Depends(get_current_user),
    client: JSearchClient = Depends(get_jsearch_client),
    query: str | None = None,
    location: str | None = None,
    employment_types: list[str] | None = Query(None),
):
    """Search form, with results when a query was submitted."""
    types = split_employment_types(employment_types)
    results = {"jobs": [], "search_error": None, "has_searched": False}
    if query is not None:
        results = await _run_search(client, query, location, types)

    ctx = await _ctx(request, db, user,
        query=query or "",
        location=location or "",
        employment_types=types,
        employment_options=EMPLOYMENT_OPTIONS,
        **results,
    )
    return templates.TemplateResponse(request, "index.html", ctx)


@router.get("/jobs/partial", response_class=HTMLResponse)
async def jobs_partial(
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User | None = Depends(get_current_user),
    client: JSearchClient = Depends(get_jsearch_client),
    query: str | None = None,
    location: str | None = None,
    employment_types: list[str] | None = Query(None),
):
    """HTMX partial returning job card HTML for the results panel."""
    types = split_employment_types(employment_types)
    results = await _run_search(client, query, location, types)
    ctx = await _ctx(request, db, user, query=query or "", location=location or "", **results)
    return templates.TemplateResponse(request, "partials/job_results.html", ctx)


@router.get("/favorites", response_class=HTMLResponse)
async def favorites_page(
    request: Request,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
    page: int = Query(1, ge=1),
    sort_by: SortKey = Query("savedAt"),
    order: SortOrder = Query("desc"),
    employment_type: str | None = None,
    q: str | None = None,
):
    """The user's saved jobs with sorting, paging and in-page filters."""
    settings = get_settings()
    result = await favorites_service.list_favorites(
        db, user.id, page=page, page_size=settings.favorites_page_size, sort_by=sort_by, order=order
    )

    # Filters narrow the current page only
    favorites = result.items
    employment_types = sorted({f.employment_type for f in favorites if f.employment_type})
    if employment_type:
        favorites = [f for f in favorites if f.employment_type.lower() == employment_type.lower()]
    if q:
        term = q.lower()
        favorites = [
            f for f in favorites
            if term in f.title.lower() or term in f.company.lower() or term in f.location.lower()
        ]

    def page_url(**overrides) -> str:
        params = {"page": page, "sort_by": sort_by, "order": order}
        if employment_type:
            params["employment_type"] = employment_type
        if q:
            params["q"] = q
        params.update(overrides)
        return f"/favorites?{urlencode(params)}"

    def sort_url(key: str) -> str:
        # Clicking the active key flips direction; a new key starts descending
        if key == sort_by:
            return page_url(sort_by=key, order="asc" if order == "desc" else "desc", page=1)
        return page_url(sort_by=key, order="desc", page=1)

    cards = []
    for favorite in favorites:
        card = serialize_favorite(favorite)
        card["id"] = card.pop("jobId")
        cards.append(card)

    ctx = await _ctx(request, db, user,
        favorites=cards,
        pagination=result.pagination,
        sort_by=sort_by,
        order=order,
        employment_type=employment_type or "",
        employment_types=employment_types,
        q=q or "",
        page_url=page_url,
        sort_url=sort_url,
    )
    return templates.TemplateResponse(request, "favorites.html", ctx)
