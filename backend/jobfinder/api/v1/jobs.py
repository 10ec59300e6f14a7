"""Job search API endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query

from jobfinder.schemas.job import SearchQuery
from jobfinder.services.search_service import JSearchClient, search_jobs, split_employment_types

router = APIRouter(prefix="/jobs", tags=["jobs"])


def get_jsearch_client() -> JSearchClient:
    return JSearchClient.from_settings()


@router.get("/search")
async def search(
    client: JSearchClient = Depends(get_jsearch_client),
    query: str | None = Query(None, description="Job title or keywords"),
    location: str | None = Query(None, description="Country name or free-text location"),
    employment_types: list[str] | None = Query(None, description="FULLTIME, PARTTIME, CONTRACTOR, INTERN"),
):
    """Search the external job listing API."""
    types = split_employment_types(employment_types)
    result = await search_jobs(client, query, location, types)

    echo = SearchQuery(
        search_term=result.query,
        location=result.location,
        employment_types=result.employment_types or None,
        country=result.country,
    )
    return {
        "success": True,
        "data": [job.model_dump(by_alias=True) for job in result.jobs],
        "total": len(result.jobs),
        "query": echo.model_dump(by_alias=True),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
