"""Job search proxy for the JSearch API (RapidAPI).

Translates a search form submission into JSearch query parameters and
normalizes the loosely-typed results into ``Job`` records. One upstream
request per search, no retries.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import httpx

from jobfinder.config import get_settings
from jobfinder.exceptions import ServiceUnavailable, UpstreamError, ValidationError
from jobfinder.schemas.job import Job

logger = logging.getLogger(__name__)


# Country names users commonly type -> ISO 3166-1 alpha-2 codes understood by JSearch
COUNTRY_CODES = {
    "india": "in",
    "united states": "us",
    "usa": "us",
    "united kingdom": "gb",
    "uk": "gb",
    "germany": "de",
    "canada": "ca",
    "australia": "au",
    "japan": "jp",
    "china": "cn",
}

NO_TITLE = "No title available"
UNKNOWN_COMPANY = "Unknown Company"
NO_LOCATION = "Location not specified"
NO_EMPLOYMENT_TYPE = "Not specified"
NO_APPLY_LINK = "#"


class JSearchClient:
    """Async client for the JSearch ``/search`` endpoint."""

    def __init__(
        self,
        api_key: str,
        host: str = "jsearch.p.rapidapi.com",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.host = host
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls) -> "JSearchClient":
        settings = get_settings()
        return cls(settings.rapidapi_key, settings.rapidapi_host, settings.search_timeout)

    @property
    def search_url(self) -> str:
        return f"https://{self.host}/search"

    async def search(self, params: dict[str, str]) -> list[dict[str, Any]]:
        """Run one search request and return the raw ``data`` list."""
        headers = {
            "X-RapidAPI-Key": self.api_key,
            "X-RapidAPI-Host": self.host,
        }
        logger.info(f"Fetching jobs from {self.search_url} params={params}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.get(self.search_url, params=params, headers=headers)
        except httpx.TransportError as e:
            logger.error(f"JSearch request failed: {e}")
            raise ServiceUnavailable(
                "Unable to connect to job search service. Please try again later."
            ) from e

        if resp.status_code >= 400:
            logger.error(f"JSearch API error: status={resp.status_code} body={resp.text[:500]}")
            raise UpstreamError(
                "Failed to fetch jobs from external service",
                upstream_status=resp.status_code,
                details=resp.text,
            )

        try:
            data = resp.json()
        except ValueError as e:
            logger.error(f"JSearch returned invalid JSON: {e}")
            raise UpstreamError(
                "Job search service returned an unreadable response",
                upstream_status=resp.status_code,
            ) from e

        jobs = data.get("data") if isinstance(data, dict) else None
        return jobs or []


@dataclass
class SearchResult:
    jobs: list[Job]
    query: str
    location: str | None = None
    employment_types: list[str] = field(default_factory=list)
    country: str | None = None


def resolve_location(location: str | None) -> tuple[str | None, str | None]:
    """Split a typed location into ``(country_code, free_text_location)``.

    Known country names map to a code; anything else is passed through as a
    free-text location. Blank input yields ``(None, None)``.
    """
    if not location or not location.strip():
        return None, None
    cleaned = location.strip()
    code = COUNTRY_CODES.get(cleaned.lower())
    if code:
        return code, None
    return None, cleaned


def build_search_params(
    query: str,
    location: str | None = None,
    employment_types: list[str] | None = None,
) -> dict[str, str]:
    """Build JSearch query parameters. The query must already be validated."""
    params = {
        "query": query.strip(),
        "page": "1",
        "num_pages": "1",
        "date_posted": "all",
    }

    country, free_text = resolve_location(location)
    if free_text:
        params["location"] = free_text
    if country:
        params["country"] = country

    types = [t for t in (employment_types or []) if t]
    if types:
        params["employment_types"] = ",".join(types)

    return params


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _string_list(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [_text(item) for item in value if item]


def normalize_job(raw: dict[str, Any], now: datetime | None = None) -> Job:
    """Convert one raw JSearch result into a ``Job``.

    Missing display fields degrade to placeholder text. A result without
    ``job_id`` gets ``"{employer}-{epoch millis}"``, which is only unique
    within a single response and is flagged via ``synthetic_id``.
    """
    now = now or datetime.now(timezone.utc)
    employer = raw.get("employer_name")

    job_id = raw.get("job_id")
    synthetic = not job_id
    if synthetic:
        job_id = f"{employer or 'unknown'}-{int(now.timestamp() * 1000)}"

    city = raw.get("job_city")
    state = raw.get("job_state")
    if city and state:
        location = f"{city}, {state}"
    else:
        location = raw.get("job_country") or NO_LOCATION

    return Job(
        id=_text(job_id),
        title=raw.get("job_title") or NO_TITLE,
        company=employer or UNKNOWN_COMPANY,
        location=location,
        employment_type=raw.get("job_employment_type") or NO_EMPLOYMENT_TYPE,
        apply_link=raw.get("job_apply_link") or NO_APPLY_LINK,
        company_logo=raw.get("employer_logo") or None,
        description=_text(raw.get("job_description")),
        salary=_text(raw.get("job_salary")),
        posted_date=raw.get("job_posted_at_datetime_utc") or now.isoformat(),
        requirements=_string_list(raw.get("job_required_skills")),
        benefits=_string_list(raw.get("job_benefits")),
        is_remote=bool(raw.get("job_is_remote")),
        synthetic_id=synthetic,
    )


async def search_jobs(
    client: JSearchClient,
    query: str | None,
    location: str | None = None,
    employment_types: list[str] | None = None,
) -> SearchResult:
    """Validate, query JSearch once and normalize the results."""
    if not query or not query.strip():
        raise ValidationError("Job title/query is required", fields=["query"])

    params = build_search_params(query, location, employment_types)
    raw_jobs = await client.search(params)

    now = datetime.now(timezone.utc)
    jobs = []
    for raw in raw_jobs:
        if not isinstance(raw, dict):
            logger.warning(f"Skipping malformed JSearch result: {raw!r}")
            continue
        jobs.append(normalize_job(raw, now))

    logger.info(f"Search '{params['query']}' returned {len(jobs)} jobs")

    return SearchResult(
        jobs=jobs,
        query=query,
        location=location or None,
        employment_types=[t for t in (employment_types or []) if t],
        country=params.get("country"),
    )


def split_employment_types(values: list[str] | None) -> list[str]:
    """Accept both repeated and comma-joined ``employment_types`` parameters."""
    types = []
    for value in values or []:
        types.extend(part.strip() for part in value.split(",") if part.strip())
    return types
