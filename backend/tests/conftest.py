"""Shared fixtures: a throwaway SQLite database per test, a fake JSearch API
and an in-process client for the FastAPI app."""

import os
import tempfile

os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{tempfile.mkdtemp(prefix='jobfinder-')}/app.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("RAPIDAPI_KEY", "test-rapidapi-key")

from datetime import datetime, timezone  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from jobfinder.api.v1.jobs import get_jsearch_client  # noqa: E402
from jobfinder.dependencies.auth import get_caller_id  # noqa: E402
from jobfinder.main import app  # noqa: E402
from jobfinder.models import Base, User  # noqa: E402
from jobfinder.models.base import build_engine, get_db  # noqa: E402
from jobfinder.schemas.favorite import FavoriteJobCreate  # noqa: E402
from jobfinder.services.search_service import JSearchClient  # noqa: E402


def make_payload(job_id: str = "job-123", **overrides) -> FavoriteJobCreate:
    fields = {
        "id": job_id,
        "title": "Backend Engineer",
        "company": "Acme",
        "location": "Austin, TX",
        "employmentType": "FULLTIME",
        "applyLink": f"https://jobs.example.com/{job_id}",
        "companyLogo": None,
        "description": "Build APIs.",
        "salary": "$120k",
    }
    fields.update(overrides)
    return FavoriteJobCreate.model_validate(fields)


def raw_job(job_id: str | None = "abc123", **overrides) -> dict:
    raw = {
        "job_id": job_id,
        "job_title": "Python Developer",
        "employer_name": "Initech",
        "employer_logo": "https://logo.example.com/initech.png",
        "job_city": "Austin",
        "job_state": "TX",
        "job_country": "US",
        "job_employment_type": "FULLTIME",
        "job_apply_link": "https://apply.example.com/abc123",
        "job_description": "Write Python.",
        "job_posted_at_datetime_utc": "2026-10-01T00:00:00.000Z",
        "job_required_skills": ["Python", "SQL"],
        "job_benefits": ["health_insurance"],
        "job_is_remote": False,
    }
    raw.update(overrides)
    return raw


class FakeJSearch:
    """Stands in for the JSearch API via ``httpx.MockTransport``."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.payload: dict = {"status": "OK", "data": []}
        self.error: Exception | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json=self.payload)

    def client(self) -> JSearchClient:
        return JSearchClient("test-rapidapi-key", transport=httpx.MockTransport(self.handler))


class Caller:
    """Identity the app sees for the current test request."""

    def __init__(self):
        self.id = None


@pytest.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


async def _create_user(session_factory, provider_id: str, email: str, name: str) -> User:
    async with session_factory() as session:
        user = User(
            provider_id=provider_id,
            email=email,
            display_name=name,
            avatar_url="",
            last_login_at=datetime.now(timezone.utc),
        )
        session.add(user)
        await session.commit()
        return user


@pytest.fixture
async def user(session_factory) -> User:
    return await _create_user(session_factory, "google-oauth2|a", "a@example.com", "User A")


@pytest.fixture
async def other_user(session_factory) -> User:
    return await _create_user(session_factory, "google-oauth2|b", "b@example.com", "User B")


@pytest.fixture
def jsearch() -> FakeJSearch:
    return FakeJSearch()


@pytest.fixture
def caller() -> Caller:
    return Caller()


@pytest.fixture
async def client(session_factory, jsearch, caller):
    """HTTP client for the app with DB, identity and upstream overridden."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_caller_id] = lambda: caller.id
    app.dependency_overrides[get_jsearch_client] = jsearch.client

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="https://test") as http:
        yield http

    app.dependency_overrides.clear()
