"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.gzip import GZipMiddleware
from starlette.middleware.sessions import SessionMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from jobfinder.config import get_settings
from jobfinder.exceptions import InternalError, JobFinderError, UpstreamError
from jobfinder.models import Base
from jobfinder.models.base import engine, AsyncSessionLocal
from jobfinder.api.v1 import router as api_v1_router
from jobfinder.dependencies.auth import NotAuthenticatedException
from jobfinder.routes.auth import router as auth_router
from jobfinder.routes.web import router as web_router

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    logger.info("Starting %s...", settings.app_name)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables verified")
    yield
    logger.info("Shutting down...")
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    description="Job search with per-user favorites",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(GZipMiddleware, minimum_size=500)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(
    SessionMiddleware,
    secret_key=settings.secret_key,
    max_age=30 * 24 * 60 * 60,
    same_site="lax",
    https_only=not settings.debug,
)


@app.exception_handler(JobFinderError)
async def jobfinder_error_handler(request: Request, exc: JobFinderError):
    """Render service errors as ``{error, message, ...}`` JSON."""
    body = exc.to_dict()
    if isinstance(exc, UpstreamError) and settings.debug:
        body["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"Database error on {request.method} {request.url.path}")
    body = InternalError("An unexpected error occurred").to_dict()
    if settings.debug:
        body["details"] = str(exc)
    return JSONResponse(status_code=500, content=body)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    body = InternalError("An unexpected error occurred").to_dict()
    if settings.debug:
        body["details"] = str(exc)
    return JSONResponse(status_code=500, content=body)


@app.exception_handler(NotAuthenticatedException)
async def not_authenticated_handler(request: Request, exc: NotAuthenticatedException):
    return RedirectResponse("/login", status_code=303)


# Include API routers
app.include_router(api_v1_router)

# Include web routes (HTML pages)
app.include_router(auth_router)
app.include_router(web_router)

# Static files
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")


@app.get("/health")
async def health_check():
    return {"status": "healthy", "app": settings.app_name}


@app.get("/health/detailed")
async def detailed_health_check():
    checks = {}

    # Database
    try:
        async with AsyncSessionLocal() as session:
            result = await session.execute(text("SELECT 1"))
            result.scalar()
            checks["database"] = {"ok": True}
    except Exception as e:
        checks["database"] = {"ok": False, "message": str(e)}

    checks["search_api"] = {"ok": bool(settings.rapidapi_key), "message": None if settings.rapidapi_key else "RAPIDAPI_KEY not set"}

    all_ok = all(check.get("ok", False) for check in checks.values())
    status = "healthy" if all_ok else "degraded"

    return {
        "status": status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": checks,
    }
