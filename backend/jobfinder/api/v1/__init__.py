"""API v1 router aggregation."""

from fastapi import APIRouter

from jobfinder.api.v1.favorites import router as favorites_router
from jobfinder.api.v1.jobs import router as jobs_router
from jobfinder.api.v1.interactions import router as interactions_router

router = APIRouter(prefix="/api/v1")

router.include_router(favorites_router)
router.include_router(jobs_router)
router.include_router(interactions_router)
