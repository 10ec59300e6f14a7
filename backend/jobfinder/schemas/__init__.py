"""Pydantic schemas package."""

from jobfinder.schemas.favorite import (
    FavoriteJobCreate,
    FavoriteJobRead,
    Pagination,
)
from jobfinder.schemas.job import (
    Job,
    SearchQuery,
)

__all__ = [
    # Favorites
    "FavoriteJobCreate",
    "FavoriteJobRead",
    "Pagination",
    # Search
    "Job",
    "SearchQuery",
]
