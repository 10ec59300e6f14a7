"""Pydantic schemas for favorite jobs."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class FavoriteJobCreate(BaseModel):
    """Request body for adding a favorite.

    Every field is optional at the schema level so that the favorites service
    can report all missing required fields at once.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    job_id: str | None = Field(default=None, alias="id")
    title: str | None = None
    company: str | None = None
    location: str | None = None
    employment_type: str | None = None
    apply_link: str | None = None
    company_logo: str | None = None
    description: str | None = None
    salary: str | None = None


class FavoriteJobRead(BaseModel):
    """Stored favorite as returned to clients."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    job_id: str
    title: str
    company: str
    location: str
    employment_type: str
    apply_link: str
    company_logo: str | None = None
    description: str = ""
    salary: str = ""
    saved_at: datetime


class Pagination(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next_page: bool
    has_prev_page: bool


def serialize_favorite(favorite) -> dict:
    """JSON-ready camelCase dict for a FavoriteJob row."""
    return FavoriteJobRead.model_validate(favorite).model_dump(mode="json", by_alias=True)
