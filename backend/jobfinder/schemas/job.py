"""Pydantic schemas for normalized search results."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Job(BaseModel):
    """Canonical job record built from a raw JSearch result."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    company: str
    location: str
    employment_type: str
    apply_link: str
    company_logo: str | None = None
    description: str = ""
    salary: str = ""
    posted_date: str | None = None
    requirements: list[str] = Field(default_factory=list)
    benefits: list[str] = Field(default_factory=list)
    is_remote: bool = False
    synthetic_id: bool = False  # id was generated because the source had none

    def favorite_payload(self) -> dict:
        """Fields the favorites API expects when saving this job."""
        return {
            "id": self.id,
            "title": self.title,
            "company": self.company,
            "location": self.location,
            "employmentType": self.employment_type,
            "applyLink": self.apply_link,
            "companyLogo": self.company_logo,
            "description": self.description,
            "salary": self.salary,
        }


class SearchQuery(BaseModel):
    """Echo of the search request, as sent back to clients."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    search_term: str
    location: str | None = None
    employment_types: list[str] | None = None
    country: str | None = None
