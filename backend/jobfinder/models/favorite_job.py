"""Favorite job model — a job listing a user saved from search results.

Rows belong to exactly one user and are deleted with it. The integer
primary key doubles as insertion order for stable sorting.
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship

from jobfinder.models.base import Base, utcnow


class FavoriteJob(Base):
    __tablename__ = "favorite_jobs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Natural key from the search provider
    job_id = Column(String(512), nullable=False, index=True)

    title = Column(Text, nullable=False)
    company = Column(Text, nullable=False)
    location = Column(Text, nullable=False)
    employment_type = Column(Text, nullable=False)
    apply_link = Column(Text, nullable=False)
    company_logo = Column(Text)
    description = Column(Text, default="", nullable=False)
    salary = Column(Text, default="", nullable=False)
    saved_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="favorites")

    __table_args__ = (
        UniqueConstraint("user_id", "job_id", name="uq_favorite_jobs_user_job"),
    )
