"""User model. Identity comes from the external sign-in provider."""

from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.orm import relationship

from jobfinder.models.base import Base, TimestampMixin, UUIDMixin


class User(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "users"

    provider_id = Column(String(255), unique=True, nullable=False, index=True)  # Google "sub"
    email = Column(String(255), unique=True, nullable=False, index=True)
    display_name = Column(String(255), nullable=False)
    avatar_url = Column(Text, default="", nullable=False)
    last_login_at = Column(DateTime(timezone=True))

    # Relationships
    favorites = relationship(
        "FavoriteJob",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="FavoriteJob.id",
    )
