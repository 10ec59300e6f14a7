"""ORM models. Importing this package registers every table on ``Base.metadata``."""

from jobfinder.models.base import Base
from jobfinder.models.user import User
from jobfinder.models.favorite_job import FavoriteJob

__all__ = ["Base", "User", "FavoriteJob"]
