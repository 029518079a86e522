"""SQLAlchemy ORM models."""

from sentinel.models.base import Base
from sentinel.models.refresh_token import RefreshToken
from sentinel.models.user import User

__all__ = ["Base", "RefreshToken", "User"]
