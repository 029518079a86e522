"""Core app configuration, database, security and token handling."""

from sentinel.core.config import get_settings, settings
from sentinel.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
