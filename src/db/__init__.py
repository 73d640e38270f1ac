"""Database layer for the application."""

from .database import Base, create_db_session, get_engine, get_session_factory
from .models import UserSettings

__all__ = [
    "Base",
    "UserSettings",
    "create_db_session",
    "get_engine",
    "get_session_factory",
]
