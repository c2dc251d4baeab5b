"""Database utilities package."""

from .base import Base, SessionRepository, create_schema, get_engine, get_session_factory, utcnow

__all__ = [
    "Base",
    "SessionRepository",
    "create_schema",
    "get_engine",
    "get_session_factory",
    "utcnow",
]
