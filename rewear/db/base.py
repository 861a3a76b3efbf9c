"""
SQLAlchemy declarative base and shared column helpers.
"""

from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase


def utcnow() -> datetime:
    """Timestamps are set in Python so they are readable right after flush."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all ORM models. Enables Alembic migrations."""

    pass
