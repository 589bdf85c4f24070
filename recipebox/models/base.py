"""SQLAlchemy base and helper utilities."""

from datetime import datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class TimestampMixin:
    """Mixin that adds created_at and updated_at timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )


def normalize_search_query(query: str) -> str:
    """Normalize a search query for history keys.

    Only trims and lowercases. Punctuation is kept so "mac & cheese" and
    "mac cheese" stay distinct history entries.
    """
    return query.strip().lower()
