"""Per-user search history ledger."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class SearchHistory(Base):
    """One row per (user, normalized query).

    ``query`` is always stored trimmed and lowercased; ``run_count`` only
    ever grows.
    """

    __tablename__ = "user_search_history"
    __table_args__ = (
        Index("user_search_history_last_searched_idx", "last_searched_at"),
    )

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    query: Mapped[str] = mapped_column(Text, primary_key=True)
    results_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    run_count: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    last_searched_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<SearchHistory(user_id={self.user_id}, query='{self.query}', runs={self.run_count})>"
