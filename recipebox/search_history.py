"""Per-user search history: upsert on search, list, delete, clear."""

import logging
from datetime import datetime

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .config import get_settings
from .errors import AuthenticationRequired
from .models import SearchHistory, normalize_search_query

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


def _require_user(user_id) -> None:
    if not user_id:
        raise AuthenticationRequired()


def _upsert_statement(dialect_name: str, user_id: int, query: str, results_count: int):
    insert = _UPSERT_DIALECTS[dialect_name]
    now = datetime.utcnow()
    stmt = insert(SearchHistory).values(
        user_id=user_id,
        query=query,
        results_count=results_count,
        run_count=1,
        last_searched_at=now,
    )
    return stmt.on_conflict_do_update(
        index_elements=[SearchHistory.user_id, SearchHistory.query],
        set_={
            "results_count": results_count,
            "run_count": SearchHistory.run_count + 1,
            "last_searched_at": now,
        },
    )


def record_search(db_session: Session, user_id: int, query: str | None, results_count: int) -> bool:
    """Upsert the history row for a search inside a savepoint.

    Blank queries are ignored. Nothing is committed; the caller owns the
    transaction. A failed write is logged and only its savepoint is rolled
    back, so pending work in the session survives and the error never
    propagates to the search caller.

    Returns:
        True if the row was written.
    """
    if not query or not query.strip():
        return False
    normalized = normalize_search_query(query)

    dialect_name = db_session.get_bind().dialect.name
    if dialect_name not in _UPSERT_DIALECTS:
        logger.warning(f"Search history is not supported on {dialect_name}")
        return False

    try:
        with db_session.begin_nested():
            db_session.execute(_upsert_statement(dialect_name, user_id, normalized, results_count))
        return True
    except SQLAlchemyError as e:
        logger.warning(
            f"Failed to persist search history: user_id={user_id} "
            f"query={normalized!r} error={e}"
        )
        return False


def list_history(db_session: Session, user_id: int, limit: int | None = None) -> list[SearchHistory]:
    """Most recently searched entries first."""
    _require_user(user_id)
    if limit is None:
        limit = get_settings().history_default_limit
    return (
        db_session.query(SearchHistory)
        .filter(SearchHistory.user_id == user_id)
        .order_by(SearchHistory.last_searched_at.desc())
        .limit(limit)
        .all()
    )


def delete_history_entry(db_session: Session, user_id: int, query: str) -> bool:
    """Delete one entry by query text (normalized the same way as on write).

    Raises:
        ValueError: If the query is blank.

    Returns:
        True if a row was removed.
    """
    _require_user(user_id)
    normalized = normalize_search_query(query or "")
    if not normalized:
        raise ValueError("Query is required")

    deleted = (
        db_session.query(SearchHistory)
        .filter(SearchHistory.user_id == user_id, SearchHistory.query == normalized)
        .delete(synchronize_session=False)
    )
    db_session.commit()
    logger.info(f"Deleted search history entry: user_id={user_id} query={normalized!r}")
    return deleted > 0


def clear_history(db_session: Session, user_id: int) -> int:
    """Delete every history entry for the user. Returns rows removed."""
    _require_user(user_id)
    deleted = (
        db_session.query(SearchHistory)
        .filter(SearchHistory.user_id == user_id)
        .delete(synchronize_session=False)
    )
    db_session.commit()
    logger.info(f"Cleared search history: user_id={user_id} removed={deleted}")
    return deleted
