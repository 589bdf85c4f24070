"""SQLite FTS5 index over recipe title, description and cuisine.

The index is a standalone FTS5 table kept in step with ``recipes`` by
triggers, so every write to ``recipes`` updates the index inside the same
transaction. Only non-archived recipes are mirrored.

All functions accept either a ``Connection`` or a ``Session``; both expose
``execute``.
"""

import logging

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, OperationalError

logger = logging.getLogger(__name__)

FTS_TABLE = "recipes_fts"
FTS_TRIGGERS = ("recipes_fts_update", "recipes_fts_delete", "recipes_fts_insert")

CREATE_TABLE_SQL = f"""
CREATE VIRTUAL TABLE IF NOT EXISTS {FTS_TABLE} USING fts5(
    recipe_id UNINDEXED,
    title,
    description,
    cuisine
)
"""

CREATE_INSERT_TRIGGER_SQL = f"""
CREATE TRIGGER IF NOT EXISTS recipes_fts_insert AFTER INSERT ON recipes
WHEN NEW.is_archived = 0
BEGIN
    INSERT INTO {FTS_TABLE}(recipe_id, title, description, cuisine)
    VALUES (NEW.id, NEW.title, COALESCE(NEW.description, ''), COALESCE(NEW.cuisine, ''));
END
"""

CREATE_UPDATE_TRIGGER_SQL = f"""
CREATE TRIGGER IF NOT EXISTS recipes_fts_update
AFTER UPDATE OF title, description, cuisine, is_archived ON recipes
BEGIN
    DELETE FROM {FTS_TABLE} WHERE recipe_id = OLD.id;
    INSERT INTO {FTS_TABLE}(recipe_id, title, description, cuisine)
    SELECT NEW.id, NEW.title, COALESCE(NEW.description, ''), COALESCE(NEW.cuisine, '')
    WHERE NEW.is_archived = 0;
END
"""

CREATE_DELETE_TRIGGER_SQL = f"""
CREATE TRIGGER IF NOT EXISTS recipes_fts_delete AFTER DELETE ON recipes
BEGIN
    DELETE FROM {FTS_TABLE} WHERE recipe_id = OLD.id;
END
"""

POPULATE_SQL = f"""
INSERT INTO {FTS_TABLE}(recipe_id, title, description, cuisine)
SELECT r.id, r.title, COALESCE(r.description, ''), COALESCE(r.cuisine, '')
FROM recipes r
WHERE r.is_archived = 0
"""

MATCH_SQL = text(
    f"SELECT recipe_id FROM {FTS_TABLE} "
    f"WHERE {FTS_TABLE} MATCH :expression "
    "ORDER BY rank "
    "LIMIT :limit"
)


def create_fts_index(conn) -> None:
    """Create the FTS table and its maintenance triggers (idempotent)."""
    logger.info("Creating recipes FTS table")
    conn.execute(text(CREATE_TABLE_SQL))
    conn.execute(text(CREATE_INSERT_TRIGGER_SQL))
    conn.execute(text(CREATE_UPDATE_TRIGGER_SQL))
    conn.execute(text(CREATE_DELETE_TRIGGER_SQL))
    logger.info("Created FTS table and triggers")


def rebuild_fts_index(conn) -> int:
    """Clear and repopulate the index from non-archived recipes.

    Returns:
        Number of index entries written.
    """
    logger.info("Rebuilding recipes FTS index")
    conn.execute(text(f"DELETE FROM {FTS_TABLE}"))
    conn.execute(text(POPULATE_SQL))
    count = conn.execute(text(f"SELECT COUNT(*) FROM {FTS_TABLE}")).scalar() or 0
    logger.info(f"Rebuilt FTS index with {count} entries")
    return count


def drop_fts_index(conn) -> None:
    """Drop the triggers first, then the FTS table."""
    logger.info("Dropping recipes FTS table")
    for trigger in FTS_TRIGGERS:
        conn.execute(text(f"DROP TRIGGER IF EXISTS {trigger}"))
    conn.execute(text(f"DROP TABLE IF EXISTS {FTS_TABLE}"))
    logger.info("Dropped FTS table and triggers")


def fts_index_exists(conn) -> bool:
    """Return True if the FTS table exists and answers a query."""
    try:
        conn.execute(text(f"SELECT COUNT(*) FROM {FTS_TABLE}")).scalar()
        return True
    except OperationalError as e:
        logger.warning(f"FTS table is missing or corrupted: {e}")
        return False


def match_recipe_ids(conn, expression: str, limit: int) -> list[int]:
    """Run one MATCH expression and return up to ``limit`` ids, best rank first.

    Raises:
        DBAPIError: If the engine rejects the expression.
    """
    rows = conn.execute(MATCH_SQL, {"expression": expression, "limit": limit})
    return [int(row[0]) for row in rows]


def try_match_recipe_ids(conn, expression: str, limit: int) -> list[int]:
    """Like ``match_recipe_ids`` but a rejected expression yields no ids."""
    try:
        return match_recipe_ids(conn, expression, limit)
    except DBAPIError as e:
        logger.debug(f"FTS expression {expression!r} failed: {e}")
        return []
