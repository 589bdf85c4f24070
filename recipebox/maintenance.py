"""Destructive resets and orphaned-row auditing.

Deletes run child tables first so foreign keys are satisfied:
notes -> images -> tag relations -> ingredients -> instructions -> tags ->
recipes.
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy import delete, text
from sqlalchemy.orm import Session

from .fts import create_fts_index, drop_fts_index, fts_index_exists
from .models import (
    Recipe,
    RecipeImage,
    RecipeIngredient,
    RecipeInstruction,
    RecipeNote,
    RecipeTag,
    SearchHistory,
    User,
    recipe_tag_relations,
)

logger = logging.getLogger(__name__)

RECIPE_DATA_DELETE_ORDER = [
    RecipeNote.__table__,
    RecipeImage.__table__,
    recipe_tag_relations,
    RecipeIngredient.__table__,
    RecipeInstruction.__table__,
    RecipeTag.__table__,
    Recipe.__table__,
]

# category -> (table, referencing column, referenced table.column)
ORPHAN_CHECKS = {
    "ingredients": ("recipe_ingredients", "recipe_id", "recipes.id"),
    "instructions": ("recipe_instructions", "recipe_id", "recipes.id"),
    "images": ("recipe_images", "recipe_id", "recipes.id"),
    "notes": ("recipe_notes", "recipe_id", "recipes.id"),
    "tag_relations": ("recipe_tag_relations", "recipe_id", "recipes.id"),
    "recipes_without_owner": ("recipes", "user_id", "users.id"),
}


@dataclass
class IntegrityReport:
    """Orphan counts per category, plus whether the FTS table answers."""

    orphans: dict[str, int] = field(default_factory=dict)
    fts_ok: bool = True

    @property
    def is_valid(self) -> bool:
        return self.fts_ok and not any(self.orphans.values())

    @property
    def issues(self) -> list[str]:
        issues = [
            f"Found {count} orphaned {category.replace('_', ' ')}"
            for category, count in self.orphans.items()
            if count
        ]
        if not self.fts_ok:
            issues.append("FTS table is missing or corrupted")
        return issues


@dataclass
class CleanupReport:
    cleaned: dict[str, int] = field(default_factory=dict)
    fts_ok: bool = True

    @property
    def total(self) -> int:
        return sum(self.cleaned.values())

    @property
    def details(self) -> list[str]:
        return [
            f"Cleaned {count} orphaned {category.replace('_', ' ')}"
            for category, count in self.cleaned.items()
            if count
        ]


def _orphan_sql(table: str, column: str, target: str) -> tuple[str, str]:
    target_table, target_column = target.split(".")
    where = (
        f"{column} NOT IN (SELECT {target_column} FROM {target_table})"
    )
    count_sql = f"SELECT COUNT(*) FROM {table} WHERE {where}"
    delete_sql = f"DELETE FROM {table} WHERE {where}"
    return count_sql, delete_sql


def reset_recipe_data(db_session: Session) -> None:
    """Delete all recipe data, keeping users.

    The index and its triggers are dropped first so the bulk delete does
    not churn the index, then recreated empty.
    """
    logger.info("Starting recipe data reset (preserving users)")
    try:
        drop_fts_index(db_session)
        for table in RECIPE_DATA_DELETE_ORDER:
            result = db_session.execute(delete(table))
            logger.info(f"Deleted {result.rowcount} rows from {table.name}")
        create_fts_index(db_session)
        db_session.commit()
    except Exception:
        logger.exception("Recipe data reset failed")
        db_session.rollback()
        raise
    logger.info("Recipe data reset completed successfully")


def reset_user_data(db_session: Session) -> None:
    """Delete all recipe data, search history and users."""
    logger.info("Starting user data reset")
    reset_recipe_data(db_session)
    try:
        db_session.execute(delete(SearchHistory.__table__))
        db_session.execute(delete(User.__table__))
        db_session.commit()
    except Exception:
        logger.exception("User data reset failed")
        db_session.rollback()
        raise
    logger.info("User data reset completed successfully")


def validate_database_integrity(db_session: Session) -> IntegrityReport:
    """Count orphaned rows per category without changing anything."""
    logger.info("Starting database integrity check")
    report = IntegrityReport()
    for category, (table, column, target) in ORPHAN_CHECKS.items():
        count_sql, _ = _orphan_sql(table, column, target)
        report.orphans[category] = db_session.execute(text(count_sql)).scalar() or 0
    report.fts_ok = fts_index_exists(db_session)

    logger.info(
        f"Database integrity check completed: valid={report.is_valid} "
        f"issues={len(report.issues)}"
    )
    return report


def cleanup_orphaned_data(db_session: Session) -> CleanupReport:
    """Delete orphaned rows in every category and report what was removed."""
    logger.info("Starting orphaned data cleanup")
    report = CleanupReport()
    try:
        for category, (table, column, target) in ORPHAN_CHECKS.items():
            _, delete_sql = _orphan_sql(table, column, target)
            report.cleaned[category] = db_session.execute(text(delete_sql)).rowcount
        db_session.commit()
    except Exception:
        logger.exception("Orphaned data cleanup failed")
        db_session.rollback()
        raise
    report.fts_ok = fts_index_exists(db_session)

    logger.info(f"Orphaned data cleanup completed: cleaned={report.total} details={report.details}")
    return report
