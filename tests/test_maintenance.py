"""Tests for resets, integrity checks and orphan cleanup."""

import pytest
from sqlalchemy import text

from recipebox.fts import FTS_TABLE, drop_fts_index, fts_index_exists, match_recipe_ids
from recipebox.maintenance import (
    cleanup_orphaned_data,
    reset_recipe_data,
    reset_user_data,
    validate_database_integrity,
)
from recipebox.models import Recipe, RecipeTag, SearchHistory, User
from recipebox.search_history import record_search


@pytest.fixture
def alice(make_user):
    return make_user("alice@example.com")


def _insert_orphans(engine):
    """Insert rows that point at missing parents, bypassing FK checks.

    Runs on the raw driver connection in autocommit mode, since the pragma is
    ignored inside a transaction.
    """
    raw = engine.raw_connection()
    try:
        cursor = raw.cursor()
        cursor.execute("PRAGMA foreign_keys=OFF")
        cursor.execute(
            "INSERT INTO recipe_ingredients (recipe_id, name, sort_order, is_optional) "
            "VALUES (9001, 'ghost flour', 0, 0)"
        )
        cursor.execute(
            "INSERT INTO recipe_instructions (recipe_id, step_number, instruction) "
            "VALUES (9001, 1, 'haunt')"
        )
        cursor.execute(
            "INSERT INTO recipes (user_id, title, is_public, is_archived, created_at, updated_at) "
            "VALUES (9002, 'Ownerless Stew', 0, 0, '2026-01-01 00:00:00', '2026-01-01 00:00:00')"
        )
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
    finally:
        raw.close()


def test_reset_recipe_data_keeps_users(db, alice, make_recipe):
    make_recipe(alice, "Pancakes", ingredients=["flour"], instructions=["Fry"], tags=["breakfast"])
    record_search(db, alice.id, "pancakes", 1)

    reset_recipe_data(db)

    assert db.query(Recipe).count() == 0
    assert db.query(RecipeTag).count() == 0
    assert db.query(User).count() == 1
    assert db.query(SearchHistory).count() == 1
    assert fts_index_exists(db)
    assert db.execute(text(f"SELECT COUNT(*) FROM {FTS_TABLE}")).scalar() == 0


def test_index_triggers_work_after_reset(db, alice, make_recipe):
    make_recipe(alice, "Pancakes")
    reset_recipe_data(db)

    recipe = make_recipe(alice, "Waffles")

    assert match_recipe_ids(db, '"waffles"', 100) == [recipe.id]


def test_reset_user_data_removes_everything(db, alice, make_recipe):
    make_recipe(alice, "Pancakes")
    record_search(db, alice.id, "pancakes", 1)

    reset_user_data(db)

    assert db.query(User).count() == 0
    assert db.query(SearchHistory).count() == 0
    assert db.query(Recipe).count() == 0


def test_validate_clean_database(db, alice, make_recipe):
    make_recipe(alice, "Pancakes", ingredients=["flour"])

    report = validate_database_integrity(db)

    assert report.is_valid
    assert report.issues == []
    assert set(report.orphans) == {
        "ingredients", "instructions", "images", "notes",
        "tag_relations", "recipes_without_owner",
    }


def test_validate_reports_orphans_without_deleting(engine, db, alice):
    _insert_orphans(engine)

    report = validate_database_integrity(db)

    assert not report.is_valid
    assert report.orphans["ingredients"] == 1
    assert report.orphans["instructions"] == 1
    assert report.orphans["recipes_without_owner"] == 1
    assert report.orphans["images"] == 0
    assert "Found 1 orphaned ingredients" in report.issues
    # Read-only
    assert validate_database_integrity(db).orphans == report.orphans


def test_validate_reports_missing_index(db):
    drop_fts_index(db)

    report = validate_database_integrity(db)

    assert report.fts_ok is False
    assert "FTS table is missing or corrupted" in report.issues


def test_cleanup_removes_orphans(engine, db, alice):
    _insert_orphans(engine)

    report = cleanup_orphaned_data(db)

    assert report.cleaned["ingredients"] == 1
    assert report.cleaned["instructions"] == 1
    assert report.cleaned["recipes_without_owner"] == 1
    assert report.total == 3
    assert report.fts_ok is True
    assert validate_database_integrity(db).is_valid
