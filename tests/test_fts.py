"""Tests for the FTS index and its maintenance triggers."""

from sqlalchemy import text

from recipebox.fts import (
    FTS_TABLE,
    create_fts_index,
    drop_fts_index,
    fts_index_exists,
    match_recipe_ids,
    rebuild_fts_index,
    try_match_recipe_ids,
)
from recipebox.recipes import archive_recipe, delete_recipe, update_recipe
from recipebox.schemas import RecipeUpdate


def _index_count(db) -> int:
    return db.execute(text(f"SELECT COUNT(*) FROM {FTS_TABLE}")).scalar()


def test_insert_mirrors_recipe(db, make_user, make_recipe):
    user = make_user("a@example.com")
    recipe = make_recipe(user, "Chicken Tikka Masala", cuisine="Indian")

    assert match_recipe_ids(db, '"chicken"', 100) == [recipe.id]
    assert match_recipe_ids(db, '"indian"', 100) == [recipe.id]
    assert _index_count(db) == 1


def test_update_rewrites_entry(db, make_user, make_recipe):
    user = make_user("a@example.com")
    recipe = make_recipe(user, "Chicken Soup")

    update_recipe(db, recipe.id, RecipeUpdate(title="Beef Stew"))
    db.commit()

    assert match_recipe_ids(db, '"chicken"', 100) == []
    assert match_recipe_ids(db, '"stew"', 100) == [recipe.id]
    assert _index_count(db) == 1


def test_archive_removes_and_restore_readds(db, make_user, make_recipe):
    user = make_user("a@example.com")
    recipe = make_recipe(user, "Lentil Dal")

    archive_recipe(db, recipe.id)
    db.commit()
    assert _index_count(db) == 0

    archive_recipe(db, recipe.id, archived=False)
    db.commit()
    assert match_recipe_ids(db, '"lentil"', 100) == [recipe.id]


def test_delete_removes_entry(db, make_user, make_recipe):
    user = make_user("a@example.com")
    recipe = make_recipe(user, "Lentil Dal")

    delete_recipe(db, recipe.id)
    db.commit()
    assert _index_count(db) == 0


def test_uncommitted_write_rolls_back_index(db, make_user, make_recipe):
    user = make_user("a@example.com")
    recipe = make_recipe(user, "Lentil Dal")

    update_recipe(db, recipe.id, RecipeUpdate(title="Split Pea Soup"))
    db.rollback()

    assert match_recipe_ids(db, '"lentil"', 100) == [recipe.id]
    assert match_recipe_ids(db, '"pea"', 100) == []


def test_rebuild_repopulates(db, make_user, make_recipe):
    user = make_user("a@example.com")
    make_recipe(user, "Lentil Dal")
    make_recipe(user, "Pad Thai")
    archived = make_recipe(user, "Old Chili")
    archive_recipe(db, archived.id)
    db.execute(text(f"DELETE FROM {FTS_TABLE}"))
    db.commit()

    assert rebuild_fts_index(db) == 2
    assert _index_count(db) == 2


def test_drop_and_recreate(db):
    drop_fts_index(db)
    assert fts_index_exists(db) is False

    create_fts_index(db)
    assert fts_index_exists(db) is True


def test_candidate_limit(db, make_user, make_recipe):
    user = make_user("a@example.com")
    for i in range(5):
        make_recipe(user, f"Soup number {i}")

    assert len(match_recipe_ids(db, '"soup"', 3)) == 3


def test_rejected_expression_yields_no_ids(db):
    assert try_match_recipe_ids(db, '"unterminated', 100) == []
