"""Tests for the recipe write paths."""

import pytest
from pydantic import ValidationError

from recipebox.errors import RecipeNotFound
from recipebox.models import Recipe
from recipebox.recipes import get_recipe, update_recipe
from recipebox.schemas import RecipeUpdate


@pytest.fixture
def alice(make_user):
    return make_user("alice@example.com")


@pytest.mark.parametrize("field", ["title", "is_public"])
def test_update_rejects_null_for_required_columns(field):
    with pytest.raises(ValidationError):
        RecipeUpdate(**{field: None})


def test_update_leaves_omitted_fields_alone(db, alice, make_recipe):
    recipe = make_recipe(alice, "Lentil Dal", description="Weeknight staple", cuisine="Indian")

    update_recipe(db, recipe.id, RecipeUpdate(cuisine="Nepali"))
    db.commit()

    stored = db.get(Recipe, recipe.id)
    assert stored.title == "Lentil Dal"
    assert stored.description == "Weeknight staple"
    assert stored.cuisine == "Nepali"


def test_update_clears_nullable_field(db, alice, make_recipe):
    recipe = make_recipe(alice, "Lentil Dal", description="Weeknight staple")

    update_recipe(db, recipe.id, RecipeUpdate(description=None))
    db.commit()

    assert db.get(Recipe, recipe.id).description is None


def test_update_replaces_tags(db, alice, make_recipe):
    recipe = make_recipe(alice, "Lentil Dal", tags=["vegan", "quick"])

    update_recipe(db, recipe.id, RecipeUpdate(tags=["vegan", " vegan ", "comfort"]))
    db.commit()

    assert sorted(t.name for t in db.get(Recipe, recipe.id).tags) == ["comfort", "vegan"]


def test_get_missing_recipe(db):
    with pytest.raises(RecipeNotFound):
        get_recipe(db, 404)
