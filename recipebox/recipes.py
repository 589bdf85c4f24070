"""Recipe write paths.

Every mutation goes through the ``recipes`` table, so the FTS triggers keep
the search index in step within the caller's transaction. Functions flush
but never commit; the caller owns the transaction.
"""

import logging

from sqlalchemy.orm import Session

from .errors import RecipeNotFound
from .models import (
    Recipe,
    RecipeIngredient,
    RecipeInstruction,
    RecipeTag,
)
from .schemas import RecipeCreate, RecipeUpdate

logger = logging.getLogger(__name__)


def _get_or_create_tag(name: str, db_session: Session) -> RecipeTag:
    """Find existing tag by name, or create a new one."""
    name = name.strip()
    tag = db_session.query(RecipeTag).filter(RecipeTag.name == name).first()
    if not tag:
        tag = RecipeTag(name=name)
        db_session.add(tag)
        db_session.flush()
    return tag


def _resolve_tags(names: list[str], db_session: Session) -> list[RecipeTag]:
    seen = []
    for name in names:
        if name and name.strip() and name.strip() not in seen:
            seen.append(name.strip())
    return [_get_or_create_tag(name, db_session) for name in seen]


def get_recipe(db_session: Session, recipe_id: int) -> Recipe:
    recipe = db_session.get(Recipe, recipe_id)
    if recipe is None:
        raise RecipeNotFound(recipe_id)
    return recipe


def create_recipe(db_session: Session, user_id: int, data: RecipeCreate) -> Recipe:
    """Insert a recipe with its ingredients, instructions and tags."""
    recipe = Recipe(
        user_id=user_id,
        title=data.title.strip(),
        description=data.description,
        servings=data.servings,
        prep_time_minutes=data.prep_time_minutes,
        cook_time_minutes=data.cook_time_minutes,
        difficulty=data.difficulty,
        cuisine=(data.cuisine or "").strip() or None,
        source_url=data.source_url,
        source_name=data.source_name,
        is_public=data.is_public,
    )
    recipe.ingredients = [
        RecipeIngredient(sort_order=i, **ing.model_dump())
        for i, ing in enumerate(data.ingredients)
    ]
    recipe.instructions = [
        RecipeInstruction(step_number=i + 1, **step.model_dump())
        for i, step in enumerate(data.instructions)
    ]
    recipe.tags = _resolve_tags(data.tags, db_session)

    db_session.add(recipe)
    db_session.flush()
    logger.info(f"Created recipe id={recipe.id} user_id={user_id} title={recipe.title!r}")
    return recipe


def update_recipe(db_session: Session, recipe_id: int, data: RecipeUpdate) -> Recipe:
    """Apply the fields set on ``data``; unset fields are left alone."""
    recipe = get_recipe(db_session, recipe_id)
    changes = data.model_dump(exclude_unset=True)

    tags = changes.pop("tags", None)
    for field, value in changes.items():
        setattr(recipe, field, value)
    if tags is not None:
        recipe.tags = _resolve_tags(tags, db_session)

    db_session.flush()
    logger.info(f"Updated recipe id={recipe_id} fields={sorted(changes)}")
    return recipe


def archive_recipe(db_session: Session, recipe_id: int, archived: bool = True) -> Recipe:
    """Archive (or restore) a recipe; archived recipes leave the search index."""
    recipe = get_recipe(db_session, recipe_id)
    recipe.is_archived = archived
    db_session.flush()
    logger.info(f"Set archived={archived} on recipe id={recipe_id}")
    return recipe


def delete_recipe(db_session: Session, recipe_id: int) -> None:
    """Delete a recipe; child rows go with it via ON DELETE CASCADE."""
    recipe = get_recipe(db_session, recipe_id)
    db_session.delete(recipe)
    db_session.flush()
    logger.info(f"Deleted recipe id={recipe_id}")
