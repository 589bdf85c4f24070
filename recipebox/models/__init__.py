"""Database models for recipebox."""

from .base import Base, TimestampMixin, normalize_search_query
from .user import User
from .tag import RecipeTag, recipe_tag_relations
from .recipe import Recipe, Difficulty
from .ingredient import RecipeIngredient, RecipeInstruction
from .image import RecipeImage
from .recipe_notes import RecipeNote
from .search_history import SearchHistory

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "normalize_search_query",
    # Models
    "User",
    "Recipe",
    "Difficulty",
    "RecipeIngredient",
    "RecipeInstruction",
    "RecipeTag",
    "recipe_tag_relations",
    "RecipeImage",
    "RecipeNote",
    "SearchHistory",
]
