"""Exceptions raised by the recipe search core."""


class RecipeboxError(Exception):
    """Base class for recipebox errors."""


class AuthenticationRequired(RecipeboxError):
    """No user id was supplied by the session provider."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class RecipeNotFound(RecipeboxError):
    """A recipe id did not resolve to a row."""

    def __init__(self, recipe_id: int):
        self.recipe_id = recipe_id
        super().__init__(f"Recipe {recipe_id} not found")
