"""Recipe ingredient and instruction child rows."""

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class RecipeIngredient(Base):
    """One ingredient line of a recipe, ordered by sort_order."""

    __tablename__ = "recipe_ingredients"
    __table_args__ = (
        Index("recipe_ingredients_recipe_id_idx", "recipe_id"),
        Index("recipe_ingredients_name_idx", "name"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    recipe_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Stored as text to keep fractions like "1/2"
    amount: Mapped[str | None] = mapped_column(String(50), nullable=True)
    unit: Mapped[str | None] = mapped_column(String(50), nullable=True)
    notes: Mapped[str | None] = mapped_column(String(255), nullable=True)
    group_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False)
    is_optional: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    recipe: Mapped["Recipe"] = relationship("Recipe", back_populates="ingredients")

    def __repr__(self) -> str:
        return f"<RecipeIngredient(recipe_id={self.recipe_id}, name='{self.name}')>"


class RecipeInstruction(Base):
    """One numbered step of a recipe."""

    __tablename__ = "recipe_instructions"
    __table_args__ = (
        Index("recipe_instructions_recipe_id_idx", "recipe_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    recipe_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False
    )
    step_number: Mapped[int] = mapped_column(Integer, nullable=False)
    instruction: Mapped[str] = mapped_column(Text, nullable=False)
    time_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    temperature: Mapped[str | None] = mapped_column(String(50), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    group_name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    recipe: Mapped["Recipe"] = relationship("Recipe", back_populates="instructions")

    def __repr__(self) -> str:
        return f"<RecipeInstruction(recipe_id={self.recipe_id}, step={self.step_number})>"
