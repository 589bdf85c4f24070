"""Recipe model for storing recipe information."""

import enum

from sqlalchemy import Boolean, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin
from .tag import recipe_tag_relations


class Difficulty(str, enum.Enum):
    """How hard a recipe is to cook."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Recipe(Base, TimestampMixin):
    """Model for storing recipes."""

    __tablename__ = "recipes"
    __table_args__ = (
        Index("recipes_user_id_idx", "user_id"),
        Index("recipes_title_idx", "title"),
        Index("recipes_cuisine_idx", "cuisine"),
        Index("recipes_difficulty_idx", "difficulty"),
        Index("recipes_is_archived_idx", "is_archived"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    servings: Mapped[int | None] = mapped_column(Integer, nullable=True)
    prep_time_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cook_time_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    difficulty: Mapped[Difficulty | None] = mapped_column(
        Enum(Difficulty, values_callable=lambda x: [e.value for e in x]),
        nullable=True,
    )
    cuisine: Mapped[str | None] = mapped_column(String(100), nullable=True)
    source_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    source_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_public: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="recipes")
    ingredients: Mapped[list["RecipeIngredient"]] = relationship(
        "RecipeIngredient",
        back_populates="recipe",
        order_by="RecipeIngredient.sort_order",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    instructions: Mapped[list["RecipeInstruction"]] = relationship(
        "RecipeInstruction",
        back_populates="recipe",
        order_by="RecipeInstruction.step_number",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    images: Mapped[list["RecipeImage"]] = relationship(
        "RecipeImage",
        back_populates="recipe",
        order_by="RecipeImage.sort_order",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    notes: Mapped[list["RecipeNote"]] = relationship(
        "RecipeNote",
        back_populates="recipe",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    tags: Mapped[list["RecipeTag"]] = relationship(
        "RecipeTag",
        secondary=recipe_tag_relations,
        back_populates="recipes",
        passive_deletes=True,
    )

    @property
    def total_time_minutes(self) -> int:
        return (self.prep_time_minutes or 0) + (self.cook_time_minutes or 0)

    def __repr__(self) -> str:
        return f"<Recipe(id={self.id}, title='{self.title}')>"
