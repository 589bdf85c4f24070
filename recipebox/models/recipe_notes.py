"""Recipe notes model for storing cooking feedback."""

from sqlalchemy import Boolean, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin


class RecipeNote(Base, TimestampMixin):
    """Model for storing a user's notes and rating on a recipe."""

    __tablename__ = "recipe_notes"
    __table_args__ = (
        Index("recipe_notes_recipe_id_idx", "recipe_id"),
        Index("recipe_notes_user_id_idx", "user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    recipe_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    rating: Mapped[int | None] = mapped_column(Integer, nullable=True)  # 1-5 stars
    is_private: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationship to recipe
    recipe: Mapped["Recipe"] = relationship("Recipe", back_populates="notes")

    def __repr__(self) -> str:
        return f"<RecipeNote(id={self.id}, recipe_id={self.recipe_id}, rating={self.rating})>"
