"""Tag vocabulary and the recipe/tag association table."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


recipe_tag_relations = Table(
    "recipe_tag_relations",
    Base.metadata,
    Column(
        "recipe_id",
        Integer,
        ForeignKey("recipes.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "tag_id",
        Integer,
        ForeignKey("recipe_tags.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class RecipeTag(Base):
    """Globally deduplicated tag, e.g. "vegan" or "weeknight"."""

    __tablename__ = "recipe_tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    color: Mapped[str | None] = mapped_column(String(20), nullable=True)
    category: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )

    recipes: Mapped[list["Recipe"]] = relationship(
        "Recipe", secondary=recipe_tag_relations, back_populates="tags"
    )

    def __repr__(self) -> str:
        return f"<RecipeTag(id={self.id}, name='{self.name}')>"
