"""Pydantic schemas for search parameters and results."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import get_settings
from .models import Difficulty

SortBy = Literal[
    "title",
    "created_at",
    "updated_at",
    "prep_time_minutes",
    "cook_time_minutes",
    "average_rating",
    "relevance",
    "difficulty",
]
SortOrder = Literal["asc", "desc"]

MIN_QUERY_LENGTH = 2


def _default_limit() -> int:
    return get_settings().search_default_limit


class SearchParams(BaseModel):
    """Filters, sort and pagination for a recipe search."""

    query: str | None = None
    cuisine: list[str] | None = None
    difficulty: list[Difficulty] | None = None
    tags: list[str] | None = None
    max_prep_time: int | None = Field(default=None, ge=0)
    max_cook_time: int | None = Field(default=None, ge=0)
    servings: int | None = Field(default=None, ge=1)
    is_public: bool | None = None
    sort_by: SortBy = "updated_at"
    sort_order: SortOrder = "desc"
    limit: int = Field(default_factory=_default_limit, ge=1)
    offset: int = Field(default=0, ge=0)

    @field_validator("query")
    @classmethod
    def check_query_length(cls, v):
        if v is not None and v.strip() and len(v.strip()) < MIN_QUERY_LENGTH:
            raise ValueError("Search query too short")
        return v

    @field_validator("limit")
    @classmethod
    def check_max_limit(cls, v):
        max_limit = get_settings().search_max_limit
        if v > max_limit:
            raise ValueError(f"Limit must be {max_limit} or less")
        return v

    @property
    def has_query(self) -> bool:
        return bool(self.query and self.query.strip())


class IngredientOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    amount: str | None = None
    unit: str | None = None
    notes: str | None = None
    group_name: str | None = None
    sort_order: int
    is_optional: bool = False


class InstructionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    step_number: int
    instruction: str
    time_minutes: int | None = None
    temperature: str | None = None
    notes: str | None = None
    group_name: str | None = None


class TagOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    color: str | None = None
    category: str | None = None
    created_at: datetime


class ImageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    filename: str
    original_name: str | None = None
    mime_type: str
    file_size: int
    width: int | None = None
    height: int | None = None
    alt_text: str | None = None
    is_hero: bool = False
    sort_order: int


class OwnerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str | None = None
    email: str


class RecipeWithDetails(BaseModel):
    """A recipe row expanded with its child records."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    title: str
    description: str | None = None
    servings: int | None = None
    prep_time_minutes: int | None = None
    cook_time_minutes: int | None = None
    total_time_minutes: int = 0
    difficulty: Difficulty | None = None
    cuisine: str | None = None
    source_url: str | None = None
    source_name: str | None = None
    is_public: bool
    is_archived: bool
    created_at: datetime
    updated_at: datetime
    ingredients: list[IngredientOut] = []
    instructions: list[InstructionOut] = []
    tags: list[TagOut] = []
    images: list[ImageOut] = []
    user: OwnerOut | None = None


class SearchFilters(BaseModel):
    """Facet values available for the filter UI."""

    cuisines: list[str] = []
    difficulties: list[Difficulty] = []
    tags: list[TagOut] = []


class SearchResult(BaseModel):
    recipes: list[RecipeWithDetails] = []
    total: int = 0
    has_more: bool = False
    filters: SearchFilters = Field(default_factory=SearchFilters)


class SearchHistoryEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    query: str
    results_count: int
    run_count: int
    last_searched_at: datetime


class IngredientIn(BaseModel):
    name: str = Field(min_length=1)
    amount: str | None = None
    unit: str | None = None
    notes: str | None = None
    group_name: str | None = None
    is_optional: bool = False


class InstructionIn(BaseModel):
    instruction: str = Field(min_length=1)
    time_minutes: int | None = Field(default=None, ge=0)
    temperature: str | None = None
    notes: str | None = None
    group_name: str | None = None


class RecipeCreate(BaseModel):
    """Fields accepted when saving a new recipe."""

    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    servings: int | None = Field(default=None, ge=1)
    prep_time_minutes: int | None = Field(default=None, ge=0)
    cook_time_minutes: int | None = Field(default=None, ge=0)
    difficulty: Difficulty | None = None
    cuisine: str | None = None
    source_url: str | None = None
    source_name: str | None = None
    is_public: bool = False
    ingredients: list[IngredientIn] = []
    instructions: list[InstructionIn] = []
    tags: list[str] = []


class RecipeUpdate(BaseModel):
    """Scalar fields that may change on an existing recipe."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    servings: int | None = Field(default=None, ge=1)
    prep_time_minutes: int | None = Field(default=None, ge=0)
    cook_time_minutes: int | None = Field(default=None, ge=0)
    difficulty: Difficulty | None = None
    cuisine: str | None = None
    is_public: bool | None = None
    tags: list[str] | None = None

    @field_validator("title", "is_public")
    @classmethod
    def reject_null(cls, v, info):
        # Omit the field to leave it unchanged; these columns are NOT NULL
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v
