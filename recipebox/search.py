"""Recipe search: query planning, FTS strategy cascade, hydration and facets.

Flow for one search:

    visibility + archived predicates
    -> FTS strategies in order (phrase, all terms, prefix, any term)
    -> pattern-match fallback when no strategy hits
    -> cuisine / difficulty / time / servings / tag filters
    -> count, sort, paginate
    -> hydrate page, record history, build facets
"""

import logging
import re
from collections import defaultdict
from typing import Callable

from sqlalchemy import distinct, func, or_, select
from sqlalchemy.orm import Session

from .config import get_settings
from .errors import AuthenticationRequired
from .fts import try_match_recipe_ids
from .models import (
    Difficulty,
    Recipe,
    RecipeImage,
    RecipeIngredient,
    RecipeInstruction,
    RecipeNote,
    RecipeTag,
    User,
    recipe_tag_relations,
)
from .schemas import (
    ImageOut,
    IngredientOut,
    InstructionOut,
    OwnerOut,
    RecipeWithDetails,
    SearchFilters,
    SearchParams,
    SearchResult,
    TagOut,
)
from .search_history import record_search

logger = logging.getLogger(__name__)

_UNSAFE_FTS_CHARS = re.compile(r"[^a-zA-Z0-9\s]")
_DIFFICULTY_ORDER = {d: i for i, d in enumerate(Difficulty)}

# "relevance" has no ranking score; it means "leave the row order alone".
# "average_rating" has no aggregate column yet and sorts by title.
SORT_COLUMNS = {
    "title": Recipe.title,
    "created_at": Recipe.created_at,
    "updated_at": Recipe.updated_at,
    "prep_time_minutes": Recipe.prep_time_minutes,
    "cook_time_minutes": Recipe.cook_time_minutes,
    "difficulty": Recipe.difficulty,
    "average_rating": Recipe.title,
    "relevance": None,
}


# =============================================================================
# FTS Strategies
# =============================================================================


def sanitize_query(query: str) -> str:
    """Strip everything FTS5 could read as syntax."""
    return _UNSAFE_FTS_CHARS.sub("", query).strip()


def split_terms(clean_query: str) -> list[str]:
    return clean_query.split()


def phrase_strategy(terms: list[str]) -> str | None:
    """Exact phrase: all terms adjacent and in order."""
    if not terms:
        return None
    return '"' + " ".join(terms) + '"'


def all_terms_strategy(terms: list[str]) -> str | None:
    if len(terms) < 2:
        return None
    return " AND ".join(f'"{t}"' for t in terms)


def prefix_strategy(terms: list[str]) -> str | None:
    """Prefix match, only for a single term long enough to be selective."""
    if len(terms) != 1 or len(terms[0]) < 3:
        return None
    return f'"{terms[0]}"*'


def any_terms_strategy(terms: list[str]) -> str | None:
    if len(terms) < 2:
        return None
    return " OR ".join(f'"{t}"' for t in terms)


FTS_STRATEGIES: list[Callable[[list[str]], str | None]] = [
    phrase_strategy,
    all_terms_strategy,
    prefix_strategy,
    any_terms_strategy,
]


def build_match_expressions(terms: list[str]) -> list[str]:
    """MATCH expressions to try, most precise first."""
    expressions = []
    for strategy in FTS_STRATEGIES:
        expression = strategy(terms)
        if expression is not None:
            expressions.append(expression)
    return expressions


def find_fts_candidates(db_session: Session, terms: list[str], limit: int) -> list[int]:
    """Return ids from the first strategy with hits, or [] if none hit."""
    for expression in build_match_expressions(terms):
        ids = try_match_recipe_ids(db_session, expression, limit)
        if ids:
            logger.debug(f"FTS strategy {expression!r} matched {len(ids)} recipes")
            return ids
    return []


# =============================================================================
# Predicates
# =============================================================================


def escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def pattern_match_condition(query: str):
    """Case-insensitive substring match on the recipe and its child rows."""
    pattern = f"%{escape_like(query.strip())}%"

    def like(column):
        return column.ilike(pattern, escape="\\")

    return or_(
        like(Recipe.title),
        like(Recipe.description),
        like(Recipe.cuisine),
        select(RecipeIngredient.id)
        .where(
            RecipeIngredient.recipe_id == Recipe.id,
            or_(like(RecipeIngredient.name), like(RecipeIngredient.notes)),
        )
        .exists(),
        select(RecipeInstruction.id)
        .where(
            RecipeInstruction.recipe_id == Recipe.id,
            like(RecipeInstruction.instruction),
        )
        .exists(),
        select(RecipeNote.id)
        .where(RecipeNote.recipe_id == Recipe.id, like(RecipeNote.content))
        .exists(),
    )


def visibility_condition(user_id: int, is_public: bool | None):
    """Which recipes the caller may see.

    Unset: own recipes plus everyone's public ones. True: public recipes
    only. False: the caller's own private recipes; other users' private
    recipes are never visible.
    """
    if is_public is None:
        return or_(Recipe.user_id == user_id, Recipe.is_public.is_(True))
    if is_public:
        return Recipe.is_public.is_(True)
    return (Recipe.is_public.is_(False)) & (Recipe.user_id == user_id)


def text_condition(db_session: Session, query: str, candidate_limit: int):
    clean_query = sanitize_query(query)
    if clean_query:
        ids = find_fts_candidates(db_session, split_terms(clean_query), candidate_limit)
        if ids:
            return Recipe.id.in_(ids)
        logger.info(f"No FTS hits for {query!r}, falling back to pattern match")
    else:
        logger.info(f"Query {query!r} is empty after sanitizing, using pattern match")
    return pattern_match_condition(query)


def recipe_ids_with_all_tags(db_session: Session, tag_names: list[str]) -> list[int]:
    """Ids of recipes carrying every one of ``tag_names``."""
    wanted = set(tag_names)
    rows = (
        db_session.query(recipe_tag_relations.c.recipe_id)
        .join(RecipeTag, RecipeTag.id == recipe_tag_relations.c.tag_id)
        .filter(RecipeTag.name.in_(wanted))
        .group_by(recipe_tag_relations.c.recipe_id)
        .having(func.count(distinct(RecipeTag.id)) == len(wanted))
        .all()
    )
    return [row[0] for row in rows]


# =============================================================================
# Hydration and Facets
# =============================================================================


def _group_by_recipe(rows, key=lambda row: row.recipe_id) -> dict[int, list]:
    grouped = defaultdict(list)
    for row in rows:
        grouped[key(row)].append(row)
    return grouped


def hydrate_recipes(db_session: Session, recipes: list[Recipe]) -> list[RecipeWithDetails]:
    """Expand recipe rows with their children, keeping the input order.

    One query per child table for the whole page.
    """
    if not recipes:
        return []
    ids = [r.id for r in recipes]

    ingredients = _group_by_recipe(
        db_session.query(RecipeIngredient)
        .filter(RecipeIngredient.recipe_id.in_(ids))
        .order_by(RecipeIngredient.sort_order, RecipeIngredient.id)
    )
    instructions = _group_by_recipe(
        db_session.query(RecipeInstruction)
        .filter(RecipeInstruction.recipe_id.in_(ids))
        .order_by(RecipeInstruction.step_number, RecipeInstruction.id)
    )
    images = _group_by_recipe(
        db_session.query(RecipeImage)
        .filter(RecipeImage.recipe_id.in_(ids))
        .order_by(RecipeImage.sort_order, RecipeImage.id)
    )
    tags = _group_by_recipe(
        db_session.query(recipe_tag_relations.c.recipe_id, RecipeTag)
        .join(RecipeTag, RecipeTag.id == recipe_tag_relations.c.tag_id)
        .filter(recipe_tag_relations.c.recipe_id.in_(ids))
        .order_by(RecipeTag.name),
        key=lambda row: row[0],
    )
    owners = {
        u.id: u
        for u in db_session.query(User).filter(User.id.in_({r.user_id for r in recipes}))
    }

    details = []
    for recipe in recipes:
        data = {c.key: getattr(recipe, c.key) for c in Recipe.__table__.columns}
        owner = owners.get(recipe.user_id)
        data.update(
            total_time_minutes=recipe.total_time_minutes,
            ingredients=[IngredientOut.model_validate(i) for i in ingredients[recipe.id]],
            instructions=[InstructionOut.model_validate(i) for i in instructions[recipe.id]],
            tags=[TagOut.model_validate(row[1]) for row in tags[recipe.id]],
            images=[ImageOut.model_validate(i) for i in images[recipe.id]],
            user=OwnerOut.model_validate(owner) if owner else None,
        )
        details.append(RecipeWithDetails.model_validate(data))
    return details


def build_filters(db_session: Session, user_id: int) -> SearchFilters:
    """Distinct cuisines, difficulties and tags for the filter UI.

    Cuisines and difficulties come from non-archived recipes the caller can
    see; tags are the whole vocabulary.
    """
    visible = (Recipe.is_archived.is_(False), visibility_condition(user_id, None))

    cuisines = (
        db_session.query(Recipe.cuisine)
        .filter(*visible, Recipe.cuisine.isnot(None), Recipe.cuisine != "")
        .distinct()
        .order_by(Recipe.cuisine)
        .all()
    )
    difficulties = (
        db_session.query(Recipe.difficulty)
        .filter(*visible, Recipe.difficulty.isnot(None))
        .distinct()
        .all()
    )
    tags = db_session.query(RecipeTag).order_by(RecipeTag.name).all()

    return SearchFilters(
        cuisines=[row[0] for row in cuisines],
        difficulties=sorted((row[0] for row in difficulties), key=_DIFFICULTY_ORDER.get),
        tags=[TagOut.model_validate(t) for t in tags],
    )


# =============================================================================
# Planner
# =============================================================================


def search_recipes(db_session: Session, user_id: int | None, params: SearchParams) -> SearchResult:
    """Search non-archived recipes visible to ``user_id``.

    Raises:
        AuthenticationRequired: If no user id was supplied.
    """
    if not user_id:
        raise AuthenticationRequired()

    logger.info(
        f"Starting recipe search: user_id={user_id} "
        f"params={params.model_dump(exclude_none=True)}"
    )
    try:
        return _run_search(db_session, user_id, params)
    except Exception:
        logger.exception(
            f"Recipe search failed: user_id={user_id} "
            f"params={params.model_dump(exclude_none=True)}"
        )
        raise


def _run_search(db_session: Session, user_id: int, params: SearchParams) -> SearchResult:
    settings = get_settings()

    conditions = [
        Recipe.is_archived.is_(False),
        visibility_condition(user_id, params.is_public),
    ]

    if params.has_query:
        conditions.append(
            text_condition(db_session, params.query, settings.fts_candidate_limit)
        )
    if params.cuisine:
        conditions.append(Recipe.cuisine.in_(params.cuisine))
    if params.difficulty:
        conditions.append(Recipe.difficulty.in_(params.difficulty))
    if params.max_prep_time is not None:
        conditions.append(func.coalesce(Recipe.prep_time_minutes, 0) <= params.max_prep_time)
    if params.max_cook_time is not None:
        conditions.append(func.coalesce(Recipe.cook_time_minutes, 0) <= params.max_cook_time)
    if params.servings is not None:
        conditions.append(Recipe.servings == params.servings)

    if params.tags:
        tagged_ids = recipe_ids_with_all_tags(db_session, params.tags)
        if not tagged_ids:
            logger.info(f"No recipes carry all tags {params.tags}, returning empty result")
            return SearchResult()
        conditions.append(Recipe.id.in_(tagged_ids))

    query = db_session.query(Recipe).filter(*conditions)
    total = query.order_by(None).count()

    sort_column = SORT_COLUMNS[params.sort_by]
    if sort_column is not None:
        direction = sort_column.asc() if params.sort_order == "asc" else sort_column.desc()
        query = query.order_by(direction, Recipe.id)

    rows = query.limit(params.limit).offset(params.offset).all()
    recipes = hydrate_recipes(db_session, rows)

    if params.has_query:
        record_search(db_session, user_id, params.query, total)

    filters = build_filters(db_session, user_id)

    logger.info(
        f"Recipe search completed: user_id={user_id} query={params.query!r} "
        f"results_count={len(recipes)} total={total}"
    )
    return SearchResult(
        recipes=recipes,
        total=total,
        has_more=params.offset + params.limit < total,
        filters=filters,
    )
