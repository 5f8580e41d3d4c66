"""
Recipe catalog.

Responsibilities:
- Create, read, update and delete recipes with ownership rules.
- Count detail views and fold new ratings into the running average atomically.
- List recipes with filters, free-text search, sorting and pagination.
"""
from __future__ import annotations

import logging
from typing import Any, Literal

from pydantic import BaseModel

from ..errors import AuthorizationError, ValidationError
from ..storage.collection import Collection
from ..storage.pagination import Page, build_page, page_window
from ..taxonomy import Category, Cuisine, Difficulty, Role, SpiceLevel
from .models import Rating, Recipe, RecipeCreate, RecipeUpdate
from .search import rank_by_text

logger = logging.getLogger(__name__)

MAX_LIST_LIMIT = 50
DEFAULT_LIST_LIMIT = 12
FEATURED_LIMIT = 8

RecipeSort = Literal["name", "popularity", "rating", "created_at", "total_time"]
SortOrder = Literal["asc", "desc"]

_SORT_PATHS: dict[str, str] = {
    "name": "name",
    "popularity": "popularity",
    "rating": "rating.average",
    "created_at": "created_at",
    "total_time": "total_time",
}

_recipes: Collection[Recipe] = Collection("recipes", label="Recipe", unique=("name",))


class RecipeFilters(BaseModel):
    category: Category | None = None
    cuisine: Cuisine | None = None
    difficulty: Difficulty | None = None
    is_vegetarian: bool | None = None
    spice_level: SpiceLevel | None = None

    def matches(self, recipe: Recipe) -> bool:
        if self.category is not None and recipe.category != self.category:
            return False
        if self.cuisine is not None and recipe.cuisine != self.cuisine:
            return False
        if self.difficulty is not None and recipe.difficulty != self.difficulty:
            return False
        if self.is_vegetarian is not None and recipe.is_vegetarian != self.is_vegetarian:
            return False
        if self.spice_level is not None and recipe.spice_level != self.spice_level:
            return False
        return True


def _is_admin(actor: dict[str, Any]) -> bool:
    return actor.get("role") == Role.admin.value


# ── Reads ────────────────────────────────────────────────────────────────


def all_recipes() -> list[Recipe]:
    """Snapshot of the whole catalog in insertion order."""
    return _recipes.all()


def get_recipe(recipe_id: str) -> Recipe:
    return _recipes.require(recipe_id)


def view_recipe(recipe_id: str) -> Recipe:
    """Return the recipe after counting one more detail view."""
    return _recipes.increment(recipe_id, "popularity")


def featured_recipes(limit: int = FEATURED_LIMIT) -> list[Recipe]:
    return _recipes.find(lambda r: r.featured, sort=[("popularity", True)], limit=limit)


def list_recipes(
    filters: RecipeFilters | None = None,
    *,
    search: str | None = None,
    sort: RecipeSort = "popularity",
    order: SortOrder = "desc",
    page: int = 1,
    limit: int = DEFAULT_LIST_LIMIT,
) -> Page[Recipe]:
    skip, limit = page_window(page, limit, MAX_LIST_LIMIT)
    if sort not in _SORT_PATHS:
        raise ValidationError(f"Cannot sort recipes by {sort!r}")
    filters = filters or RecipeFilters()
    sort_spec = [(_SORT_PATHS[sort], order != "asc")]

    if search and search.strip():
        ordered = _recipes.find(filters.matches, sort=sort_spec)
        ranked = [r for r, _ in rank_by_text(ordered, search)]
        return build_page(ranked[skip:skip + limit], len(ranked), page, limit)

    items = _recipes.find(filters.matches, sort=sort_spec, skip=skip, limit=limit)
    return build_page(items, _recipes.count(filters.matches), page, limit)


# ── Writes ───────────────────────────────────────────────────────────────


def create_recipe(data: RecipeCreate, created_by: str | None = None) -> Recipe:
    recipe = Recipe(**data.model_dump(), created_by=created_by)
    _recipes.insert(recipe)
    logger.info("Recipe %s created: %s", recipe.id, recipe.name)
    return recipe


def update_recipe(recipe_id: str, changes: RecipeUpdate, actor: dict[str, Any]) -> Recipe:
    recipe = _recipes.require(recipe_id)
    if not _is_admin(actor) and recipe.created_by != actor.get("id"):
        raise AuthorizationError("Not authorized to update this recipe")

    update = {
        field: getattr(changes, field)
        for field in changes.model_fields_set
        if getattr(changes, field) is not None
    }
    return _recipes.update(recipe_id, update)


def delete_recipe(recipe_id: str, actor: dict[str, Any]) -> None:
    _recipes.require(recipe_id)
    if not _is_admin(actor):
        raise AuthorizationError("Not authorized to delete this recipe")
    _recipes.delete(recipe_id)
    logger.info("Recipe %s deleted by %s", recipe_id, actor.get("id"))


def apply_rating(rating: Rating, value: float) -> Rating:
    """Fold one new rating into the running average, rounded to one decimal."""
    new_average = (rating.average * rating.count + value) / (rating.count + 1)
    return Rating(average=round(new_average, 1), count=rating.count + 1)


def rate_recipe(recipe_id: str, value: float) -> Recipe:
    if not 1.0 <= value <= 5.0:
        raise ValidationError("Rating must be between 1 and 5")
    return _recipes.find_one_and_update(
        recipe_id,
        lambda r: r.model_copy(update={"rating": apply_rating(r.rating, value)}),
    )


def clear_recipes() -> None:
    _recipes.clear()
