"""
Per-user cookbook activity: favourite and saved recipes, cooking streaks and
the top-cooks leaderboard.
"""
from __future__ import annotations

from datetime import datetime

from ..catalog.models import Recipe
from ..catalog.store import get_recipe
from ..errors import NotFoundError, ValidationError
from ..storage.collection import utcnow
from ..storage.pagination import Page, build_page, page_window
from .models import CookingStats, TopCook, User
from .users import users_collection

MAX_FAVORITES_LIMIT = 50
MAX_TOP_COOKS_LIMIT = 20


def _with_stats(user: User, **changes) -> User:
    return user.model_copy(update={"stats": user.stats.model_copy(update=changes)})


def add_favorite(user_id: str, recipe_id: str) -> User:
    get_recipe(recipe_id)

    def mutate(user: User) -> User:
        if recipe_id in user.stats.favorite_recipes:
            return user
        return _with_stats(user, favorite_recipes=[*user.stats.favorite_recipes, recipe_id])

    return users_collection().find_one_and_update(user_id, mutate)


def remove_favorite(user_id: str, recipe_id: str) -> User:
    """Drop a favourite, including ids of recipes deleted since."""
    return users_collection().find_one_and_update(
        user_id,
        lambda u: _with_stats(
            u, favorite_recipes=[r for r in u.stats.favorite_recipes if r != recipe_id]
        ),
    )


def save_recipe(user_id: str, recipe_id: str) -> User:
    get_recipe(recipe_id)

    def mutate(user: User) -> User:
        if recipe_id in user.stats.saved_recipes:
            return user
        return _with_stats(user, saved_recipes=[*user.stats.saved_recipes, recipe_id])

    return users_collection().find_one_and_update(user_id, mutate)


def unsave_recipe(user_id: str, recipe_id: str) -> User:
    return users_collection().find_one_and_update(
        user_id,
        lambda u: _with_stats(
            u, saved_recipes=[r for r in u.stats.saved_recipes if r != recipe_id]
        ),
    )


def favorite_recipes(user_id: str, page: int = 1, limit: int = 12) -> Page[Recipe]:
    """Favourite recipes that still exist, newest recipe first."""
    skip, limit = page_window(page, limit, MAX_FAVORITES_LIMIT)
    user = users_collection().require(user_id)

    recipes: list[Recipe] = []
    for recipe_id in user.stats.favorite_recipes:
        try:
            recipes.append(get_recipe(recipe_id))
        except NotFoundError:
            continue
    recipes.sort(key=lambda r: r.created_at, reverse=True)
    return build_page(recipes[skip:skip + limit], len(recipes), page, limit)


def next_stats(stats: CookingStats, now: datetime) -> CookingStats:
    """Stats after cooking one more recipe at *now*.

    Cooking on the day after the last session extends the streak, a longer
    gap restarts it at one, and cooking again the same day leaves it as is.
    """
    if stats.last_cooked is None:
        streak = 1
    else:
        days = (now - stats.last_cooked).days
        if days == 1:
            streak = stats.cooking_streak + 1
        elif days > 1:
            streak = 1
        else:
            streak = max(stats.cooking_streak, 1)
    return stats.model_copy(update={
        "cooking_streak": streak,
        "last_cooked": now,
        "recipes_cooked": stats.recipes_cooked + 1,
    })


def record_cooked(user_id: str, recipe_id: str, now: datetime | None = None) -> User:
    get_recipe(recipe_id)
    now = now or utcnow()
    return users_collection().find_one_and_update(
        user_id,
        lambda u: u.model_copy(update={"stats": next_stats(u.stats, now)}),
    )


def top_cooks(limit: int = 10) -> list[TopCook]:
    if not 1 <= limit <= MAX_TOP_COOKS_LIMIT:
        raise ValidationError(f"Limit must be between 1 and {MAX_TOP_COOKS_LIMIT}")
    users = users_collection().find(
        lambda u: u.is_active,
        sort=[("stats.recipes_cooked", True)],
        limit=limit,
    )
    return [
        TopCook(
            id=u.id,
            name=u.name,
            avatar=u.profile.avatar,
            recipes_cooked=u.stats.recipes_cooked,
            cooking_streak=u.stats.cooking_streak,
        )
        for u in users
    ]
