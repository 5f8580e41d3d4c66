"""
Recommendation and ingredient-match engine.

Responsibilities:
- Turn a user's stored preferences into a recipe predicate.
- Rank the filtered catalog into personal recommendations.
- Score recipes against the ingredients a cook has on hand.
- Derive the quick and trending recipe lists.

Every function here is a pure computation over a catalog snapshot; callers
load the recipes and persist any follow-up mutation themselves.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, Sequence

from ..auth.models import User
from ..catalog.models import Recipe
from ..errors import ValidationError
from ..storage.collection import utcnow
from ..taxonomy import (
    SPICE_ORDER,
    TIMEFRAME_DAYS,
    CookingExperience,
    DietaryPreference,
    Difficulty,
    SpiceLevel,
    Timeframe,
)
from .models import ScoredRecipe

Predicate = Callable[[Recipe], bool]

DEFAULT_LIMIT = 10
MAX_LIMIT = 20
DEFAULT_QUICK_MAX_TIME = 30
QUICK_TIME_RANGE = (5, 60)

EXPERIENCE_DIFFICULTIES: dict[CookingExperience, frozenset[Difficulty]] = {
    CookingExperience.beginner: frozenset({Difficulty.easy}),
    CookingExperience.intermediate: frozenset({Difficulty.easy, Difficulty.medium}),
    CookingExperience.advanced: frozenset({Difficulty.easy, Difficulty.medium, Difficulty.hard}),
    CookingExperience.professional: frozenset({Difficulty.easy, Difficulty.medium, Difficulty.hard}),
}
_FALLBACK_DIFFICULTIES = frozenset({Difficulty.easy})


def _check_limit(limit: int) -> int:
    if isinstance(limit, bool) or not isinstance(limit, int) or not 1 <= limit <= MAX_LIMIT:
        raise ValidationError(f"Limit must be between 1 and {MAX_LIMIT}")
    return limit


def _popularity_then_rating(recipes: list[Recipe]) -> list[Recipe]:
    return sorted(recipes, key=lambda r: (-r.popularity, -r.rating.average))


# ── Preference filter ────────────────────────────────────────────────────


def allowed_spice_levels(ceiling: SpiceLevel) -> list[SpiceLevel]:
    """Spice levels up to and including *ceiling*, mildest first."""
    return SPICE_ORDER[: SPICE_ORDER.index(ceiling) + 1]


def allowed_difficulties(experience: CookingExperience | None) -> frozenset[Difficulty]:
    if experience is None:
        return _FALLBACK_DIFFICULTIES
    return EXPERIENCE_DIFFICULTIES.get(experience, _FALLBACK_DIFFICULTIES)


def build_filter(user: User) -> Predicate:
    """AND together the dietary, spice, cuisine and difficulty constraints."""
    dietary = set(user.profile.dietary_preferences)
    need_vegetarian = DietaryPreference.vegetarian in dietary
    need_vegan = DietaryPreference.vegan in dietary
    need_gluten_free = DietaryPreference.gluten_free in dietary

    spice_ceiling = user.preferences.spice_level
    spice_levels = set(allowed_spice_levels(spice_ceiling)) if spice_ceiling else None
    cuisines = set(user.profile.favorite_cuisines) or None
    difficulties = allowed_difficulties(user.profile.cooking_experience)

    def predicate(recipe: Recipe) -> bool:
        if need_vegetarian and not recipe.is_vegetarian:
            return False
        if need_vegan and not recipe.is_vegan:
            return False
        if need_gluten_free and not recipe.is_gluten_free:
            return False
        if spice_levels is not None and recipe.spice_level not in spice_levels:
            return False
        if cuisines is not None and recipe.cuisine not in cuisines:
            return False
        return recipe.difficulty in difficulties

    return predicate


def recommend(
    user: User,
    recipes: Sequence[Recipe],
    limit: int = DEFAULT_LIMIT,
) -> tuple[list[Recipe], int]:
    """Return ``(top recipes, total matching)`` for the user's preferences."""
    _check_limit(limit)
    predicate = build_filter(user)
    candidates = [r for r in recipes if predicate(r)]
    return _popularity_then_rating(candidates)[:limit], len(candidates)


# ── Ingredient matching ──────────────────────────────────────────────────


def normalize_ingredients(available: object) -> list[str]:
    if not isinstance(available, (list, tuple)) or not available:
        raise ValidationError("At least one ingredient is required")
    normalized: list[str] = []
    for item in available:
        if not isinstance(item, str) or not item.strip():
            raise ValidationError("Each ingredient must be a non-empty string")
        normalized.append(item.strip().lower())
    return normalized


def score_recipe(recipe: Recipe, search_terms: Sequence[str]) -> ScoredRecipe | None:
    """Score one recipe, or ``None`` when none of its ingredients match.

    An ingredient matches when any search term is a case-insensitive
    substring of its name, so "onion" also matches "Spring onion".
    """
    matched = [
        ing.name
        for ing in recipe.ingredients
        if any(term in ing.name.lower() for term in search_terms)
    ]
    if not matched:
        return None
    return ScoredRecipe(
        recipe=recipe,
        match_score=len(matched) / len(recipe.ingredients),
        matched_ingredients=matched,
    )


def match_by_ingredients(
    available: Sequence[str],
    recipes: Sequence[Recipe],
    limit: int = DEFAULT_LIMIT,
) -> list[ScoredRecipe]:
    """Rank recipes by the share of their ingredients found in *available*.

    Ties on score go to the more popular recipe, then to catalog order.
    """
    terms = normalize_ingredients(available)
    _check_limit(limit)

    scored = [s for s in (score_recipe(r, terms) for r in recipes) if s is not None]
    scored.sort(key=lambda s: (-s.match_score, -s.recipe.popularity))
    return scored[:limit]


# ── Derived lists ────────────────────────────────────────────────────────


def quick_recipes(
    recipes: Sequence[Recipe],
    max_time: int = DEFAULT_QUICK_MAX_TIME,
    limit: int = DEFAULT_LIMIT,
) -> list[Recipe]:
    low, high = QUICK_TIME_RANGE
    if not low <= max_time <= high:
        raise ValidationError(f"Max time must be between {low} and {high} minutes")
    _check_limit(limit)
    quick = [r for r in recipes if r.total_time <= max_time]
    return sorted(quick, key=lambda r: -r.popularity)[:limit]


def trending_window_start(timeframe: Timeframe, now: datetime | None = None) -> datetime:
    now = now or utcnow()
    return now - timedelta(days=TIMEFRAME_DAYS[timeframe])


def trending_recipes(
    recipes: Sequence[Recipe],
    timeframe: Timeframe = Timeframe.week,
    limit: int = DEFAULT_LIMIT,
    now: datetime | None = None,
) -> list[Recipe]:
    _check_limit(limit)
    start = trending_window_start(timeframe, now)
    recent = [r for r in recipes if r.created_at >= start]
    return _popularity_then_rating(recent)[:limit]
