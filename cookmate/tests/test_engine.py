from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from cookmate.auth.models import Preferences, Profile, User
from cookmate.catalog.models import Rating
from cookmate.errors import ValidationError
from cookmate.recommendations.engine import (
    allowed_difficulties,
    allowed_spice_levels,
    build_filter,
    match_by_ingredients,
    quick_recipes,
    recommend,
    trending_recipes,
)
from cookmate.taxonomy import CookingExperience, Difficulty, SpiceLevel, Timeframe


def _user(
    dietary=(),
    cuisines=(),
    experience=CookingExperience.advanced,
    spice=SpiceLevel.extra_hot,
) -> User:
    return User(
        name="Cook",
        email="cook@example.com",
        password_hash="x",
        profile=Profile(
            cooking_experience=experience,
            dietary_preferences=list(dietary),
            favorite_cuisines=list(cuisines),
        ),
        preferences=Preferences(spice_level=spice),
    )


# ── Spice ceiling and difficulty mapping ─────────────────────────────────


class TestPreferenceMappings:
    def test_spice_prefix(self):
        assert allowed_spice_levels(SpiceLevel.hot) == [
            SpiceLevel.mild, SpiceLevel.medium, SpiceLevel.hot,
        ]
        assert allowed_spice_levels(SpiceLevel.mild) == [SpiceLevel.mild]

    def test_difficulty_by_experience(self):
        assert allowed_difficulties(CookingExperience.beginner) == {Difficulty.easy}
        assert allowed_difficulties(CookingExperience.intermediate) == {
            Difficulty.easy, Difficulty.medium,
        }
        assert allowed_difficulties(CookingExperience.professional) == {
            Difficulty.easy, Difficulty.medium, Difficulty.hard,
        }

    def test_unknown_experience_defaults_to_easy(self):
        assert allowed_difficulties(None) == {Difficulty.easy}


# ── build_filter ─────────────────────────────────────────────────────────


class TestBuildFilter:
    def test_medium_ceiling_excludes_hot_and_extra_hot(self, make_recipe):
        predicate = build_filter(_user(spice=SpiceLevel.medium))
        assert predicate(make_recipe("a", spice_level="mild"))
        assert predicate(make_recipe("b", spice_level="medium"))
        assert not predicate(make_recipe("c", spice_level="hot"))
        assert not predicate(make_recipe("d", spice_level="extra-hot"))

    def test_dietary_flags_are_independent(self, make_recipe):
        predicate = build_filter(_user(dietary=["vegan", "gluten-free"]))
        vegan_only = make_recipe("a", is_vegetarian=True, is_vegan=True)
        both = make_recipe("b", is_vegetarian=True, is_vegan=True, is_gluten_free=True)
        assert not predicate(vegan_only)
        assert predicate(both)

    def test_vegetarian_requirement(self, make_recipe):
        predicate = build_filter(_user(dietary=["vegetarian"]))
        assert not predicate(make_recipe("a"))
        assert predicate(make_recipe("b", is_vegetarian=True))

    def test_other_dietary_tags_do_not_filter(self, make_recipe):
        predicate = build_filter(_user(dietary=["keto", "halal"]))
        assert predicate(make_recipe("a"))

    def test_cuisine_allow_list(self, make_recipe):
        predicate = build_filter(_user(cuisines=["kerala", "bengali"]))
        assert predicate(make_recipe("a", cuisine="kerala"))
        assert not predicate(make_recipe("b", cuisine="punjabi"))

    def test_no_favourite_cuisines_is_unrestricted(self, make_recipe):
        predicate = build_filter(_user())
        assert predicate(make_recipe("a", cuisine="punjabi"))

    def test_beginner_only_sees_easy(self, make_recipe):
        predicate = build_filter(_user(experience=CookingExperience.beginner))
        assert predicate(make_recipe("a", difficulty="easy"))
        assert not predicate(make_recipe("b", difficulty="medium"))
        assert not predicate(make_recipe("c", difficulty="hard"))

    def test_missing_spice_preference_is_unrestricted(self, make_recipe):
        predicate = build_filter(_user(spice=None))
        assert predicate(make_recipe("a", spice_level="extra-hot"))


# ── recommend ────────────────────────────────────────────────────────────


class TestRecommend:
    def test_sorted_by_popularity_then_rating(self, make_recipe):
        recipes = [
            make_recipe("a", popularity=5, rating=Rating(average=3.0, count=1)),
            make_recipe("b", popularity=9, rating=Rating(average=2.0, count=1)),
            make_recipe("c", popularity=5, rating=Rating(average=4.5, count=2)),
        ]
        top, total = recommend(_user(), recipes)
        assert [r.name for r in top] == ["b", "c", "a"]
        assert total == 3

    def test_limit_truncates(self, make_recipe):
        recipes = [make_recipe(f"r{i}", popularity=i) for i in range(15)]
        top, total = recommend(_user(), recipes, limit=4)
        assert [r.name for r in top] == ["r14", "r13", "r12", "r11"]
        assert total == 15

    @pytest.mark.parametrize("limit", [0, 21])
    def test_limit_out_of_range(self, make_recipe, limit):
        with pytest.raises(ValidationError):
            recommend(_user(), [make_recipe()], limit=limit)


# ── match_by_ingredients ─────────────────────────────────────────────────


class TestIngredientMatch:
    def test_half_match(self, make_recipe):
        recipe = make_recipe("curry", ingredients=("tomato", "onion", "cumin", "salt"))
        [scored] = match_by_ingredients(["tomato", "onion"], [recipe])
        assert scored.match_score == 0.5
        assert scored.matched_ingredients == ["tomato", "onion"]

    def test_full_match_scores_one(self, make_recipe):
        recipe = make_recipe("salad", ingredients=("tomato",))
        [scored] = match_by_ingredients(["tomato", "onion"], [recipe])
        assert scored.match_score == 1.0

    def test_case_insensitive_substring(self, make_recipe):
        recipe = make_recipe("raita", ingredients=("Spring Onion", "Yogurt"))
        [scored] = match_by_ingredients(["  ONION "], [recipe])
        assert scored.matched_ingredients == ["Spring Onion"]
        assert scored.match_score == 0.5

    def test_recipes_without_matches_are_not_candidates(self, make_recipe):
        recipe = make_recipe("kheer", ingredients=("Rice", "Milk"))
        assert match_by_ingredients(["tomato"], [recipe]) == []

    def test_sorted_by_score_then_popularity_then_catalog_order(self, make_recipe):
        recipes = [
            make_recipe("first", ingredients=("tomato", "salt"), popularity=1),
            make_recipe("second", ingredients=("tomato",), popularity=0),
            make_recipe("third", ingredients=("tomato", "rice"), popularity=7),
            make_recipe("fourth", ingredients=("tomato", "dal"), popularity=1),
        ]
        result = match_by_ingredients(["tomato"], recipes)
        assert [s.recipe.name for s in result] == ["second", "third", "first", "fourth"]

    def test_limit_applies_after_scoring(self, make_recipe):
        recipes = [make_recipe(f"r{i}", ingredients=("tomato", "x", "y")) for i in range(3)]
        recipes.append(make_recipe("best", ingredients=("tomato",)))
        result = match_by_ingredients(["tomato"], recipes, limit=1)
        assert [s.recipe.name for s in result] == ["best"]

    @pytest.mark.parametrize("available", ["tomato", [], [""], ["  "], [3]])
    def test_malformed_ingredients_rejected(self, make_recipe, available):
        with pytest.raises(ValidationError):
            match_by_ingredients(available, [make_recipe()])


# ── Quick and trending ───────────────────────────────────────────────────


class TestDerivedLists:
    def test_quick_recipes_by_total_time(self, make_recipe):
        recipes = [
            make_recipe("fast", prep_time=5, cook_time=10, popularity=1),
            make_recipe("exact", prep_time=10, cook_time=20, popularity=3),
            make_recipe("slow", prep_time=20, cook_time=20, popularity=9),
        ]
        result = quick_recipes(recipes, max_time=30)
        assert [r.name for r in result] == ["exact", "fast"]

    def test_quick_recipes_rejects_bad_max_time(self, make_recipe):
        with pytest.raises(ValidationError):
            quick_recipes([make_recipe()], max_time=90)

    def test_trending_window(self, make_recipe):
        now = datetime(2026, 3, 10, 12, tzinfo=timezone.utc)
        recipes = [
            make_recipe("today", created_at=now - timedelta(hours=2), popularity=1),
            make_recipe("this-week", created_at=now - timedelta(days=5), popularity=8),
            make_recipe("old", created_at=now - timedelta(days=20), popularity=50),
        ]
        assert [r.name for r in trending_recipes(recipes, Timeframe.day, now=now)] == ["today"]
        assert [r.name for r in trending_recipes(recipes, Timeframe.week, now=now)] == [
            "this-week", "today",
        ]
        assert len(trending_recipes(recipes, Timeframe.month, now=now)) == 3
