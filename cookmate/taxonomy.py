"""
Closed vocabularies shared by the entity models and the recommendation engine.

Keep every tag list here so request validation and preference filtering can
never drift apart.
"""
from __future__ import annotations

from enum import Enum


class Category(str, Enum):
    main_course = "main-course"
    appetizer = "appetizer"
    dessert = "dessert"
    beverage = "beverage"
    snack = "snack"
    bread = "bread"
    curry = "curry"
    rice = "rice"


class Cuisine(str, Enum):
    north_indian = "north-indian"
    south_indian = "south-indian"
    gujarati = "gujarati"
    punjabi = "punjabi"
    bengali = "bengali"
    rajasthani = "rajasthani"
    maharastrian = "maharastrian"
    kerala = "kerala"
    hyderabadi = "hyderabadi"
    street_food = "street-food"


class Difficulty(str, Enum):
    easy = "easy"
    medium = "medium"
    hard = "hard"


DIFFICULTY_LABELS: dict[Difficulty, str] = {
    Difficulty.easy: "Beginner",
    Difficulty.medium: "Intermediate",
    Difficulty.hard: "Advanced",
}


class SpiceLevel(str, Enum):
    mild = "mild"
    medium = "medium"
    hot = "hot"
    extra_hot = "extra-hot"


# Total order, mildest first.
SPICE_ORDER: list[SpiceLevel] = [
    SpiceLevel.mild,
    SpiceLevel.medium,
    SpiceLevel.hot,
    SpiceLevel.extra_hot,
]


class DietaryPreference(str, Enum):
    vegetarian = "vegetarian"
    vegan = "vegan"
    gluten_free = "gluten-free"
    dairy_free = "dairy-free"
    keto = "keto"
    paleo = "paleo"
    halal = "halal"


class CookingExperience(str, Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"
    professional = "professional"


class WaitlistExperience(str, Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"


# Waitlist interests are every cuisine plus a few lifestyle tags.
Interest = Enum(
    "Interest",
    [(c.name, c.value) for c in Cuisine]
    + [
        ("vegetarian", "vegetarian"),
        ("vegan", "vegan"),
        ("quick_meals", "quick-meals"),
        ("traditional_recipes", "traditional-recipes"),
    ],
    type=str,
)


class ReferralSource(str, Enum):
    google = "google"
    facebook = "facebook"
    instagram = "instagram"
    twitter = "twitter"
    friend = "friend"
    blog = "blog"
    other = "other"


class WaitlistStatus(str, Enum):
    waiting = "waiting"
    invited = "invited"
    registered = "registered"
    declined = "declined"


class Role(str, Enum):
    user = "user"
    admin = "admin"
    chef = "chef"


class Timeframe(str, Enum):
    day = "day"
    week = "week"
    month = "month"


TIMEFRAME_DAYS: dict[Timeframe, int] = {
    Timeframe.day: 1,
    Timeframe.week: 7,
    Timeframe.month: 30,
}
