from __future__ import annotations

from typing import Any


def recipe_payload(name: str = "Test Dish", ingredients: tuple[str, ...] = ("Tomato",), **overrides: Any) -> dict:
    payload: dict[str, Any] = {
        "name": name,
        "description": f"{name} for tests",
        "category": "curry",
        "cuisine": "north-indian",
        "difficulty": "easy",
        "prep_time": 10,
        "cook_time": 15,
        "servings": 2,
        "ingredients": [{"name": i, "quantity": "1", "unit": "cup"} for i in ingredients],
        "instructions": [{"step": 1, "description": "Cook everything."}],
        "spice_level": "mild",
    }
    payload.update(overrides)
    return payload
