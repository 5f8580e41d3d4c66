from __future__ import annotations

from typing import Any, Callable

import pytest

from cookmate.catalog.models import Recipe
from cookmate.tests.factories import recipe_payload


@pytest.fixture
def make_recipe() -> Callable[..., Recipe]:
    def factory(name: str = "Test Dish", ingredients: tuple[str, ...] = ("Tomato",), **overrides: Any) -> Recipe:
        return Recipe(**recipe_payload(name, ingredients, **overrides))

    return factory
