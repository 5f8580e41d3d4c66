from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from ..config import DEFAULT_APP_CONFIG
from .models import RecipeCreate
from .store import all_recipes, create_recipe

logger = logging.getLogger(__name__)


def load_seed_recipes(path: Path = DEFAULT_APP_CONFIG.seed_path) -> list[RecipeCreate]:
    """Read the bundled recipe catalog into validated create requests."""
    df = pd.read_json(path, orient="records", dtype=False)

    # Plain Python objects, with gaps as None so model defaults apply.
    df = df.astype(object).where(pd.notna(df), None)

    recipes: list[RecipeCreate] = []
    for record in df.to_dict(orient="records"):
        fields = {k: v for k, v in record.items() if v is not None}
        recipes.append(RecipeCreate(**fields))
    return recipes


def seed_catalog(path: Path = DEFAULT_APP_CONFIG.seed_path) -> int:
    """Load the seed catalog when the catalog is empty. Returns recipes added."""
    if all_recipes():
        return 0
    recipes = load_seed_recipes(path)
    for recipe in recipes:
        create_recipe(recipe)
    logger.info("Seeded %d recipes from %s", len(recipes), path)
    return len(recipes)
