from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from ..catalog.models import Recipe


class IngredientSearchRequest(BaseModel):
    ingredients: list[str] = Field(..., min_length=1)
    limit: int = Field(default=10, ge=1, le=20)

    @field_validator("ingredients")
    @classmethod
    def _non_blank(cls, v: list[str]) -> list[str]:
        if any(not item.strip() for item in v):
            raise ValueError("Each ingredient must be a non-empty string")
        return v


class ScoredRecipe(BaseModel):
    recipe: Recipe
    match_score: float
    matched_ingredients: list[str]


class IngredientSearchResponse(BaseModel):
    recipes: list[ScoredRecipe]
    search_ingredients: list[str]


class RecommendationItem(BaseModel):
    recipe: Recipe
    reason: str | None = None


class RecommendationResponse(BaseModel):
    recommendations: list[RecommendationItem]
    total_candidates: int
