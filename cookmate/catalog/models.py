from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from ..storage.collection import utcnow
from ..taxonomy import DIFFICULTY_LABELS, Category, Cuisine, Difficulty, SpiceLevel


class Ingredient(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1)
    quantity: str = Field(..., min_length=1)
    unit: str = Field(..., min_length=1)


class InstructionStep(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    step: int = Field(..., ge=1)
    description: str = Field(..., min_length=1)
    tips: str | None = None


class Nutrition(BaseModel):
    calories: float | None = None
    protein: float | None = None
    carbs: float | None = None
    fat: float | None = None
    fiber: float | None = None


class Rating(BaseModel):
    average: float = Field(default=0.0, ge=0.0, le=5.0)
    count: int = Field(default=0, ge=0)


def _normalize_tags(tags: list[str]) -> list[str]:
    return [t.strip().lower() for t in tags if t and t.strip()]


class RecipeCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=500)
    category: Category
    cuisine: Cuisine
    difficulty: Difficulty
    prep_time: int = Field(..., ge=1, description="Minutes")
    cook_time: int = Field(..., ge=1, description="Minutes")
    servings: int = Field(..., ge=1)
    ingredients: list[Ingredient] = Field(..., min_length=1)
    instructions: list[InstructionStep] = Field(..., min_length=1)
    nutrition: Nutrition | None = None
    tags: list[str] = Field(default_factory=list)
    image_url: str = ""
    is_vegetarian: bool = False
    is_vegan: bool = False
    is_gluten_free: bool = False
    spice_level: SpiceLevel = SpiceLevel.medium
    featured: bool = False

    @field_validator("tags")
    @classmethod
    def _lowercase_tags(cls, v: list[str]) -> list[str]:
        return _normalize_tags(v)


class RecipeUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, min_length=1, max_length=500)
    category: Category | None = None
    cuisine: Cuisine | None = None
    difficulty: Difficulty | None = None
    prep_time: int | None = Field(default=None, ge=1)
    cook_time: int | None = Field(default=None, ge=1)
    servings: int | None = Field(default=None, ge=1)
    ingredients: list[Ingredient] | None = Field(default=None, min_length=1)
    instructions: list[InstructionStep] | None = Field(default=None, min_length=1)
    nutrition: Nutrition | None = None
    tags: list[str] | None = None
    image_url: str | None = None
    is_vegetarian: bool | None = None
    is_vegan: bool | None = None
    is_gluten_free: bool | None = None
    spice_level: SpiceLevel | None = None
    featured: bool | None = None

    @field_validator("tags")
    @classmethod
    def _lowercase_tags(cls, v: list[str] | None) -> list[str] | None:
        return None if v is None else _normalize_tags(v)


class Recipe(RecipeCreate):
    id: str = Field(default_factory=lambda: uuid4().hex)
    popularity: int = Field(default=0, ge=0)
    rating: Rating = Field(default_factory=Rating)
    created_by: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @computed_field
    @property
    def total_time(self) -> int:
        return self.prep_time + self.cook_time

    @computed_field
    @property
    def difficulty_display(self) -> str:
        return DIFFICULTY_LABELS.get(self.difficulty, self.difficulty.value)


class RateRequest(BaseModel):
    rating: float = Field(..., ge=1.0, le=5.0)


class RecipeSummary(BaseModel):
    id: str
    name: str
    rating: Rating | None = None
