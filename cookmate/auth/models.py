from __future__ import annotations

import re
from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..storage.collection import utcnow
from ..taxonomy import CookingExperience, Cuisine, DietaryPreference, Role, SpiceLevel

EMAIL_RE = re.compile(r"^\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+$")


def normalize_email(value: str) -> str:
    email = value.strip().lower()
    if not EMAIL_RE.match(email):
        raise ValueError("Please enter a valid email")
    return email


class Profile(BaseModel):
    avatar: str = ""
    bio: str | None = Field(default=None, max_length=200)
    location: str | None = None
    cooking_experience: CookingExperience | None = CookingExperience.beginner
    dietary_preferences: list[DietaryPreference] = Field(default_factory=list)
    favorite_cuisines: list[Cuisine] = Field(default_factory=list)


class NotificationSettings(BaseModel):
    email: bool = True
    push: bool = True
    weekly_recipes: bool = True


class Preferences(BaseModel):
    spice_level: SpiceLevel | None = SpiceLevel.medium
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)


class CookingStats(BaseModel):
    recipes_cooked: int = 0
    favorite_recipes: list[str] = Field(default_factory=list)
    saved_recipes: list[str] = Field(default_factory=list)
    cooking_streak: int = 0
    last_cooked: datetime | None = None


class User(BaseModel):
    id: str = Field(default_factory=lambda: uuid4().hex)
    name: str
    email: str
    password_hash: str = Field(..., exclude=True)
    role: Role = Role.user
    profile: Profile = Field(default_factory=Profile)
    preferences: Preferences = Field(default_factory=Preferences)
    stats: CookingStats = Field(default_factory=CookingStats)
    is_active: bool = True
    last_login: datetime | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def session_identity(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name, "email": self.email, "role": self.role.value}


# ── Requests ─────────────────────────────────────────────────────────────


class RegisterRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=50)
    email: str
    password: str = Field(..., min_length=6)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return normalize_email(v)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(default=None, min_length=1, max_length=50)
    avatar: str | None = None
    bio: str | None = Field(default=None, max_length=200)
    location: str | None = None
    cooking_experience: CookingExperience | None = None
    dietary_preferences: list[DietaryPreference] | None = None
    favorite_cuisines: list[Cuisine] | None = None
    spice_level: SpiceLevel | None = None
    notifications: NotificationSettings | None = None


class RoleUpdate(BaseModel):
    role: Role


class StatusUpdate(BaseModel):
    is_active: bool


class TopCook(BaseModel):
    id: str
    name: str
    avatar: str
    recipes_cooked: int
    cooking_streak: int
