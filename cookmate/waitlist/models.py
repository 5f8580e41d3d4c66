from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from ..auth.models import normalize_email
from ..storage.collection import utcnow
from ..taxonomy import Interest, ReferralSource, WaitlistExperience, WaitlistStatus


class WaitlistEntry(BaseModel):
    id: str = Field(default_factory=lambda: uuid4().hex)
    email: str
    name: str = ""
    interests: list[Interest] = Field(default_factory=list)
    cooking_experience: WaitlistExperience = WaitlistExperience.beginner
    referral_source: ReferralSource = ReferralSource.other
    position: int = 0
    status: WaitlistStatus = WaitlistStatus.waiting
    notes: str | None = None
    is_active: bool = True
    ip_address: str | None = Field(default=None, exclude=True)
    user_agent: str | None = Field(default=None, exclude=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    invited_at: datetime | None = None
    registered_at: datetime | None = None

    @computed_field
    @property
    def wait_days(self) -> int | None:
        if self.status != WaitlistStatus.waiting:
            return None
        return (utcnow() - self.created_at).days


class JoinRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: str
    name: str = Field(default="", max_length=50)
    interests: list[Interest] = Field(default_factory=list)
    cooking_experience: WaitlistExperience = WaitlistExperience.beginner
    referral_source: ReferralSource = ReferralSource.other

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return normalize_email(v)


class WaitlistUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(default=None, max_length=50)
    interests: list[Interest] | None = None
    cooking_experience: WaitlistExperience | None = None
    referral_source: ReferralSource | None = None
    status: WaitlistStatus | None = None
    notes: str | None = Field(default=None, max_length=500)
    is_active: bool | None = None


class JoinResult(BaseModel):
    email: str
    position: int
    total_count: int
    estimated_wait_time: int


class WaitlistStats(BaseModel):
    total_count: int
    estimated_wait_time: int
    stats: dict[str, int]
