"""Onboarding schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import ConfigDict, Field, StrictBool

from moodtracker.schemas.auth import UserOut
from moodtracker.schemas.base import CamelModel

MAX_PROFILE_FIELD_LENGTH = 255


class OnboardingStartRequest(CamelModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    first_name: str = Field(min_length=1, max_length=MAX_PROFILE_FIELD_LENGTH)
    last_name: str = Field(min_length=1, max_length=MAX_PROFILE_FIELD_LENGTH)
    company: str = Field(min_length=1, max_length=MAX_PROFILE_FIELD_LENGTH)
    role: str = Field(min_length=1, max_length=MAX_PROFILE_FIELD_LENGTH)


class OnboardingStepUpdate(CamelModel):
    completed: StrictBool
    data: dict[str, Any] | None = None


class OnboardingStepOut(CamelModel):
    id: int
    user_id: int
    step: str
    position: int
    completed: bool
    data: dict[str, Any] | None = None
    updated_at: datetime


class OnboardingStarted(CamelModel):
    user: UserOut
    steps: list[OnboardingStepOut]


class PaginationOut(CamelModel):
    page: int
    limit: int
    total: int
    has_next: bool
    has_prev: bool


class OnboardingStepsPage(CamelModel):
    steps: list[OnboardingStepOut]
    completed_steps: int
    total_steps: int
    pagination: PaginationOut
