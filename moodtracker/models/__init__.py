"""SQLAlchemy models."""

from __future__ import annotations

from moodtracker.models.mood_entry import MoodEntry
from moodtracker.models.onboarding_step import OnboardingStep
from moodtracker.models.user import User

__all__ = [
    "User",
    "MoodEntry",
    "OnboardingStep",
]
