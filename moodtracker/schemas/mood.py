"""Mood entry schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from moodtracker.core.moods import MoodType
from moodtracker.schemas.base import CamelModel


class MoodEntryOut(CamelModel):
    id: uuid.UUID
    user_id: int
    mood: MoodType
    note: str | None = None
    created_at: datetime
    updated_at: datetime


class StreakStats(CamelModel):
    current: int = 0
    longest: int = 0


class MoodAnalyticsOut(CamelModel):
    total_entries: int
    mood_distribution: dict[MoodType, int]
    average_mood_score: float
    streaks: StreakStats
