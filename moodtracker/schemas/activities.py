"""Activity suggestion schemas."""

from moodtracker.core.moods import MoodType
from moodtracker.schemas.base import CamelModel


class ActivitySuggestionsOut(CamelModel):
    mood: MoodType
    suggestions: list[str]
