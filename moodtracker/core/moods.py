"""Mood enumeration and scoring constants."""

from __future__ import annotations

import enum


class MoodType(str, enum.Enum):
    HAPPY = "HAPPY"
    EXCITED = "EXCITED"
    CALM = "CALM"
    NEUTRAL = "NEUTRAL"
    ANXIOUS = "ANXIOUS"
    SAD = "SAD"
    ANGRY = "ANGRY"


# Numeric scale used for average mood score (1 = worst, 5 = best)
MOOD_SCORES: dict[MoodType, int] = {
    MoodType.HAPPY: 5,
    MoodType.EXCITED: 4,
    MoodType.CALM: 4,
    MoodType.NEUTRAL: 3,
    MoodType.ANXIOUS: 2,
    MoodType.SAD: 1,
    MoodType.ANGRY: 1,
}

# Maximum note length after sanitization
MAX_NOTE_LENGTH = 1000
