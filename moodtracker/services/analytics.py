"""Mood analytics aggregation."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timedelta, timezone

from moodtracker.core.moods import MOOD_SCORES, MoodType
from moodtracker.schemas.mood import MoodAnalyticsOut, StreakStats


def _as_utc_date(value: datetime) -> date:
    # SQLite hands back naive datetimes; they are stored as UTC
    if value.tzinfo is None:
        return value.date()
    return value.astimezone(timezone.utc).date()


def longest_streak(days: list[date]) -> int:
    """Longest run of consecutive days in a sorted, de-duplicated list."""
    best = run = 0
    previous: date | None = None
    for day in days:
        if previous is not None and day - previous == timedelta(days=1):
            run += 1
        else:
            run = 1
        best = max(best, run)
        previous = day
    return best


def current_streak(days: list[date], today: date) -> int:
    """Consecutive days ending today, or yesterday if today has no entry yet."""
    if not days:
        return 0
    day_set = set(days)
    cursor = today if today in day_set else today - timedelta(days=1)
    streak = 0
    while cursor in day_set:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def summarize_moods(
    rows: Iterable[tuple[MoodType, datetime]],
    today: date | None = None,
) -> MoodAnalyticsOut:
    """Aggregate (mood, created_at) rows into analytics."""
    today = today or datetime.now(timezone.utc).date()
    distribution = {mood: 0 for mood in MoodType}
    score_total = 0
    days: set[date] = set()

    for mood, created_at in rows:
        distribution[mood] += 1
        score_total += MOOD_SCORES[mood]
        days.add(_as_utc_date(created_at))

    total = sum(distribution.values())
    average = round(score_total / total, 2) if total else 0.0
    sorted_days = sorted(days)
    return MoodAnalyticsOut(
        total_entries=total,
        mood_distribution=distribution,
        average_mood_score=average,
        streaks=StreakStats(
            current=current_streak(sorted_days, today),
            longest=longest_streak(sorted_days),
        ),
    )
