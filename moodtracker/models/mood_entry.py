"""Mood entry model."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Enum, ForeignKey, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from moodtracker.core.moods import MoodType
from moodtracker.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MoodEntry(Base):
    """A single recorded mood for one user."""

    __tablename__ = "mood_entries"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    mood: Mapped[MoodType] = mapped_column(
        Enum(MoodType, name="mood_type", native_enum=False, length=16), nullable=False
    )
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Set in Python so created_at and updated_at share one clock
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )
