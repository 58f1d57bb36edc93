"""Mood entry persistence and aggregation."""

from __future__ import annotations

import functools
import logging
import uuid
from collections.abc import Callable, Mapping
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Protocol

from sqlalchemy import Select, desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from moodtracker.core.moods import MoodType
from moodtracker.core.result import Err, ErrorKind, Ok, Result
from moodtracker.models.mood_entry import MoodEntry
from moodtracker.schemas.mood import MoodAnalyticsOut, MoodEntryOut
from moodtracker.services.analytics import summarize_moods

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Mood entry not found"
ACCESS_DENIED_MESSAGE = "Access denied"


class MoodService(Protocol):
    def get_mood_entries(
        self,
        user_id: int,
        start_date: date | None,
        end_date: date | None,
        mood_type: MoodType | None,
        page: int,
        limit: int,
    ) -> Result[list[MoodEntryOut]]: ...

    def get_mood_entry_by_id(self, entry_id: uuid.UUID, user_id: int) -> Result[MoodEntryOut]: ...

    def create_mood_entry(self, user_id: int, mood: MoodType, note: str | None) -> Result[MoodEntryOut]: ...

    def update_mood_entry(
        self, entry_id: uuid.UUID, user_id: int, changes: Mapping[str, Any]
    ) -> Result[MoodEntryOut]: ...

    def delete_mood_entry(self, entry_id: uuid.UUID, user_id: int) -> Result[bool]: ...

    def get_mood_analytics(
        self, user_id: int, start_date: date | None, end_date: date | None
    ) -> Result[MoodAnalyticsOut]: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _persistence_guard(method: Callable[..., Result]) -> Callable[..., Result]:
    """Turn database errors into Err(INTERNAL); the session context rolls back."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs) -> Result:
        try:
            return method(self, *args, **kwargs)
        except SQLAlchemyError:
            logger.exception("Mood persistence failure in %s", method.__name__)
            return Err(ErrorKind.INTERNAL, "Internal server error")

    return wrapper


def _within_dates(stmt: Select, start_date: date | None, end_date: date | None) -> Select:
    """Restrict to entries created on or after start_date and on or before end_date."""
    if start_date is not None:
        lower = datetime.combine(start_date, time.min, tzinfo=timezone.utc)
        stmt = stmt.where(MoodEntry.created_at >= lower)
    if end_date is not None:
        upper = datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=timezone.utc)
        stmt = stmt.where(MoodEntry.created_at < upper)
    return stmt


def _owned_entry(db: Session, entry_id: uuid.UUID, user_id: int) -> MoodEntry | Err:
    entry = db.get(MoodEntry, entry_id)
    if entry is None:
        return Err(ErrorKind.NOT_FOUND, NOT_FOUND_MESSAGE)
    if entry.user_id != user_id:
        logger.warning("Denied access to mood entry %s for user_id=%s", entry_id, user_id)
        return Err(ErrorKind.UNAUTHORIZED, ACCESS_DENIED_MESSAGE)
    return entry


class SqlMoodService:
    """MoodService over the SQLAlchemy mood_entries table."""

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    @_persistence_guard
    def get_mood_entries(
        self,
        user_id: int,
        start_date: date | None,
        end_date: date | None,
        mood_type: MoodType | None,
        page: int,
        limit: int,
    ) -> Result[list[MoodEntryOut]]:
        """Entries owned by user_id, newest first."""
        stmt = select(MoodEntry).where(MoodEntry.user_id == user_id)
        stmt = _within_dates(stmt, start_date, end_date)
        if mood_type is not None:
            stmt = stmt.where(MoodEntry.mood == mood_type)
        stmt = (
            stmt.order_by(desc(MoodEntry.created_at), desc(MoodEntry.id))
            .offset((page - 1) * limit)
            .limit(limit)
        )
        with self._session_factory() as db:
            entries = db.execute(stmt).scalars().all()
            return Ok([MoodEntryOut.model_validate(entry) for entry in entries])

    @_persistence_guard
    def get_mood_entry_by_id(self, entry_id: uuid.UUID, user_id: int) -> Result[MoodEntryOut]:
        with self._session_factory() as db:
            entry = _owned_entry(db, entry_id, user_id)
            if isinstance(entry, Err):
                return entry
            return Ok(MoodEntryOut.model_validate(entry))

    @_persistence_guard
    def create_mood_entry(self, user_id: int, mood: MoodType, note: str | None) -> Result[MoodEntryOut]:
        now = _utcnow()
        entry = MoodEntry(user_id=user_id, mood=mood, note=note, created_at=now, updated_at=now)
        with self._session_factory() as db:
            db.add(entry)
            db.commit()
            db.refresh(entry)
            logger.info("Mood entry created id=%s user_id=%s mood=%s", entry.id, user_id, mood.value)
            return Ok(MoodEntryOut.model_validate(entry))

    @_persistence_guard
    def update_mood_entry(
        self, entry_id: uuid.UUID, user_id: int, changes: Mapping[str, Any]
    ) -> Result[MoodEntryOut]:
        """Apply only the supplied fields; updated_at is always refreshed."""
        with self._session_factory() as db:
            entry = _owned_entry(db, entry_id, user_id)
            if isinstance(entry, Err):
                return entry
            if "mood" in changes:
                entry.mood = changes["mood"]
            if "note" in changes:
                entry.note = changes["note"]
            entry.updated_at = _utcnow()
            db.commit()
            db.refresh(entry)
            logger.info("Mood entry updated id=%s fields=%s", entry_id, ",".join(sorted(changes)))
            return Ok(MoodEntryOut.model_validate(entry))

    @_persistence_guard
    def delete_mood_entry(self, entry_id: uuid.UUID, user_id: int) -> Result[bool]:
        with self._session_factory() as db:
            entry = _owned_entry(db, entry_id, user_id)
            if isinstance(entry, Err):
                return entry
            db.delete(entry)
            db.commit()
            logger.info("Mood entry deleted id=%s user_id=%s", entry_id, user_id)
            return Ok(True)

    @_persistence_guard
    def get_mood_analytics(
        self, user_id: int, start_date: date | None, end_date: date | None
    ) -> Result[MoodAnalyticsOut]:
        stmt = select(MoodEntry.mood, MoodEntry.created_at).where(MoodEntry.user_id == user_id)
        stmt = _within_dates(stmt, start_date, end_date)
        with self._session_factory() as db:
            rows = db.execute(stmt).all()
        return Ok(summarize_moods((row.mood, row.created_at) for row in rows))
