"""Request validation and normalization.

Every function here is pure: it either returns a normalized value or raises
:class:`ValidationFailure` carrying a machine-readable kind and the message
sent back to the client.
"""

from __future__ import annotations

import enum
import re
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from html.parser import HTMLParser
from typing import Any

from moodtracker.core.moods import MAX_NOTE_LENGTH, MoodType


class ValidationKind(str, enum.Enum):
    INVALID_DATE_FORMAT = "invalid_date_format"
    INVALID_DATE_RANGE = "invalid_date_range"
    INVALID_PAGINATION = "invalid_pagination"
    MISSING_MOOD_TYPE = "missing_mood_type"
    INVALID_MOOD_TYPE = "invalid_mood_type"
    NOTE_TOO_LONG = "note_too_long"
    INVALID_NOTE = "invalid_note"
    INVALID_ID_FORMAT = "invalid_id_format"
    EMPTY_UPDATE = "empty_update"


MESSAGES: dict[ValidationKind, str] = {
    ValidationKind.INVALID_DATE_FORMAT: "Invalid date format",
    ValidationKind.INVALID_DATE_RANGE: "Start date must not be after end date",
    ValidationKind.INVALID_PAGINATION: "Invalid pagination parameters",
    ValidationKind.MISSING_MOOD_TYPE: "Mood type is required",
    ValidationKind.INVALID_MOOD_TYPE: "Invalid mood type",
    ValidationKind.NOTE_TOO_LONG: f"Note cannot exceed {MAX_NOTE_LENGTH} characters",
    ValidationKind.INVALID_NOTE: "Note must be a string",
    ValidationKind.INVALID_ID_FORMAT: "Invalid mood entry ID format",
    ValidationKind.EMPTY_UPDATE: "At least one field must be provided for update",
}

UPDATABLE_FIELDS = ("mood", "note")

# Largest OFFSET a 64-bit SQL integer can hold
MAX_OFFSET = 2**63 - 1

_DANGLING_TAG = re.compile(r"<[A-Za-z/!?][^>]*\Z")


class ValidationFailure(ValueError):
    """Raised when client input fails a validation rule."""

    def __init__(self, kind: ValidationKind, message: str | None = None):
        self.kind = kind
        self.message = message or MESSAGES[kind]
        super().__init__(self.message)


@dataclass(frozen=True)
class DateRange:
    start: date | None = None
    end: date | None = None


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int


@dataclass(frozen=True)
class ListMoodQuery:
    start_date: date | None
    end_date: date | None
    mood_type: MoodType | None
    page: int
    limit: int


@dataclass(frozen=True)
class CreateMoodRequest:
    mood: MoodType
    note: str | None = None


@dataclass(frozen=True)
class UpdateMoodRequest:
    # Only the fields supplied by the client, already normalized
    changes: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AnalyticsQuery:
    start_date: date | None
    end_date: date | None


def _parse_date(value: Any) -> date | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationFailure(ValidationKind.INVALID_DATE_FORMAT)
    raw = value.strip()
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(raw).date()
    except ValueError as exc:
        raise ValidationFailure(ValidationKind.INVALID_DATE_FORMAT) from exc


def parse_date_range(start: Any = None, end: Any = None) -> DateRange:
    """Parse optional ISO start/end bounds into calendar dates."""
    start_date = _parse_date(start)
    end_date = _parse_date(end)
    if start_date and end_date and start_date > end_date:
        raise ValidationFailure(ValidationKind.INVALID_DATE_RANGE)
    return DateRange(start=start_date, end=end_date)


def _parse_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationFailure(ValidationKind.INVALID_PAGINATION)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as exc:
            raise ValidationFailure(ValidationKind.INVALID_PAGINATION) from exc
    raise ValidationFailure(ValidationKind.INVALID_PAGINATION)


def parse_pagination(
    page: Any = None,
    limit: Any = None,
    default_limit: int = 20,
    max_limit: int = 100,
) -> Pagination:
    """Parse page/limit, applying defaults for absent values."""
    page_num = 1 if page in (None, "") else _parse_int(page)
    limit_num = default_limit if limit in (None, "") else _parse_int(limit)
    if page_num < 1 or limit_num < 1 or limit_num > max_limit:
        raise ValidationFailure(ValidationKind.INVALID_PAGINATION)
    if (page_num - 1) * limit_num > MAX_OFFSET:
        raise ValidationFailure(ValidationKind.INVALID_PAGINATION)
    return Pagination(page=page_num, limit=limit_num)


def validate_mood_type(value: Any) -> MoodType:
    """Return the MoodType member for value (case-insensitive)."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationFailure(ValidationKind.MISSING_MOOD_TYPE)
    if not isinstance(value, str):
        raise ValidationFailure(ValidationKind.INVALID_MOOD_TYPE)
    try:
        return MoodType(value.strip().upper())
    except ValueError as exc:
        raise ValidationFailure(ValidationKind.INVALID_MOOD_TYPE) from exc


class _TextExtractor(HTMLParser):
    """Collects text content, dropping tags and script/style bodies."""

    _skipped_tags = frozenset({"script", "style"})

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self._parts: list[str] = []
        self._skip_depth = 0

    def handle_starttag(self, tag: str, attrs) -> None:
        if tag in self._skipped_tags:
            self._skip_depth += 1

    def handle_endtag(self, tag: str) -> None:
        if tag in self._skipped_tags and self._skip_depth:
            self._skip_depth -= 1

    def handle_data(self, data: str) -> None:
        if not self._skip_depth:
            self._parts.append(data)

    @property
    def text(self) -> str:
        return "".join(self._parts)


def _strip_once(value: str) -> str:
    parser = _TextExtractor()
    parser.feed(value)
    parser.close()
    # An unclosed tag at the end is passed through as data by close()
    return _DANGLING_TAG.sub("", parser.text)


def strip_html(value: str) -> str:
    """Remove markup until none is left.

    Decoding entities can produce new tags (`&lt;b&gt;`), so passes repeat
    until the text stops changing. Each changing pass makes it shorter.
    """
    while True:
        stripped = _strip_once(value)
        if stripped == value:
            return stripped
        value = stripped


def sanitize_note(value: Any) -> str | None:
    """Strip markup and surrounding whitespace; None for absent or empty notes."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationFailure(ValidationKind.INVALID_NOTE)
    cleaned = strip_html(value).strip()
    if len(cleaned) > MAX_NOTE_LENGTH:
        raise ValidationFailure(ValidationKind.NOTE_TOO_LONG)
    return cleaned or None


def validate_id_format(value: Any) -> uuid.UUID:
    """Mood entry ids are UUIDs."""
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str):
        raise ValidationFailure(ValidationKind.INVALID_ID_FORMAT)
    try:
        return uuid.UUID(value.strip())
    except ValueError as exc:
        raise ValidationFailure(ValidationKind.INVALID_ID_FORMAT) from exc


def parse_list_query(
    params: Mapping[str, Any],
    default_limit: int = 20,
    max_limit: int = 100,
) -> ListMoodQuery:
    date_range = parse_date_range(params.get("startDate"), params.get("endDate"))
    raw_mood = params.get("moodType")
    mood_type = None if raw_mood in (None, "") else validate_mood_type(raw_mood)
    pagination = parse_pagination(
        params.get("page"),
        params.get("limit"),
        default_limit=default_limit,
        max_limit=max_limit,
    )
    return ListMoodQuery(
        start_date=date_range.start,
        end_date=date_range.end,
        mood_type=mood_type,
        page=pagination.page,
        limit=pagination.limit,
    )


def parse_create_request(body: Mapping[str, Any]) -> CreateMoodRequest:
    mood = validate_mood_type(body.get("mood"))
    note = sanitize_note(body.get("note"))
    return CreateMoodRequest(mood=mood, note=note)


def parse_update_request(body: Mapping[str, Any]) -> UpdateMoodRequest:
    if not any(name in body for name in UPDATABLE_FIELDS):
        raise ValidationFailure(ValidationKind.EMPTY_UPDATE)
    changes: dict[str, Any] = {}
    if "mood" in body:
        changes["mood"] = validate_mood_type(body["mood"])
    if "note" in body:
        changes["note"] = sanitize_note(body["note"])
    return UpdateMoodRequest(changes=changes)


def parse_analytics_query(params: Mapping[str, Any]) -> AnalyticsQuery:
    date_range = parse_date_range(params.get("startDate"), params.get("endDate"))
    return AnalyticsQuery(start_date=date_range.start, end_date=date_range.end)
