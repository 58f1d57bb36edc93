"""Validation module tests."""

import uuid
from datetime import date

import pytest

from moodtracker.core.moods import MoodType
from moodtracker.core.validation import (
    ValidationFailure,
    ValidationKind,
    parse_create_request,
    parse_date_range,
    parse_list_query,
    parse_pagination,
    parse_update_request,
    sanitize_note,
    validate_id_format,
    validate_mood_type,
)


def _kind_of(fn, *args, **kwargs) -> ValidationKind:
    with pytest.raises(ValidationFailure) as exc:
        fn(*args, **kwargs)
    return exc.value.kind


def test_date_range_parses_iso_dates():
    result = parse_date_range("2023-01-01", "2023-01-31")
    assert result.start == date(2023, 1, 1)
    assert result.end == date(2023, 1, 31)


def test_date_range_accepts_datetimes_and_absent_bounds():
    result = parse_date_range("2023-01-05T10:00:00Z", None)
    assert result.start == date(2023, 1, 5)
    assert result.end is None
    assert parse_date_range("", "").start is None


@pytest.mark.parametrize("start,end", [("invalid-date", "2023-01-01"), ("2023-01-01", "2023-13-40"), ("01/02/2023", None)])
def test_date_range_rejects_unparseable_dates(start, end):
    assert _kind_of(parse_date_range, start, end) is ValidationKind.INVALID_DATE_FORMAT


def test_date_range_rejects_start_after_end():
    assert _kind_of(parse_date_range, "2023-02-01", "2023-01-01") is ValidationKind.INVALID_DATE_RANGE


def test_pagination_defaults_when_absent():
    result = parse_pagination(None, None, default_limit=20)
    assert (result.page, result.limit) == (1, 20)


def test_pagination_parses_strings():
    result = parse_pagination("2", "10")
    assert (result.page, result.limit) == (2, 10)


@pytest.mark.parametrize("page,limit", [("-1", "0"), ("0", "10"), ("1", "0"), ("abc", "10"), ("1", "101"), ("1.5", None)])
def test_pagination_rejects_out_of_bounds(page, limit):
    assert _kind_of(parse_pagination, page, limit, max_limit=100) is ValidationKind.INVALID_PAGINATION


def test_pagination_offset_must_fit_a_64_bit_integer():
    largest = parse_pagination(str(2**63), "1")
    assert largest.page == 2**63
    assert _kind_of(parse_pagination, str(2**63 + 1), "1") is ValidationKind.INVALID_PAGINATION
    assert _kind_of(parse_pagination, "10000000000000000000", None) is ValidationKind.INVALID_PAGINATION


def test_mood_type_is_normalized():
    assert validate_mood_type("HAPPY") is MoodType.HAPPY
    assert validate_mood_type(" sad ") is MoodType.SAD


@pytest.mark.parametrize("value", [None, "", "   "])
def test_mood_type_missing(value):
    assert _kind_of(validate_mood_type, value) is ValidationKind.MISSING_MOOD_TYPE


@pytest.mark.parametrize("value", ["INVALID_MOOD", 3, ["HAPPY"]])
def test_mood_type_invalid(value):
    failure = pytest.raises(ValidationFailure, validate_mood_type, value).value
    assert failure.kind is ValidationKind.INVALID_MOOD_TYPE
    assert failure.message == "Invalid mood type"


def test_note_is_trimmed_and_stripped_of_html():
    assert sanitize_note("   Feeling good   ") == "Feeling good"
    assert sanitize_note('<script>alert("xss")</script>Safe note') == "Safe note"
    assert sanitize_note("<b>bold</b> &amp; <i>brave</i>") == "bold & brave"


def test_note_entity_encoded_markup_is_stripped_after_decoding():
    assert sanitize_note("&lt;script&gt;alert(1)&lt;/script&gt;ok") == "ok"
    assert sanitize_note("&amp;lt;b&amp;gt;bold&amp;lt;/b&amp;gt;") == "bold"


@pytest.mark.parametrize(
    "note,expected",
    [
        ("hi <img src=x onerror=alert(1)", "hi"),
        ("hi &lt;img src=x onerror=alert(1)", "hi"),
        ("fine <!-- unterminated", "fine"),
    ],
)
def test_note_unclosed_tag_is_dropped(note, expected):
    assert sanitize_note(note) == expected


def test_note_keeps_plain_angle_brackets():
    assert sanitize_note("I feel <3 today") == "I feel <3 today"
    assert sanitize_note("2 < 3 and 4 > 1") == "2 < 3 and 4 > 1"


def test_note_empty_after_sanitizing_is_none():
    assert sanitize_note(None) is None
    assert sanitize_note("  <br/>  ") is None


def test_note_length_is_checked_after_sanitizing():
    assert len(sanitize_note("a" * 1000)) == 1000
    assert sanitize_note("<p>" + "a" * 1000 + "</p>") == "a" * 1000
    failure = pytest.raises(ValidationFailure, sanitize_note, "a" * 1001).value
    assert failure.kind is ValidationKind.NOTE_TOO_LONG
    assert failure.message == "Note cannot exceed 1000 characters"


def test_note_must_be_string():
    assert _kind_of(sanitize_note, 42) is ValidationKind.INVALID_NOTE


def test_id_format():
    entry_id = uuid.uuid4()
    assert validate_id_format(str(entry_id)) == entry_id
    failure = pytest.raises(ValidationFailure, validate_id_format, "invalid-id-format").value
    assert failure.message == "Invalid mood entry ID format"


def test_list_query_combines_filters():
    query = parse_list_query({"startDate": "2023-01-01", "moodType": "happy", "page": "2", "limit": "5"})
    assert query.start_date == date(2023, 1, 1)
    assert query.end_date is None
    assert query.mood_type is MoodType.HAPPY
    assert (query.page, query.limit) == (2, 5)


def test_create_request_requires_mood():
    assert _kind_of(parse_create_request, {"note": "Just a note"}) is ValidationKind.MISSING_MOOD_TYPE
    request = parse_create_request({"mood": "NEUTRAL"})
    assert request.mood is MoodType.NEUTRAL
    assert request.note is None


def test_update_request_keeps_only_supplied_fields():
    assert parse_update_request({"mood": "SAD"}).changes == {"mood": MoodType.SAD}
    assert parse_update_request({"note": " <i>x</i> "}).changes == {"note": "x"}


@pytest.mark.parametrize("body", [{}, {"unknown": 1}])
def test_update_request_without_recognized_fields(body):
    failure = pytest.raises(ValidationFailure, parse_update_request, body).value
    assert failure.kind is ValidationKind.EMPTY_UPDATE
    assert failure.message == "At least one field must be provided for update"
