"""Tests for date and datetime parsing."""

import pytest
from datetime import date, datetime, timedelta, timezone, UTC
from catalogit.utils.date_parser import parse_date, parse_datetime, to_naive_utc, utc_now


def test_parse_absolute_date():
    """Test parsing absolute dates."""
    result = parse_date("2024-01-15")
    assert result == date(2024, 1, 15)


def test_parse_long_date():
    """Test parsing a written-out date."""
    assert parse_date("January 15, 2024") == date(2024, 1, 15)


def test_parse_today():
    """Test parsing 'today'."""
    result = parse_date("today")
    assert result == date.today()


def test_parse_yesterday():
    """Test parsing 'yesterday'."""
    result = parse_date("Yesterday")
    assert result == date.today() - timedelta(days=1)


def test_parse_tomorrow():
    """Test parsing 'tomorrow'."""
    result = parse_date("tomorrow")
    assert result == date.today() + timedelta(days=1)


def test_parse_invalid_date():
    """Test that unparseable dates raise ValueError."""
    with pytest.raises(ValueError):
        parse_date("not a date at all")


def test_parse_datetime_iso_with_offset():
    """Test that offsets are preserved."""
    result = parse_datetime("2024-06-01T10:30:00Z")
    assert result == datetime(2024, 6, 1, 10, 30, tzinfo=UTC)
    assert result.tzinfo is not None


def test_parse_datetime_naive():
    """Test that naive ISO timestamps stay naive."""
    result = parse_datetime("2024-06-01T17:45")
    assert result == datetime(2024, 6, 1, 17, 45)
    assert result.tzinfo is None


def test_parse_datetime_loose_format():
    """Test fallback to dateutil's general parser."""
    assert parse_datetime("June 1 2024 5pm") == datetime(2024, 6, 1, 17, 0)


def test_parse_datetime_now():
    """Test that 'now' is naive UTC, the clock bookings use."""
    before = utc_now()
    result = parse_datetime("now")
    assert result.tzinfo is None
    assert before <= result <= utc_now()


def test_parse_datetime_invalid():
    with pytest.raises(ValueError):
        parse_datetime("half past never")


def test_to_naive_utc_converts_offset():
    """Test that aware datetimes are converted to UTC and made naive."""
    ist = timezone(timedelta(hours=5, minutes=30))
    result = to_naive_utc(datetime(2024, 6, 1, 10, 0, tzinfo=ist))
    assert result == datetime(2024, 6, 1, 4, 30)
    assert result.tzinfo is None


def test_to_naive_utc_keeps_naive():
    moment = datetime(2024, 6, 1, 10, 0)
    assert to_naive_utc(moment) == moment


def test_utc_now_is_naive():
    assert utc_now().tzinfo is None
