"""Date and datetime parsing utilities."""

from datetime import date, datetime, timedelta, UTC
from dateutil import parser as date_parser


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "January 15, 2024") and the
    relative words "today", "yesterday" and "tomorrow".

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_datetime(value: str) -> datetime:
    """Parse an ISO 8601 (or similar) timestamp.

    "now" returns the current time as naive UTC, the same clock bookings
    are stored in. Offsets in the input are kept, so "2024-01-15T10:30:00Z"
    is timezone-aware.

    Raises:
        ValueError: If the string cannot be parsed
    """
    value = value.strip()
    if value.lower() == "now":
        return utc_now()

    try:
        return date_parser.isoparse(value)
    except (ValueError, TypeError, OverflowError):
        pass

    try:
        return date_parser.parse(value)
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse datetime '{value}': {e}")


def to_naive_utc(moment: datetime) -> datetime:
    """Convert a datetime to naive UTC.

    Naive input is assumed to already be UTC. Booking timestamps are stored
    this way.
    """
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(UTC).replace(tzinfo=None)


def utc_now() -> datetime:
    """Return the current time as naive UTC."""
    return datetime.now(UTC).replace(tzinfo=None)
