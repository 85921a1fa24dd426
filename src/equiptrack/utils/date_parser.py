"""Date parsing utilities."""

from datetime import UTC, date, datetime, time, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def utcnow() -> datetime:
    """Return the current time as a naive UTC datetime.

    Naive UTC is what SQLite round-trips, so every timestamp the engine stores
    or compares uses this form.
    """
    return datetime.now(UTC).replace(tzinfo=None)


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2025-01-15", "January 15, 2025", etc.
    - Relative dates: "today", "yesterday", "tomorrow", "next week", "last month", etc.

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = utcnow().date()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    # Handle "last/this/next" + time period
    if date_str.startswith("last "):
        period = date_str[5:]
        if period == "month":
            return (today - relativedelta(months=1)).replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1) - relativedelta(years=1)
        elif period == "week":
            return today - timedelta(days=today.weekday() + 7)

    elif date_str.startswith("this "):
        period = date_str[5:]
        if period == "month":
            return today.replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1)
        elif period == "week":
            return today - timedelta(days=today.weekday())

    elif date_str.startswith("next "):
        period = date_str[5:]
        if period == "month":
            return (today + relativedelta(months=1)).replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1) + relativedelta(years=1)
        elif period == "week":
            return today + timedelta(days=(7 - today.weekday()))

    # Try parsing as absolute date
    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_datetime(value: str | date | datetime | None) -> Optional[datetime]:
    """Parse a date or timestamp into a naive UTC datetime.

    Accepts datetime and date objects, ISO 8601 timestamps (with or without
    offset) and anything ``parse_date`` understands. Timezone-aware values are
    converted to UTC. Plain dates become midnight of that day.

    Args:
        value: Value to parse, or None

    Returns:
        Naive UTC datetime, or None if value is None

    Raises:
        ValueError: If the value cannot be parsed
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(UTC).replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if not isinstance(value, str):
        raise ValueError(f"Could not parse date '{value}': expected a string")

    text = value.strip()
    if not text:
        raise ValueError("Could not parse date '': empty value")

    # Timestamps keep their time part; everything else goes through parse_date
    if "t" in text.lower() and any(ch.isdigit() for ch in text):
        try:
            return parse_datetime(date_parser.isoparse(text))
        except ValueError:
            pass

    return datetime.combine(parse_date(text), time.min)
