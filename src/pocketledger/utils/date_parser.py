"""Date parsing for command-line input."""

from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

_WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def _relative_start(unit: str, offset: int, today: date) -> Optional[date]:
    """First day of the week/month/year ``offset`` units away from today."""
    if unit == "week":
        return today - timedelta(days=today.weekday()) + timedelta(weeks=offset)
    if unit == "month":
        return today.replace(day=1) + relativedelta(months=offset)
    if unit == "year":
        return today.replace(month=1, day=1) + relativedelta(years=offset)
    return None


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports:
    - Absolute dates: "2024-03-15", "March 15, 2024", "15 Mar 2024"
    - "today", "yesterday", "tomorrow"
    - "this/last/next week|month|year" (first day of that period)
    - "last <weekday>"

    Args:
        date_str: Date string
        today: Reference date for relative input (defaults to today)

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = today or date.today()

    fixed = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if text in fixed:
        return fixed[text]

    offsets = {"last": -1, "this": 0, "next": 1}
    prefix, _, unit = text.partition(" ")
    if prefix in offsets and unit:
        start = _relative_start(unit, offsets[prefix], today)
        if start is not None:
            return start
        if prefix == "last" and unit in _WEEKDAYS:
            days_ago = (today.weekday() - _WEEKDAYS.index(unit)) % 7 or 7
            return today - timedelta(days=days_ago)

    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def get_date_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get start and end dates for a named period.

    "this-*" periods end today; "last-*" periods cover the whole previous
    week, month or year.

    Args:
        period: this-week, this-month, this-year, last-week, last-month, last-year

    Returns:
        Tuple of (start_date, end_date)

    Raises:
        ValueError: If period string is not recognized
    """
    name = period.strip().lower()
    today = today or date.today()
    prefix, _, unit = name.partition("-")

    if prefix == "this" and unit in ("week", "month", "year"):
        return _relative_start(unit, 0, today), today
    if prefix == "last" and unit in ("week", "month", "year"):
        start = _relative_start(unit, -1, today)
        end = _relative_start(unit, 0, today) - timedelta(days=1)
        return start, end

    raise ValueError(
        f"Unknown period: '{period}'. Supported periods: this-week, this-month, "
        "this-year, last-week, last-month, last-year"
    )
