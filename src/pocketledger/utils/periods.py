"""Calendar helpers for month keys and period bucketing."""

from datetime import date, timedelta
from dateutil.relativedelta import relativedelta

from pocketledger.domain.entities import BudgetPeriod


def month_key(day: date) -> str:
    """Return the "YYYY-MM" key of a date."""
    return f"{day.year}-{day.month:02d}"


def format_month(year: int, month: int) -> str:
    """Return the "YYYY-MM" key for a year and 1-indexed month.

    Raises:
        ValueError: If month is outside 1..12
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    return f"{year}-{month:02d}"


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """Return the first and last day of a month."""
    format_month(year, month)
    start = date(year, month, 1)
    end = start + relativedelta(months=1) - timedelta(days=1)
    return start, end


def previous_month(year: int, month: int) -> tuple[int, int]:
    """Return (year, month) of the month before, wrapping January to December."""
    prior = date(year, month, 1) - relativedelta(months=1)
    return prior.year, prior.month


def bucket_key(day: date, interval: BudgetPeriod) -> str:
    """Return the trend bucket a date falls into.

    Weekly buckets follow ISO weeks so a week spanning two months stays one bucket.
    """
    if interval == BudgetPeriod.DAILY:
        return day.isoformat()
    if interval == BudgetPeriod.WEEKLY:
        iso_year, iso_week, _ = day.isocalendar()
        return f"{iso_year}-W{iso_week:02d}"
    if interval == BudgetPeriod.MONTHLY:
        return month_key(day)
    if interval == BudgetPeriod.YEARLY:
        return str(day.year)
    raise ValueError(f"Unsupported interval: {interval}")
