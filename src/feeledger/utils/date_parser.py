"""Date parsing utilities."""

import calendar
from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


PERIODS = ("this-month", "last-month", "this-year", "last-year", "this-week", "last-week")


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports:
    - Absolute dates: "2025-10-15", "15/10/2025" (day first), "October 15, 2025"
    - Relative dates: "today", "yesterday", "this month", "last month"

    Args:
        date_str: Date string
        today: Reference day for relative dates (defaults to today)

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = today or date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "this month": today.replace(day=1),
        "last month": (today - relativedelta(months=1)).replace(day=1),
        "this year": today.replace(month=1, day=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    # ISO dates are unambiguous; anything else is read day-first as on receipts
    try:
        return date.fromisoformat(date_str)
    except ValueError:
        pass

    try:
        return date_parser.parse(date_str, dayfirst=True).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def get_date_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get start and end dates for a reporting period.

    Args:
        period: One of this-month, last-month, this-year, last-year,
            this-week, last-week
        today: Reference day (defaults to today)

    Returns:
        Tuple of (start_date, end_date), both inclusive

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = today or date.today()

    if period == "this-month":
        return today.replace(day=1), today
    if period == "last-month":
        start = (today - relativedelta(months=1)).replace(day=1)
        return start, today.replace(day=1) - timedelta(days=1)
    if period == "this-year":
        return today.replace(month=1, day=1), today
    if period == "last-year":
        start = today.replace(month=1, day=1) - relativedelta(years=1)
        return start, today.replace(month=1, day=1) - timedelta(days=1)
    if period == "this-week":
        return today - timedelta(days=today.weekday()), today
    if period == "last-week":
        start = today - timedelta(days=today.weekday() + 7)
        return start, start + timedelta(days=6)

    raise ValueError(f"Unknown period: '{period}'. Supported periods: {', '.join(PERIODS)}")


def month_range(year: int, month: int) -> tuple[date, date]:
    """First and last day of a billing month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)
