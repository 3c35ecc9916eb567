import calendar
from datetime import date, datetime
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

DateLike = Union[date, datetime, str]


def to_date(d: Optional[DateLike]) -> Optional[date]:
    """Normalize a date, datetime or ISO string to a calendar date"""
    if d is None:
        return None
    if isinstance(d, datetime):
        return d.date()
    if isinstance(d, date):
        return d
    if isinstance(d, str):
        # Store rows carry "YYYY-MM-DD" or "YYYY-MM-DDTHH:MM:SS..."
        return date.fromisoformat(d.strip()[:10])
    raise TypeError(f"cannot interpret {type(d).__name__} as a date")


def add_months(d: date, months: int) -> date:
    """Add N calendar months, clamping to the last day of the target month"""
    return d + relativedelta(months=months)


def add_years(d: date, years: int) -> date:
    """Add N years; Feb 29 lands on Feb 28 in non-leap years"""
    return d + relativedelta(years=years)


def days_between(d1: date, d2: date) -> int:
    """Whole days from d1 to d2 (negative when d2 is earlier)"""
    return (d2 - d1).days


def months_between(d1: date, d2: date) -> int:
    """Calendar month index of d2 counted from d1's month"""
    return (d2.year - d1.year) * 12 + (d2.month - d1.month)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def first_weekday_offset(year: int, month: int, sunday_first: bool = True) -> int:
    """Leading blank cells before day 1 in a week grid"""
    weekday = calendar.monthrange(year, month)[0]  # Monday == 0
    if sunday_first:
        return (weekday + 1) % 7
    return weekday
