"""Per-month calendar descriptions for a virtualized date picker"""
from datetime import date
from typing import Any, Iterator, List, Optional, Sequence, Tuple

from config.settings import CALENDAR_YEARS_BACK, CALENDAR_YEARS_FORWARD, WEEK_STARTS_ON_SUNDAY
from core.date_scheduler import classify_date
from core.exceptions import ValidationError
from data_manager.data_validator import coerce_date
from data_manager.schema import CalendarDay, CalendarMonth, LoanTerms
from utils.date_utils import days_in_month, first_weekday_offset

MonthKey = Tuple[int, int]


def calendar_window(
    reference_today: Any,
    years_back: int = CALENDAR_YEARS_BACK,
    years_forward: int = CALENDAR_YEARS_FORWARD,
) -> List[MonthKey]:
    """(year, month) keys for whole years around today, oldest first"""
    today = coerce_date(reference_today, "reference_today")
    if years_back < 0:
        raise ValidationError("years_back", years_back, "must not be negative")
    if years_forward < 0:
        raise ValidationError("years_forward", years_forward, "must not be negative")
    return [
        (year, month)
        for year in range(today.year - years_back, today.year + years_forward + 1)
        for month in range(1, 13)
    ]


def describe_month(
    year: int,
    month: int,
    terms: Optional[LoanTerms] = None,
    reference_today: Any = None,
) -> CalendarMonth:
    """Grid metadata and per-day flags for one month; needs no other month"""
    if not 1 <= month <= 12:
        raise ValidationError("month", month, "must be between 1 and 12")
    if reference_today is None:
        reference_today = date.today()
    today = coerce_date(reference_today, "reference_today")

    n_days = days_in_month(year, month)
    days = tuple(
        CalendarDay(day=d, classification=classify_date(d, terms, today))
        for d in (date(year, month, i) for i in range(1, n_days + 1))
    )
    return CalendarMonth(
        id=f"{year:04d}-{month:02d}",
        year=year,
        month=month,
        days_in_month=n_days,
        first_weekday_offset=first_weekday_offset(year, month, WEEK_STARTS_ON_SUNDAY),
        days=days,
    )


def iter_calendar(
    terms: Optional[LoanTerms],
    reference_today: Any,
    months: Optional[Sequence[MonthKey]] = None,
) -> Iterator[CalendarMonth]:
    """Lazily describe each month of the window (default window when omitted)"""
    keys = months if months is not None else calendar_window(reference_today)
    for year, month in keys:
        yield describe_month(year, month, terms, reference_today)


def initial_month_index(window: Sequence[MonthKey], target: Any) -> int:
    """Index of the month holding `target`, or 0 when it is outside the window"""
    d = coerce_date(target, "target")
    try:
        return list(window).index((d.year, d.month))
    except ValueError:
        return 0
