"""
Due-date arithmetic for repayment plans.

All functions work on calendar dates only. Each step is measured from the
plan's start date, so a monthly plan starting on the 31st is clamped in
short months and returns to the 31st whenever the month allows it.
"""
import logging
from dataclasses import replace
from datetime import date, timedelta
from typing import Any, List

from config.constants import Frequency
from config.settings import PERIOD_LENGTH_DAYS
from data_manager.data_validator import coerce_date, coerce_frequency, coerce_periods
from data_manager.schema import DayClassification, LoanTerms
from utils.date_utils import add_months, add_years, months_between

logger = logging.getLogger(__name__)


def period_length_days(frequency: Any) -> int:
    """Approximate period length used for elapsed-period estimates"""
    return PERIOD_LENGTH_DAYS[coerce_frequency(frequency).value]


def step_date(start: date, frequency: Frequency, index: int) -> date:
    """start advanced by `index` frequency steps"""
    if frequency == Frequency.DAILY:
        return start + timedelta(days=index)
    if frequency == Frequency.WEEKLY:
        return start + timedelta(days=7 * index)
    if frequency == Frequency.MONTHLY:
        return add_months(start, index)
    return add_years(start, index)


def compute_end_date(start_date: Any, frequency: Any, periods: Any) -> date:
    """start_date advanced by `periods` steps of the frequency"""
    start = coerce_date(start_date, "start_date")
    freq = coerce_frequency(frequency)
    n = coerce_periods(periods)
    return step_date(start, freq, n)


def generate_due_dates(start_date: Any, frequency: Any, periods: Any) -> List[date]:
    """Ordered due dates: the start date itself, then one per step up to periods-1"""
    start = coerce_date(start_date, "start_date")
    freq = coerce_frequency(frequency)
    n = coerce_periods(periods)
    end = step_date(start, freq, n)

    dates = [start]
    for i in range(1, n):
        nxt = step_date(start, freq, i)
        if nxt > end:
            logger.debug("Due date %s passes end date %s, stopping at %d", nxt, end, i)
            break
        dates.append(nxt)
    return dates


def is_due_date(day: Any, start_date: Any, frequency: Any, periods: Any) -> bool:
    """Membership in generate_due_dates() without building the list"""
    d = coerce_date(day, "date")
    start = coerce_date(start_date, "start_date")
    freq = coerce_frequency(frequency)
    n = coerce_periods(periods)
    if d < start:
        return False

    if freq == Frequency.DAILY:
        index = (d - start).days
    elif freq == Frequency.WEEKLY:
        diff = (d - start).days
        if diff % 7:
            return False
        index = diff // 7
    elif freq == Frequency.MONTHLY:
        index = months_between(start, d)
    else:
        index = d.year - start.year

    if index < 0 or index >= n:
        return False
    return step_date(start, freq, index) == d and d <= step_date(start, freq, n)


def anchor_terms(terms: LoanTerms, start_date: Any) -> LoanTerms:
    """Copy of the terms with start and derived end date set"""
    start = coerce_date(start_date, "start_date")
    return replace(
        terms,
        start_date=start,
        end_date=compute_end_date(start, terms.frequency, terms.periods),
    )


def resolve_end_date(terms: LoanTerms) -> date:
    """Persisted end date, or the derived one for snapshots stored without it"""
    if terms.end_date is not None:
        return terms.end_date
    return compute_end_date(terms.start_date, terms.frequency, terms.periods)


def classify_date(day: Any, terms: LoanTerms, reference_today: Any) -> DayClassification:
    """Calendar highlighting flags for one day"""
    d = coerce_date(day, "date")
    today = coerce_date(reference_today, "reference_today")

    if terms is None or terms.start_date is None:
        return DayClassification(is_past=d < today, is_today=d == today)

    start = terms.start_date
    end = resolve_end_date(terms)
    return DayClassification(
        is_due=is_due_date(d, start, terms.frequency, terms.periods),
        is_in_range=start <= d <= end,
        is_past=d < today,
        is_today=d == today,
        is_start=d == start,
        is_end=d == end,
    )
