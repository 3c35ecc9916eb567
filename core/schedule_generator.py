"""
Onboarding and schedule tabulation.

Builds the LoanTerms snapshot persisted on a customer, matches imported
customers to plan templates, and lays the due dates out as a DataFrame
reconciled against repayments collected so far.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Optional, Sequence

import pandas as pd

from config.constants import SCHEDULE_COLUMNS, TransactionType
from core.date_scheduler import anchor_terms, generate_due_dates
from core.exceptions import PlanNotFoundError, ValidationError
from core.ledger import TransactionLike, normalize_transactions
from core.plan_scaler import scale
from data_manager.data_validator import coerce_date, coerce_frequency, coerce_periods
from data_manager.schema import LoanTerms, RepaymentPlanTemplate

logger = logging.getLogger(__name__)


def create_loan_terms(
    template: RepaymentPlanTemplate,
    amount_given: Any,
    start_date: Any,
) -> LoanTerms:
    """Scale the template and anchor it to the start date"""
    terms = anchor_terms(scale(template, amount_given), start_date)
    logger.debug(
        "Loan terms for plan %s: %s to %s", terms.plan_id, terms.start_date, terms.end_date,
    )
    return terms


def find_matching_plan(
    templates: Sequence[RepaymentPlanTemplate],
    frequency: Any,
    periods: Any,
) -> RepaymentPlanTemplate:
    """First template with the same frequency and period count"""
    freq = coerce_frequency(frequency)
    n = coerce_periods(periods)
    for template in templates:
        if coerce_frequency(template.frequency) == freq and template.periods == n:
            return template
    raise PlanNotFoundError(f"Repayment plan not found for: {freq.value} with {n} periods")


def generate_schedule(
    terms: LoanTerms,
    transactions: Iterable[TransactionLike] = (),
    reference_today: Optional[Any] = None,
) -> pd.DataFrame:
    """Due-date table with cumulative expectation and coverage by repayments"""
    if terms.start_date is None:
        raise ValidationError("start_date", None, "loan terms are not anchored to a start date")

    today: Optional[date] = (
        coerce_date(reference_today, "reference_today") if reference_today is not None else None
    )
    repaid = sum(
        (t.amount for t in normalize_transactions(transactions)
         if t.transaction_type == TransactionType.REPAYMENT),
        Decimal("0"),
    )

    records = []
    cumulative = Decimal("0")
    due_dates = generate_due_dates(terms.start_date, terms.frequency, terms.periods)
    for i, due in enumerate(due_dates, start=1):
        cumulative += terms.repayment_amount
        records.append({
            "period": i,
            "due_date": due.strftime("%Y-%m-%d"),
            "expected_amount": float(terms.repayment_amount),
            "cumulative_expected": float(cumulative),
            "is_past": today is not None and due < today,
            "is_covered": cumulative <= repaid,
        })

    return pd.DataFrame(records, columns=SCHEDULE_COLUMNS)
