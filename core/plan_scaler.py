"""Scale a repayment plan template to a disbursed amount"""
import logging
from decimal import Decimal
from typing import Any

from core.exceptions import InvalidPlanError, ValidationError
from data_manager.data_validator import (
    coerce_amount,
    coerce_decimal,
    coerce_frequency,
    coerce_periods,
    round2,
)
from data_manager.schema import LoanTerms, RepaymentPlanTemplate

logger = logging.getLogger(__name__)


def _plan_value(template: RepaymentPlanTemplate, field: str, required: bool = True) -> Decimal:
    value = getattr(template, field, None)
    if value is None or value == "":
        if required:
            raise InvalidPlanError(field, value, "is required for scaling")
        return Decimal("0")
    try:
        return coerce_decimal(value, field)
    except ValidationError as e:
        raise InvalidPlanError(field, value, e.message) from None


def scale_factor(template: RepaymentPlanTemplate, amount_given: Any) -> Decimal:
    """amount_given / base_amount"""
    base_amount = _plan_value(template, "base_amount")
    if base_amount <= 0:
        raise InvalidPlanError("base_amount", template.base_amount, "must be greater than 0")
    amount = coerce_amount(amount_given, "amount_given")
    return amount / base_amount


def scale(template: RepaymentPlanTemplate, amount_given: Any) -> LoanTerms:
    """Derive per-period figures for a disbursed amount.

    Repayment and advance are scaled by amount_given / base_amount and
    rounded half-up to 2 places. The late fee and period count are copied
    from the template unscaled. The returned terms are not yet anchored to
    a start date.
    """
    try:
        frequency = coerce_frequency(template.frequency)
        periods = coerce_periods(template.periods)
    except ValidationError as e:
        raise InvalidPlanError(e.field, e.value, e.message) from None

    factor = scale_factor(template, amount_given)
    repayment_per_period = _plan_value(template, "repayment_per_period")
    advance = _plan_value(template, "advance_amount", required=False)
    late_fee = _plan_value(template, "late_fee_per_period", required=False)

    terms = LoanTerms(
        frequency=frequency,
        periods=periods,
        repayment_amount=round2(factor * repayment_per_period),
        advance_amount=round2(factor * advance),
        late_fee_per_period=late_fee,
        amount_given=coerce_amount(amount_given, "amount_given"),
        plan_id=str(template.id) if template.id is not None else None,
    )
    logger.debug(
        "Scaled plan %s by %s: repayment=%s advance=%s periods=%d",
        template.id, factor, terms.repayment_amount, terms.advance_amount, periods,
    )
    return terms
