"""Input coercion and caller-side policy checks.

Every helper raises ``ValidationError`` naming the offending field and the
value received; nothing is silently coerced to a default.
"""
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

from config.constants import PAYMENT_MODE_ALIASES, Frequency, PaymentMode, TransactionType
from config.settings import AMOUNT_PRECISION, MAX_BACKDATE_DAYS
from core.exceptions import InvalidPlanError, ValidationError
from utils.date_utils import to_date

_QUANT = Decimal(1).scaleb(-AMOUNT_PRECISION)


def round2(value: Decimal) -> Decimal:
    """Round half-up to the amount precision (2 places)"""
    return value.quantize(_QUANT, rounding=ROUND_HALF_UP)


def coerce_decimal(value: Any, field: str) -> Decimal:
    if isinstance(value, bool) or value is None:
        raise ValidationError(field, value, "must be a number")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValidationError(field, value, "must be a number") from None
    if not result.is_finite():
        raise ValidationError(field, value, "must be a finite number")
    return result


def coerce_amount(value: Any, field: str = "amount") -> Decimal:
    """Strictly positive money amount"""
    amount = coerce_decimal(value, field)
    if amount <= 0:
        raise ValidationError(field, value, "must be greater than 0")
    return amount


def coerce_non_negative(value: Any, field: str) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    amount = coerce_decimal(value, field)
    if amount < 0:
        raise ValidationError(field, value, "must not be negative")
    return amount


def coerce_periods(value: Any, field: str = "periods") -> int:
    if isinstance(value, bool):
        raise ValidationError(field, value, "must be a whole number")
    if isinstance(value, int):
        periods = value
    else:
        try:
            as_decimal = Decimal(str(value).strip())
        except (InvalidOperation, AttributeError):
            raise ValidationError(field, value, "must be a whole number") from None
        if not as_decimal.is_finite() or as_decimal != as_decimal.to_integral_value():
            raise ValidationError(field, value, "must be a whole number")
        periods = int(as_decimal)
    if periods <= 0:
        raise ValidationError(field, value, "must be greater than 0")
    return periods


def coerce_frequency(value: Any, field: str = "frequency") -> Frequency:
    if isinstance(value, Frequency):
        return value
    if isinstance(value, str):
        try:
            return Frequency(value.strip().lower())
        except ValueError:
            pass
    allowed = ", ".join(f.value for f in Frequency)
    raise ValidationError(field, value, f"unsupported frequency (expected one of {allowed})")


def coerce_transaction_type(value: Any, field: str = "type") -> TransactionType:
    if isinstance(value, TransactionType):
        return value
    if isinstance(value, str):
        try:
            return TransactionType(value.strip().lower())
        except ValueError:
            pass
    allowed = ", ".join(t.value for t in TransactionType)
    raise ValidationError(field, value, f"unsupported transaction type (expected one of {allowed})")


def coerce_payment_mode(value: Any, field: str = "payment_mode") -> PaymentMode:
    if isinstance(value, PaymentMode):
        return value
    if isinstance(value, str):
        token = value.strip().lower()
        token = PAYMENT_MODE_ALIASES.get(token, token)
        try:
            return PaymentMode(token)
        except ValueError:
            pass
    allowed = ", ".join(m.value for m in PaymentMode)
    raise ValidationError(field, value, f"unsupported payment mode (expected one of {allowed})")


def coerce_date(value: Any, field: str) -> date:
    try:
        result = to_date(value)
    except (TypeError, ValueError):
        raise ValidationError(field, value, "must be a date (YYYY-MM-DD)") from None
    if result is None:
        raise ValidationError(field, value, "is required")
    return result


def validate_template(template) -> None:
    """Check a plan template before it is offered for onboarding"""
    if not getattr(template, "name", "") or not str(template.name).strip():
        raise InvalidPlanError("name", getattr(template, "name", None), "must not be empty")
    for field in ("base_amount", "repayment_per_period"):
        try:
            coerce_amount(getattr(template, field, None), field)
        except ValidationError as e:
            raise InvalidPlanError(e.field, e.value, e.message) from None
    for field in ("advance_amount", "late_fee_per_period"):
        try:
            coerce_non_negative(getattr(template, field, None), field)
        except ValidationError as e:
            raise InvalidPlanError(e.field, e.value, e.message) from None


def validate_transaction_date(
    transaction_date: Any,
    reference_today: Any,
    terms=None,
    max_backdate_days: int = MAX_BACKDATE_DAYS,
) -> date:
    """Collection-time backdating policy.

    A transaction may be dated at most ``max_backdate_days`` before today.
    When anchored terms are given the date must also fall inside the plan's
    start/end range. Returns the normalized date.
    """
    tx_date = coerce_date(transaction_date, "transaction_date")
    today = coerce_date(reference_today, "reference_today")

    earliest = today - timedelta(days=max_backdate_days)
    if tx_date < earliest:
        raise ValidationError(
            "transaction_date", tx_date,
            f"cannot be more than {max_backdate_days} days in the past",
        )

    if terms is not None and terms.start_date is not None and terms.end_date is not None:
        if tx_date < terms.start_date or tx_date > terms.end_date:
            raise ValidationError(
                "transaction_date", tx_date,
                f"outside the repayment range {terms.start_date} to {terms.end_date}",
            )
    return tx_date


def validate_transaction(transaction, reference_today: Optional[Any] = None, terms=None) -> None:
    """Full pre-insert check for a new ledger entry"""
    if transaction.amount <= 0:
        raise ValidationError("amount", transaction.amount, "must be greater than 0")
    if reference_today is not None:
        validate_transaction_date(transaction.transaction_date, reference_today, terms)
