from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Tuple

from config.constants import Frequency, PaymentMode, TransactionType
from data_manager.data_validator import (
    coerce_amount,
    coerce_date,
    coerce_decimal,
    coerce_frequency,
    coerce_non_negative,
    coerce_payment_mode,
    coerce_periods,
    coerce_transaction_type,
)


def _first(record: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in record and record[key] is not None:
            return record[key]
    return default


def _optional_date(record: Mapping[str, Any], key: str) -> Optional[date]:
    value = _first(record, key)
    return coerce_date(value, key) if value not in (None, "") else None


@dataclass(frozen=True)
class RepaymentPlanTemplate:
    id: str
    name: str
    frequency: Frequency
    periods: int
    base_amount: Decimal  # principal the per-period figures are calibrated to
    repayment_per_period: Decimal
    advance_amount: Decimal = Decimal("0")
    late_fee_per_period: Decimal = Decimal("0")
    description: str = ""

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "RepaymentPlanTemplate":
        """Build from a repayment_plans row; scaling fields are left for scale() to judge"""
        base_amount = _first(record, "base_amount")
        repayment = _first(record, "repayment_per_period")
        return cls(
            id=str(_first(record, "id", "plan_id", default="")),
            name=str(_first(record, "name", default="")).strip(),
            frequency=coerce_frequency(_first(record, "frequency")),
            periods=coerce_periods(_first(record, "periods")),
            base_amount=coerce_decimal(base_amount, "base_amount") if base_amount is not None else None,
            repayment_per_period=(
                coerce_decimal(repayment, "repayment_per_period") if repayment is not None else None
            ),
            advance_amount=coerce_non_negative(_first(record, "advance_amount"), "advance_amount"),
            late_fee_per_period=coerce_non_negative(
                _first(record, "late_fee_per_period"), "late_fee_per_period",
            ),
            description=str(_first(record, "description", default="") or ""),
        )


@dataclass(frozen=True)
class LoanTerms:
    """Scaled, date-anchored snapshot stored on the customer at onboarding."""

    frequency: Frequency
    periods: int
    repayment_amount: Decimal
    advance_amount: Decimal
    late_fee_per_period: Decimal
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    amount_given: Optional[Decimal] = None
    plan_id: Optional[str] = None

    def __post_init__(self):
        # Accept raw tokens and plain numbers; store enums, Decimals and dates
        normalized = {
            "frequency": coerce_frequency(self.frequency),
            "periods": coerce_periods(self.periods),
            "repayment_amount": coerce_non_negative(self.repayment_amount, "repayment_amount"),
            "advance_amount": coerce_non_negative(self.advance_amount, "advance_amount"),
            "late_fee_per_period": coerce_non_negative(self.late_fee_per_period, "late_fee_per_period"),
            "start_date": coerce_date(self.start_date, "start_date") if self.start_date is not None else None,
            "end_date": coerce_date(self.end_date, "end_date") if self.end_date is not None else None,
            "amount_given": (
                coerce_amount(self.amount_given, "amount_given") if self.amount_given is not None else None
            ),
            "plan_id": str(self.plan_id) if self.plan_id is not None else None,
        }
        for name, value in normalized.items():
            object.__setattr__(self, name, value)

    @property
    def is_anchored(self) -> bool:
        return self.start_date is not None and self.end_date is not None

    @property
    def expected_total_repayment(self) -> Decimal:
        return self.repayment_amount * self.periods

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "LoanTerms":
        """Build from a customers row (the persisted snapshot, never the template)"""
        amount_given = _first(record, "amount_given")
        plan_id = _first(record, "repayment_plan_id", "plan_id")
        return cls(
            frequency=coerce_frequency(
                _first(record, "repayment_frequency", "frequency"), "repayment_frequency",
            ),
            periods=coerce_periods(_first(record, "days_to_complete", "periods"), "days_to_complete"),
            repayment_amount=coerce_non_negative(_first(record, "repayment_amount"), "repayment_amount"),
            advance_amount=coerce_non_negative(_first(record, "advance_amount"), "advance_amount"),
            late_fee_per_period=coerce_non_negative(
                _first(record, "late_fee_per_day", "late_fee_per_period"), "late_fee_per_day",
            ),
            start_date=_optional_date(record, "start_date"),
            end_date=_optional_date(record, "end_date"),
            amount_given=coerce_amount(amount_given, "amount_given") if amount_given is not None else None,
            plan_id=str(plan_id) if plan_id is not None else None,
        )

    def to_record(self) -> Dict[str, Any]:
        """Customer columns to persist"""
        return {
            "repayment_plan_id": self.plan_id,
            "repayment_frequency": self.frequency.value,
            "days_to_complete": self.periods,
            "amount_given": str(self.amount_given) if self.amount_given is not None else None,
            "repayment_amount": str(self.repayment_amount),
            "advance_amount": str(self.advance_amount),
            "late_fee_per_day": str(self.late_fee_per_period),
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
        }


@dataclass(frozen=True)
class Transaction:
    customer_id: str
    amount: Decimal
    transaction_type: TransactionType
    payment_mode: PaymentMode
    transaction_date: date
    remarks: str = ""

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Transaction":
        return cls(
            customer_id=str(_first(record, "customer_id", default="")),
            amount=coerce_amount(_first(record, "amount")),
            transaction_type=coerce_transaction_type(
                _first(record, "transaction_type", "type"), "transaction_type",
            ),
            payment_mode=coerce_payment_mode(_first(record, "payment_mode")),
            transaction_date=coerce_date(_first(record, "transaction_date"), "transaction_date"),
            remarks=str(_first(record, "remarks", default="") or ""),
        )


@dataclass(frozen=True)
class LedgerSummary:
    total_repaid: Decimal
    total_by_cash: Decimal
    total_by_upi: Decimal
    expected_total_repayment: Decimal
    pending_amount: Decimal
    elapsed_periods: int
    pending_periods: int
    period_unit: str
    overdue_periods: int = 0
    accrued_late_fee: Decimal = Decimal("0")
    installments_outstanding: Decimal = Decimal("0")
    first_transaction_date: Optional[date] = None
    totals_by_type: Dict[str, Decimal] = field(default_factory=dict)

    @property
    def pending_periods_label(self) -> str:
        return f"{self.pending_periods} {self.period_unit}"

    @property
    def has_open_balance(self) -> bool:
        return self.pending_amount > 0


@dataclass(frozen=True)
class DayClassification:
    is_due: bool = False
    is_in_range: bool = False
    is_past: bool = False
    is_today: bool = False
    is_start: bool = False
    is_end: bool = False


@dataclass(frozen=True)
class CalendarDay:
    day: date
    classification: DayClassification


@dataclass(frozen=True)
class CalendarMonth:
    id: str  # "YYYY-MM"
    year: int
    month: int
    days_in_month: int
    first_weekday_offset: int
    days: Tuple[CalendarDay, ...] = ()

    @property
    def due_days(self) -> Tuple[date, ...]:
        return tuple(d.day for d in self.days if d.classification.is_due)
