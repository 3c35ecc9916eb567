"""Input coercion, policy checks and record parsing tests"""
from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from config.constants import Frequency, PaymentMode, TransactionType
from core.exceptions import InvalidPlanError, ValidationError
from data_manager.data_validator import (
    coerce_amount,
    coerce_frequency,
    coerce_payment_mode,
    coerce_periods,
    round2,
    validate_template,
    validate_transaction,
    validate_transaction_date,
)
from data_manager.schema import LoanTerms, RepaymentPlanTemplate, Transaction


class TestCoercion:
    def test_round2_half_up(self):
        assert round2(Decimal("2.675")) == Decimal("2.68")
        assert round2(Decimal("-1.005")) == Decimal("-1.01")

    def test_amount(self):
        assert coerce_amount("12.50") == Decimal("12.50")
        assert coerce_amount(0.1) == Decimal("0.1")

    @pytest.mark.parametrize("value", [0, -1, "nan", "inf", None, True, "", "ten"])
    def test_amount_rejected(self, value):
        with pytest.raises(ValidationError) as exc:
            coerce_amount(value, "amount_given")
        assert exc.value.field == "amount_given"

    def test_periods_from_string(self):
        assert coerce_periods("12") == 12
        assert coerce_periods(12.0) == 12

    def test_frequency_tokens(self):
        assert coerce_frequency(" WEEKLY ") == Frequency.WEEKLY
        with pytest.raises(ValidationError) as exc:
            coerce_frequency("biweekly")
        assert "daily, weekly, monthly, yearly" in str(exc.value)

    def test_payment_mode_aliases(self):
        assert coerce_payment_mode("Paid by cash") == PaymentMode.CASH
        assert coerce_payment_mode("UPI") == PaymentMode.UPI
        with pytest.raises(ValidationError):
            coerce_payment_mode("cheque")


class TestErrorDetail:
    def test_message_names_field_and_value(self):
        with pytest.raises(ValidationError) as exc:
            coerce_periods(0, "days_to_complete")
        assert str(exc.value) == "days_to_complete: must be greater than 0 (got 0)"
        assert exc.value.value == 0


class TestValidateTemplate:
    def test_valid(self, weekly_template):
        validate_template(weekly_template)

    @pytest.mark.parametrize("field,value", [
        ("name", " "),
        ("base_amount", Decimal("0")),
        ("base_amount", None),
        ("base_amount", "abc"),
        ("repayment_per_period", "abc"),
        ("repayment_per_period", Decimal("0")),
        ("advance_amount", Decimal("-1")),
        ("late_fee_per_period", Decimal("-1")),
        ("late_fee_per_period", "ten"),
    ])
    def test_invalid(self, weekly_template, field, value):
        with pytest.raises(InvalidPlanError) as exc:
            validate_template(replace(weekly_template, **{field: value}))
        assert exc.value.field == field

    def test_missing_optional_amounts(self, weekly_template):
        validate_template(replace(weekly_template, advance_amount=None, late_fee_per_period=None))


class TestTransactionDatePolicy:
    def test_within_window(self):
        assert validate_transaction_date("2024-03-03", date(2024, 3, 10)) == date(2024, 3, 3)

    def test_too_far_back(self):
        with pytest.raises(ValidationError) as exc:
            validate_transaction_date(date(2024, 3, 2), date(2024, 3, 10))
        assert exc.value.field == "transaction_date"
        assert "7 days" in str(exc.value)

    def test_custom_window(self):
        validate_transaction_date(date(2024, 3, 1), date(2024, 3, 10), max_backdate_days=30)

    def test_outside_plan_range(self, daily_terms):
        with pytest.raises(ValidationError) as exc:
            validate_transaction_date(date(2024, 3, 12), date(2024, 3, 12), daily_terms)
        assert "outside the repayment range" in str(exc.value)

    def test_validate_transaction(self, make_tx, daily_terms):
        validate_transaction(make_tx(100, date(2024, 3, 5)), date(2024, 3, 6), daily_terms)
        with pytest.raises(ValidationError):
            validate_transaction(make_tx(0, date(2024, 3, 5)))


class TestFromRecord:
    def test_template_row(self):
        template = RepaymentPlanTemplate.from_record({
            "id": 7, "name": "Daily 100", "frequency": "Daily", "periods": "100",
            "base_amount": "10000", "repayment_per_period": 120,
            "advance_amount": None, "late_fee_per_period": "20", "description": None,
        })
        assert template.id == "7"
        assert template.frequency == Frequency.DAILY
        assert template.periods == 100
        assert template.base_amount == Decimal("10000")
        assert template.advance_amount == Decimal("0")
        assert template.late_fee_per_period == Decimal("20")

    def test_customer_row(self):
        terms = LoanTerms.from_record({
            "repayment_frequency": "monthly", "days_to_complete": 12,
            "repayment_amount": 1000, "advance_amount": "0", "late_fee_per_day": 50,
            "start_date": "2024-01-31T00:00:00", "end_date": "2025-01-31",
            "amount_given": 10000, "repayment_plan_id": 3,
        })
        assert terms.frequency == Frequency.MONTHLY
        assert terms.periods == 12
        assert terms.start_date == date(2024, 1, 31)
        assert terms.end_date == date(2025, 1, 31)
        assert terms.plan_id == "3"
        assert terms.expected_total_repayment == Decimal("12000")

    def test_customer_row_bad_frequency(self):
        with pytest.raises(ValidationError) as exc:
            LoanTerms.from_record({"repayment_frequency": "hourly", "days_to_complete": 5})
        assert exc.value.field == "repayment_frequency"

    def test_transaction_row(self):
        tx = Transaction.from_record({
            "customer_id": 42, "amount": "150.00", "type": "late_fee",
            "payment_mode": "cash", "transaction_date": "2024-03-01", "remarks": None,
        })
        assert tx.customer_id == "42"
        assert tx.transaction_type == TransactionType.LATE_FEE
        assert tx.remarks == ""
