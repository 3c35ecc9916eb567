import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

# Make the project root importable
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from config.constants import Frequency, PaymentMode, TransactionType  # noqa: E402
from data_manager.schema import LoanTerms, RepaymentPlanTemplate, Transaction  # noqa: E402


@pytest.fixture
def weekly_template() -> RepaymentPlanTemplate:
    """1000 base, 50/week for 20 weeks, 100 advance, 5 late fee"""
    return RepaymentPlanTemplate(
        id="plan-weekly-20",
        name="Weekly 20",
        frequency=Frequency.WEEKLY,
        periods=20,
        base_amount=Decimal("1000"),
        repayment_per_period=Decimal("50"),
        advance_amount=Decimal("100"),
        late_fee_per_period=Decimal("5"),
    )


@pytest.fixture
def daily_terms() -> LoanTerms:
    """100/day for 10 days starting 2024-03-01"""
    return LoanTerms(
        frequency=Frequency.DAILY,
        periods=10,
        repayment_amount=Decimal("100"),
        advance_amount=Decimal("0"),
        late_fee_per_period=Decimal("10"),
        start_date=date(2024, 3, 1),
        end_date=date(2024, 3, 11),
    )


@pytest.fixture
def make_tx():
    def _make(amount, day, tx_type=TransactionType.REPAYMENT, mode=PaymentMode.CASH, customer_id="cust-001"):
        return Transaction(
            customer_id=customer_id,
            amount=Decimal(str(amount)),
            transaction_type=tx_type,
            payment_mode=mode,
            transaction_date=day,
        )
    return _make
