"""Reconcile a customer's ledger against its loan terms"""
import logging
from decimal import Decimal
from typing import Any, Iterable, List, Mapping, Union

import pandas as pd

from config.constants import DAILY_TOTALS_COLUMNS, TRANSACTION_COLUMNS, PaymentMode, TransactionType
from core.date_scheduler import period_length_days, resolve_end_date
from data_manager.data_validator import coerce_date, round2
from data_manager.schema import LedgerSummary, LoanTerms, Transaction
from utils.date_utils import days_between

logger = logging.getLogger(__name__)

TransactionLike = Union[Transaction, Mapping[str, Any]]


def normalize_transactions(transactions: Iterable[TransactionLike]) -> List[Transaction]:
    """Accept Transaction objects or raw ledger rows"""
    return [
        t if isinstance(t, Transaction) else Transaction.from_record(t)
        for t in transactions or ()
    ]


def _total(transactions: Iterable[Transaction]) -> Decimal:
    return sum((t.amount for t in transactions), Decimal("0"))


def elapsed_periods(terms: LoanTerms, transactions: List[Transaction], reference_today: Any) -> int:
    """Whole periods since the first collection (0 before any collection)"""
    if not transactions:
        return 0
    today = coerce_date(reference_today, "reference_today")
    first = min(t.transaction_date for t in transactions)
    return max(0, days_between(first, today) // period_length_days(terms.frequency))


def overdue_periods(terms: LoanTerms, pending_amount: Decimal, reference_today: Any) -> int:
    """Whole periods past the end date while a balance remains open.

    Counted in plan periods rather than days, and zero once the balance is
    settled, so a closed loan never keeps accruing a fee.
    """
    if terms.start_date is None or pending_amount <= 0:
        return 0
    today = coerce_date(reference_today, "reference_today")
    end = resolve_end_date(terms)
    if today <= end:
        return 0
    return days_between(end, today) // period_length_days(terms.frequency)


def summarize(
    terms: LoanTerms,
    transactions: Iterable[TransactionLike],
    reference_today: Any,
) -> LedgerSummary:
    """
    Standing balance of one customer.

    pending_amount is expected minus repaid and is not clamped, so an
    overpaid loan reports a negative figure.
    """
    txs = normalize_transactions(transactions)

    totals_by_type = {
        tx_type.value: _total(t for t in txs if t.transaction_type == tx_type)
        for tx_type in TransactionType
    }
    total_repaid = totals_by_type[TransactionType.REPAYMENT.value]
    total_by_cash = _total(t for t in txs if t.payment_mode == PaymentMode.CASH)
    total_by_upi = _total(t for t in txs if t.payment_mode == PaymentMode.UPI)

    expected = terms.repayment_amount * terms.periods
    pending_amount = expected - total_repaid

    elapsed = elapsed_periods(terms, txs, reference_today)
    pending = max(0, terms.periods - elapsed)

    overdue = overdue_periods(terms, pending_amount, reference_today)
    accrued_late_fee = terms.late_fee_per_period * overdue

    if terms.repayment_amount:
        installments = round2(pending_amount / terms.repayment_amount)
    else:
        installments = Decimal("0")

    summary = LedgerSummary(
        total_repaid=total_repaid,
        total_by_cash=total_by_cash,
        total_by_upi=total_by_upi,
        expected_total_repayment=expected,
        pending_amount=pending_amount,
        elapsed_periods=elapsed,
        pending_periods=pending,
        period_unit=terms.frequency.unit,
        overdue_periods=overdue,
        accrued_late_fee=accrued_late_fee,
        installments_outstanding=installments,
        first_transaction_date=min((t.transaction_date for t in txs), default=None),
        totals_by_type=totals_by_type,
    )
    logger.debug(
        "Ledger summary: %d transactions, repaid=%s pending=%s pending_periods=%d",
        len(txs), total_repaid, pending_amount, pending,
    )
    return summary


def has_open_balance(terms: LoanTerms, transactions: Iterable[TransactionLike]) -> bool:
    """True while repayments fall short of the expected total"""
    txs = normalize_transactions(transactions)
    repaid = _total(t for t in txs if t.transaction_type == TransactionType.REPAYMENT)
    return terms.repayment_amount * terms.periods - repaid > 0


def transactions_frame(transactions: Iterable[TransactionLike]) -> pd.DataFrame:
    """Ledger as a DataFrame (amounts as floats, dates as ISO strings)"""
    records = [
        {
            "customer_id": t.customer_id,
            "transaction_date": t.transaction_date.strftime("%Y-%m-%d"),
            "transaction_type": t.transaction_type.value,
            "payment_mode": t.payment_mode.value,
            "amount": float(t.amount),
            "remarks": t.remarks,
        }
        for t in normalize_transactions(transactions)
    ]
    return pd.DataFrame(records, columns=TRANSACTION_COLUMNS)


def transactions_from_frame(df: pd.DataFrame) -> List[Transaction]:
    """Parse ledger rows read with pd.read_csv"""
    if df.empty:
        return []
    clean = df.astype(object).where(df.notna(), None)
    return [Transaction.from_record(row) for row in clean.to_dict("records")]


def daily_collection_totals(transactions: Iterable[TransactionLike]) -> pd.DataFrame:
    """Collected amount per day split by payment mode"""
    df = transactions_frame(transactions)
    if df.empty:
        return pd.DataFrame(columns=DAILY_TOTALS_COLUMNS)

    pivot = df.pivot_table(
        index="transaction_date", columns="payment_mode",
        values="amount", aggfunc="sum", fill_value=0.0,
    )
    pivot = pivot.reindex(columns=[m.value for m in PaymentMode], fill_value=0.0)
    pivot["total"] = pivot[PaymentMode.CASH.value] + pivot[PaymentMode.UPI.value]
    out = pivot.reset_index()
    out.columns.name = None
    return out[DAILY_TOTALS_COLUMNS].round(2)
