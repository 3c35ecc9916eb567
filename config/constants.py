from enum import Enum


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @property
    def label(self) -> str:
        return {
            "daily": "Daily",
            "weekly": "Weekly",
            "monthly": "Monthly",
            "yearly": "Yearly",
        }[self.value]

    @property
    def unit(self) -> str:
        """Plural unit used for pending-period figures"""
        return {
            "daily": "days",
            "weekly": "weeks",
            "monthly": "months",
            "yearly": "years",
        }[self.value]


class TransactionType(str, Enum):
    REPAYMENT = "repayment"
    ADVANCE = "advance"
    LATE_FEE = "late_fee"
    GIVEN = "given"

    @property
    def label(self) -> str:
        return {
            "repayment": "Repayment",
            "advance": "Advance",
            "late_fee": "Late fee",
            "given": "Amount given",
        }[self.value]


class PaymentMode(str, Enum):
    CASH = "cash"
    UPI = "upi"

    @property
    def label(self) -> str:
        return {
            "cash": "Cash",
            "upi": "UPI",
        }[self.value]


# Spellings seen in collection exports
PAYMENT_MODE_ALIASES = {
    "paid by cash": PaymentMode.CASH.value,
    "paid by upi": PaymentMode.UPI.value,
}

# Column definitions
SCHEDULE_COLUMNS = [
    "period", "due_date", "expected_amount", "cumulative_expected",
    "is_past", "is_covered",
]

TRANSACTION_COLUMNS = [
    "customer_id", "transaction_date", "transaction_type",
    "payment_mode", "amount", "remarks",
]

DAILY_TOTALS_COLUMNS = ["transaction_date", "cash", "upi", "total"]
