"""Exception hierarchy for the repayment engine."""
from typing import Any


class RepaymentEngineError(Exception):
    """Base exception for all engine errors."""


class ValidationError(RepaymentEngineError):
    """Raised when an input is malformed or out of range.

    Carries the offending field and the received value so callers can
    point at the exact input that needs fixing.
    """

    def __init__(self, field: str, value: Any, message: str) -> None:
        self.field = field
        self.value = value
        self.message = message
        super().__init__(f"{field}: {message} (got {value!r})")


class InvalidPlanError(ValidationError):
    """Raised when a plan template cannot be used for scaling."""


class PlanNotFoundError(RepaymentEngineError):
    """Raised when no plan template matches a frequency/period pair."""
