"""Errors raised by the calculation engine.

Every error is raised synchronously and leaves no partial result behind:
the caller corrects its input and calls again.
"""

from typing import Any


class LoanCalcError(Exception):
    """Base exception for engine errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InvalidInputError(LoanCalcError):
    """Loan description is malformed (principal, term, rate periods, plans)."""

    pass


class InvalidPaymentNumberError(LoanCalcError):
    """Overpayment targets a month outside [1, schedule length]."""

    pass


class InvalidRateChangeMonthError(LoanCalcError):
    """Rate change month is not strictly inside the schedule."""

    pass


class ScheduleTooLongError(LoanCalcError):
    """A schedule would exceed the 600-payment ceiling."""

    pass
