"""Canonical loans used across engine and API tests.

Reference loan: $300K, 4.5%, 30yr, equal installments, payment $1,520.06.
"""

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from loancalc.api.app import app
from loancalc.engine.schedule import generate_schedule
from loancalc.models.loan import InterestRatePeriod, LoanDetails, RepaymentModel


def make_loan(
    principal: str = "300000",
    rate: str = "4.5",
    term: int = 30,
    **kwargs,
) -> LoanDetails:
    return LoanDetails(
        principal=Decimal(principal),
        interest_rate_periods=[InterestRatePeriod(start_month=1, interest_rate=Decimal(rate))],
        loan_term=term,
        **kwargs,
    )


@pytest.fixture
def reference_loan() -> LoanDetails:
    """$300K at 4.5% for 30 years."""
    return make_loan()


@pytest.fixture
def reference_schedule(reference_loan):
    return generate_schedule(reference_loan)


@pytest.fixture
def fifteen_year_loan() -> LoanDetails:
    """$200K at 3.5% for 15 years."""
    return make_loan("200000", "3.5", 15)


@pytest.fixture
def decreasing_loan() -> LoanDetails:
    """$120K at 6% for 10 years: $1,000 principal every month."""
    return make_loan("120000", "6", 10, repayment_model=RepaymentModel.DECREASING_INSTALLMENTS)


@pytest.fixture
def dated_loan() -> LoanDetails:
    return make_loan(start_date=date(2024, 1, 15))


@pytest.fixture
def reference_payload() -> dict:
    return {
        "principal": "300000",
        "interestRatePeriods": [{"startMonth": 1, "interestRate": "4.5"}],
        "loanTerm": 30,
    }


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def loan_factory():
    """Build a single-rate loan: loan_factory("100000", "0", 10, **fields)."""
    return make_loan
