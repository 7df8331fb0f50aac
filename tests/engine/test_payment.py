from decimal import Decimal

import pytest

from loancalc.engine.payment import monthly_payment, monthly_rate, round_cents
from loancalc.exceptions import InvalidInputError


class TestMonthlyRate:
    def test_percent_to_monthly_fraction(self):
        assert monthly_rate(Decimal("6")) == Decimal("0.005")

    def test_zero(self):
        assert monthly_rate(Decimal("0")) == 0


class TestRoundCents:
    def test_half_up(self):
        assert round_cents(Decimal("1.005")) == Decimal("1.01")
        assert round_cents(Decimal("1.004")) == Decimal("1.00")


class TestMonthlyPayment:
    def test_thirty_year_reference(self):
        """$300K at 4.5% for 30 years."""
        pmt = monthly_payment(Decimal("300000"), monthly_rate(Decimal("4.5")), 360)
        assert pmt == Decimal("1520.06")

    def test_fifteen_year_reference(self):
        pmt = monthly_payment(Decimal("200000"), monthly_rate(Decimal("3.5")), 180)
        assert pmt == Decimal("1429.77")

    def test_zero_rate_is_pure_division(self):
        pmt = monthly_payment(Decimal("360000"), Decimal("0"), 360)
        assert pmt == Decimal("1000.00")

    def test_tiny_rate_is_pure_division(self):
        pmt = monthly_payment(Decimal("120000"), Decimal("0.00005"), 120)
        assert pmt == Decimal("1000.00")

    def test_small_rate_is_linearized(self):
        # 120000 * (1 + 0.0005 * 120) / 120
        pmt = monthly_payment(Decimal("120000"), Decimal("0.0005"), 120)
        assert pmt == Decimal("1060.00")

    def test_linear_branch_starts_at_threshold(self):
        pmt = monthly_payment(Decimal("120000"), Decimal("0.0001"), 120)
        assert pmt == Decimal("1012.00")

    def test_zero_principal(self):
        assert monthly_payment(Decimal("0"), Decimal("0.005"), 360) == Decimal("0")

    def test_non_positive_months_rejected(self):
        with pytest.raises(InvalidInputError):
            monthly_payment(Decimal("1000"), Decimal("0.005"), 0)
