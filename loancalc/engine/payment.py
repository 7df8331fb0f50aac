"""Installment formula for one balance, rate and remaining term.

Pure functions: Decimal in, Decimal out. No I/O.
"""

from decimal import Decimal, ROUND_HALF_UP

from loancalc.exceptions import InvalidInputError

TWO_PLACES = Decimal("0.01")
FOUR_PLACES = Decimal("0.0001")

# Below these monthly rates the annuity form loses precision
ZERO_RATE_THRESHOLD = Decimal("0.0001")
LINEAR_RATE_THRESHOLD = Decimal("0.001")


def round_cents(value: Decimal) -> Decimal:
    """Round a money amount half-up to the cent."""
    return value.quantize(TWO_PLACES, ROUND_HALF_UP)


def monthly_rate(annual_rate: Decimal) -> Decimal:
    """Convert an annual percentage (e.g. 4.5) to a monthly fraction."""
    return annual_rate / Decimal("100") / Decimal("12")


def monthly_payment(principal: Decimal, rate: Decimal, total_months: int) -> Decimal:
    """Installment that amortizes ``principal`` over ``total_months`` at monthly ``rate``.

    Near-zero rates use pure division or a linearized form instead of the
    annuity formula, where (1+r)^n - 1 approaches zero.
    """
    if total_months <= 0:
        raise InvalidInputError(
            "Total months must be positive", {"total_months": total_months}
        )
    if principal <= 0:
        return Decimal("0.00")

    if rate < ZERO_RATE_THRESHOLD:
        return round_cents(principal / total_months)
    if rate < LINEAR_RATE_THRESHOLD:
        return round_cents(principal * (1 + rate * total_months) / total_months)

    # M = P * [r(1+r)^n] / [(1+r)^n - 1]
    factor = (1 + rate) ** total_months
    return round_cents(principal * (rate * factor) / (factor - 1))
