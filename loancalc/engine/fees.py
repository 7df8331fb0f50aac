"""Loan fees and APR.

Pure functions. No I/O.
"""

import logging
from collections.abc import Sequence
from dataclasses import replace
from decimal import Decimal

from scipy.optimize import brentq

from loancalc.engine.payment import round_cents
from loancalc.models.loan import AdditionalCosts, FeeSpec, FeeType
from loancalc.models.results import ScheduleEntry

logger = logging.getLogger(__name__)

APR_TOLERANCE = 1e-4
APR_MAX_ITERATIONS = 100
APR_INITIAL_GUESS = 0.05 / 12  # Monthly
APR_INITIAL_STEP = 0.01 / 12
APR_STEP_DECAY = 0.9


def _fee(spec: FeeSpec | None, base: Decimal, per_month: bool = False) -> Decimal:
    if spec is None:
        return Decimal("0")
    if spec.type is FeeType.FIXED:
        return round_cents(spec.amount)
    fee = base * spec.amount / 100
    if per_month:
        fee = fee / 12
    return round_cents(fee)


def one_time_fees(principal: Decimal, costs: AdditionalCosts | None) -> Decimal:
    """Origination fee, fixed or a percentage of the principal."""
    if costs is None:
        return Decimal("0")
    return _fee(costs.origination_fee, principal)


def recurring_fees(balance: Decimal, costs: AdditionalCosts | None) -> Decimal:
    """Monthly insurance plus administrative fee on a pre-payment balance.

    Percentage fees are annual rates on the balance, charged monthly.
    """
    if costs is None:
        return Decimal("0")
    return (
        _fee(costs.loan_insurance, balance, per_month=True)
        + _fee(costs.administrative_fee, balance, per_month=True)
    )


def early_repayment_fee(overpayment: Decimal, costs: AdditionalCosts | None) -> Decimal:
    """Fee charged on one overpayment, fixed or a percentage of the amount."""
    if costs is None or overpayment <= 0:
        return Decimal("0")
    return _fee(costs.early_repayment_fee, overpayment)


def apply_fees(
    schedule: Sequence[ScheduleEntry],
    principal: Decimal,
    costs: AdditionalCosts | None,
) -> tuple[list[ScheduleEntry], Decimal, Decimal]:
    """Attach monthly fees to each entry.

    Returns the new schedule, total recurring fees and total early-repayment fees.
    """
    result: list[ScheduleEntry] = []
    total_recurring = Decimal("0")
    total_early = Decimal("0")
    opening = principal

    for entry in schedule:
        recurring = recurring_fees(opening, costs)
        early = early_repayment_fee(entry.overpayment_amount, costs)
        total_recurring += recurring
        total_early += early
        result.append(replace(entry, fees=recurring + early))
        opening = entry.balance

    return result, total_recurring, total_early


def _present_value(cash_flow: float, months: int, rate: float) -> float:
    if rate == 0:
        return cash_flow * months
    return sum(cash_flow / (1 + rate) ** k for k in range(1, months + 1))


def calculate_apr(
    principal: Decimal,
    monthly_payment: Decimal,
    total_months: int,
    one_time: Decimal = Decimal("0"),
    recurring: Decimal = Decimal("0"),
) -> Decimal:
    """Annual percentage rate equating payments plus fees to net proceeds.

    Searches the monthly rate g with a step that shrinks every iteration,
    moving up while the discounted payments exceed principal - one_time.
    """
    net_proceeds = float(principal - one_time)
    cash_flow = float(monthly_payment + recurring)

    guess = APR_INITIAL_GUESS
    step = APR_INITIAL_STEP
    for _ in range(APR_MAX_ITERATIONS):
        residual = _present_value(cash_flow, total_months, guess) - net_proceeds
        if abs(residual) < APR_TOLERANCE:
            break
        guess = guess + step if residual > 0 else guess - step
        step *= APR_STEP_DECAY
    else:
        logger.debug("APR search stopped after %s iterations at %s", APR_MAX_ITERATIONS, guess)

    return round_cents(Decimal(str(guess * 12 * 100)))


def reference_apr(
    principal: Decimal,
    monthly_payment: Decimal,
    total_months: int,
    one_time: Decimal = Decimal("0"),
    recurring: Decimal = Decimal("0"),
) -> Decimal | None:
    """Same equation as ``calculate_apr`` solved with Brent's method.

    Used to flag disagreement with the stepped search. None when no root
    lies between -1% and 100% a month.
    """
    net_proceeds = float(principal - one_time)
    cash_flow = float(monthly_payment + recurring)

    def npv(rate: float) -> float:
        return _present_value(cash_flow, total_months, rate) - net_proceeds

    try:
        rate = brentq(npv, -0.01, 1.0, xtol=1e-12, maxiter=1000)
    except ValueError:
        return None
    return round_cents(Decimal(str(rate * 12 * 100)))
