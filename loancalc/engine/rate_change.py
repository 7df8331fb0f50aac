"""Mid-term rate changes spliced into an existing schedule.

Pure functions. No I/O.
"""

import logging
from collections.abc import Sequence
from decimal import Decimal, ROUND_HALF_UP

from loancalc.engine.payment import round_cents
from loancalc.engine.schedule import (
    amortize,
    constant_principal_rule,
    equal_installment_rule,
    with_running_totals,
)
from loancalc.exceptions import InvalidInputError, InvalidRateChangeMonthError
from loancalc.models.loan import InterestRatePeriod, RateChange, RepaymentModel
from loancalc.models.results import ScheduleEntry

logger = logging.getLogger(__name__)


def apply_rate_change(
    schedule: Sequence[ScheduleEntry],
    change_at_month: int,
    new_rate: Decimal,
    remaining_term_years: Decimal | None = None,
    repayment_model: RepaymentModel = RepaymentModel.EQUAL_INSTALLMENTS,
) -> list[ScheduleEntry]:
    """Re-amortize everything after payment ``change_at_month`` at ``new_rate``.

    Payments 1..change_at_month are kept as they are; the balance left after
    them is recast over ``remaining_term_years`` (default: the months the
    schedule had left) starting with payment ``change_at_month + 1``.
    The carried balance is the one after payment ``change_at_month`` itself,
    so no payment is skipped and principal still sums to the loan amount.
    """
    length = len(schedule)
    if change_at_month <= 0 or change_at_month >= length:
        raise InvalidRateChangeMonthError(
            f"Invalid month {change_at_month} for rate change on a schedule of {length} payments",
            {"month": change_at_month, "schedule_length": length},
        )

    head = list(schedule[:change_at_month])
    balance = head[-1].balance
    if balance <= 0:
        return head

    if remaining_term_years is not None:
        tail_months = int((remaining_term_years * 12).quantize(Decimal("1"), ROUND_HALF_UP))
        if tail_months < 1:
            raise InvalidInputError(
                "Remaining term override must cover at least one month",
                {"remaining_term_years": str(remaining_term_years)},
            )
    else:
        tail_months = length - change_at_month

    if repayment_model is RepaymentModel.DECREASING_INSTALLMENTS:
        rule = constant_principal_rule(round_cents(balance / tail_months))
    else:
        rule = equal_installment_rule()

    first = change_at_month + 1
    logger.debug(
        "Rate change to %s%% after payment %s: recasting %s over %s months",
        new_rate, change_at_month, balance, tail_months,
    )
    tail = amortize(
        balance,
        [InterestRatePeriod(first, new_rate)],
        first,
        change_at_month + tail_months,
        rule,
        schedule[0].payment_date,
    )
    return with_running_totals([*head, *tail], from_month=first)


def perform_rate_changes(
    schedule: Sequence[ScheduleEntry],
    rate_changes: Sequence[RateChange],
    repayment_model: RepaymentModel = RepaymentModel.EQUAL_INSTALLMENTS,
) -> list[ScheduleEntry]:
    """Apply rate changes in ascending month order, each on the previous result."""
    result = list(schedule)
    for change in sorted(rate_changes, key=lambda c: c.month):
        result = apply_rate_change(
            result,
            change.month,
            change.new_rate,
            change.remaining_term_years,
            repayment_model,
        )
    return result
