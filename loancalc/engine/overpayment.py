"""Overpayment rules: when they fire and how they reshape a schedule.

Pure functions. No I/O.
"""

import logging
from collections.abc import Sequence
from dataclasses import replace
from datetime import date
from decimal import Decimal

from loancalc.engine.dates import payment_month
from loancalc.engine.payment import round_cents
from loancalc.engine.schedule import (
    PrincipalRule,
    amortize,
    constant_principal_rule,
    equal_installment_rule,
    held_installment_rule,
    held_principal_rule,
    periods_from_entries,
    with_running_totals,
)
from loancalc.exceptions import InvalidInputError, InvalidPaymentNumberError
from loancalc.models.loan import (
    Frequency,
    OverpaymentDetails,
    OverpaymentEffect,
    RepaymentModel,
)
from loancalc.models.results import ScheduleEntry

logger = logging.getLogger(__name__)

# Months between firings; None fires once
FREQUENCY_STEP: dict[Frequency, int | None] = {
    Frequency.ONE_TIME: None,
    Frequency.MONTHLY: 1,
    Frequency.QUARTERLY: 3,
    Frequency.ANNUAL: 12,
}


def _resolve(month: int | None, when: date | None, loan_start: date | None, label: str) -> int | None:
    if month is not None:
        return month
    if when is None:
        return None
    if loan_start is None:
        raise InvalidInputError(
            f"Overpayment {label} date given without a loan start date",
            {label: when.isoformat()},
        )
    return payment_month(loan_start, when)


def resolve_months(overpayment: OverpaymentDetails, loan_start: date | None = None) -> tuple[int, int | None]:
    """Start and optional end payment numbers of a rule.

    Explicit months win over dates. A date maps to the payment falling in
    its calendar month, payment 1 being in the loan's start month.
    """
    start = _resolve(overpayment.start_month, overpayment.start_date, loan_start, "start")
    if start is None:
        raise InvalidInputError("Overpayment needs a start month or start date")
    end = _resolve(overpayment.end_month, overpayment.end_date, loan_start, "end")
    return start, end


def is_overpayment_applicable(
    overpayment: OverpaymentDetails, month: int, loan_start: date | None = None
) -> bool:
    """Whether ``overpayment`` fires at payment ``month``."""
    start, end = resolve_months(overpayment, loan_start)
    if month < start:
        return False
    if end is not None and month > end:
        return False

    frequency = overpayment.frequency if overpayment.recurs else Frequency.ONE_TIME
    step = FREQUENCY_STEP[frequency]
    if step is None:
        return month == start
    return (month - start) % step == 0


def _tail_rule(
    schedule: Sequence[ScheduleEntry],
    month: int,
    balance: Decimal,
    effect: OverpaymentEffect,
    repayment_model: RepaymentModel,
) -> PrincipalRule:
    later = schedule[month:]
    decreasing = repayment_model is RepaymentModel.DECREASING_INSTALLMENTS

    if effect is OverpaymentEffect.REDUCE_TERM:
        # Same installment as before, so the balance runs out sooner
        if decreasing:
            return held_principal_rule({e.payment_number: e.principal_payment for e in later})
        return held_installment_rule({e.payment_number: e.monthly_payment for e in later})

    # REDUCE_PAYMENT: same last month, smaller installment
    if decreasing:
        return constant_principal_rule(round_cents(balance / len(later)))
    return equal_installment_rule()


def apply_overpayment(
    schedule: Sequence[ScheduleEntry],
    amount: Decimal,
    month: int,
    effect: OverpaymentEffect,
    repayment_model: RepaymentModel = RepaymentModel.EQUAL_INSTALLMENTS,
) -> list[ScheduleEntry]:
    """Pay ``amount`` extra with payment ``month`` and re-amortize the rest.

    The amount is clamped to the balance left after that month's regular
    payment. Entries before ``month`` are untouched.
    """
    if month <= 0 or month > len(schedule):
        raise InvalidPaymentNumberError(
            f"Invalid payment number {month} for a schedule of {len(schedule)} payments",
            {"payment_number": month, "schedule_length": len(schedule)},
        )

    entry = schedule[month - 1]
    if entry.balance <= 0:
        logger.debug("Overpayment at month %s skipped: loan already repaid", month)
        return list(schedule)

    applied = min(round_cents(amount), entry.balance)
    if applied <= 0:
        return list(schedule)
    if applied < amount:
        logger.debug("Overpayment at month %s clamped from %s to %s", month, amount, applied)

    balance = entry.balance - applied
    target = replace(
        entry,
        is_overpayment=True,
        overpayment_amount=entry.overpayment_amount + applied,
        principal_payment=entry.principal_payment + applied,
        balance=balance,
    )

    tail: list[ScheduleEntry] = []
    if balance > 0 and month < len(schedule):
        later = schedule[month:]
        tail = amortize(
            balance,
            periods_from_entries(later),
            month + 1,
            len(schedule),
            _tail_rule(schedule, month, balance, effect, repayment_model),
            schedule[0].payment_date,
        )

    return with_running_totals([*schedule[:month - 1], target, *tail], from_month=month)


def perform_overpayments(
    schedule: Sequence[ScheduleEntry],
    overpayments: Sequence[OverpaymentDetails],
    loan_start: date | None = None,
    repayment_model: RepaymentModel = RepaymentModel.EQUAL_INSTALLMENTS,
) -> list[ScheduleEntry]:
    """Apply every rule month by month until the balance reaches zero.

    Rules firing in the same month are paid together; the effect of the
    largest one (first declared on ties) governs the re-amortization.
    """
    result = list(schedule)
    if not overpayments:
        return result

    month = 1
    while month <= len(result):
        firing = [op for op in overpayments if is_overpayment_applicable(op, month, loan_start)]
        if firing:
            total = sum((op.amount for op in firing), Decimal("0"))
            effect = max(firing, key=lambda op: op.amount).effect
            result = apply_overpayment(result, total, month, effect, repayment_model)
        if result[month - 1].balance <= 0:
            break
        month += 1

    return result
