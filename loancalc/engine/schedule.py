"""Month-by-month amortization schedules.

Pure functions: dataclasses in, new lists of ScheduleEntry out. No I/O.
The same amortization loop builds full schedules and the tails spliced in
after overpayments and rate changes; only the rule that splits each month's
installment into principal and interest differs.
"""

from collections.abc import Callable, Sequence
from dataclasses import replace
from datetime import date
from decimal import Decimal

from loancalc.engine.dates import add_months
from loancalc.engine.payment import monthly_payment, monthly_rate, round_cents
from loancalc.exceptions import ScheduleTooLongError
from loancalc.models.loan import InterestRatePeriod, LoanDetails, RepaymentModel
from loancalc.models.results import ScheduleEntry, YearlyData

MAX_SCHEDULE_MONTHS = 600

# (balance, monthly rate, interest, month, remaining months) -> (principal, installment)
PrincipalRule = Callable[[Decimal, Decimal, Decimal, int, int], tuple[Decimal, Decimal]]


class RateCursor:
    """Annual rate in force for a month, advancing monotonically.

    The latest period whose start month is <= the month governs it. Months
    must be queried in non-decreasing order.
    """

    def __init__(self, periods: Sequence[InterestRatePeriod]):
        self._periods = sorted(periods, key=lambda p: p.start_month)
        self._index = 0

    def rate_at(self, month: int) -> Decimal:
        periods = self._periods
        while self._index + 1 < len(periods) and periods[self._index + 1].start_month <= month:
            self._index += 1
        return periods[self._index].interest_rate


def rate_at(periods: Sequence[InterestRatePeriod], month: int) -> Decimal:
    """Annual rate in force at ``month`` (one-off lookup)."""
    return RateCursor(periods).rate_at(month)


def periods_from_entries(entries: Sequence[ScheduleEntry]) -> list[InterestRatePeriod]:
    """Collapse the rates recorded on schedule entries back into periods."""
    periods: list[InterestRatePeriod] = []
    for entry in entries:
        if not periods or periods[-1].interest_rate != entry.interest_rate:
            periods.append(InterestRatePeriod(entry.payment_number, entry.interest_rate))
    return periods


def equal_installment_rule() -> PrincipalRule:
    """Recompute the annuity every month from the remaining balance and countdown."""
    def rule(balance, rate, interest, month, remaining):
        installment = monthly_payment(balance, rate, remaining)
        return installment - interest, installment
    return rule


def constant_principal_rule(principal_part: Decimal) -> PrincipalRule:
    """Fixed principal portion each month; interest on top."""
    def rule(balance, rate, interest, month, remaining):
        return principal_part, principal_part + interest
    return rule


def held_installment_rule(installments: dict[int, Decimal]) -> PrincipalRule:
    """Pay a pre-agreed installment per month, whatever the balance."""
    def rule(balance, rate, interest, month, remaining):
        installment = installments[month]
        return installment - interest, installment
    return rule


def held_principal_rule(principal_parts: dict[int, Decimal]) -> PrincipalRule:
    """Pay a pre-agreed principal portion per month plus that month's interest."""
    def rule(balance, rate, interest, month, remaining):
        principal_part = principal_parts[month]
        return principal_part, principal_part + interest
    return rule


def amortize(
    balance: Decimal,
    periods: Sequence[InterestRatePeriod],
    first_month: int,
    last_month: int,
    rule: PrincipalRule,
    first_payment_date: date | None = None,
) -> list[ScheduleEntry]:
    """Amortize ``balance`` over payments ``first_month``..``last_month``.

    Stops early when the balance reaches zero. The last month always clears
    the balance, and principal never exceeds it. Running totals are left at
    zero; see ``with_running_totals``.
    """
    if last_month > MAX_SCHEDULE_MONTHS:
        raise ScheduleTooLongError(
            f"Schedule would run to payment {last_month}, "
            f"beyond the {MAX_SCHEDULE_MONTHS}-payment ceiling",
            {"last_month": last_month, "max_months": MAX_SCHEDULE_MONTHS},
        )

    cursor = RateCursor(periods)
    entries: list[ScheduleEntry] = []

    for month in range(first_month, last_month + 1):
        annual_rate = cursor.rate_at(month)
        rate = monthly_rate(annual_rate)
        interest = round_cents(balance * rate)
        principal_part, installment = rule(balance, rate, interest, month, last_month - month + 1)
        principal_part = round_cents(principal_part)

        # Final-month / early-payoff clamp
        if principal_part > balance or month == last_month:
            principal_part = balance
            installment = principal_part + interest
        # An installment below the interest never grows the balance
        elif principal_part < 0:
            principal_part = Decimal("0.00")
            installment = interest

        balance = balance - principal_part
        entries.append(ScheduleEntry(
            payment_number=month,
            monthly_payment=round_cents(installment),
            principal_payment=principal_part,
            interest_payment=interest,
            balance=balance,
            interest_rate=annual_rate,
            payment_date=(
                add_months(first_payment_date, month - 1) if first_payment_date else None
            ),
        ))
        if balance <= 0:
            break

    return entries


def with_running_totals(entries: Sequence[ScheduleEntry], from_month: int = 1) -> list[ScheduleEntry]:
    """Recompute cumulative interest and cash paid from ``from_month`` onward.

    Entries before ``from_month`` are carried over untouched and seed the sums.
    """
    result: list[ScheduleEntry] = []
    total_interest = Decimal("0")
    total_payment = Decimal("0")

    for entry in entries:
        if entry.payment_number < from_month:
            total_interest = entry.total_interest
            total_payment = entry.total_payment
            result.append(entry)
            continue
        total_interest += entry.interest_payment
        total_payment += entry.monthly_payment + entry.overpayment_amount
        result.append(replace(entry, total_interest=total_interest, total_payment=total_payment))

    return result


def generate_schedule(loan: LoanDetails) -> list[ScheduleEntry]:
    """Full schedule for ``loan`` under its own rate periods, ignoring overpayments."""
    total_months = loan.total_months
    if total_months > MAX_SCHEDULE_MONTHS:
        raise ScheduleTooLongError(
            f"Loan term of {loan.loan_term} years exceeds the "
            f"{MAX_SCHEDULE_MONTHS}-payment ceiling",
            {"loan_term": loan.loan_term, "max_months": MAX_SCHEDULE_MONTHS},
        )

    if loan.repayment_model is RepaymentModel.DECREASING_INSTALLMENTS:
        rule = constant_principal_rule(round_cents(loan.principal / total_months))
    else:
        rule = equal_installment_rule()

    entries = amortize(
        loan.principal,
        loan.interest_rate_periods,
        1,
        total_months,
        rule,
        loan.start_date,
    )
    return with_running_totals(entries)


def aggregate_yearly(schedule: Sequence[ScheduleEntry]) -> list[YearlyData]:
    """Group a schedule into 12-payment years."""
    yearly: list[YearlyData] = []
    zero = Decimal("0")
    principal = interest = payment = overpayment = fees = zero

    for i, entry in enumerate(schedule):
        principal += entry.principal_payment
        interest += entry.interest_payment
        payment += entry.monthly_payment + entry.overpayment_amount
        overpayment += entry.overpayment_amount
        fees += entry.fees

        if entry.payment_number % 12 == 0 or i == len(schedule) - 1:
            yearly.append(YearlyData(
                year=(entry.payment_number - 1) // 12 + 1,
                principal=principal,
                interest=interest,
                payment=payment,
                overpayment=overpayment,
                fees=fees,
                balance=entry.balance,
                total_interest=entry.total_interest,
            ))
            principal = interest = payment = overpayment = fees = zero

    return yearly
