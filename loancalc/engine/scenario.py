"""Scenario composer: the full calculation for one loan.

Order matters and is fixed: base schedule, rate changes (ascending month),
overpayments (single month-by-month pass), then fees, totals and APR.

Pure functions. No I/O.
"""

import logging
from collections.abc import Sequence
from dataclasses import replace
from decimal import Decimal, ROUND_HALF_UP

from loancalc.config import settings
from loancalc.engine.fees import apply_fees, calculate_apr, one_time_fees, reference_apr
from loancalc.engine.overpayment import perform_overpayments, resolve_months
from loancalc.engine.payment import FOUR_PLACES
from loancalc.engine.rate_change import perform_rate_changes
from loancalc.engine.schedule import aggregate_yearly, generate_schedule
from loancalc.exceptions import InvalidInputError
from loancalc.models.loan import LoanDetails, OverpaymentDetails, RateChange
from loancalc.models.results import CalculationResults, ScheduleEntry

logger = logging.getLogger(__name__)


def validate_loan_details(loan: LoanDetails, rate_changes: Sequence[RateChange] = ()) -> list[str]:
    """All problems with a loan description, empty when it is usable."""
    errors: list[str] = []

    if loan.principal <= 0:
        errors.append("Principal must be greater than zero")
    if loan.loan_term <= 0:
        errors.append("Loan term must be greater than zero")

    periods = loan.interest_rate_periods
    if not periods:
        errors.append("At least one interest rate period is required")
    else:
        starts = [p.start_month for p in periods]
        if any(p.interest_rate < 0 for p in periods):
            errors.append("Interest rates cannot be negative")
        if any(s < 1 for s in starts):
            errors.append("Rate periods must start at month 1 or later")
        elif min(starts) != 1:
            errors.append("The first rate period must start at month 1")
        if len(set(starts)) != len(starts):
            errors.append("Rate periods must have distinct start months")

    for i, op in enumerate(loan.overpayment_plans, start=1):
        if op.amount <= 0:
            errors.append(f"Overpayment {i}: amount must be greater than zero")
        try:
            start, end = resolve_months(op, loan.start_date)
        except InvalidInputError as e:
            errors.append(f"Overpayment {i}: {e.message}")
            continue
        if start < 1:
            errors.append(f"Overpayment {i}: start must be on or after the first payment")
        if end is not None and end < start:
            errors.append(f"Overpayment {i}: end must not be before start")

    for change in rate_changes:
        if change.month < 1:
            errors.append(f"Rate change at month {change.month}: month must be 1 or later")
        if change.new_rate < 0:
            errors.append(f"Rate change at month {change.month}: rate cannot be negative")
        if change.remaining_term_years is not None and change.remaining_term_years <= 0:
            errors.append(f"Rate change at month {change.month}: remaining term must be positive")

    return errors


def finalize_results(schedule: Sequence[ScheduleEntry], original_term: int) -> CalculationResults:
    """Totals and yearly data for a finished schedule, before fees."""
    schedule = list(schedule)
    total_interest = sum((e.interest_payment for e in schedule), Decimal("0"))
    total_principal = sum((e.principal_payment for e in schedule), Decimal("0"))

    actual_months = next(
        (e.payment_number for e in schedule if e.balance <= 0), len(schedule)
    )

    return CalculationResults(
        monthly_payment=schedule[0].monthly_payment if schedule else Decimal("0"),
        total_interest=total_interest,
        schedule=schedule,
        yearly_data=aggregate_yearly(schedule),
        original_term=original_term,
        actual_term=(Decimal(actual_months) / 12).quantize(FOUR_PLACES, ROUND_HALF_UP),
        actual_term_months=actual_months,
        total_cost=total_principal + total_interest,
    )


def calculate_loan_details(
    loan: LoanDetails, rate_changes: Sequence[RateChange] = ()
) -> CalculationResults:
    """Schedule, totals, fees and APR for ``loan`` with optional rate changes."""
    errors = validate_loan_details(loan, rate_changes)
    if errors:
        raise InvalidInputError("Invalid loan details", {"errors": errors})

    schedule = generate_schedule(loan)
    schedule = perform_rate_changes(schedule, rate_changes, loan.repayment_model)
    schedule = perform_overpayments(
        schedule, loan.overpayment_plans, loan.start_date, loan.repayment_model
    )

    costs = loan.additional_costs
    schedule, recurring, early = apply_fees(schedule, loan.principal, costs)
    one_time = one_time_fees(loan.principal, costs)

    results = finalize_results(schedule, loan.loan_term)

    average_recurring = recurring / len(schedule)
    apr = calculate_apr(
        loan.principal, results.monthly_payment, loan.total_months, one_time, average_recurring
    )
    reference = reference_apr(
        loan.principal, results.monthly_payment, loan.total_months, one_time, average_recurring
    )
    if reference is not None and abs(apr - reference) > settings.apr_discrepancy_threshold:
        logger.warning(
            "APR search gave %s%% but the reference root is %s%% (loan %r)",
            apr, reference, loan.name,
        )

    return replace(
        results,
        one_time_fees=one_time,
        recurring_fees=recurring,
        early_repayment_fees=early,
        total_cost=loan.principal + results.total_interest + one_time + recurring + early,
        apr=apr,
    )


def calculate_complex_scenario(
    loan: LoanDetails,
    rate_changes: Sequence[RateChange],
    overpayments: Sequence[OverpaymentDetails],
) -> CalculationResults:
    """``calculate_loan_details`` with the loan's overpayment plans replaced."""
    return calculate_loan_details(
        replace(loan, overpayment_plans=list(overpayments)), rate_changes
    )
