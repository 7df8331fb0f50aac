from datetime import date
from decimal import Decimal

import pytest

from loancalc.engine.schedule import (
    MAX_SCHEDULE_MONTHS,
    RateCursor,
    aggregate_yearly,
    generate_schedule,
    periods_from_entries,
    with_running_totals,
)
from loancalc.exceptions import ScheduleTooLongError
from loancalc.models.loan import InterestRatePeriod, LoanDetails


class TestRateCursor:
    def test_latest_started_period_governs(self):
        cursor = RateCursor([
            InterestRatePeriod(25, Decimal("3")),
            InterestRatePeriod(1, Decimal("5")),
            InterestRatePeriod(13, Decimal("4")),
        ])
        rates = [cursor.rate_at(m) for m in (1, 12, 13, 24, 25, 360)]
        assert rates == [Decimal("5"), Decimal("5"), Decimal("4"), Decimal("4"), Decimal("3"), Decimal("3")]


class TestGenerateSchedule:
    def test_payment_count(self, reference_schedule):
        assert len(reference_schedule) == 360

    def test_first_payment(self, reference_schedule):
        first = reference_schedule[0]
        # 300000 * 0.045 / 12
        assert first.interest_payment == Decimal("1125.00")
        assert first.monthly_payment == Decimal("1520.06")
        assert first.principal_payment == Decimal("395.06")
        assert first.balance == Decimal("299604.94")
        assert first.interest_rate == Decimal("4.5")

    def test_total_interest(self, reference_schedule):
        total = reference_schedule[-1].total_interest
        assert Decimal("247218") <= total <= Decimal("247220")

    def test_final_balance_zero(self, reference_schedule):
        assert reference_schedule[-1].balance == Decimal("0")

    def test_principal_sums_to_loan(self, reference_schedule):
        assert sum(e.principal_payment for e in reference_schedule) == Decimal("300000")

    def test_each_payment_is_principal_plus_interest(self, reference_schedule):
        for e in reference_schedule:
            assert e.principal_payment + e.interest_payment == e.monthly_payment

    def test_balance_never_increases(self, reference_schedule):
        for prev, cur in zip(reference_schedule, reference_schedule[1:]):
            assert cur.balance <= prev.balance

    def test_running_totals(self, reference_schedule):
        last = reference_schedule[-1]
        assert last.total_payment == sum(e.monthly_payment for e in reference_schedule)
        assert last.total_interest == sum(e.interest_payment for e in reference_schedule)

    def test_fifteen_year_end_to_end(self, fifteen_year_loan):
        schedule = generate_schedule(fifteen_year_loan)
        assert schedule[0].monthly_payment == Decimal("1429.77")
        assert abs(schedule[59].interest_payment - Decimal("424.6")) <= Decimal("1")
        assert schedule[-1].balance == Decimal("0")

    def test_zero_rate(self, loan_factory):
        schedule = generate_schedule(loan_factory("100000", "0", 10))
        assert len(schedule) == 120
        assert schedule[0].monthly_payment == Decimal("833.33")
        assert schedule[-1].total_interest == Decimal("0")
        assert schedule[-1].balance == Decimal("0")

    def test_decreasing_installments(self, decreasing_loan):
        schedule = generate_schedule(decreasing_loan)
        assert len(schedule) == 120
        assert schedule[0].principal_payment == Decimal("1000.00")
        assert schedule[0].interest_payment == Decimal("600.00")
        assert schedule[0].monthly_payment == Decimal("1600.00")
        assert schedule[1].interest_payment == Decimal("595.00")
        assert schedule[-1].balance == Decimal("0")
        payments = [e.monthly_payment for e in schedule]
        assert payments == sorted(payments, reverse=True)

    def test_rate_period_steps_payment(self):
        loan = LoanDetails(
            principal=Decimal("100000"),
            interest_rate_periods=[
                InterestRatePeriod(1, Decimal("5")),
                InterestRatePeriod(13, Decimal("3")),
            ],
            loan_term=30,
        )
        schedule = generate_schedule(loan)
        assert schedule[11].interest_rate == Decimal("5")
        assert schedule[12].interest_rate == Decimal("3")
        assert schedule[12].monthly_payment < schedule[11].monthly_payment
        assert schedule[-1].balance == Decimal("0")
        assert len(schedule) == 360

    def test_payment_dates_clamp_to_month_end(self, loan_factory):
        schedule = generate_schedule(loan_factory(start_date=date(2024, 1, 31)))
        assert schedule[0].payment_date == date(2024, 1, 31)
        assert schedule[1].payment_date == date(2024, 2, 29)
        assert schedule[12].payment_date == date(2025, 1, 31)

    def test_no_dates_without_start(self, reference_schedule):
        assert reference_schedule[0].payment_date is None

    def test_term_beyond_ceiling_raises(self, loan_factory):
        with pytest.raises(ScheduleTooLongError):
            generate_schedule(loan_factory(term=MAX_SCHEDULE_MONTHS // 12 + 1))

    def test_term_at_ceiling_allowed(self, loan_factory):
        assert len(generate_schedule(loan_factory(term=50))) == 600


class TestRunningTotals:
    def test_recompute_is_identity_on_fresh_schedule(self, reference_schedule):
        assert with_running_totals(reference_schedule) == reference_schedule

    def test_entries_before_start_untouched(self, reference_schedule):
        result = with_running_totals(reference_schedule, from_month=100)
        assert result[:99] == reference_schedule[:99]
        assert result[-1].total_interest == reference_schedule[-1].total_interest


class TestPeriodsFromEntries:
    def test_collapses_runs(self, reference_schedule):
        assert periods_from_entries(reference_schedule[10:]) == [
            InterestRatePeriod(11, Decimal("4.5")),
        ]


class TestAggregateYearly:
    def test_thirty_years(self, reference_schedule):
        yearly = aggregate_yearly(reference_schedule)
        assert len(yearly) == 30
        assert yearly[0].year == 1
        assert yearly[-1].balance == Decimal("0")
        assert yearly[-1].total_interest == reference_schedule[-1].total_interest

    def test_yearly_totals_match(self, reference_schedule):
        yearly = aggregate_yearly(reference_schedule)
        assert sum(y.interest for y in yearly) == reference_schedule[-1].total_interest
        assert sum(y.principal for y in yearly) == Decimal("300000")
        assert yearly[0].payment == sum(e.monthly_payment for e in reference_schedule[:12])

    def test_partial_final_year(self, reference_schedule):
        yearly = aggregate_yearly(reference_schedule[:18])
        assert len(yearly) == 2
        assert yearly[1].year == 2
        assert yearly[1].balance == reference_schedule[17].balance
