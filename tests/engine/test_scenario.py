import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from loancalc.engine.scenario import (
    calculate_complex_scenario,
    calculate_loan_details,
    validate_loan_details,
)
from loancalc.exceptions import InvalidInputError
from loancalc.models.loan import (
    AdditionalCosts,
    FeeSpec,
    FeeType,
    Frequency,
    InterestRatePeriod,
    OverpaymentDetails,
    OverpaymentEffect,
    RateChange,
)


class TestValidation:
    def test_valid_loan(self, reference_loan):
        assert validate_loan_details(reference_loan) == []

    def test_non_positive_principal_and_term(self, loan_factory):
        errors = validate_loan_details(loan_factory("0", term=0))
        assert "Principal must be greater than zero" in errors
        assert "Loan term must be greater than zero" in errors

    def test_rate_periods(self, reference_loan):
        assert validate_loan_details(replace(reference_loan, interest_rate_periods=[])) == [
            "At least one interest rate period is required"
        ]
        late_start = replace(
            reference_loan, interest_rate_periods=[InterestRatePeriod(2, Decimal("4"))]
        )
        assert "The first rate period must start at month 1" in validate_loan_details(late_start)
        negative = replace(
            reference_loan, interest_rate_periods=[InterestRatePeriod(1, Decimal("-1"))]
        )
        assert "Interest rates cannot be negative" in validate_loan_details(negative)
        duplicate = replace(reference_loan, interest_rate_periods=[
            InterestRatePeriod(1, Decimal("4")), InterestRatePeriod(1, Decimal("5")),
        ])
        assert "Rate periods must have distinct start months" in validate_loan_details(duplicate)

    def test_overpayment_plans(self, loan_factory):
        loan = loan_factory(overpayment_plans=[
            OverpaymentDetails(amount=Decimal("0"), start_month=1),
            OverpaymentDetails(amount=Decimal("100"), start_month=10, end_month=5),
            OverpaymentDetails(amount=Decimal("100"), start_date=date(2024, 1, 1)),
        ])
        errors = validate_loan_details(loan)
        assert len(errors) == 3
        assert errors[0].startswith("Overpayment 1")
        assert errors[1].startswith("Overpayment 2")
        assert errors[2].startswith("Overpayment 3")

    def test_rate_changes(self, reference_loan):
        errors = validate_loan_details(
            reference_loan, [RateChange(month=0, new_rate=Decimal("-1"))]
        )
        assert len(errors) == 2

    def test_calculate_raises_with_all_errors(self, loan_factory):
        with pytest.raises(InvalidInputError) as exc_info:
            calculate_loan_details(loan_factory("-5", term=0))
        assert len(exc_info.value.details["errors"]) == 2


class TestCalculateLoanDetails:
    def test_reference_results(self, reference_loan):
        results = calculate_loan_details(reference_loan)
        assert results.monthly_payment == Decimal("1520.06")
        assert len(results.schedule) == 360
        assert results.actual_term_months == 360
        assert results.actual_term == Decimal("30.0000")
        assert results.original_term == 30
        assert len(results.yearly_data) == 30
        assert Decimal("247218") <= results.total_interest <= Decimal("247220")
        assert results.total_cost == Decimal("300000") + results.total_interest
        assert abs(results.apr - Decimal("4.50")) <= Decimal("0.01")

    def test_input_not_mutated(self, reference_loan):
        loan = replace(reference_loan, overpayment_plans=[
            OverpaymentDetails(amount=Decimal("5000"), start_month=6),
        ])
        before = list(loan.overpayment_plans)
        calculate_loan_details(loan)
        assert loan.overpayment_plans == before

    def test_reduce_term_shortens_actual_term(self, loan_factory):
        baseline = calculate_loan_details(loan_factory())
        results = calculate_loan_details(loan_factory(overpayment_plans=[
            OverpaymentDetails(amount=Decimal("20000"), start_month=12),
        ]))
        assert results.actual_term < baseline.actual_term
        assert results.total_interest < baseline.total_interest
        assert results.total_overpayments == Decimal("20000")

    def test_reduce_payment_keeps_term(self, loan_factory):
        results = calculate_loan_details(loan_factory(overpayment_plans=[
            OverpaymentDetails(
                amount=Decimal("20000"), start_month=12,
                effect=OverpaymentEffect.REDUCE_PAYMENT,
            ),
        ]))
        assert results.actual_term_months == 360
        assert results.schedule[12].monthly_payment < results.schedule[10].monthly_payment

    def test_rate_changes_before_overpayments(self, loan_factory):
        loan = loan_factory(overpayment_plans=[
            OverpaymentDetails(amount=Decimal("10000"), start_month=30),
        ])
        results = calculate_loan_details(loan, [RateChange(month=24, new_rate=Decimal("6"))])
        entry = results.schedule[29]
        assert entry.interest_rate == Decimal("6")
        assert entry.overpayment_amount == Decimal("10000")
        assert results.schedule[-1].balance == Decimal("0")

    def test_date_based_overpayment(self, dated_loan):
        loan = replace(dated_loan, overpayment_plans=[
            OverpaymentDetails(amount=Decimal("5000"), start_date=date(2024, 6, 15)),
        ])
        results = calculate_loan_details(loan)
        assert results.schedule[5].is_overpayment
        assert results.schedule[5].payment_date == date(2024, 6, 15)

    def test_fees_and_total_cost(self, loan_factory):
        costs = AdditionalCosts(
            origination_fee=FeeSpec(Decimal("1"), FeeType.PERCENTAGE),
            loan_insurance=FeeSpec(Decimal("20")),
            early_repayment_fee=FeeSpec(Decimal("1"), FeeType.PERCENTAGE),
        )
        results = calculate_loan_details(loan_factory(
            additional_costs=costs,
            overpayment_plans=[OverpaymentDetails(amount=Decimal("10000"), start_month=12)],
        ))
        months = results.actual_term_months
        assert results.one_time_fees == Decimal("3000.00")
        assert results.recurring_fees == Decimal("20") * months
        assert results.early_repayment_fees == Decimal("100.00")
        assert results.schedule[11].fees == Decimal("120.00")
        assert results.total_cost == (
            Decimal("300000") + results.total_interest
            + Decimal("3000.00") + results.recurring_fees + Decimal("100.00")
        )
        assert results.apr > Decimal("4.5")

    def test_yearly_overpayment_column(self, loan_factory):
        results = calculate_loan_details(loan_factory(overpayment_plans=[
            OverpaymentDetails(
                amount=Decimal("100"), start_month=1, end_month=24, frequency=Frequency.MONTHLY,
            ),
        ]))
        assert results.yearly_data[0].overpayment == Decimal("1200")
        assert results.yearly_data[1].overpayment == Decimal("1200")
        assert results.yearly_data[2].overpayment == Decimal("0")


class TestAPRCrossCheck:
    def test_warns_when_search_cannot_reach_rate(self, loan_factory, caplog):
        # The stepped search tops out near 15%; the reference root is ~25%
        with caplog.at_level(logging.WARNING, logger="loancalc.engine.scenario"):
            results = calculate_loan_details(loan_factory("100000", "25", 10))
        assert results.apr < Decimal("16")
        warnings = [
            r for r in caplog.records
            if r.levelno == logging.WARNING and r.name == "loancalc.engine.scenario"
        ]
        assert len(warnings) == 1
        assert "reference root" in warnings[0].getMessage()

    def test_no_warning_when_methods_agree(self, reference_loan, caplog):
        with caplog.at_level(logging.WARNING, logger="loancalc.engine.scenario"):
            calculate_loan_details(reference_loan)
        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]


class TestComplexScenario:
    def test_replaces_overpayment_plans(self, loan_factory):
        loan = loan_factory(overpayment_plans=[
            OverpaymentDetails(amount=Decimal("50000"), start_month=1),
        ])
        results = calculate_complex_scenario(
            loan,
            [RateChange(month=12, new_rate=Decimal("3.5"))],
            [OverpaymentDetails(amount=Decimal("1000"), start_month=24)],
        )
        assert results.total_overpayments == Decimal("1000")
        assert results.schedule[23].is_overpayment
        assert results.schedule[12].interest_rate == Decimal("3.5")
