"""Conversion from request schemas to engine dataclasses."""

from loancalc.api.schemas import (
    AdditionalCostsSchema,
    FeeSchema,
    LoanDetailsRequest,
    RateChangeSchema,
    ScenarioSchema,
)
from loancalc.models.comparison import Scenario
from loancalc.models.loan import (
    AdditionalCosts,
    FeeSpec,
    InterestRatePeriod,
    LoanDetails,
    OverpaymentDetails,
    RateChange,
)


def _fee(fee: FeeSchema | None) -> FeeSpec | None:
    if fee is None:
        return None
    return FeeSpec(amount=fee.amount, type=fee.type)


def _costs(costs: AdditionalCostsSchema | None) -> AdditionalCosts | None:
    if costs is None:
        return None
    return AdditionalCosts(
        origination_fee=_fee(costs.origination_fee),
        loan_insurance=_fee(costs.loan_insurance),
        early_repayment_fee=_fee(costs.early_repayment_fee),
        administrative_fee=_fee(costs.administrative_fee),
    )


def to_loan_details(req: LoanDetailsRequest) -> LoanDetails:
    return LoanDetails(
        principal=req.principal,
        interest_rate_periods=[
            InterestRatePeriod(start_month=p.start_month, interest_rate=p.interest_rate)
            for p in req.interest_rate_periods
        ],
        loan_term=req.loan_term,
        repayment_model=req.repayment_model,
        overpayment_plans=[
            OverpaymentDetails(
                amount=op.amount,
                start_month=op.start_month,
                start_date=op.start_date,
                end_month=op.end_month,
                end_date=op.end_date,
                is_recurring=op.is_recurring,
                frequency=op.frequency,
                effect=op.effect,
            )
            for op in req.overpayment_plans
        ],
        start_date=req.start_date,
        additional_costs=_costs(req.additional_costs),
        name=req.name,
    )


def to_rate_changes(changes: list[RateChangeSchema]) -> list[RateChange]:
    return [
        RateChange(
            month=c.month,
            new_rate=c.new_rate,
            remaining_term_years=c.remaining_term_years,
        )
        for c in changes
    ]


def to_scenario(req: ScenarioSchema) -> Scenario:
    return Scenario(
        id=req.id,
        name=req.name,
        loan=to_loan_details(req.loan),
        rate_changes=to_rate_changes(req.rate_changes),
    )
