"""Pydantic schemas for API request/response models.

JSON field names are camelCase; Python attributes stay snake_case and
either spelling is accepted on input.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from loancalc.models.loan import FeeType, Frequency, OverpaymentEffect, RepaymentModel
from loancalc.models.optimization import OptimizationGoal


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


# ---- Request schemas ----

class InterestRatePeriodSchema(CamelModel):
    start_month: int = Field(1, ge=1)
    interest_rate: Decimal = Field(..., ge=0, le=100, description="Annual percent, e.g. 4.5")


class OverpaymentSchema(CamelModel):
    amount: Decimal = Field(..., gt=0)
    start_month: int | None = Field(None, ge=1)
    start_date: date | None = None
    end_month: int | None = Field(None, ge=1)
    end_date: date | None = None
    is_recurring: bool | None = None
    frequency: Frequency = Frequency.ONE_TIME
    effect: OverpaymentEffect = OverpaymentEffect.REDUCE_TERM


class FeeSchema(CamelModel):
    amount: Decimal = Field(..., ge=0)
    type: FeeType = FeeType.FIXED


class AdditionalCostsSchema(CamelModel):
    origination_fee: FeeSchema | None = None
    loan_insurance: FeeSchema | None = None
    early_repayment_fee: FeeSchema | None = None
    administrative_fee: FeeSchema | None = None


class LoanDetailsRequest(CamelModel):
    principal: Decimal = Field(..., ge=Decimal("0.01"))
    interest_rate_periods: list[InterestRatePeriodSchema] = Field(..., min_length=1)
    loan_term: int = Field(..., ge=1, le=50, description="Years")
    repayment_model: RepaymentModel = RepaymentModel.EQUAL_INSTALLMENTS
    overpayment_plans: list[OverpaymentSchema] = []
    start_date: date | None = None
    additional_costs: AdditionalCostsSchema | None = None
    name: str = ""


class RateChangeSchema(CamelModel):
    month: int = Field(..., ge=1, description="Last payment at the old rate")
    new_rate: Decimal = Field(..., ge=0, le=100)
    remaining_term_years: Decimal | None = Field(None, gt=0)


class CalculateRequest(CamelModel):
    loan: LoanDetailsRequest
    rate_changes: list[RateChangeSchema] = []


class OptimizeRequest(CamelModel):
    loan: LoanDetailsRequest
    max_monthly_overpayment: Decimal = Field(Decimal("0"), ge=0)
    max_one_time_overpayment: Decimal = Field(Decimal("0"), ge=0)
    optimization_strategy: OptimizationGoal = OptimizationGoal.MAXIMIZE_INTEREST_SAVINGS
    fee_percentage: Decimal | None = Field(None, ge=0, le=100)


class ImpactRequest(CamelModel):
    loan: LoanDetailsRequest
    max_monthly_overpayment: Decimal = Field(..., gt=0)
    steps: int = Field(5, ge=1, le=20)


class LumpSumRequest(CamelModel):
    loan: LoanDetailsRequest
    lump_sum: Decimal = Field(..., gt=0)
    monthly_amount: Decimal = Field(..., gt=0)


class ScenarioSchema(CamelModel):
    id: str
    name: str = ""
    loan: LoanDetailsRequest
    rate_changes: list[RateChangeSchema] = []


class CompareRequest(CamelModel):
    scenarios: list[ScenarioSchema] = Field(..., min_length=2)
    include_break_even: bool = True


# ---- Response schemas ----

class ScheduleEntryResponse(CamelModel):
    payment_number: int
    monthly_payment: Decimal
    principal_payment: Decimal
    interest_payment: Decimal
    balance: Decimal
    interest_rate: Decimal
    is_overpayment: bool
    overpayment_amount: Decimal
    total_interest: Decimal
    total_payment: Decimal
    fees: Decimal
    payment_date: date | None = None


class YearlyDataResponse(CamelModel):
    year: int
    principal: Decimal
    interest: Decimal
    payment: Decimal
    overpayment: Decimal
    fees: Decimal
    balance: Decimal
    total_interest: Decimal


class CalculationResponse(CamelModel):
    monthly_payment: Decimal
    total_interest: Decimal
    schedule: list[ScheduleEntryResponse]
    yearly_data: list[YearlyDataResponse]
    original_term: int
    actual_term: Decimal
    actual_term_months: int
    one_time_fees: Decimal
    recurring_fees: Decimal
    early_repayment_fees: Decimal
    total_cost: Decimal
    apr: Decimal | None = None


class StrategySummaryResponse(CamelModel):
    name: str
    interest_saved: Decimal
    term_reduction: Decimal
    effectiveness_ratio: Decimal
    is_best: bool


class ComparisonChartResponse(CamelModel):
    labels: list[str]
    baseline: list[Decimal]
    optimized: list[Decimal]


class OptimizationResponse(CamelModel):
    strategy_name: str
    optimized_overpayments: list[OverpaymentSchema]
    interest_saved: Decimal
    nominal_interest_saved: Decimal
    time_or_payment_saved: Decimal
    optimization_value: Decimal
    optimization_fee: Decimal
    comparison_chart: ComparisonChartResponse
    all_strategies: list[StrategySummaryResponse]


class ImpactPointResponse(CamelModel):
    amount: Decimal
    interest_saved: Decimal
    term_reduction: Decimal


class LumpSumResponse(CamelModel):
    lump_sum_interest_saved: Decimal
    lump_sum_term_reduction: Decimal
    monthly_interest_saved: Decimal
    monthly_term_reduction: Decimal
    break_even_month: int


class ScenarioDifferenceResponse(CamelModel):
    scenario_id: str
    total_interest_diff: Decimal
    monthly_payment_diff: Decimal
    term_diff: Decimal
    total_cost_diff: Decimal


class ComparisonResponse(CamelModel):
    results: dict[str, CalculationResponse]
    differences: list[ScenarioDifferenceResponse]
    break_even_month: int | None = None
    cumulative_cost_difference: list[Decimal] = []


# ---- Tool-call schemas ----

class ScheduleSummary(CamelModel):
    term_months: int
    first_payment: Decimal
    last_payment: Decimal
    total_paid: Decimal
    yearly: list[YearlyDataResponse]


class ToolCalculateResponse(CamelModel):
    monthly_payment: Decimal
    total_interest: Decimal
    total_cost: Decimal
    apr: Decimal | None = None
    actual_term: Decimal
    schedule_summary: ScheduleSummary
