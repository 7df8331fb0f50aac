from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from loancalc.models.loan import OverpaymentDetails


class OptimizationGoal(Enum):
    MAXIMIZE_INTEREST_SAVINGS = "maximizeInterestSavings"
    MINIMIZE_TIME = "minimizeTime"
    BALANCED = "balanced"


@dataclass(frozen=True)
class OptimizationParameters:
    max_monthly_overpayment: Decimal
    max_one_time_overpayment: Decimal
    optimization_strategy: OptimizationGoal = OptimizationGoal.MAXIMIZE_INTEREST_SAVINGS
    fee_percentage: Decimal = Decimal("0")


@dataclass(frozen=True)
class OverpaymentStrategy:
    name: str
    description: str
    overpayments: list[OverpaymentDetails]
    total_interest_saved: Decimal = Decimal("0")  # Present value
    nominal_interest_saved: Decimal = Decimal("0")
    time_or_payment_saved: Decimal = Decimal("0")  # Years
    effectiveness_ratio: Decimal = Decimal("0")


@dataclass(frozen=True)
class StrategySummary:
    name: str
    interest_saved: Decimal
    term_reduction: Decimal
    effectiveness_ratio: Decimal
    is_best: bool = False


@dataclass(frozen=True)
class ComparisonChart:
    labels: list[str]
    baseline: list[Decimal]  # Cumulative interest at each year end
    optimized: list[Decimal]


@dataclass(frozen=True)
class OptimizationResult:
    strategy_name: str
    optimized_overpayments: list[OverpaymentDetails]
    interest_saved: Decimal
    nominal_interest_saved: Decimal
    time_or_payment_saved: Decimal
    optimization_value: Decimal
    optimization_fee: Decimal
    comparison_chart: ComparisonChart
    all_strategies: list[StrategySummary] = field(default_factory=list)


@dataclass(frozen=True)
class ImpactPoint:
    amount: Decimal
    interest_saved: Decimal
    term_reduction: Decimal  # Years


@dataclass(frozen=True)
class LumpSumComparison:
    lump_sum_interest_saved: Decimal
    lump_sum_term_reduction: Decimal
    monthly_interest_saved: Decimal
    monthly_term_reduction: Decimal
    break_even_month: int
