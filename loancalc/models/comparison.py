from dataclasses import dataclass, field
from decimal import Decimal

from loancalc.models.loan import LoanDetails, RateChange
from loancalc.models.results import CalculationResults


@dataclass(frozen=True)
class Scenario:
    id: str
    name: str
    loan: LoanDetails
    rate_changes: list[RateChange] = field(default_factory=list)


@dataclass(frozen=True)
class ScenarioDifference:
    scenario_id: str
    total_interest_diff: Decimal  # Versus the first scenario
    monthly_payment_diff: Decimal
    term_diff: Decimal  # Years
    total_cost_diff: Decimal


@dataclass(frozen=True)
class ScenarioComparison:
    scenarios: list[Scenario]
    results: dict[str, CalculationResults]
    differences: list[ScenarioDifference]
    break_even_month: int | None = None
