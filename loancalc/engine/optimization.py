"""Overpayment strategy search.

Builds a fixed set of candidate strategies within the borrower's caps, runs
each through the scenario composer and ranks them against a no-overpayment
baseline. Interest savings are valued at present value.
"""

import logging
import math
from collections.abc import Sequence
from dataclasses import replace
from decimal import Decimal, ROUND_HALF_UP

from loancalc.config import settings
from loancalc.engine.payment import FOUR_PLACES, round_cents
from loancalc.engine.scenario import calculate_loan_details
from loancalc.exceptions import InvalidInputError
from loancalc.models.loan import Frequency, LoanDetails, OverpaymentDetails, OverpaymentEffect
from loancalc.models.optimization import (
    ComparisonChart,
    ImpactPoint,
    LumpSumComparison,
    OptimizationGoal,
    OptimizationParameters,
    OptimizationResult,
    OverpaymentStrategy,
    StrategySummary,
)
from loancalc.models.results import CalculationResults

logger = logging.getLogger(__name__)

TRIVIAL_ONE_TIME_AMOUNT = Decimal("100")
TRIVIAL_PENALTY = Decimal("0.1")
MONTHLY_BONUS_WEIGHT = Decimal("0.05")


def _one_time(amount: Decimal, month: int = 1) -> OverpaymentDetails:
    return OverpaymentDetails(
        amount=amount,
        start_month=month,
        is_recurring=False,
        frequency=Frequency.ONE_TIME,
        effect=OverpaymentEffect.REDUCE_TERM,
    )


def _recurring(
    amount: Decimal,
    frequency: Frequency,
    start_month: int = 1,
    end_month: int | None = None,
) -> OverpaymentDetails:
    return OverpaymentDetails(
        amount=amount,
        start_month=start_month,
        end_month=end_month,
        is_recurring=True,
        frequency=frequency,
        effect=OverpaymentEffect.REDUCE_TERM,
    )


def candidate_strategies(loan: LoanDetails, params: OptimizationParameters) -> list[OverpaymentStrategy]:
    """Candidate strategies allowed by the caps.

    A zero cap drops its candidates, and so does any amount that rounds to
    zero cents.
    """
    monthly = params.max_monthly_overpayment
    lump = params.max_one_time_overpayment
    total_months = loan.total_months
    strategies: list[OverpaymentStrategy] = []

    if lump > 0:
        strategies.append(OverpaymentStrategy(
            name="Lump Sum Payment",
            description="Make a single lump sum payment at the beginning of the loan",
            overpayments=[_one_time(lump)],
        ))
    if monthly > 0:
        strategies.append(OverpaymentStrategy(
            name="Regular Monthly Overpayments",
            description="Make regular monthly overpayments throughout the loan term",
            overpayments=[_recurring(monthly, Frequency.MONTHLY, 1, total_months)],
        ))
    if lump > 0 and monthly > 0:
        strategies.append(OverpaymentStrategy(
            name="Combination Strategy",
            description="Make a lump sum payment at the beginning and regular monthly overpayments",
            overpayments=[_one_time(lump), _recurring(monthly, Frequency.MONTHLY, 1, total_months)],
        ))
    if monthly > 0:
        third = total_months // 3
        stages = [
            (round_cents(monthly * Decimal("0.5")), 1, third),
            (round_cents(monthly * Decimal("0.75")), third + 1, 2 * third),
            (monthly, 2 * third + 1, None),
        ]
        strategies.append(OverpaymentStrategy(
            name="Graduated Overpayments",
            description="Start with smaller overpayments and increase them over time",
            overpayments=[
                _recurring(amount, Frequency.MONTHLY, start, end)
                for amount, start, end in stages
                if amount > 0
            ],
        ))
    quarterly = round_cents(lump / 4)
    if quarterly > 0:
        strategies.append(OverpaymentStrategy(
            name="Quarterly Lump Sums",
            description="Make quarterly lump sum payments",
            overpayments=[_recurring(quarterly, Frequency.QUARTERLY, 1, total_months)],
        ))

    return strategies


def present_value_interest_saved(
    baseline: CalculationResults, candidate: CalculationResults, annual_rate: Decimal
) -> Decimal:
    """Monthly interest differences discounted at ``annual_rate``."""
    rate = annual_rate / 12
    base = {e.payment_number: e.interest_payment for e in baseline.schedule}
    cand = {e.payment_number: e.interest_payment for e in candidate.schedule}
    months = max(len(baseline.schedule), len(candidate.schedule))

    total = Decimal("0")
    for month in range(1, months + 1):
        saved = base.get(month, Decimal("0")) - cand.get(month, Decimal("0"))
        total += saved / (1 + rate) ** month
    return round_cents(total)


def effectiveness_ratio(
    strategy: OverpaymentStrategy,
    result: CalculationResults,
    interest_saved: Decimal,
    term_reduction: Decimal,
    baseline_term: Decimal,
) -> Decimal:
    """Present-value savings per unit overpaid, weighted by the term cut."""
    outlay = result.total_overpayments
    if outlay <= 0:
        return Decimal("0")

    ratio = interest_saved / outlay
    if baseline_term > 0:
        ratio *= 1 + term_reduction / baseline_term

    if any(op.frequency is Frequency.MONTHLY and op.recurs for op in strategy.overpayments):
        months_paid = sum(1 for e in result.schedule if e.is_overpayment)
        bonus = Decimal(str(math.log(1 + months_paid / 12)))
        ratio *= 1 + MONTHLY_BONUS_WEIGHT * bonus

    if any(not op.recurs and op.amount < TRIVIAL_ONE_TIME_AMOUNT for op in strategy.overpayments):
        ratio *= TRIVIAL_PENALTY

    return ratio.quantize(FOUR_PLACES, ROUND_HALF_UP)


def evaluate_strategy(
    loan: LoanDetails, strategy: OverpaymentStrategy, baseline: CalculationResults
) -> tuple[OverpaymentStrategy, CalculationResults]:
    result = calculate_loan_details(replace(loan, overpayment_plans=list(strategy.overpayments)))
    interest_saved = present_value_interest_saved(
        baseline, result, settings.optimization_discount_rate
    )
    term_reduction = baseline.actual_term - result.actual_term
    evaluated = replace(
        strategy,
        total_interest_saved=interest_saved,
        nominal_interest_saved=baseline.total_interest - result.total_interest,
        time_or_payment_saved=term_reduction,
        effectiveness_ratio=effectiveness_ratio(
            strategy, result, interest_saved, term_reduction, baseline.actual_term
        ),
    )
    logger.debug(
        "Strategy %r: pv saved %s, term cut %s, ratio %s",
        strategy.name, interest_saved, term_reduction, evaluated.effectiveness_ratio,
    )
    return evaluated, result


SELECTION_KEY = {
    OptimizationGoal.MAXIMIZE_INTEREST_SAVINGS: lambda s: s.total_interest_saved,
    OptimizationGoal.MINIMIZE_TIME: lambda s: s.time_or_payment_saved,
    OptimizationGoal.BALANCED: lambda s: s.effectiveness_ratio,
}


def find_best_strategy(
    strategies: Sequence[OverpaymentStrategy], goal: OptimizationGoal
) -> OverpaymentStrategy | None:
    """Highest-scoring strategy for ``goal``; the earliest wins ties."""
    if not strategies:
        return None
    return max(strategies, key=SELECTION_KEY[goal])


def comparison_chart(baseline: CalculationResults, optimized: CalculationResults) -> ComparisonChart:
    """Cumulative interest per year, shorter series padded with its last value."""
    base = [y.total_interest for y in baseline.yearly_data]
    opt = [y.total_interest for y in optimized.yearly_data]
    years = max(len(base), len(opt))

    def pad(series: list[Decimal]) -> list[Decimal]:
        last = series[-1] if series else Decimal("0")
        return series + [last] * (years - len(series))

    return ComparisonChart(
        labels=[f"Year {i}" for i in range(1, years + 1)],
        baseline=pad(base),
        optimized=pad(opt),
    )


def optimize_overpayments(loan: LoanDetails, params: OptimizationParameters) -> OptimizationResult:
    """Best overpayment strategy for ``loan`` under the caps in ``params``."""
    baseline = calculate_loan_details(replace(loan, overpayment_plans=[]))

    evaluated = [
        evaluate_strategy(loan, strategy, baseline)
        for strategy in candidate_strategies(loan, params)
    ]
    strategies = [s for s, _ in evaluated]
    best = find_best_strategy(strategies, params.optimization_strategy)

    if best is None:
        logger.info("No overpayment capacity; keeping the baseline schedule")
        best = OverpaymentStrategy(name="Default", description="No overpayments", overpayments=[])
        optimized = baseline
    else:
        optimized = evaluated[strategies.index(best)][1]
        logger.info(
            "Selected %r for %s: pv interest saved %s",
            best.name, params.optimization_strategy.value, best.total_interest_saved,
        )

    value = best.total_interest_saved
    return OptimizationResult(
        strategy_name=best.name,
        optimized_overpayments=list(best.overpayments),
        interest_saved=value,
        nominal_interest_saved=best.nominal_interest_saved,
        time_or_payment_saved=best.time_or_payment_saved,
        optimization_value=value,
        optimization_fee=round_cents(value * params.fee_percentage / 100),
        comparison_chart=comparison_chart(baseline, optimized),
        all_strategies=[
            StrategySummary(
                name=s.name,
                interest_saved=s.total_interest_saved,
                term_reduction=s.time_or_payment_saved,
                effectiveness_ratio=s.effectiveness_ratio,
                is_best=s is best,
            )
            for s in strategies
        ],
    )


def analyze_overpayment_impact(
    loan: LoanDetails, max_monthly: Decimal, steps: int = 5
) -> list[ImpactPoint]:
    """Nominal interest saved and term cut for evenly spaced monthly amounts."""
    if max_monthly <= 0 or steps < 1:
        raise InvalidInputError(
            "Impact analysis needs a positive monthly amount and at least one step",
            {"max_monthly": str(max_monthly), "steps": steps},
        )
    baseline = calculate_loan_details(replace(loan, overpayment_plans=[]))
    points: list[ImpactPoint] = []

    for i in range(1, steps + 1):
        amount = round_cents(max_monthly * i / steps)
        result = calculate_loan_details(replace(
            loan,
            overpayment_plans=[_recurring(amount, Frequency.MONTHLY, 1, loan.total_months)],
        ))
        points.append(ImpactPoint(
            amount=amount,
            interest_saved=baseline.total_interest - result.total_interest,
            term_reduction=baseline.actual_term - result.actual_term,
        ))

    return points


def compare_lump_sum_vs_regular(
    loan: LoanDetails, lump_sum: Decimal, monthly: Decimal
) -> LumpSumComparison:
    """One lump sum at month 1 against a monthly overpayment for the full term."""
    if lump_sum <= 0 or monthly <= 0:
        raise InvalidInputError(
            "Lump sum and monthly overpayment must both be positive",
            {"lump_sum": str(lump_sum), "monthly": str(monthly)},
        )
    baseline = calculate_loan_details(replace(loan, overpayment_plans=[]))
    lump_result = calculate_loan_details(replace(loan, overpayment_plans=[_one_time(lump_sum)]))
    monthly_result = calculate_loan_details(replace(
        loan,
        overpayment_plans=[_recurring(monthly, Frequency.MONTHLY, 1, loan.total_months)],
    ))

    return LumpSumComparison(
        lump_sum_interest_saved=baseline.total_interest - lump_result.total_interest,
        lump_sum_term_reduction=baseline.actual_term - lump_result.actual_term,
        monthly_interest_saved=baseline.total_interest - monthly_result.total_interest,
        monthly_term_reduction=baseline.actual_term - monthly_result.actual_term,
        break_even_month=math.ceil(lump_sum / monthly),
    )
