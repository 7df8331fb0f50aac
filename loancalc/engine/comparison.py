"""Side-by-side comparison of loan scenarios.

Pure functions. No I/O.
"""

from collections.abc import Sequence
from decimal import Decimal

from loancalc.engine.payment import round_cents
from loancalc.engine.scenario import calculate_loan_details
from loancalc.exceptions import InvalidInputError
from loancalc.models.comparison import Scenario, ScenarioComparison, ScenarioDifference
from loancalc.models.results import ScheduleEntry


def _outlay(entry: ScheduleEntry) -> Decimal:
    return entry.monthly_payment + entry.fees


def break_even_point(
    schedule_a: Sequence[ScheduleEntry], schedule_b: Sequence[ScheduleEntry]
) -> int | None:
    """First payment at which the schedule dearer at month 1 has cost no more in total.

    Costs are installments plus fees. None when that never happens within
    the shorter schedule.
    """
    if not schedule_a or not schedule_b:
        return None

    first_a, first_b = _outlay(schedule_a[0]), _outlay(schedule_b[0])
    if first_a == first_b:
        return 1
    a_dearer = first_a > first_b

    cumulative_a = cumulative_b = Decimal("0")
    for month, (a, b) in enumerate(zip(schedule_a, schedule_b), start=1):
        cumulative_a += _outlay(a)
        cumulative_b += _outlay(b)
        if a_dearer and cumulative_a <= cumulative_b:
            return month
        if not a_dearer and cumulative_b <= cumulative_a:
            return month
    return None


def cumulative_cost_difference(
    schedule_a: Sequence[ScheduleEntry], schedule_b: Sequence[ScheduleEntry]
) -> list[Decimal]:
    """Running total of A's outlay minus B's, over the longer schedule."""
    differences: list[Decimal] = []
    cumulative_a = cumulative_b = Decimal("0")
    for i in range(max(len(schedule_a), len(schedule_b))):
        if i < len(schedule_a):
            cumulative_a += _outlay(schedule_a[i])
        if i < len(schedule_b):
            cumulative_b += _outlay(schedule_b[i])
        differences.append(round_cents(cumulative_a - cumulative_b))
    return differences


def monthly_payment_difference(
    schedule_a: Sequence[ScheduleEntry], schedule_b: Sequence[ScheduleEntry]
) -> list[Decimal]:
    """A's outlay minus B's, month by month; a finished schedule counts as zero."""
    differences: list[Decimal] = []
    for i in range(max(len(schedule_a), len(schedule_b))):
        a = _outlay(schedule_a[i]) if i < len(schedule_a) else Decimal("0")
        b = _outlay(schedule_b[i]) if i < len(schedule_b) else Decimal("0")
        differences.append(round_cents(a - b))
    return differences


def compare_scenarios(
    scenarios: Sequence[Scenario], include_break_even: bool = True
) -> ScenarioComparison:
    """Calculate each scenario and its differences from the first one."""
    if len(scenarios) < 2:
        raise InvalidInputError(
            "At least two scenarios are required for comparison",
            {"scenario_count": len(scenarios)},
        )
    ids = [s.id for s in scenarios]
    if len(set(ids)) != len(ids):
        raise InvalidInputError("Scenario ids must be unique", {"ids": ids})

    results = {s.id: calculate_loan_details(s.loan, s.rate_changes) for s in scenarios}
    base = results[scenarios[0].id]

    differences = [
        ScenarioDifference(
            scenario_id=s.id,
            total_interest_diff=results[s.id].total_interest - base.total_interest,
            monthly_payment_diff=results[s.id].monthly_payment - base.monthly_payment,
            term_diff=results[s.id].actual_term - base.actual_term,
            total_cost_diff=results[s.id].total_cost - base.total_cost,
        )
        for s in scenarios[1:]
    ]

    break_even = None
    if include_break_even:
        break_even = break_even_point(base.schedule, results[scenarios[1].id].schedule)

    return ScenarioComparison(
        scenarios=list(scenarios),
        results=results,
        differences=differences,
        break_even_month=break_even,
    )
