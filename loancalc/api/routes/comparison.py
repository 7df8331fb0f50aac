"""Scenario comparison route."""

from fastapi import APIRouter

from loancalc.api.mapping import to_scenario
from loancalc.api.schemas import (
    CalculationResponse,
    CompareRequest,
    ComparisonResponse,
    ScenarioDifferenceResponse,
)
from loancalc.engine.comparison import compare_scenarios, cumulative_cost_difference

router = APIRouter(prefix="/api/v1", tags=["comparison"])


@router.post("/compare", response_model=ComparisonResponse)
def compare(req: CompareRequest):
    """Calculate every scenario and diff each against the first."""
    scenarios = [to_scenario(s) for s in req.scenarios]
    comparison = compare_scenarios(scenarios, req.include_break_even)

    first, second = (comparison.results[s.id] for s in scenarios[:2])
    return ComparisonResponse(
        results={
            sid: CalculationResponse.model_validate(r)
            for sid, r in comparison.results.items()
        },
        differences=[
            ScenarioDifferenceResponse.model_validate(d) for d in comparison.differences
        ],
        break_even_month=comparison.break_even_month,
        cumulative_cost_difference=cumulative_cost_difference(first.schedule, second.schedule),
    )
