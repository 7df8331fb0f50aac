"""Tool-call endpoint for agents and automations.

Takes a bare loan description and returns headline figures with a compact
schedule summary instead of the full schedule.
"""

from fastapi import APIRouter

from loancalc.api.mapping import to_loan_details
from loancalc.api.schemas import (
    LoanDetailsRequest,
    ScheduleSummary,
    ToolCalculateResponse,
    YearlyDataResponse,
)
from loancalc.engine.scenario import calculate_loan_details

router = APIRouter(prefix="/api/v1/tools", tags=["tools"])


@router.post("/calculate-mortgage", response_model=ToolCalculateResponse)
def calculate_mortgage(req: LoanDetailsRequest):
    result = calculate_loan_details(to_loan_details(req))
    schedule = result.schedule
    return ToolCalculateResponse(
        monthly_payment=result.monthly_payment,
        total_interest=result.total_interest,
        total_cost=result.total_cost,
        apr=result.apr,
        actual_term=result.actual_term,
        schedule_summary=ScheduleSummary(
            term_months=result.actual_term_months,
            first_payment=schedule[0].monthly_payment,
            last_payment=schedule[-1].monthly_payment,
            total_paid=result.total_paid,
            yearly=[YearlyDataResponse.model_validate(y) for y in result.yearly_data],
        ),
    )


@router.get("/calculate-mortgage/schema")
async def calculate_mortgage_schema():
    return {
        "name": "calculate_mortgage",
        "description": "Calculate mortgage payments, interest, total cost and APR",
        "input": LoanDetailsRequest.model_json_schema(by_alias=True),
        "output": ToolCalculateResponse.model_json_schema(by_alias=True),
    }
