"""Loan calculation routes."""

from fastapi import APIRouter

from loancalc.api.mapping import to_loan_details, to_rate_changes
from loancalc.api.schemas import CalculateRequest, CalculationResponse, LoanDetailsRequest
from loancalc.engine.scenario import calculate_loan_details, validate_loan_details

router = APIRouter(prefix="/api/v1", tags=["calculation"])


@router.post("/calculate", response_model=CalculationResponse)
def calculate(req: CalculateRequest):
    """Full schedule, totals, fees and APR for one loan."""
    result = calculate_loan_details(to_loan_details(req.loan), to_rate_changes(req.rate_changes))
    return CalculationResponse.model_validate(result)


@router.post("/validate")
def validate(req: LoanDetailsRequest):
    errors = validate_loan_details(to_loan_details(req))
    return {"valid": not errors, "errors": errors}
