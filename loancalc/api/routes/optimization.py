"""Overpayment optimization routes."""

from fastapi import APIRouter

from loancalc.api.mapping import to_loan_details
from loancalc.api.schemas import (
    ImpactPointResponse,
    ImpactRequest,
    LumpSumRequest,
    LumpSumResponse,
    OptimizationResponse,
    OptimizeRequest,
)
from loancalc.config import settings
from loancalc.engine.optimization import (
    analyze_overpayment_impact,
    compare_lump_sum_vs_regular,
    optimize_overpayments,
)
from loancalc.models.optimization import OptimizationParameters

router = APIRouter(prefix="/api/v1/optimize", tags=["optimization"])


@router.post("", response_model=OptimizationResponse)
def optimize(req: OptimizeRequest):
    params = OptimizationParameters(
        max_monthly_overpayment=req.max_monthly_overpayment,
        max_one_time_overpayment=req.max_one_time_overpayment,
        optimization_strategy=req.optimization_strategy,
        fee_percentage=(
            req.fee_percentage if req.fee_percentage is not None
            else settings.default_fee_percentage
        ),
    )
    result = optimize_overpayments(to_loan_details(req.loan), params)
    return OptimizationResponse.model_validate(result)


@router.post("/impact", response_model=list[ImpactPointResponse])
def impact(req: ImpactRequest):
    points = analyze_overpayment_impact(
        to_loan_details(req.loan), req.max_monthly_overpayment, req.steps
    )
    return [ImpactPointResponse.model_validate(p) for p in points]


@router.post("/lump-sum-vs-regular", response_model=LumpSumResponse)
def lump_sum_vs_regular(req: LumpSumRequest):
    result = compare_lump_sum_vs_regular(
        to_loan_details(req.loan), req.lump_sum, req.monthly_amount
    )
    return LumpSumResponse.model_validate(result)
