"""POST /api/calculate/* - Employer cost and hourly paycheck calculators"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from payroll_gateway.api.dependencies import get_rate_provider, get_request_id
from payroll_gateway.api.routes.schemas import (
    EmployerCostRequest,
    EmployerCostResponse,
    EmployerTaxesSchema,
    PaycheckDeductionsSchema,
    PaycheckRequest,
    PaycheckResponse,
    ValidationErrorResponse,
)
from payroll_gateway.application.rate_provider import RateProvider
from payroll_gateway.domain.models import EmployerCostInput, PaycheckInput
from payroll_gateway.domain.payroll import (
    calculate_employer_cost,
    calculate_paycheck,
    parse_int_or_default,
    parse_or_default,
    validate_employer_cost_inputs,
    validate_paycheck_inputs,
)
from payroll_gateway.infrastructure.observability.metrics import calculation_counter

router = APIRouter()


@router.post(
    "/calculate/employer-cost",
    response_model=EmployerCostResponse,
    responses={422: {"model": ValidationErrorResponse}},
)
def employer_cost(request_body: EmployerCostRequest, request: Request):
    """Yearly cost of an employee: salary plus employer taxes and benefits"""
    errors = validate_employer_cost_inputs(request_body.annual_salary)
    if errors:
        logging.info(f"Rejected employer cost input: {errors}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=422, detail={"errors": errors})

    breakdown = calculate_employer_cost(
        EmployerCostInput(
            annual_salary=parse_or_default(request_body.annual_salary),
            jurisdiction=request_body.jurisdiction,
            benefits_tier=request_body.benefits_tier,
        )
    )
    calculation_counter.labels(kind="employer_cost").inc()

    return EmployerCostResponse(
        base=breakdown.base,
        taxes=EmployerTaxesSchema(
            social_security=breakdown.taxes.social_security,
            medicare=breakdown.taxes.medicare,
            federal_unemployment=breakdown.taxes.federal_unemployment,
            state_unemployment=breakdown.taxes.state_unemployment,
        ),
        benefits=breakdown.benefits,
        total=breakdown.total,
    )


@router.post(
    "/calculate/paycheck",
    response_model=PaycheckResponse,
    responses={422: {"model": ValidationErrorResponse}},
)
def paycheck(
    request_body: PaycheckRequest,
    request: Request,
    provider: RateProvider = Depends(get_rate_provider),
):
    """
    Net pay for one period from hourly wage and weekly hours.

    State tax uses the table GET /api/tax-rates last stored in the cache,
    or the defaults. No completion call is made from here.
    """
    request_id = get_request_id(request)

    errors = validate_paycheck_inputs(request_body.hourly_rate, request_body.hours_worked, request_body.overtime)
    if errors:
        logging.info(f"Rejected paycheck input: {errors}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail={"errors": errors})

    if request_body.jurisdiction not in provider.defaults():
        raise HTTPException(
            status_code=422,
            detail={"errors": {"jurisdiction": f"Unsupported jurisdiction: {request_body.jurisdiction}"}},
        )

    resolution = provider.resolve_cached()

    breakdown = calculate_paycheck(
        PaycheckInput(
            hourly_rate=parse_or_default(request_body.hourly_rate),
            regular_hours=parse_or_default(request_body.hours_worked),
            overtime_hours=parse_or_default(request_body.overtime),
            pay_frequency=request_body.pay_frequency,
            filing_status=request_body.filing_status,
            allowances=parse_int_or_default(request_body.allowances),
            jurisdiction=request_body.jurisdiction,
        ),
        resolution.rates,
    )
    calculation_counter.labels(kind="paycheck").inc()

    return PaycheckResponse(
        gross=breakdown.gross,
        deductions=PaycheckDeductionsSchema(
            federal=breakdown.deductions.federal,
            state=breakdown.deductions.state,
            social_security=breakdown.deductions.social_security,
            medicare=breakdown.deductions.medicare,
        ),
        net=breakdown.net,
        rate_source=resolution.source.value,
    )
