"""GET /api/tax-rates - State income tax rates for the calculator page"""

import logging
import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from payroll_gateway.api.dependencies import get_rate_provider, get_request_id
from payroll_gateway.api.routes.schemas import TaxRatesResponse
from payroll_gateway.application.rate_provider import RateProvider
from payroll_gateway.domain import rate_table
from payroll_gateway.domain.models import RateSource
from payroll_gateway.infrastructure.observability.logging import log_rate_resolution

router = APIRouter()

RATE_SOURCE_HEADER = "X-Tax-Rate-Source"


@router.get(
    "/tax-rates",
    response_model=None,
    responses={200: {"model": TaxRatesResponse}},
)
async def get_tax_rates(
    request: Request,
    provider: RateProvider = Depends(get_rate_provider),
):
    """
    Rate table keyed by jurisdiction code: {"CA": {"name": ..., "rate": ...}, ...}.

    Always 200. When the completion service or cache cannot supply rates the
    defaults are returned and X-Tax-Rate-Source is "defaults", which the page
    can show as a non-blocking notice.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        resolution = await provider.resolve()
        rates, source = resolution.rates, resolution.source.value
    except Exception as e:
        logging.error(f"Unexpected error resolving tax rates: {e}", extra={"request_id": request_id})
        rates, source = rate_table.defaults(), RateSource.DEFAULTS.value

    log_rate_resolution(request_id, source, len(rates), (time.time() - start_time) * 1000)
    return JSONResponse(content=rates, headers={RATE_SOURCE_HEADER: source})
