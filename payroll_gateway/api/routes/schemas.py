"""Pydantic schemas for API request/response validation"""

from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field, RootModel

from payroll_gateway.domain.models import BenefitsTier, FilingStatus, PayFrequency

# Form fields arrive as typed text; unparseable values are read as 0
FormNumber = Optional[Union[float, str]]


class TaxRateSchema(BaseModel):
    """Effective state income tax rate"""

    name: str
    rate: float


class TaxRatesResponse(RootModel[Dict[str, TaxRateSchema]]):
    """Response for GET /api/tax-rates, keyed by jurisdiction code"""

    pass


class EmployerCostRequest(BaseModel):
    """Request body for POST /api/calculate/employer-cost"""

    annual_salary: FormNumber = Field(None, description="Annual salary before taxes and deductions")
    jurisdiction: Literal["CA", "NY", "TX"] = "CA"
    benefits_tier: BenefitsTier = BenefitsTier.BASIC


class EmployerTaxesSchema(BaseModel):
    social_security: float
    medicare: float
    federal_unemployment: float
    state_unemployment: float


class EmployerCostResponse(BaseModel):
    """Response for POST /api/calculate/employer-cost"""

    base: float
    taxes: EmployerTaxesSchema
    benefits: float
    total: float


class PaycheckRequest(BaseModel):
    """Request body for POST /api/calculate/paycheck"""

    hourly_rate: FormNumber = Field(None, description="Pay per hour")
    hours_worked: FormNumber = Field(None, description="Regular hours per week")
    overtime: FormNumber = Field(None, description="Overtime hours per week, paid at 1.5x")
    pay_frequency: PayFrequency = PayFrequency.WEEKLY
    filing_status: FilingStatus = FilingStatus.SINGLE
    allowances: Optional[Union[int, str]] = "0"
    jurisdiction: str = Field("CA", min_length=1, description="Jurisdiction code from /api/tax-rates")


class PaycheckDeductionsSchema(BaseModel):
    federal: float
    state: float
    social_security: float
    medicare: float


class PaycheckResponse(BaseModel):
    """Response for POST /api/calculate/paycheck"""

    gross: float
    deductions: PaycheckDeductionsSchema
    net: float
    rate_source: str


class ValidationErrorResponse(BaseModel):
    """422 body when form values are rejected"""

    detail: Dict[str, Any]
