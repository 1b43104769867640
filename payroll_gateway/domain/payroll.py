"""Payroll arithmetic - employer cost of an employee and employee net paycheck"""

import math
import re
from typing import Any, Dict, Mapping

from payroll_gateway.domain.models import (
    BenefitsTier,
    EmployerCostBreakdown,
    EmployerCostInput,
    EmployerTaxes,
    FilingStatus,
    PayFrequency,
    PaycheckBreakdown,
    PaycheckDeductions,
    PaycheckInput,
)

SOCIAL_SECURITY_RATE = 0.062
MEDICARE_RATE = 0.0145
FEDERAL_UNEMPLOYMENT_RATE = 0.06
UNEMPLOYMENT_WAGE_BASE = 7_000
OVERTIME_MULTIPLIER = 1.5
ANNUAL_ALLOWANCE_VALUE = 4_300

STATE_UNEMPLOYMENT_RATES: Dict[str, float] = {
    "CA": 0.034,
    "NY": 0.038,
    "TX": 0.027,
}

BENEFITS_RATES: Dict[BenefitsTier, float] = {
    BenefitsTier.BASIC: 0.20,
    BenefitsTier.STANDARD: 0.25,
    BenefitsTier.PREMIUM: 0.30,
}

PAY_PERIOD_MULTIPLIERS: Dict[PayFrequency, float] = {
    PayFrequency.WEEKLY: 1,
    PayFrequency.BIWEEKLY: 2,
    PayFrequency.MONTHLY: 52 / 12,
}

# (inclusive upper bound of period gross, flat rate); above the last bound -> TOP_FEDERAL_RATE
FEDERAL_WITHHOLDING_BRACKETS = {
    FilingStatus.SINGLE: ((11_600, 0.10), (47_150, 0.12), (100_525, 0.22)),
    FilingStatus.MARRIED: ((23_200, 0.10), (94_300, 0.12), (201_050, 0.22)),
    FilingStatus.HEAD_OF_HOUSEHOLD: ((16_550, 0.10), (63_100, 0.12), (100_500, 0.22)),
}
TOP_FEDERAL_RATE = 0.24

# Leading numeric prefix, as a browser's parseFloat/parseInt reads form input
_FLOAT_PREFIX_RE = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
_INT_PREFIX_RE = re.compile(r"^\s*[+-]?\d+")


def parse_or_default(value: Any, default: float = 0.0) -> float:
    """
    Read a numeric form field, returning default when it cannot be read.

    Unparseable input is intentionally treated as zero rather than an error:
    "" -> 0, "abc" -> 0, None -> 0, "12.5 hours" -> 12.5.
    """
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else default

    match = _FLOAT_PREFIX_RE.match(str(value))
    if not match:
        return default
    parsed = float(match.group(0))
    return parsed if math.isfinite(parsed) else default


def parse_int_or_default(value: Any, default: int = 0) -> int:
    """Integer counterpart of parse_or_default ("2.7" -> 2, "" -> 0)"""
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else default

    match = _INT_PREFIX_RE.match(str(value))
    return int(match.group(0)) if match else default


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _read_number(value: Any) -> float | None:
    """Parsed value, or None where the form would see NaN"""
    if _is_blank(value):
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value) if math.isfinite(value) else None
    match = _FLOAT_PREFIX_RE.match(str(value))
    if not match:
        return None
    parsed = float(match.group(0))
    return parsed if math.isfinite(parsed) else None


def validate_employer_cost_inputs(annual_salary: Any) -> Dict[str, str]:
    """Form checks for the employer cost calculator; empty dict when valid"""
    errors: Dict[str, str] = {}
    salary = _read_number(annual_salary)
    if salary is None or salary <= 0:
        errors["annual_salary"] = "Please enter a valid salary amount"
    return errors


def validate_paycheck_inputs(hourly_rate: Any, hours_worked: Any, overtime: Any = None) -> Dict[str, str]:
    """Form checks for the hourly paycheck calculator; overtime may be left blank"""
    errors: Dict[str, str] = {}

    rate = _read_number(hourly_rate)
    if rate is None or rate <= 0:
        errors["hourly_rate"] = "Please enter a valid hourly rate"

    hours = _read_number(hours_worked)
    if hours is None or hours < 0:
        errors["hours_worked"] = "Please enter valid hours worked"

    if not _is_blank(overtime):
        overtime_hours = _read_number(overtime)
        if overtime_hours is None or overtime_hours < 0:
            errors["overtime"] = "Please enter valid overtime hours"

    return errors


def calculate_employer_cost(inputs: EmployerCostInput) -> EmployerCostBreakdown:
    """
    Total yearly cost of an employee: salary, employer payroll taxes and benefits.

    FUTA and SUTA apply to the first $7,000 of wages only. The jurisdiction must
    be one of STATE_UNEMPLOYMENT_RATES and the tier one of BENEFITS_RATES.

    Example:
        $100,000, CA, basic -> 6200 + 1450 + 420 + 238 + 20000 -> total 128308
    """
    salary = inputs.annual_salary
    unemployment_wages = min(salary, UNEMPLOYMENT_WAGE_BASE)

    taxes = EmployerTaxes(
        social_security=salary * SOCIAL_SECURITY_RATE,
        medicare=salary * MEDICARE_RATE,
        federal_unemployment=unemployment_wages * FEDERAL_UNEMPLOYMENT_RATE,
        state_unemployment=unemployment_wages * STATE_UNEMPLOYMENT_RATES[inputs.jurisdiction],
    )
    benefits = salary * BENEFITS_RATES[BenefitsTier(inputs.benefits_tier)]

    total = (
        salary
        + taxes.social_security
        + taxes.medicare
        + taxes.federal_unemployment
        + taxes.state_unemployment
        + benefits
    )

    return EmployerCostBreakdown(base=salary, taxes=taxes, benefits=benefits, total=total)


def federal_withholding_rate(period_gross: float, filing_status: FilingStatus | str) -> float:
    """
    Flat federal withholding rate for a pay period.

    One rate is applied to the whole taxable amount; these are not progressive
    brackets.
    """
    for upper_bound, rate in FEDERAL_WITHHOLDING_BRACKETS[FilingStatus(filing_status)]:
        if period_gross <= upper_bound:
            return rate
    return TOP_FEDERAL_RATE


def calculate_paycheck(inputs: PaycheckInput, rates: Mapping[str, Mapping[str, Any]]) -> PaycheckBreakdown:
    """
    Gross pay, withholding and net pay for one pay period.

    Hours are entered per week; the pay frequency scales them to the period.
    State tax uses the jurisdiction's effective rate from the resolved table.

    Example:
        $20/h, 40h, weekly, single, 0 allowances, TX ->
        gross 800, federal 80, state 0, social security 49.6, medicare 11.6, net 658.8
    """
    multiplier = PAY_PERIOD_MULTIPLIERS[PayFrequency(inputs.pay_frequency)]

    regular_pay = inputs.hourly_rate * inputs.regular_hours
    overtime_pay = inputs.hourly_rate * OVERTIME_MULTIPLIER * inputs.overtime_hours
    period_gross = (regular_pay + overtime_pay) * multiplier

    allowance_value = inputs.allowances * ANNUAL_ALLOWANCE_VALUE / 52 * multiplier
    taxable_income = max(0.0, period_gross - allowance_value)

    deductions = PaycheckDeductions(
        federal=taxable_income * federal_withholding_rate(period_gross, inputs.filing_status),
        state=period_gross * float(rates[inputs.jurisdiction]["rate"]),
        social_security=period_gross * SOCIAL_SECURITY_RATE,
        medicare=period_gross * MEDICARE_RATE,
    )

    return PaycheckBreakdown(
        gross=period_gross,
        deductions=deductions,
        net=period_gross - deductions.total,
    )
