"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict

# Wire form of a rate table: {"CA": {"name": "California", "rate": 0.093}, ...}
RateTable = Dict[str, Dict[str, Any]]


class BenefitsTier(str, Enum):
    BASIC = "basic"
    STANDARD = "standard"
    PREMIUM = "premium"


class PayFrequency(str, Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


class FilingStatus(str, Enum):
    SINGLE = "single"
    MARRIED = "married"
    HEAD_OF_HOUSEHOLD = "head_of_household"


class RateSource(str, Enum):
    """Where a resolved rate table came from"""

    CACHE = "cache"
    REMOTE = "remote"
    DEFAULTS = "defaults"


@dataclass(frozen=True)
class RateEntry:
    """Effective state income tax rate at the reference income"""

    code: str
    name: str
    rate: float  # decimal fraction, 0 <= rate < 1

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "rate": self.rate}


@dataclass(frozen=True)
class CacheSnapshot:
    """Last successfully fetched rate table with its capture time"""

    captured_at_ms: int
    rates: RateTable


@dataclass(frozen=True)
class RateResolution:
    """Output of the rate provider"""

    rates: RateTable
    source: RateSource


@dataclass(frozen=True)
class EmployerCostInput:
    annual_salary: float
    jurisdiction: str
    benefits_tier: BenefitsTier


@dataclass(frozen=True)
class EmployerTaxes:
    social_security: float
    medicare: float
    federal_unemployment: float
    state_unemployment: float


@dataclass(frozen=True)
class EmployerCostBreakdown:
    """Total yearly cost of an employee to the employer"""

    base: float
    taxes: EmployerTaxes
    benefits: float
    total: float


@dataclass(frozen=True)
class PaycheckInput:
    hourly_rate: float
    regular_hours: float
    overtime_hours: float
    pay_frequency: PayFrequency
    filing_status: FilingStatus
    allowances: int
    jurisdiction: str


@dataclass(frozen=True)
class PaycheckDeductions:
    federal: float
    state: float
    social_security: float
    medicare: float

    @property
    def total(self) -> float:
        return self.federal + self.state + self.social_security + self.medicare


@dataclass(frozen=True)
class PaycheckBreakdown:
    """Gross, withholding and net pay for one pay period"""

    gross: float
    deductions: PaycheckDeductions
    net: float
