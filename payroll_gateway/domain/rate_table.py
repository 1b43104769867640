"""
Default state income tax rates.

Used as the final fallback when the completion service cannot provide rates,
and as the checklist of jurisdictions a fetched table must cover.

Two variants are configured:
- minimal: the three jurisdictions the calculator page offers (CA, NY, TX)
- full:    all 50 states plus DC

Rates are single blended rates at the reference income, not bracket schedules.
"""

from typing import Dict, FrozenSet, List, Optional

from payroll_gateway.config import settings
from payroll_gateway.domain.models import RateEntry, RateTable

MINIMAL = "minimal"
FULL = "full"

MINIMAL_RATES: List[RateEntry] = [
    RateEntry("CA", "California", 0.093),
    RateEntry("NY", "New York", 0.109),
    RateEntry("TX", "Texas", 0.0),
]

FULL_RATES: List[RateEntry] = [
    RateEntry("AL", "Alabama", 0.05),
    RateEntry("AK", "Alaska", 0.0),
    RateEntry("AZ", "Arizona", 0.025),
    RateEntry("AR", "Arkansas", 0.039),
    RateEntry("CA", "California", 0.093),
    RateEntry("CO", "Colorado", 0.044),
    RateEntry("CT", "Connecticut", 0.05),
    RateEntry("DE", "Delaware", 0.052),
    RateEntry("DC", "District of Columbia", 0.085),
    RateEntry("FL", "Florida", 0.0),
    RateEntry("GA", "Georgia", 0.053),
    RateEntry("HI", "Hawaii", 0.08),
    RateEntry("ID", "Idaho", 0.058),
    RateEntry("IL", "Illinois", 0.0495),
    RateEntry("IN", "Indiana", 0.03),
    RateEntry("IA", "Iowa", 0.057),
    RateEntry("KS", "Kansas", 0.052),
    RateEntry("KY", "Kentucky", 0.045),
    RateEntry("LA", "Louisiana", 0.03),
    RateEntry("ME", "Maine", 0.071),
    RateEntry("MD", "Maryland", 0.0575),
    RateEntry("MA", "Massachusetts", 0.05),
    RateEntry("MI", "Michigan", 0.0425),
    RateEntry("MN", "Minnesota", 0.068),
    RateEntry("MS", "Mississippi", 0.047),
    RateEntry("MO", "Missouri", 0.047),
    RateEntry("MT", "Montana", 0.059),
    RateEntry("NE", "Nebraska", 0.056),
    RateEntry("NV", "Nevada", 0.0),
    RateEntry("NH", "New Hampshire", 0.0),
    RateEntry("NJ", "New Jersey", 0.063),
    RateEntry("NM", "New Mexico", 0.049),
    RateEntry("NY", "New York", 0.109),
    RateEntry("NC", "North Carolina", 0.0475),
    RateEntry("ND", "North Dakota", 0.025),
    RateEntry("OH", "Ohio", 0.035),
    RateEntry("OK", "Oklahoma", 0.0475),
    RateEntry("OR", "Oregon", 0.087),
    RateEntry("PA", "Pennsylvania", 0.0307),
    RateEntry("RI", "Rhode Island", 0.055),
    RateEntry("SC", "South Carolina", 0.064),
    RateEntry("SD", "South Dakota", 0.0),
    RateEntry("TN", "Tennessee", 0.0),
    RateEntry("TX", "Texas", 0.0),
    RateEntry("UT", "Utah", 0.048),
    RateEntry("VT", "Vermont", 0.066),
    RateEntry("VA", "Virginia", 0.0575),
    RateEntry("WA", "Washington", 0.0),
    RateEntry("WV", "West Virginia", 0.051),
    RateEntry("WI", "Wisconsin", 0.053),
    RateEntry("WY", "Wyoming", 0.0),
]

VARIANTS: Dict[str, List[RateEntry]] = {
    MINIMAL: MINIMAL_RATES,
    FULL: FULL_RATES,
}


def default_entries(variant: Optional[str] = None) -> List[RateEntry]:
    """Rate entries for a variant (configured variant when omitted)"""
    name = variant or settings.rate_table_variant
    try:
        return VARIANTS[name]
    except KeyError:
        raise ValueError(f"Unknown rate table variant: {name!r}") from None


def defaults(variant: Optional[str] = None) -> RateTable:
    """
    Hard-coded fallback rate table.

    Returns a new dict on every call so callers may mutate the result
    without touching the module constants.
    """
    return {entry.code: entry.to_dict() for entry in default_entries(variant)}


def required_codes(variant: Optional[str] = None) -> FrozenSet[str]:
    """Jurisdiction codes every fetched rate table must contain"""
    return frozenset(entry.code for entry in default_entries(variant))
