"""
Tax rate resolution: cache, completion service, fallback to defaults.

Flow:
1. Fresh cached snapshot -> return it, no network call
2. Otherwise ask the completion service for a JSON rate table
3. sanitize -> repair -> parse -> validate against the default jurisdictions
4. Valid: persist to cache and return
5. Any failure: return the default table and leave the cache untouched
"""

import logging
import time
from typing import Optional

from payroll_gateway.config import settings
from payroll_gateway.domain import rate_table
from payroll_gateway.domain.exceptions import (
    IncompleteResponse,
    MalformedResponse,
    RateRetrievalError,
    TransportFailure,
)
from payroll_gateway.domain.models import RateEntry, RateResolution, RateSource, RateTable
from payroll_gateway.domain.sanitizer import parse_rate_object, repair, sanitize, validate_rate_table
from payroll_gateway.infrastructure.cache.rate_cache import RateCache
from payroll_gateway.infrastructure.clients.completion import CompletionClient
from payroll_gateway.infrastructure.observability.metrics import record_fetch_failure, record_rate_resolution

logger = logging.getLogger(__name__)

_FAILURE_REASONS = {
    TransportFailure: "transport",
    MalformedResponse: "malformed",
    IncompleteResponse: "incomplete",
}


def _join_names(names: list[str]) -> str:
    if len(names) <= 2:
        return " and ".join(names)
    return ", ".join(names[:-1]) + ", and " + names[-1]


def build_rates_prompt(entries: list[RateEntry], reference_income: int) -> str:
    """
    Fixed instruction asking for a compact JSON object of code -> {name, rate}.

    The example object uses the default rates, so the model sees the exact shape.
    """
    example = ",".join(
        f'"{e.code}":{{"name":"{e.name}","rate":{e.rate}}}' for e in entries
    )
    return (
        f"Return the current state income tax rates for {_join_names([e.name for e in entries])} "
        f"as a JSON object. Use the effective tax rate for an average income of ${reference_income:,}. "
        f"Format your response as valid JSON like this, with no additional text or explanation: "
        f"{{{example}}}"
    )


class RateProvider:
    """Resolves the state tax rate table; never raises"""

    def __init__(
        self,
        client: Optional[CompletionClient] = None,
        cache: Optional[RateCache] = None,
        variant: Optional[str] = None,
        reference_income: Optional[int] = None,
    ) -> None:
        self._client = client or CompletionClient()
        self._cache = cache or RateCache()
        self._variant = variant or settings.rate_table_variant
        self._reference_income = reference_income or settings.reference_income

    def defaults(self) -> RateTable:
        return rate_table.defaults(self._variant)

    def prompt(self) -> str:
        return build_rates_prompt(rate_table.default_entries(self._variant), self._reference_income)

    async def fetch_remote(self) -> RateTable:
        """
        One completion call, cleaned up and validated.

        Raises:
            TransportFailure: completion call failed
            MalformedResponse: completion text is not a usable JSON object
            IncompleteResponse: a default jurisdiction is missing
        """
        start_time = time.time()
        content = await self._client.complete(self.prompt())
        logger.debug("Raw completion received", extra={"completion": content[:500]})

        candidate = repair(sanitize(content))
        decoded = parse_rate_object(candidate)
        rates = validate_rate_table(decoded, rate_table.required_codes(self._variant))

        logger.info(
            "Fetched tax rates from completion service",
            extra={"jurisdiction_count": len(rates), "duration_ms": (time.time() - start_time) * 1000},
        )
        return rates

    async def resolve(self) -> RateResolution:
        """Rates plus where they came from"""
        cached = self._cached_resolution()
        if cached is not None:
            return cached

        try:
            rates = await self.fetch_remote()
        except RateRetrievalError as e:
            reason = next((r for cls, r in _FAILURE_REASONS.items() if isinstance(e, cls)), "unexpected")
            record_fetch_failure(reason)
            logger.warning(f"Using default tax rates ({reason}): {e}")
            return self._fallback()
        except Exception:
            record_fetch_failure("unexpected")
            logger.exception("Unexpected error fetching tax rates, using defaults")
            return self._fallback()

        self._cache.write(rates)
        record_rate_resolution(RateSource.REMOTE.value)
        return RateResolution(rates=rates, source=RateSource.REMOTE)

    async def get_rates(self) -> RateTable:
        return (await self.resolve()).rates

    def resolve_cached(self) -> RateResolution:
        """
        Rates without touching the completion service.

        A fresh, complete snapshot is served as CACHE; anything else is the
        default table. Used by calculations, which never make network calls.
        """
        return self._cached_resolution() or self._fallback()

    def _cached_resolution(self) -> Optional[RateResolution]:
        snapshot = self._cache.read()
        if snapshot is None or not self._cache.is_fresh(snapshot) or not self._is_complete(snapshot.rates):
            return None
        record_rate_resolution(RateSource.CACHE.value)
        return RateResolution(rates=snapshot.rates, source=RateSource.CACHE)

    def _is_complete(self, rates: RateTable) -> bool:
        # A snapshot written for another variant, or edited by hand, is a miss
        try:
            validate_rate_table(rates, rate_table.required_codes(self._variant))
        except RateRetrievalError as e:
            logger.warning(f"Ignoring cached tax rates: {e}")
            return False
        return True

    def _fallback(self) -> RateResolution:
        record_rate_resolution(RateSource.DEFAULTS.value)
        return RateResolution(rates=self.defaults(), source=RateSource.DEFAULTS)
