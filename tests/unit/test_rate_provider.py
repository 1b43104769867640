"""Unit tests for tax rate resolution (cache -> completion -> defaults)"""

import json
import pytest
from pathlib import Path
from unittest.mock import AsyncMock
from payroll_gateway.application.rate_provider import RateProvider, build_rates_prompt
from payroll_gateway.domain import rate_table
from payroll_gateway.domain.exceptions import TransportFailure
from payroll_gateway.domain.models import RateSource
from payroll_gateway.infrastructure.cache.rate_cache import RateCache
from payroll_gateway.utils.time_utils import now_ms


async def test_fetch_success_returns_and_caches(
    provider: RateProvider,
    completion_client: AsyncMock,
    rate_cache: RateCache,
    remote_rates: dict,
):
    """Test valid completion is returned unchanged and persisted"""
    resolution = await provider.resolve()

    assert resolution.source == RateSource.REMOTE
    assert resolution.rates == remote_rates
    assert rate_cache.read().rates == remote_rates
    completion_client.complete.assert_awaited_once()


async def test_fresh_cache_skips_network(
    provider: RateProvider,
    completion_client: AsyncMock,
    remote_rates: dict,
):
    """Test second call hits the cache with zero network calls"""
    first = await provider.get_rates()
    second = await provider.resolve()

    assert completion_client.complete.await_count == 1
    assert second.source == RateSource.CACHE
    assert second.rates == first == remote_rates


async def test_stale_cache_refetches(
    provider: RateProvider,
    completion_client: AsyncMock,
    rate_cache: RateCache,
    remote_rates: dict,
):
    """Test snapshot older than the TTL triggers a fetch"""
    old = now_ms() - rate_cache.ttl_ms
    rate_cache.write(rate_table.defaults("minimal"), captured_at_ms=old)

    resolution = await provider.resolve()

    assert resolution.source == RateSource.REMOTE
    assert resolution.rates == remote_rates
    assert rate_cache.read().captured_at_ms > old


@pytest.mark.parametrize(
    "reply",
    [
        "I cannot help with tax rates.",
        '{"CA":{"name":"California","rate":0.093},"TX":{"name":"Texas","rate":0.0}}',
        '{"CA":{"name":"California","rate":0.093},"NY":{"name":"New',
        '["CA", "NY", "TX"]',
        '{"CA":{"name":"California","rate":9.3},"NY":{"name":"New York","rate":0.109},"TX":{"name":"Texas","rate":0}}',
        "",
    ],
)
async def test_bad_completion_returns_defaults_without_caching(
    provider: RateProvider,
    completion_client: AsyncMock,
    cache_path: Path,
    reply: str,
):
    """Test malformed, incomplete or truncated replies fall back and leave no cache"""
    completion_client.complete.return_value = reply

    resolution = await provider.resolve()

    assert resolution.source == RateSource.DEFAULTS
    assert resolution.rates == rate_table.defaults("minimal")
    assert not cache_path.exists()


async def test_bad_completion_leaves_stale_cache_untouched(
    provider: RateProvider,
    completion_client: AsyncMock,
    rate_cache: RateCache,
    cache_path: Path,
):
    """Test a failed refresh never overwrites the previous snapshot"""
    rate_cache.write({"CA": {"name": "California", "rate": 0.05}}, captured_at_ms=1)
    before = cache_path.read_text()
    completion_client.complete.return_value = "not json"

    rates = await provider.get_rates()

    assert rates == rate_table.defaults("minimal")
    assert cache_path.read_text() == before


async def test_transport_failure_returns_defaults(
    provider: RateProvider,
    completion_client: AsyncMock,
    cache_path: Path,
):
    """Test network error falls back to defaults"""
    completion_client.complete.side_effect = TransportFailure("Completion API timeout after 30s")

    rates = await provider.get_rates()

    assert rates == rate_table.defaults("minimal")
    assert not cache_path.exists()


async def test_unexpected_error_returns_defaults(
    provider: RateProvider,
    completion_client: AsyncMock,
):
    """Test any exception inside the fetch is absorbed"""
    completion_client.complete.side_effect = RuntimeError("boom")

    resolution = await provider.resolve()

    assert resolution.source == RateSource.DEFAULTS


async def test_corrupt_cache_is_a_miss(
    provider: RateProvider,
    completion_client: AsyncMock,
    cache_path: Path,
    remote_rates: dict,
):
    """Test undecodable cache file triggers a fetch and is replaced"""
    cache_path.write_text("{garbage")

    rates = await provider.get_rates()

    assert rates == remote_rates
    assert json.loads(cache_path.read_text())["rates"] == remote_rates
    completion_client.complete.assert_awaited_once()


async def test_incomplete_cached_table_is_a_miss(
    provider: RateProvider,
    completion_client: AsyncMock,
    rate_cache: RateCache,
    remote_rates: dict,
):
    """Test fresh snapshot lacking a required code is not served"""
    rate_cache.write({"CA": {"name": "California", "rate": 0.05}})

    resolution = await provider.resolve()

    assert resolution.source == RateSource.REMOTE
    assert resolution.rates == remote_rates


async def test_cache_write_failure_still_returns_rates(
    completion_client: AsyncMock,
    tmp_path: Path,
    remote_rates: dict,
):
    """Test unwritable cache does not abort the pipeline"""
    blocker = tmp_path / "file"
    blocker.write_text("")
    provider = RateProvider(client=completion_client, cache=RateCache(blocker / "cache.json"), variant="minimal")

    resolution = await provider.resolve()

    assert resolution.source == RateSource.REMOTE
    assert resolution.rates == remote_rates


async def test_full_variant_requires_every_state(completion_client: AsyncMock, rate_cache: RateCache):
    """Test full table variant rejects a three-state reply"""
    provider = RateProvider(client=completion_client, cache=rate_cache, variant="full")

    resolution = await provider.resolve()

    assert resolution.source == RateSource.DEFAULTS
    assert len(resolution.rates) == 51


async def test_full_variant_accepts_complete_reply(completion_client: AsyncMock, rate_cache: RateCache):
    """Test full table variant with a complete reply"""
    full = rate_table.defaults("full")
    full["CA"]["rate"] = 0.0901
    completion_client.complete.return_value = "Here you go:\n" + json.dumps(full)
    provider = RateProvider(client=completion_client, cache=rate_cache, variant="full")

    rates = await provider.get_rates()

    assert rates == full


def test_prompt_lists_jurisdictions_and_reference_income():
    """Test prompt text for the minimal table"""
    prompt = build_rates_prompt(rate_table.default_entries("minimal"), 75_000)

    assert "California, New York, and Texas" in prompt
    assert "$75,000" in prompt
    assert "no additional text or explanation" in prompt
    assert prompt.endswith(
        '{"CA":{"name":"California","rate":0.093},'
        '"NY":{"name":"New York","rate":0.109},'
        '"TX":{"name":"Texas","rate":0.0}}'
    )


async def test_provider_sends_prompt(provider: RateProvider, completion_client: AsyncMock):
    """Test the completion call carries the fixed prompt"""
    await provider.resolve()
    completion_client.complete.assert_awaited_once_with(provider.prompt())


def test_resolve_cached_without_snapshot_uses_defaults(provider: RateProvider, completion_client: AsyncMock):
    """Test cache-only resolution falls back to defaults and never calls out"""
    resolution = provider.resolve_cached()

    assert resolution.source == RateSource.DEFAULTS
    assert resolution.rates == rate_table.defaults("minimal")
    completion_client.complete.assert_not_called()


async def test_resolve_cached_serves_fetched_snapshot(
    provider: RateProvider,
    completion_client: AsyncMock,
    remote_rates: dict,
):
    """Test cache-only resolution serves the table a fetch stored"""
    await provider.resolve()

    resolution = provider.resolve_cached()

    assert resolution.source == RateSource.CACHE
    assert resolution.rates == remote_rates
    assert completion_client.complete.await_count == 1


def test_resolve_cached_ignores_stale_snapshot(provider: RateProvider, rate_cache: RateCache, remote_rates: dict):
    """Test a snapshot past its TTL is not served by cache-only resolution"""
    rate_cache.write(remote_rates, captured_at_ms=now_ms() - rate_cache.ttl_ms - 1)

    assert provider.resolve_cached().source == RateSource.DEFAULTS
