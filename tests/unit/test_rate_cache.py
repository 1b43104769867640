"""Unit tests for the tax rate snapshot cache"""

import json
import pytest
from pathlib import Path
from payroll_gateway.domain.models import CacheSnapshot
from payroll_gateway.infrastructure.cache.rate_cache import DEFAULT_TTL_MS, RateCache, is_fresh


RATES = {"CA": {"name": "California", "rate": 0.093}}


def test_read_missing_file(rate_cache: RateCache):
    """Test absent cache reads as None"""
    assert rate_cache.read() is None


def test_write_then_read(rate_cache: RateCache, cache_path: Path):
    """Test written snapshot round-trips with its timestamp"""
    rate_cache.write(RATES, captured_at_ms=1_700_000_000_000)

    snapshot = rate_cache.read()
    assert snapshot == CacheSnapshot(captured_at_ms=1_700_000_000_000, rates=RATES)

    on_disk = json.loads(cache_path.read_text())
    assert on_disk == {"timestamp": 1_700_000_000_000, "rates": RATES}


def test_write_overwrites_previous_snapshot(rate_cache: RateCache):
    """Test second write replaces, never merges"""
    rate_cache.write(RATES, captured_at_ms=1)
    rate_cache.write({"TX": {"name": "Texas", "rate": 0.0}}, captured_at_ms=2)

    snapshot = rate_cache.read()
    assert snapshot.captured_at_ms == 2
    assert set(snapshot.rates) == {"TX"}


def test_write_uses_current_time(rate_cache: RateCache, monkeypatch):
    """Test capture time defaults to now"""
    monkeypatch.setattr("payroll_gateway.infrastructure.cache.rate_cache.now_ms", lambda: 42)
    rate_cache.write(RATES)
    assert rate_cache.read().captured_at_ms == 42


@pytest.mark.parametrize(
    "content",
    [
        "not json",
        "[]",
        '{"rates": {}}',
        '{"timestamp": "yesterday", "rates": {}}',
        '{"timestamp": 1, "rates": []}',
    ],
)
def test_read_corrupt_file(rate_cache: RateCache, cache_path: Path, content: str):
    """Test undecodable cache reads as None instead of raising"""
    cache_path.write_text(content)
    assert rate_cache.read() is None


def test_write_failure_is_swallowed(tmp_path: Path):
    """Test write to an unusable location does not raise"""
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("")
    cache = RateCache(blocker / "cache.json")

    cache.write(RATES)

    assert cache.read() is None


def test_write_unserializable_is_swallowed(rate_cache: RateCache, cache_path: Path):
    """Test bad payload leaves the previous snapshot in place"""
    rate_cache.write(RATES, captured_at_ms=1)
    rate_cache.write({"CA": {"name": "California", "rate": object()}})

    assert rate_cache.read().captured_at_ms == 1
    assert [p.name for p in cache_path.parent.iterdir()] == [cache_path.name]


def test_freshness_boundary():
    """Test fresh at t + TTL - 1ms, stale at t + TTL"""
    t = 1_700_000_000_000
    snapshot = CacheSnapshot(captured_at_ms=t, rates=RATES)

    assert is_fresh(snapshot, DEFAULT_TTL_MS, now=t + DEFAULT_TTL_MS - 1) is True
    assert is_fresh(snapshot, DEFAULT_TTL_MS, now=t + DEFAULT_TTL_MS) is False


def test_default_ttl_is_24_hours():
    """Test default window"""
    assert DEFAULT_TTL_MS == 24 * 60 * 60 * 1000


def test_cache_is_fresh_uses_configured_ttl(cache_path: Path):
    """Test instance TTL is applied"""
    cache = RateCache(cache_path, ttl_ms=1000)
    snapshot = CacheSnapshot(captured_at_ms=0, rates=RATES)

    assert cache.is_fresh(snapshot, now=999) is True
    assert cache.is_fresh(snapshot, now=1000) is False
