"""Pytest fixtures for testing"""

import json
import pytest
from pathlib import Path
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient
from payroll_gateway.api.main import create_app
from payroll_gateway.api.dependencies import get_rate_provider
from payroll_gateway.application.rate_provider import RateProvider
from payroll_gateway.infrastructure.cache.rate_cache import RateCache


REMOTE_RATES = {
    "CA": {"name": "California", "rate": 0.088},
    "NY": {"name": "New York", "rate": 0.0685},
    "TX": {"name": "Texas", "rate": 0.0},
}


@pytest.fixture
def remote_rates() -> dict:
    """Rate table the fake completion service reports"""
    return json.loads(json.dumps(REMOTE_RATES))


@pytest.fixture
def cache_path(tmp_path: Path) -> Path:
    """Cache file location inside a per-test directory"""
    return tmp_path / "tax_rates_cache.json"


@pytest.fixture
def rate_cache(cache_path: Path) -> RateCache:
    """Rate cache with the standard 24h TTL"""
    return RateCache(cache_path, ttl_ms=24 * 60 * 60 * 1000)


@pytest.fixture
def completion_client() -> AsyncMock:
    """Completion client stub replying with a fenced JSON rate table"""
    client = AsyncMock()
    client.complete.return_value = "```json\n" + json.dumps(REMOTE_RATES) + "\n```"
    return client


@pytest.fixture
def provider(completion_client: AsyncMock, rate_cache: RateCache) -> RateProvider:
    """Rate provider on the minimal CA/NY/TX table"""
    return RateProvider(client=completion_client, cache=rate_cache, variant="minimal")


@pytest.fixture
def client(provider: RateProvider) -> TestClient:
    """Create FastAPI test client with the stubbed rate provider"""
    app = create_app()
    app.dependency_overrides[get_rate_provider] = lambda: provider
    return TestClient(app)
