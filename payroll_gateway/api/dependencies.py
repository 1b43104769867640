"""Dependency injection for FastAPI endpoints"""

from fastapi import Request

from payroll_gateway.application.rate_provider import RateProvider
from payroll_gateway.infrastructure.cache.rate_cache import RateCache
from payroll_gateway.infrastructure.clients.completion import CompletionClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_completion_client() -> CompletionClient:
    """Provide completion API client instance"""
    return CompletionClient()


def get_rate_cache() -> RateCache:
    """Provide tax rate cache bound to the configured file"""
    return RateCache()


def get_rate_provider() -> RateProvider:
    """Provide tax rate provider wired to the default client and cache"""
    return RateProvider(client=get_completion_client(), cache=get_rate_cache())
