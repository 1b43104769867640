"""Configuration management using Pydantic Settings"""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "payroll-gateway"
    log_level: str = "INFO"

    # Completion service (Anthropic Messages API)
    anthropic_api_key: str = ""
    anthropic_api_base: str = "https://api.anthropic.com"
    anthropic_version: str = "2023-06-01"
    completion_model: str = "claude-3-5-sonnet-latest"
    completion_max_tokens: int = 1024

    # HTTP Client
    http_timeout_seconds: float = 30.0

    # Tax rate cache
    cache_file_path: str = "tax_rates_cache.json"
    rate_cache_ttl_hours: float = 24.0

    # Rate table: "minimal" (CA, NY, TX) or "full" (50 states + DC)
    rate_table_variant: Literal["minimal", "full"] = "minimal"
    reference_income: int = 75_000


settings = Settings()
