"""Prometheus metrics for tax rate resolution, completion calls and calculations"""

from prometheus_client import Counter, Histogram

# Rate resolution metrics
rate_resolution_counter = Counter(
    "tax_rate_resolutions_total",
    "Tax rate tables served",
    ["source"],  # cache | remote | defaults
)

rate_fetch_failure_counter = Counter(
    "tax_rate_fetch_failures_total",
    "Failed attempts to obtain rates from the completion service",
    ["reason"],  # transport | malformed | incomplete | unexpected
)

# Completion service metrics
completion_latency_histogram = Histogram(
    "completion_latency_seconds",
    "Completion service response time",
    buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0],
)

# Cache metrics
cache_write_failure_counter = Counter(
    "rate_cache_write_failures_total",
    "Failed writes of the tax rate cache file",
)

# Calculations
calculation_counter = Counter(
    "payroll_calculations_total",
    "Payroll calculations performed",
    ["kind"],  # employer_cost | paycheck
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_rate_resolution(source: str) -> None:
    """Count where a served rate table came from"""
    rate_resolution_counter.labels(source=source).inc()


def record_fetch_failure(reason: str) -> None:
    rate_fetch_failure_counter.labels(reason=reason).inc()
