"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from payroll_gateway import __version__
from payroll_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from payroll_gateway.api.routes import calculations, tax_rates
from payroll_gateway.infrastructure.observability.logging import setup_logging
from payroll_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Payroll Calculator Gateway",
        description="State tax rates and payroll cost calculations",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(tax_rates.router, prefix="/api", tags=["tax-rates"])
    app.include_router(calculations.router, prefix="/api", tags=["calculations"])

    return app


app = create_app()
