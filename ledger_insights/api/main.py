"""FastAPI application factory"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from ledger_insights.api.middleware import RequestIDMiddleware, MetricsMiddleware
from ledger_insights.api.v1 import dates, forecast, recurring, scheduled, trends
from ledger_insights.domain.exceptions import InvalidInputError
from ledger_insights.infrastructure.observability.logging import setup_logging
from ledger_insights.config import settings

API_VERSION = "0.1.0"

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Ledger Insights",
        description="Recurring payment detection, cash-flow forecasting and spending trends for budget ledgers",
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Input-shape errors that escape a router become 422, same as query validation
    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(request: Request, exc: InvalidInputError):
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.get("/health")
    def health_check():
        return {
            "status": "ok",
            "service": settings.service_name,
            "version": API_VERSION,
            "ledger_configured": bool(settings.ledger_access_token),
        }

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(recurring.router, prefix="/v1", tags=["recurring"])
    app.include_router(forecast.router, prefix="/v1", tags=["forecast"])
    app.include_router(trends.router, prefix="/v1", tags=["trends"])
    app.include_router(scheduled.router, prefix="/v1", tags=["scheduled"])
    app.include_router(dates.router, prefix="/v1", tags=["dates"])

    return app


app = create_app()
