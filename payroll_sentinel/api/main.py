"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from payroll_sentinel.api.dependencies import build_alert_filter, build_risk_monitor
from payroll_sentinel.api.middleware import RequestIDMiddleware, MetricsMiddleware
from payroll_sentinel.api.v1 import alerts, risk
from payroll_sentinel.infrastructure.observability.logging import setup_logging
from payroll_sentinel.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Payroll Sentinel",
        description="Payroll cash-flow risk assessment and alerting service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Alert history and dispatch locks live as long as the process
    app.state.alert_filter = build_alert_filter(settings)
    app.state.risk_monitor = build_risk_monitor(app.state.alert_filter, settings)

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
    app.include_router(risk.router, prefix="/v1", tags=["risk"])
    app.include_router(alerts.router, prefix="/v1", tags=["alerts"])

    return app


app = create_app()
