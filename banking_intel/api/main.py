"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from banking_intel.api.middleware import RequestIDMiddleware, MetricsMiddleware
from banking_intel.api.v1 import report
from banking_intel.infrastructure.observability.logging import setup_logging
from banking_intel.config import settings

setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Banking Intelligence Gateway",
        description="Narrative banking intelligence reports from account and transaction snapshots",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Last added runs first
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(report.router, prefix="/v1", tags=["reports"])

    return app


app = create_app()
