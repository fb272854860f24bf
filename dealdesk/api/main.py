"""FastAPI application factory"""

import logging
from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from dealdesk.api.middleware import RequestIDMiddleware, MetricsMiddleware
from dealdesk.api.v1 import affordability, deals
from dealdesk.config import Settings, settings
from dealdesk.infrastructure.observability.logging import setup_logging
from dealdesk.infrastructure.observability.metrics import invalid_input_counter

API_VERSION = "0.1.0"


async def _count_schema_rejection(request: Request, exc: RequestValidationError):
    # Payloads pydantic refuses never reach the core; count them alongside core rejections
    invalid_input_counter.labels(source="schema").inc()
    logging.warning(
        "Request body failed validation",
        extra={
            "request_id": getattr(request.state, "request_id", None),
            "endpoint": request.url.path,
            "error_count": len(exc.errors()),
        },
    )
    return await request_validation_exception_handler(request, exc)


def create_app(app_settings: Settings = settings) -> FastAPI:
    """Build the DealDesk service: deal analysis and affordability under /v1"""
    setup_logging(app_settings.log_level)

    app = FastAPI(
        title="DealDesk",
        description="Buy-here-pay-here deal structuring: payments, underwriting and affordability",
        version=API_VERSION,
    )
    app.state.settings = app_settings

    # Last added runs first, so the request id exists before timing starts
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(RequestValidationError, _count_schema_rejection)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": app_settings.service_name, "version": API_VERSION}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(deals.router, prefix="/v1", tags=["deals"])
    app.include_router(affordability.router, prefix="/v1", tags=["affordability"])

    return app


app = create_app()
