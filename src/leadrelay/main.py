"""Lead Relay - Status API

Small FastAPI application next to the Celery worker:
- Health, readiness and Prometheus metrics
- Processing status and failure digest
- Manual replay of a single message

Run with:
    uvicorn leadrelay.main:app --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .api.router import router as status_router
from .config import get_settings
from .observability.logging_config import configure_logging
from .observability.middleware import RunIDMiddleware
from .observability.router import router as observability_router
from .workers.bootstrap import LeadRelayServices, build_services

logger = logging.getLogger(__name__)


def create_app(services: Optional[LeadRelayServices] = None) -> FastAPI:
    """Application factory.

    Args:
        services: Pre-built service graph (tests). Built from settings at
            startup when omitted.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.services is None:
            settings = get_settings()
            configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)
            app.state.services = build_services(settings)
        logger.info("Lead Relay API starting up...")

        yield

        logger.info("Lead Relay API shutting down...")

    app = FastAPI(
        title="Lead Relay API",
        description="Status and operations API for the lead relay worker",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.services = services

    app.add_middleware(RunIDMiddleware)

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        """Log the full error, return a generic message."""
        logger.error(f"Database error on {request.method} {request.url.path}", exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "database_error",
                "message": "A database error occurred. Please try again later.",
            },
        )

    app.include_router(observability_router)
    app.include_router(status_router)

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, Any]:
        return {
            "name": "Lead Relay API",
            "version": "0.1.0",
            "status": "running",
        }

    return app


app = create_app()
