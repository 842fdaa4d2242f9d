"""FastAPI middleware for observability.

Binds a run ID to every status API request and logs request completion.
"""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from .logging_config import get_logger
from .run_context import run_scope

logger = get_logger(__name__)


class RunIDMiddleware(BaseHTTPMiddleware):
    """Middleware to generate and inject run IDs (X-Run-ID header)."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        with run_scope(request.headers.get("X-Run-ID")) as run_id:
            start_time = time.time()
            logger.info(f"{request.method} {request.url.path}")

            try:
                response = await call_next(request)
            except Exception as e:
                duration_ms = (time.time() - start_time) * 1000
                logger.error(
                    f"Request failed: {str(e)}",
                    extra={"duration_ms": round(duration_ms, 2)},
                    exc_info=True
                )
                raise

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                f"Request completed: {response.status_code}",
                extra={
                    "status_code": response.status_code,
                    "duration_ms": round(duration_ms, 2),
                }
            )

            response.headers["X-Run-ID"] = run_id
            return response
