"""
Observability Middleware.

Tags every calculation request with a correlation ID, times it and emits one
log line per request.
"""

import time
import uuid
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("coop_transport")

CORRELATION_HEADER = "X-Correlation-ID"
PROCESS_TIME_HEADER = "X-Process-Time"


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the application logger."""
    logger.setLevel(level.upper())
    if logger.handlers:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)s [%(name)s] %(message)s"
    ))
    logger.addHandler(handler)


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """Correlation ID and timing for every request."""

    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        response.headers[CORRELATION_HEADER] = correlation_id
        response.headers[PROCESS_TIME_HEADER] = f"{elapsed_ms:.2f}"

        context = {
            "correlation_id": correlation_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round(elapsed_ms, 2),
        }
        summary = "%s %s -> %s (%.2f ms)"
        args = (request.method, request.url.path, response.status_code, elapsed_ms)

        if response.status_code >= 500:
            logger.error(summary, *args, extra=context)
        elif response.status_code >= 400:
            logger.warning(summary, *args, extra=context)
        else:
            logger.info(summary, *args, extra=context)

        return response
