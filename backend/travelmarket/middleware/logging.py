"""
Logging middleware for request correlation and structured access logs.
"""
import time
import uuid
from typing import Callable
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
import structlog


logger = structlog.get_logger(__name__)

QUIET_PATHS = {"/health", "/metrics"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Binds a request id to every log line of a request and logs one access record per response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_host=request.client.host if request.client else None
        )

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "http_request_failed",
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
                error=str(exc),
                error_type=type(exc).__name__
            )
            raise

        duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
        if request.url.path not in QUIET_PATHS:
            log = logger.warning if response.status_code >= 500 else logger.info
            log(
                "http_request_completed",
                status_code=response.status_code,
                duration_ms=duration_ms
            )

        response.headers["X-Request-ID"] = request_id
        return response
