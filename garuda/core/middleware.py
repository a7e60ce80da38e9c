import time
import uuid
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from garuda.core.config.logging import bind_context, clear_context
from garuda.core.metrics import (
    http_request_duration_seconds,
    http_requests_total,
)

REQUEST_ID_HEADER = "X-Request-ID"


# ==================================================
# Metrics Middleware
# ==================================================
class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Middleware to automatically track request duration and status codes.
    For streamed replies the duration covers the time to the response headers.
    """
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        status_code = 500  # Default if request fails before response
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response

        finally:
            duration = time.time() - start_time

            # /metrics and /health are noise
            if request.url.path not in ["/metrics", "/health"]:
                http_requests_total.labels(
                    method=request.method,
                    endpoint=request.url.path,
                    status=status_code
                ).inc()

                http_request_duration_seconds.labels(
                    method=request.method,
                    endpoint=request.url.path
                ).observe(duration)


# ==================================================
# Logging Context Middleware
# ==================================================
class LoggingContextMiddleware(BaseHTTPMiddleware):
    """
    Binds a request id to every log line emitted while handling the request.
    A client supplied X-Request-ID is reused, otherwise one is generated.
    """
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            # Reset context (crucial for async/thread safety)
            clear_context()
            request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
            bind_context(request_id=request_id, path=request.url.path)

            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response

        finally:
            clear_context()
