"""Request context middleware for observability.

Responsibilities (handled in one pass):
- Generate or propagate ``X-Request-ID`` header
- Measure request duration
- Log every request/response as structured JSON
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from ..core.logging_config import request_id_var

logger = logging.getLogger(__name__)

# Polled endpoints that would drown the log at INFO.
_QUIET_PATHS = frozenset({"/health", "/robots.txt"})


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Single middleware handling request-id, timing, and request logging."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        # --- Request ID ---
        rid = request.headers.get("x-request-id") or uuid.uuid4().hex[:16]
        request_id_var.set(rid)

        # --- Timing ---
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        # --- Response headers ---
        response.headers["X-Request-ID"] = rid
        response.headers["X-Response-Time"] = f"{duration_ms}ms"

        # --- Structured request log ---
        log = logger.debug if request.url.path in _QUIET_PATHS else logger.info
        log(
            f"{request.method} {request.url.path} {response.status_code}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        return response
