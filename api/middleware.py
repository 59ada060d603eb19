"""Request logging middleware using ContextVar.

Takes the request id from the X-Request-ID header (or generates one) and
stores it in a ContextVar so that any downstream code, including log
records, can read it via get_request_id() without explicit parameter
passing. Logs one line per request with status and latency.
"""

import logging
import time
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("api.access")

# ---------------------------------------------------------------------------
# Context variable: thread/task-safe request state
# ---------------------------------------------------------------------------

_current_request_id: ContextVar[str] = ContextVar("current_request_id", default="-")

REQUEST_ID_HEADER = "X-Request-ID"


def get_request_id() -> str:
    """Return the request id for the current request, or "-" outside one."""
    return _current_request_id.get()


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Assign a request id and log each request.

    Priority for the id:
    1. X-Request-ID header (explicit, e.g. from a proxy)
    2. A fresh uuid4 hex
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        token = _current_request_id.set(request_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(
                "%s %s -> %d (%.1f ms)",
                request.method,
                request.url.path,
                response.status_code,
                elapsed_ms,
            )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            _current_request_id.reset(token)
