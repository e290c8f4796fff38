"""
ViewSet: Request Logging Middleware
====================================

What:  One access-log line per request: method, path, status, duration.
Why:   Error responses are produced inside the dispatcher without raising, so
       the access log is where a 4xx/5xx from a resource shows up next to
       its request id.
How:   Measures from middleware entry to response return and picks the log
       level from the status code (5xx → ERROR, 4xx → WARNING, else INFO).

What we log vs what we DON'T log:
    Log: method, path, status, duration, client IP, request id
    Don't log: request bodies or query strings (may carry personal data)
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from viewset.context import request_id_var

logger = logging.getLogger("viewset.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request on the `viewset.access` logger."""

    # Probes hit these every few seconds; logging them drowns real traffic
    QUIET_PATHS = {"/health"}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            request.url.path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
