"""
ViewSet: Request ID Middleware
===============================

What:  Assigns a correlation id to each request and echoes it back.
Why:   The default exception handler and the access logger tag every line
       with this id, so one failed request can be traced across log entries.
How:   Reuses the client's X-Request-ID header when present, otherwise
       generates a short UUID; stores it in a ContextVar and request.state
       and sets the X-Request-ID response header.
"""

import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from viewset.context import request_id_var


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Sets `request_id_var`, `request.state.request_id` and the response header."""

    header_name = "X-Request-ID"

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(self.header_name) or str(uuid.uuid4())[:8]
        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[self.header_name] = rid
        return response
