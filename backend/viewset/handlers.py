"""
ViewSet: Default Exception Handler
===================================

What:  Turns a failed pipeline stage into the terminal JSON error response.
How:   A ViewSetError carries its own status code; any other exception maps
       to 400. The body is always `{"message": <error text>}`.
Who:   Used by every ViewSet that is built without an explicit handler, and
       by the app-level handler for ViewSetErrors raised outside a pipeline.

Logging:
    5xx responses are logged at ERROR with the original cause attached;
    4xx responses at WARNING. Context dicts are logged, never returned.
    Lines carry the request id from viewset.context, which stays empty
    unless RequestIDMiddleware is installed.
"""

import logging

from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from viewset.exceptions import ViewSetError
from viewset.interfaces import ExceptionHandler
from viewset.context import request_id_var

logger = logging.getLogger(__name__)


class DefaultExceptionHandler(ExceptionHandler):
    """Maps ViewSetError → its status, everything else → 400."""

    fallback_status_code = 400

    async def handle(self, error: Exception, request: Request) -> Response:
        if isinstance(error, ViewSetError):
            status_code = error.status_code
            message = error.message
            context = error.context
        else:
            status_code = self.fallback_status_code
            message = str(error)
            context = {}

        rid = request_id_var.get("")
        if status_code >= 500:
            logger.error(
                "[%s] %s %s failed with %d: %s | Context: %s",
                rid,
                request.method,
                request.url.path,
                status_code,
                message,
                context,
                exc_info=getattr(error, "cause", None) or error,
            )
        else:
            logger.warning(
                "[%s] %s %s rejected with %d: %s",
                rid,
                request.method,
                request.url.path,
                status_code,
                message,
            )

        return JSONResponse(status_code=status_code, content={"message": message})
