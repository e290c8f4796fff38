"""
Request-scoped context shared by the library and the demo middleware.

`request_id_var` holds the correlation id of the request being handled.
RequestIDMiddleware sets it; without that middleware it stays "" and log
lines carry an empty id.
"""

from contextvars import ContextVar

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")
