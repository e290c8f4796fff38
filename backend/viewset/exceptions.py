"""
ViewSet: Exception Hierarchy
=============================

What:  The error shapes the dispatcher hands to its ExceptionHandler.
Why:   Collaborator errors are opaque. The dispatcher only knows WHICH pipeline
       stage failed, and maps that stage to a fixed HTTP status. Each stage has
       its own exception class carrying that status, the collaborator's
       message and the original error as `cause`.
How:   Every wrapped error is a `ViewSetError` with `message`, `status_code`,
       `cause` and an optional `context` dict. `DefaultExceptionHandler`
       recognizes this shape; anything else falls back to 400.
Who:   Raised/built by the dispatcher, the pagination adapter and managers;
       consumed by exception handlers.

Exception Hierarchy:
    ViewSetError (base, status carried per instance)
    ├── PermissionDenied   → 403 Forbidden       (PermissionChecker refused)
    ├── NotFound           → 404 Not Found       (GetObject failed, any cause)
    ├── ValidationFailed   → 400 Bad Request     (FormValidator or Save failed)
    └── InternalFailure    → 500 Server Error    (GetObjects or Serialize failed)

    ImproperlyConfigured   construction-time only, never reaches a handler
    ObjectDoesNotExist     raised by managers when a lookup matches no row
"""

from typing import Any, Dict, Optional


class ViewSetError(Exception):
    """
    Base exception for every error a ViewSet pipeline stage reports.

    Attributes:
        message:      Text returned to the client as `{"message": ...}`
        status_code:  HTTP status the exception handler should respond with
        cause:        The collaborator exception that triggered this error
        context:      Extra debug info (logged, never returned to the client)
    """

    status_code: int = 400

    def __init__(
        self,
        message: str = "Request could not be processed",
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.cause = cause
        self.context = context or {}
        super().__init__(self.message)
        # Keeps the original traceback attached when the error is logged
        self.__cause__ = cause

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, status_code={self.status_code})"


class PermissionDenied(ViewSetError):
    """
    Raised when the PermissionChecker refuses the action.

    HTTP: 403 Forbidden. The pipeline aborts before any persistence call.
    """

    status_code = 403

    def __init__(
        self,
        message: str = "You do not have permission to perform this action",
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, cause=cause, context=context)


class NotFound(ViewSetError):
    """
    Raised when the object lookup for a detail route fails.

    HTTP: 404 Not Found. "No row matched" and any other lookup failure
    (bad path parameter, query error) are not distinguished.
    """

    status_code = 404

    def __init__(
        self,
        message: str = "Object not found",
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, cause=cause, context=context)


class ValidationFailed(ViewSetError):
    """
    Raised when input validation or a write fails.

    HTTP: 400 Bad Request. Covers FormValidator errors, Save errors on
    create/update, Delete errors and pagination query binding errors.
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, cause=cause, context=context)


class InternalFailure(ViewSetError):
    """
    Raised when listing or serialization fails.

    HTTP: 500 Internal Server Error.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "An internal error occurred",
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, cause=cause, context=context)


class ImproperlyConfigured(Exception):
    """
    Raised while constructing a ViewSet with an unusable configuration.

    Not a ViewSetError: it is raised at startup, before any route is mounted,
    so no request can ever observe it.
    """


class ObjectDoesNotExist(LookupError):
    """Raised by a PersistenceManager when a single-row lookup matches nothing."""

    def __init__(self, message: str = "Object not found"):
        self.message = message
        super().__init__(message)
