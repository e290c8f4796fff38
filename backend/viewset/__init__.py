"""
ViewSet: Package Initializer
=============================

What: Declarative CRUD resources for FastAPI.
Why:  A resource (list, retrieve, create, update, delete) is described once and
      mounted as a fixed pipeline of pluggable collaborators instead of five
      hand-written route handlers.
Who:  Imported by applications that mount resources, and by the demo app in
      `viewset.main`.

Architecture Note:

    ┌─────────────────────────────────────┐
    │       ViewSet (Dispatcher)          │  ← route table + action pipeline
    ├─────────────────────────────────────┤
    │  PermissionChecker  FormValidator   │  ← pluggable collaborators
    │  Serializer   ExceptionHandler      │
    ├─────────────────────────────────────┤
    │       PersistenceManager            │  ← all storage reads/writes
    ├─────────────────────────────────────┤
    │   SQLAlchemyManager (async ORM)     │  ← default adapter + pagination
    └─────────────────────────────────────┘

    The dispatcher never touches storage or request bodies itself. Every side
    effect goes through a collaborator, so each layer can be swapped or
    mocked on its own.
"""

from viewset.exceptions import (
    ImproperlyConfigured,
    InternalFailure,
    NotFound,
    ObjectDoesNotExist,
    PermissionDenied,
    ValidationFailed,
    ViewSetError,
)
from viewset.handlers import DefaultExceptionHandler
from viewset.interfaces import (
    ComputedField,
    ExceptionHandler,
    FormValidator,
    PermissionChecker,
    PersistenceManager,
    Serializer,
)
from viewset.permissions import AllowAny
from viewset.references import ABSENT, Absent, EntityRef, Present
from viewset.routing import Route, build_routes
from viewset.serializers import DefaultSerializer
from viewset.validators import DefaultValidator
from viewset.viewset import (
    CREATE_ACTION,
    DELETE_ACTION,
    LIST_ACTION,
    RETRIEVE_ACTION,
    UPDATE_ACTION,
    ViewSet,
)

__version__ = "1.0.0"

__all__ = [
    "ABSENT",
    "Absent",
    "AllowAny",
    "ComputedField",
    "CREATE_ACTION",
    "DefaultExceptionHandler",
    "DefaultSerializer",
    "DefaultValidator",
    "DELETE_ACTION",
    "EntityRef",
    "ExceptionHandler",
    "FormValidator",
    "ImproperlyConfigured",
    "InternalFailure",
    "LIST_ACTION",
    "NotFound",
    "ObjectDoesNotExist",
    "PermissionChecker",
    "PermissionDenied",
    "PersistenceManager",
    "Present",
    "RETRIEVE_ACTION",
    "Route",
    "Serializer",
    "UPDATE_ACTION",
    "ValidationFailed",
    "ViewSet",
    "ViewSetError",
    "build_routes",
]
