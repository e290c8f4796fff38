"""
ViewSet: Collaborator Contracts
================================

What:  Abstract base classes for everything the dispatcher delegates to.
Why:   The dispatcher only sequences calls and maps failures to status codes.
       Access control, payload validation, storage and response shaping are
       injected per ViewSet, so each can be replaced or mocked independently.
How:   Concrete collaborators inherit from these classes. Every method is a
       coroutine and receives the current Starlette `Request` as its request
       context (path params, query string, body, `request.state`).

Contract for failures:
    Collaborators signal failure by raising. The dispatcher treats the
    exception as opaque, wraps it in the ViewSetError subclass for the failing
    stage and forwards it to the ExceptionHandler, so the status depends on
    the stage alone. The one exception is get_objects() during a list: a
    ViewSetError raised there (a bad page window, say) keeps its own status.

Defaults (used when a ViewSet is built without the collaborator):
    - ExceptionHandler  → viewset.handlers.DefaultExceptionHandler
    - PermissionChecker → viewset.permissions.AllowAny
    - Serializer        → viewset.serializers.DefaultSerializer
    - FormValidator     → viewset.validators.DefaultValidator
    - PersistenceManager has no default (required)
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Sequence, Tuple, TypeVar

from starlette.requests import Request
from starlette.responses import Response

from viewset.references import EntityRef

EntityT = TypeVar("EntityT")
ValidatedT = TypeVar("ValidatedT")


class ComputedField(ABC, Generic[EntityT]):
    """One extra key merged into a serialized entity."""

    @abstractmethod
    async def serialize(self, entity: EntityT, request: Request) -> Any:
        """Return the value for this field. Raising fails the whole serialization."""
        ...


class Serializer(ABC, Generic[EntityT]):
    """Turns entities into JSON-ready mappings."""

    @abstractmethod
    async def serialize(self, entity: EntityT, request: Request) -> Dict[str, Any]:
        ...

    @abstractmethod
    async def many_serialize(
        self, entities: Sequence[EntityT], request: Request
    ) -> List[Dict[str, Any]]:
        """Serialize in order. The first failing entity aborts the whole list."""
        ...


class FormValidator(ABC, Generic[EntityT, ValidatedT]):
    """Decodes and validates the request payload."""

    @abstractmethod
    async def validate(self, ref: EntityRef, request: Request) -> ValidatedT:
        """
        Return the validated input for a create (`ref` is Absent) or an
        update (`ref` is Present and carries the current entity, so a
        validator can merge or compare against stored values).
        """
        ...


class PersistenceManager(ABC, Generic[EntityT, ValidatedT]):
    """
    Performs every storage read and write for a resource.

    Contract:
        - get_object() raises when no single entity matches the request
        - get_objects() returns the page of entities and a meta mapping
          holding at least "next" and "previous"
        - save() inserts when given Absent and updates when given Present,
          never the reverse, and returns the stored entity
    """

    @abstractmethod
    async def get_object(self, request: Request) -> EntityT:
        ...

    @abstractmethod
    async def get_objects(self, request: Request) -> Tuple[List[EntityT], Dict[str, Any]]:
        ...

    @abstractmethod
    async def save(self, ref: EntityRef, validated: ValidatedT, request: Request) -> EntityT:
        ...

    @abstractmethod
    async def delete(self, entity: EntityT, request: Request) -> None:
        ...

    async def close(self, request: Request) -> None:
        """Release request-scoped resources; awaited once after every request."""
        return None


class PermissionChecker(ABC):
    """Decides whether the current request may run an action."""

    @abstractmethod
    async def check(self, action: str, request: Request) -> None:
        """Return normally to allow; raise to deny (the error text is the message)."""
        ...


class ExceptionHandler(ABC):
    """Writes the terminal response for a failed pipeline stage."""

    @abstractmethod
    async def handle(self, error: Exception, request: Request) -> Response:
        """
        Build the error response. Implementations should honor
        `ViewSetError.status_code` and fall back to 400 for anything else.
        """
        ...
