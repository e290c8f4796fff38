"""
ViewSet: Action Dispatcher
===========================

What:  Turns a declarative resource description into mounted FastAPI routes
       that each run a fixed pipeline.
Why:   List/retrieve/create/update/delete differ only in which collaborators
       they call and which status code a failure maps to. Encoding that once
       keeps every resource consistent.
How:   `ViewSet` is a frozen dataclass. Construction fills in default
       collaborators and builds the route table; `register()` mounts one
       endpoint per route. Each endpoint closes over the (immutable) ViewSet,
       runs the permission check, then the route's action procedure.

Pipeline (per request):

    ┌────────────┐   ┌──────────────────┐   ┌──────────┐   ┌───────────┐
    │ Permission │──▶│ Validate / Fetch │──▶│ Persist  │──▶│ Serialize │
    │  Checker   │   │                  │   │          │   │           │
    └────────────┘   └──────────────────┘   └──────────┘   └───────────┘
         403               400 / 404             400            500

    The first failing stage aborts the request: its error is wrapped in the
    stage's ViewSetError subclass and handed to the ExceptionHandler, which
    writes the response. Nothing downstream runs and nothing is retried.

Stage → status mapping:
    permission check              → 403 PermissionDenied
    get_object                    → 404 NotFound
    validate, save, delete        → 400 ValidationFailed
    get_objects, (many_)serialize → 500 InternalFailure

    The status depends only on the stage: whatever a collaborator raises is
    rewrapped in the stage's class. The single exception is get_objects in
    the list action, which forwards a ViewSetError unchanged so that a
    pagination binding failure answers 400.

Cleanup:
    After every request, whatever the outcome, the endpoint awaits
    `manager.close(request)` so request-scoped resources never outlive it.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Generic, Optional, Sequence, Tuple, Type, Union

from fastapi import APIRouter, FastAPI
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from viewset.exceptions import (
    ImproperlyConfigured,
    InternalFailure,
    NotFound,
    PermissionDenied,
    ValidationFailed,
    ViewSetError,
)
from viewset.handlers import DefaultExceptionHandler
from viewset.interfaces import (
    EntityT,
    ExceptionHandler,
    FormValidator,
    PermissionChecker,
    PersistenceManager,
    Serializer,
    ValidatedT,
)
from viewset.permissions import AllowAny
from viewset.references import ABSENT, Present
from viewset.routing import (
    CREATE_ACTION,
    DELETE_ACTION,
    LIST_ACTION,
    RETRIEVE_ACTION,
    UPDATE_ACTION,
    ActionHandler,
    Route,
    build_routes,
)
from viewset.serializers import DefaultSerializer
from viewset.validators import DefaultValidator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewSet(Generic[EntityT, ValidatedT]):
    """
    A resource mounted under `base_path`.

    Args:
        base_path:          Router prefix, e.g. "/people"
        manager:            PersistenceManager (required)
        detail_path:        Detail sub-path with one placeholder, e.g. "/{pk}"
        exclude_actions:    Standard action names not to mount
        extra_routes:       Custom routes, always mounted
        exception_handler:  Defaults to DefaultExceptionHandler
        permission_checker: Defaults to AllowAny
        serializer:         Defaults to DefaultSerializer()
        form_validator:     Defaults to DefaultValidator(input_schema)
        input_schema:       Pydantic model the default validator binds into
        name:               Route name prefix and OpenAPI tag

    Raises:
        ImproperlyConfigured: `manager` is None. A ViewSet without
            persistence has no valid use, so it is never constructed.

    The instance is frozen once built; endpoints share it by reference.
    """

    base_path: str
    manager: PersistenceManager[EntityT, ValidatedT]
    detail_path: str = "/{pk}"
    exclude_actions: Sequence[str] = ()
    extra_routes: Sequence[Route] = ()
    exception_handler: Optional[ExceptionHandler] = None
    permission_checker: Optional[PermissionChecker] = None
    serializer: Optional[Serializer[EntityT]] = None
    form_validator: Optional[FormValidator[EntityT, ValidatedT]] = None
    input_schema: Optional[Type[BaseModel]] = None
    name: Optional[str] = None
    routes: Tuple[Route, ...] = field(init=False)

    def __post_init__(self) -> None:
        if self.manager is None:
            raise ImproperlyConfigured(f"ViewSet at '{self.base_path}': manager is required")

        # Frozen dataclass: defaults are filled in through object.__setattr__
        # exactly once, here, before any route exists.
        def _set(name: str, value: Any) -> None:
            object.__setattr__(self, name, value)

        if self.exception_handler is None:
            _set("exception_handler", DefaultExceptionHandler())
        if self.permission_checker is None:
            _set("permission_checker", AllowAny())
        if self.serializer is None:
            _set("serializer", DefaultSerializer())
        if self.form_validator is None:
            _set("form_validator", DefaultValidator(self.input_schema))

        _set("exclude_actions", tuple(self.exclude_actions))
        _set("extra_routes", tuple(self.extra_routes))
        _set(
            "routes",
            build_routes(
                self.detail_path,
                self.exclude_actions,
                self.extra_routes,
                STANDARD_HANDLERS,
            ),
        )

    # ── Mounting ──────────────────────────────────────────────────────────

    def register(self, router: Union[FastAPI, APIRouter]) -> APIRouter:
        """Mount every route under `base_path` on `router`; returns the group."""
        group = APIRouter(prefix=self.base_path, tags=[self.name] if self.name else None)
        route_prefix = f"{self.name}-" if self.name else ""
        for route in self.routes:
            group.add_api_route(
                route.sub_path,
                self.bind(route),
                methods=[route.method],
                name=f"{route_prefix}{route.action}",
                response_model=None,
            )
        router.include_router(group)
        logger.info(
            "Mounted %d routes at '%s' (%s)",
            len(self.routes),
            self.base_path,
            ", ".join(f"{r.method} {r.action}" for r in self.routes),
        )
        return group

    def bind(self, route: Route):
        """Return the FastAPI endpoint for one route."""
        viewset = self
        action = route.action
        handler: ActionHandler = route.handler

        async def endpoint(request: Request) -> Response:
            try:
                try:
                    await viewset.permission_checker.check(action, request)
                except Exception as exc:
                    return await viewset.fail(PermissionDenied, exc, request)
                return await handler(action, viewset, request)
            finally:
                await viewset.manager.close(request)

        endpoint.__name__ = f"{action}_{route.method.lower()}"
        return endpoint

    # ── Failure reporting ─────────────────────────────────────────────────

    async def fail(
        self,
        error_cls: Type[ViewSetError],
        exc: Exception,
        request: Request,
        forward: bool = False,
    ) -> Response:
        """
        Wrap `exc` in the failing stage's `error_cls` and let the exception
        handler respond. With `forward=True` a ViewSetError is handed over
        unchanged instead.
        """
        if forward and isinstance(exc, ViewSetError):
            error = exc
        else:
            error = error_cls(str(exc), cause=exc)
        logger.debug(
            "%s %s aborted at %s: %r", request.method, request.url.path, error_cls.__name__, exc
        )
        return await self.exception_handler.handle(error, request)


def render(status_code: int, content: Any) -> Response:
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


# ══════════════════════════════════════════════════════════════════════════
# Action Procedures
# ══════════════════════════════════════════════════════════════════════════


async def list_objects(action: str, viewset: ViewSet, request: Request) -> Response:
    """
    get_objects failures are 500, except a ViewSetError raised by the
    manager, which is forwarded as is: pagination binding errors surface
    from here as ValidationFailed (400).
    """
    try:
        entities, meta = await viewset.manager.get_objects(request)
    except Exception as exc:
        return await viewset.fail(InternalFailure, exc, request, forward=True)

    try:
        results = await viewset.serializer.many_serialize(entities, request)
    except Exception as exc:
        return await viewset.fail(InternalFailure, exc, request)

    return render(200, {"meta": meta, "results": results})


async def retrieve_object(action: str, viewset: ViewSet, request: Request) -> Response:
    try:
        entity = await viewset.manager.get_object(request)
    except Exception as exc:
        return await viewset.fail(NotFound, exc, request)

    try:
        data = await viewset.serializer.serialize(entity, request)
    except Exception as exc:
        return await viewset.fail(InternalFailure, exc, request)

    return render(200, data)


async def create_object(action: str, viewset: ViewSet, request: Request) -> Response:
    ref = ABSENT

    try:
        validated = await viewset.form_validator.validate(ref, request)
    except Exception as exc:
        return await viewset.fail(ValidationFailed, exc, request)

    try:
        entity = await viewset.manager.save(ref, validated, request)
    except Exception as exc:
        return await viewset.fail(ValidationFailed, exc, request)

    try:
        data = await viewset.serializer.serialize(entity, request)
    except Exception as exc:
        return await viewset.fail(InternalFailure, exc, request)

    return render(201, data)


async def update_object(action: str, viewset: ViewSet, request: Request) -> Response:
    """Shared by PUT and PATCH."""
    try:
        entity = await viewset.manager.get_object(request)
    except Exception as exc:
        return await viewset.fail(NotFound, exc, request)

    ref = Present(entity)

    try:
        validated = await viewset.form_validator.validate(ref, request)
    except Exception as exc:
        return await viewset.fail(ValidationFailed, exc, request)

    try:
        entity = await viewset.manager.save(ref, validated, request)
    except Exception as exc:
        return await viewset.fail(ValidationFailed, exc, request)

    try:
        data = await viewset.serializer.serialize(entity, request)
    except Exception as exc:
        return await viewset.fail(InternalFailure, exc, request)

    return render(200, data)


async def delete_object(action: str, viewset: ViewSet, request: Request) -> Response:
    try:
        entity = await viewset.manager.get_object(request)
    except Exception as exc:
        return await viewset.fail(NotFound, exc, request)

    try:
        await viewset.manager.delete(entity, request)
    except Exception as exc:
        return await viewset.fail(ValidationFailed, exc, request)

    return Response(status_code=204)


STANDARD_HANDLERS = {
    LIST_ACTION: list_objects,
    RETRIEVE_ACTION: retrieve_object,
    CREATE_ACTION: create_object,
    UPDATE_ACTION: update_object,
    DELETE_ACTION: delete_object,
}
