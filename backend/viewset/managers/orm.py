"""
ViewSet: SQLAlchemy Persistence Manager
========================================

What:  The default PersistenceManager, backed by an async SQLAlchemy model.
Why:   Most resources are "one mapped table, optionally filtered per request".
       This adapter covers that case; each step (pagination, create, update,
       delete) can still be swapped with a plain async function.
How:   - One AsyncSession per request, created lazily and cached on
         request.state; close() ends it once the endpoint returns
       - Scope generators are called on every request and composed onto
         select(model); they may depend on per-request auth state, so the
         composed statement is never cached
       - save() branches strictly on the entity reference:
         Absent → create_func, Present → update_func

Request flow for PUT /people/3:

    get_object ──▶ get_session (new, cached)  ──▶ SELECT ... WHERE id = 3
    save       ──▶ get_session (cached)       ──▶ UPDATE ... ; COMMIT
    close      ──▶ session.close()            ──▶ connection back to the pool
"""

import logging
from collections.abc import Mapping
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple, Type

from pydantic import BaseModel
from sqlalchemy import Select, inspect as sa_inspect, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.requests import Request

from viewset.config import settings
from viewset.database import async_session_factory
from viewset.exceptions import ObjectDoesNotExist
from viewset.interfaces import EntityT, PersistenceManager, ValidatedT
from viewset.managers.pagination import PaginateFunc, limit_offset_paginate
from viewset.references import Absent, EntityRef, Present
from viewset.serializers import reflect_fields

logger = logging.getLogger(__name__)

ScopeGenerator = Callable[[Request], Callable[[Select], Select]]
CreateFunc = Callable[[Type[Any], Any, AsyncSession, Request], Awaitable[Any]]
UpdateFunc = Callable[[Any, Any, AsyncSession, Request], Awaitable[Any]]
DeleteFunc = Callable[[Any, AsyncSession, Request], Awaitable[None]]


# ══════════════════════════════════════════════════════════════════════════
# Default write functions
# ══════════════════════════════════════════════════════════════════════════


def as_field_mapping(model: Type[Any], validated: Any, partial: bool = False) -> Dict[str, Any]:
    """
    Decode validated input into {attribute: value} for `model`.

    partial=True keeps only the fields the client actually sent (pydantic
    `exclude_unset`), which is what an in-place update applies. Keys that are
    not mapped attributes of `model` are dropped.
    """
    if isinstance(validated, BaseModel):
        data = validated.model_dump(exclude_unset=partial)
    elif isinstance(validated, Mapping):
        data = dict(validated)
    else:
        data = reflect_fields(validated)

    mapped = sa_inspect(model).attrs.keys()
    return {key: value for key, value in data.items() if key in mapped}


async def default_create(
    model: Type[Any], validated: Any, session: AsyncSession, request: Request
) -> Any:
    entity = model(**as_field_mapping(model, validated))
    session.add(entity)
    try:
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    await session.refresh(entity)
    return entity


async def default_update(
    entity: Any, validated: Any, session: AsyncSession, request: Request
) -> Any:
    changes = as_field_mapping(type(entity), validated, partial=True)
    for key, value in changes.items():
        setattr(entity, key, value)
    try:
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    await session.refresh(entity)
    return entity


async def default_delete(entity: Any, session: AsyncSession, request: Request) -> None:
    await session.delete(entity)
    try:
        await session.commit()
    except Exception:
        await session.rollback()
        raise


# ══════════════════════════════════════════════════════════════════════════
# Manager
# ══════════════════════════════════════════════════════════════════════════


class SQLAlchemyManager(PersistenceManager[EntityT, ValidatedT]):
    """
    PersistenceManager for one mapped model class.

    Args:
        model:            The mapped class (subclass of viewset.database.Base)
        session_factory:  Where request sessions come from
        scope_generators: Per-request statement filters (tenant, soft delete...)
        lookup_model:     Pydantic model that decodes path params into column
                          filters; field names are attributes, aliases are
                          path param names. None → "pk" maps to the primary
                          key, other params map to same-named columns
        ordering:         ORDER BY clauses; None → primary key
        paginate_func:    Defaults to limit_offset_paginate
        create_func / update_func / delete_func: Default write functions above
        state_key:        request.state attribute the session is cached under
    """

    def __init__(
        self,
        model: Type[EntityT],
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
        *,
        scope_generators: Sequence[ScopeGenerator] = (),
        lookup_model: Optional[Type[BaseModel]] = None,
        ordering: Optional[Sequence[Any]] = None,
        paginate_func: Optional[PaginateFunc] = None,
        create_func: Optional[CreateFunc] = None,
        update_func: Optional[UpdateFunc] = None,
        delete_func: Optional[DeleteFunc] = None,
        state_key: Optional[str] = None,
    ):
        self.model = model
        self.session_factory = session_factory or async_session_factory
        self.scope_generators = tuple(scope_generators)
        self.lookup_model = lookup_model
        self.ordering = tuple(ordering) if ordering is not None else tuple(
            sa_inspect(model).primary_key
        )
        self.paginate_func = paginate_func or limit_offset_paginate
        self.create_func = create_func or default_create
        self.update_func = update_func or default_update
        self.delete_func = delete_func or default_delete
        self.state_key = state_key or settings.db_session_state_key

    # ── Request-scoped plumbing ───────────────────────────────────────────

    def new_session(self, request: Request) -> AsyncSession:
        session = self.session_factory()
        setattr(request.state, self.state_key, session)
        return session

    def get_session(self, request: Request) -> AsyncSession:
        """The session cached for this request, created on first use."""
        session = getattr(request.state, self.state_key, None)
        if not isinstance(session, AsyncSession):
            return self.new_session(request)
        return session

    def get_queryset(self, request: Request) -> Select:
        statement = select(self.model)
        for generate in self.scope_generators:
            statement = generate(request)(statement)
        return statement.order_by(*self.ordering)

    def lookup_filters(self, request: Request) -> Dict[str, Any]:
        """Decode path parameters into {attribute: value} filters."""
        params = dict(request.path_params)
        if self.lookup_model is not None:
            return self.lookup_model.model_validate(params).model_dump()

        mapper = sa_inspect(self.model)
        filters: Dict[str, Any] = {}
        for name, raw in params.items():
            column = mapper.primary_key[0] if name == "pk" else mapper.columns[name]
            key = mapper.get_property_by_column(column).key
            filters[key] = column.type.python_type(raw)
        return filters

    # ── PersistenceManager ────────────────────────────────────────────────

    async def get_object(self, request: Request) -> EntityT:
        filters = self.lookup_filters(request)
        session = self.get_session(request)
        result = await session.execute(self.get_queryset(request).filter_by(**filters).limit(1))
        entity = result.scalars().first()
        if entity is None:
            raise ObjectDoesNotExist("Object not found")
        return entity

    async def get_objects(self, request: Request) -> Tuple[List[EntityT], Dict[str, Any]]:
        session = self.get_session(request)
        return await self.paginate_func(self.get_queryset(request), session, request)

    async def save(self, ref: EntityRef, validated: ValidatedT, request: Request) -> EntityT:
        session = self.get_session(request)
        if isinstance(ref, Absent):
            entity = await self.create_func(self.model, validated, session, request)
            logger.info("Created %s", self.model.__name__)
            return entity
        if isinstance(ref, Present):
            entity = await self.update_func(ref.entity, validated, session, request)
            logger.info("Updated %s", self.model.__name__)
            return entity
        raise TypeError(f"save() expects Absent or Present, got {type(ref).__name__}")

    async def delete(self, entity: EntityT, request: Request) -> None:
        session = self.get_session(request)
        await self.delete_func(entity, session, request)
        logger.info("Deleted %s", self.model.__name__)

    async def close(self, request: Request) -> None:
        """Close the request's cached session, if one was opened."""
        session = getattr(request.state, self.state_key, None)
        if isinstance(session, AsyncSession):
            delattr(request.state, self.state_key)
            await session.close()
