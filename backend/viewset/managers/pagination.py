"""
ViewSet: Limit-Offset Pagination
=================================

What:  The default list window for SQLAlchemyManager.get_objects().
Why:   Offset windows map directly onto LIMIT/OFFSET, need no cursor column,
       and give clients ready-made next/previous links.
How:   The window is bound from the query string, then:

       1. withCount=true → SELECT count(*) over the scoped statement → meta["count"]
       2. fetch LIMIT L+1 OFFSET O (one extra row answers "is there a next
          page?" without a second round trip)
       3. keep at most L rows
       4. meta["next"]     = current URL with offset=O+L,         or None
       5. meta["previous"] = current URL with offset=max(0, O-L), or None when O == 0

Query parameters:
    limit      rows per page, 0..MAX_WINDOW_VALUE, default settings.default_page_limit (20)
    offset     rows to skip, 0..MAX_WINDOW_VALUE, default 0
    withCount  include the total row count, default false

Binding errors (negative, non-numeric or out-of-range values) raise
ValidationFailed (400) before the database is touched.
"""

from typing import Any, Awaitable, Callable, Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import Request

from viewset.config import settings
from viewset.exceptions import ValidationFailed

# LIMIT L+1 must still fit a signed 64-bit SQL integer
MAX_WINDOW_VALUE = 2**63 - 2

PaginateFunc = Callable[
    [Select, AsyncSession, Request], Awaitable[Tuple[List[Any], Dict[str, Any]]]
]


class LimitOffsetPaginator(BaseModel):
    """The per-request pagination window."""

    model_config = ConfigDict(extra="ignore")

    limit: int = Field(
        default_factory=lambda: settings.default_page_limit, ge=0, le=MAX_WINDOW_VALUE
    )
    offset: int = Field(default=0, ge=0, le=MAX_WINDOW_VALUE)
    with_count: bool = Field(default=False, alias="withCount")

    @classmethod
    def from_request(cls, request: Request) -> "LimitOffsetPaginator":
        try:
            return cls.model_validate(dict(request.query_params))
        except PydanticValidationError as exc:
            details = "; ".join(
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                for error in exc.errors()
            )
            raise ValidationFailed(
                f"Invalid pagination parameters: {details}",
                cause=exc,
                context={"query": str(request.query_params)},
            ) from exc


def replace_offset(request: Request, offset: int) -> str:
    """The current request URL with its `offset` query parameter set to `offset`."""
    return str(request.url.include_query_params(offset=offset))


async def limit_offset_paginate(
    statement: Select, session: AsyncSession, request: Request
) -> Tuple[List[Any], Dict[str, Any]]:
    """Run one limit-offset window over `statement`; returns (entities, meta)."""
    window = LimitOffsetPaginator.from_request(request)
    limit, offset = window.limit, window.offset
    meta: Dict[str, Any] = {}

    if window.with_count:
        count_statement = select(func.count()).select_from(
            statement.order_by(None).subquery()
        )
        meta["count"] = (await session.execute(count_statement)).scalar_one()

    result = await session.execute(statement.limit(limit + 1).offset(offset))

    entities: List[Any] = []
    fetched = 0
    for entity in result.scalars():
        fetched += 1
        if fetched > limit:
            break
        entities.append(entity)

    meta["next"] = replace_offset(request, offset + limit) if fetched > limit else None
    meta["previous"] = replace_offset(request, max(0, offset - limit)) if offset > 0 else None
    return entities, meta
