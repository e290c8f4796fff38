"""Persistence adapters: the SQLAlchemy manager and its pagination."""

from viewset.managers.orm import (
    SQLAlchemyManager,
    default_create,
    default_delete,
    default_update,
)
from viewset.managers.pagination import LimitOffsetPaginator, limit_offset_paginate

__all__ = [
    "LimitOffsetPaginator",
    "SQLAlchemyManager",
    "default_create",
    "default_delete",
    "default_update",
    "limit_offset_paginate",
]
