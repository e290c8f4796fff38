"""
ViewSet: Database Engine & Session Factory
===========================================

What:  Async SQLAlchemy engine, session factory and declarative base for the
       default persistence adapter and the demo application.
Why:   SQLAlchemyManager needs a session factory; keeping the engine here lets
       the app lifespan create tables and dispose the pool in one place.
How:   The engine is created from settings at import time. Sessions are NOT
       opened here: the manager opens one lazily per request and caches it on
       request.state, and closes it when the ViewSet endpoint returns.

Session settings:
    expire_on_commit=False: entities stay readable after save() commits, so
    the serializer can read them without lazy-loading (which fails outside
    a greenlet-aware context under asyncio).
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from viewset.config import settings


# ── Engine Configuration ──────────────────────────────────────────────────
engine = create_async_engine(
    settings.database_url,
    pool_pre_ping=settings.db_pool_pre_ping,
    # SQL echo only in DEBUG; it is very noisy otherwise
    echo=settings.log_level == "DEBUG",
)


def make_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory with the settings every manager session relies on."""
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


async_session_factory = make_session_factory(engine)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """Base class for the ORM models resources are built on."""

    pass


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def create_tables(bind: AsyncEngine) -> None:
    """Create every table registered on Base.metadata (idempotent)."""
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine(bind: AsyncEngine = engine) -> None:
    """Close all pooled connections; called on application shutdown."""
    await bind.dispose()
