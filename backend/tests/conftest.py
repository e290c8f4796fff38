"""
ViewSet: Test Configuration (conftest.py)
==========================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Provides reusable test infrastructure (in-memory store, in-memory
       SQLite engine, raw requests, API clients).
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── store:           InMemoryPersonManager, a PersistenceManager double
    ├── engine:          aiosqlite in-memory engine with the tables created
    ├── session_factory: async_sessionmaker bound to `engine`
    ├── make_request:    builds a bare starlette Request (no server needed)
    ├── mount:           mounts ViewSets on a fresh app, returns an AsyncClient
    └── test_client:     AsyncClient for the demo app in viewset.main
"""

import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

# Override settings for testing BEFORE any viewset imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests
os.environ["DEFAULT_PAGE_LIMIT"] = "20"

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool
from starlette.requests import Request

from viewset import ObjectDoesNotExist, PersistenceManager
from viewset.database import create_tables, make_session_factory
from viewset.middleware.db_session import DBSessionMiddleware
from viewset.references import Absent, EntityRef, Present


# ══════════════════════════════════════════════════════════════════════════
# Test Doubles
# ══════════════════════════════════════════════════════════════════════════

@dataclass
class PersonRecord:
    id: int
    name: str
    age: int


class InMemoryPersonManager(PersistenceManager[PersonRecord, Any]):
    """
    List-backed PersistenceManager; every call is recorded in `calls`.

    Validated input may be a pydantic model or a plain dict.
    """

    def __init__(self, records: Optional[List[PersonRecord]] = None):
        self.records: List[PersonRecord] = list(records or [])
        self.counter = max((r.id for r in self.records), default=0)
        self.calls: List[str] = []

    @staticmethod
    def _fields(validated: Any) -> Dict[str, Any]:
        if isinstance(validated, BaseModel):
            return validated.model_dump(exclude_unset=True)
        return dict(validated)

    async def get_object(self, request: Request) -> PersonRecord:
        self.calls.append("get_object")
        lookup = request.path_params.get("pk")
        for record in self.records:
            if str(record.id) == lookup:
                return record
        raise ObjectDoesNotExist("Object not found")

    async def get_objects(self, request: Request) -> Tuple[List[PersonRecord], Dict[str, Any]]:
        self.calls.append("get_objects")
        return list(self.records), {"count": len(self.records)}

    async def save(self, ref: EntityRef, validated: Any, request: Request) -> PersonRecord:
        self.calls.append("save")
        fields = self._fields(validated)
        if isinstance(ref, Absent):
            self.counter += 1
            record = PersonRecord(id=self.counter, **fields)
            self.records.append(record)
            return record
        if isinstance(ref, Present):
            for key, value in fields.items():
                setattr(ref.entity, key, value)
            return ref.entity
        raise TypeError("unexpected reference")

    async def delete(self, entity: PersonRecord, request: Request) -> None:
        self.calls.append("delete")
        self.records.remove(entity)


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def store():
    """An empty in-memory person store."""
    return InMemoryPersonManager()


@pytest_asyncio.fixture
async def engine():
    """
    Provides an in-memory SQLite engine with every table created.

    StaticPool keeps a single connection, so all sessions see the same
    in-memory database for the lifetime of the test.
    """
    bind = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_tables(bind)
    yield bind
    await bind.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def make_request():
    """
    Builds a starlette Request from an ASGI scope.

    Usage:
        request = make_request("/people/", query_string="limit=2&offset=0")
        request = make_request("/people/3", path_params={"pk": "3"})
    """

    def _make(
        path: str = "/people/",
        query_string: str = "",
        path_params: Optional[Dict[str, Any]] = None,
        method: str = "GET",
        headers: Optional[List[Tuple[bytes, bytes]]] = None,
    ) -> Request:
        scope = {
            "type": "http",
            "http_version": "1.1",
            "method": method,
            "scheme": "http",
            "server": ("test", 80),
            "root_path": "",
            "path": path,
            "raw_path": path.encode(),
            "query_string": query_string.encode(),
            "headers": headers or [],
            "path_params": path_params or {},
        }
        return Request(scope)

    return _make


@pytest_asyncio.fixture
async def mount():
    """
    Mounts ViewSets on a fresh FastAPI app and returns an AsyncClient for it.

    Usage:
        client = await mount(ViewSet("/people", store))
        response = await client.get("/people/")
    """
    clients: List[AsyncClient] = []

    async def _mount(*viewsets) -> AsyncClient:
        app = FastAPI()
        app.add_middleware(DBSessionMiddleware)
        for viewset in viewsets:
            viewset.register(app)
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        clients.append(client)
        return client

    yield _mount

    for client in clients:
        await client.aclose()


@pytest_asyncio.fixture
async def test_client(engine):
    """
    Provides an async HTTP client for the demo application.

    The app is built on the test engine; ASGITransport does not run the
    lifespan, so the `engine` fixture has already created the tables.
    """
    from viewset.main import create_app

    app = create_app(engine=engine)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
