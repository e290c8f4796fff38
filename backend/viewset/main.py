"""
ViewSet: Demo Application Factory
==================================

What:  Builds a FastAPI application that mounts one ViewSet resource
       (`/people`) on the default SQLAlchemy adapter.
Why:   Shows the whole stack wired together: settings, logging, middleware,
       request-scoped sessions and the action pipeline.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
       Tests pass their own engine; `uvicorn viewset.main:app` uses the one
       built from settings.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────────┐ ┌─────────────────┐  │
    │  │ Req ID   │→│  Logging     │→│  DB Session     │  │
    │  └──────────┘ └──────────────┘ └─────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌────────────────────────────┐ ┌────────────────┐  │
    │  │ /people  (ViewSet, CRUD)   │ │ GET /health    │  │
    │  └────────────────────────────┘ └────────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ ViewSetError→own status │ Exception→500      │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, then create_all on the app's engine
    Shutdown: dispose the engine's pool
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine

from viewset import DefaultSerializer, ViewSet, ViewSetError, __version__
from viewset.config import settings
from viewset.context import request_id_var
from viewset.database import create_tables, dispose_engine, engine as default_engine
from viewset.database import make_session_factory
from viewset.managers import SQLAlchemyManager
from viewset.middleware.db_session import DBSessionMiddleware
from viewset.middleware.logging import RequestLoggingMiddleware
from viewset.middleware.request_id import RequestIDMiddleware
from viewset.models import Person
from viewset.routes import health
from viewset.schemas import PersonLookup, PersonRequest, PersonResponse

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure root logging for the application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s

    Level comes from settings.log_level. Output goes to stdout so container
    runtimes capture it.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries log every operation at DEBUG/INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    bind: AsyncEngine = app.state.engine
    logger.info("ViewSet demo %s starting up (database: %s)", __version__, bind.url)

    await create_tables(bind)
    logger.info("Tables ready")

    yield

    logger.info("Shutting down...")
    await dispose_engine(bind)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Last-resort handlers for errors raised outside a ViewSet pipeline.

    ViewSet endpoints answer their own failures through the configured
    ExceptionHandler. These handlers cover custom routes and middleware:
        ViewSetError → its own status code
        Exception    → 500, generic message; traceback logged server-side only
    """

    @app.exception_handler(ViewSetError)
    async def handle_viewset_error(request: Request, exc: ViewSetError):
        rid = request_id_var.get("")
        logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"message": "An unexpected error occurred."},
        )


# ══════════════════════════════════════════════════════════════════════════
# Resources
# ══════════════════════════════════════════════════════════════════════════

def people_viewset(bind: AsyncEngine) -> ViewSet:
    """The `/people` resource: full CRUD over the Person table."""
    manager = SQLAlchemyManager(
        Person,
        make_session_factory(bind),
        lookup_model=PersonLookup,
    )
    return ViewSet(
        "/people",
        manager,
        input_schema=PersonRequest,
        serializer=DefaultSerializer(schema=PersonResponse),
        name="people",
    )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(engine: Optional[AsyncEngine] = None) -> FastAPI:
    """
    Create and configure the demo application.

    Args:
        engine: Database engine for the app; defaults to the one built from
                settings.database_url.
    """
    bind = engine if engine is not None else default_engine

    app = FastAPI(
        title="ViewSet Demo API",
        description="Declarative CRUD resources mounted from ViewSet descriptions.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.engine = bind

    # Last added runs first: RequestID → Logging → DBSession → route
    app.add_middleware(DBSessionMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    people_viewset(bind).register(app)

    return app


app = create_app()
