"""Book Catalog API — FastAPI application factory and entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map BookCatalogError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Store client created in the lifespan, kept on app.state, closed on shutdown
    - Startup aborts (process exits) when the database is unreachable

Design Decisions:
    - create_app(settings): configuration assembled once and passed in; tests
      build their own app with their own settings
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from book_catalog.api.error_handlers import register_error_handlers
from book_catalog.api.routes import books, health
from book_catalog.config import Settings, get_settings
from book_catalog.core.errors import DatabaseError
from book_catalog.infrastructure.database import DatabaseSessionManager
from book_catalog.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings: Settings = app.state.settings
    setup_logging(settings.log_level, settings.log_format)
    db_manager = DatabaseSessionManager(
        settings.effective_database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    try:
        await db_manager.connect(create_tables=settings.database_create_tables)
    except DatabaseError:
        await db_manager.close()
        logger.critical("Book Catalog API cannot start: database unavailable")
        raise
    app.state.db_manager = db_manager
    logger.info("Book Catalog API started")
    yield
    logger.info("Book Catalog API shutting down")
    await db_manager.close()
    app.state.db_manager = None


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI application for the given settings."""
    settings = settings or get_settings()
    app = FastAPI(
        title="Book Catalog API", version=health.SERVICE_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.db_manager = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(books.router)

    register_error_handlers(app)
    return app


app = create_app()
