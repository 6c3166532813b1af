"""docbind Example API: a `books` collection exposed through generated handlers.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers answer with failure envelopes
    - CORS configured from settings (not hardcoded)
    - Tables created on startup via lifespan context manager

Design Decisions:
    - create_app() takes an optional session manager so tests can inject an
      in-memory database without touching the module-level app
    - Books are wired through register_resource; any other layout can be built
      from endpoint(resource.<kind>()) directly

Run with:
    uvicorn docbind.main:app --port 3000
"""

import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

import docbind.infrastructure.database as db_module
from docbind.api.adapter import register_resource
from docbind.api.error_handlers import register_error_handlers
from docbind.api.routes import health
from docbind.config import Settings, get_settings
from docbind.infrastructure.database import DatabaseSessionManager
from docbind.infrastructure.observability import setup_logging
from docbind.infrastructure.sql_store import SqlDocumentStore
from docbind.schemas.book import BookSchema
from docbind.services.resource import Resource

logger = logging.getLogger(__name__)


def build_books_resource(db: DatabaseSessionManager, settings: Settings) -> Resource:
    store = SqlDocumentStore(
        db, "books", model_name="Book", schema=BookSchema,
        id_key=settings.id_key, version_key=settings.version_key,
    )
    return Resource(store)


def create_app(
    settings: Settings | None = None, db: DatabaseSessionManager | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    if db is None:
        db = db_module.init_db(
            settings.database_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
        )
    else:
        db_module.db_manager = db

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup/shutdown lifecycle."""
        setup_logging(settings.log_level, settings.log_format)
        await db.create_all()
        logger.info("docbind API started")
        yield
        logger.info("docbind API shutting down")
        await db.dispose()

    app = FastAPI(title="docbind API", version="1.0.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    books = APIRouter(tags=["books"])
    register_resource(books, "/books", build_books_resource(db, settings))

    app.include_router(health.router)
    app.include_router(books)
    register_error_handlers(app)
    return app


app = create_app()
