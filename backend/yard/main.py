"""Container Yard API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map YardError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database and event broadcaster initialized on startup via lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py: main stays a wiring module
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from yard.api.error_handlers import register_error_handlers
from yard.api.routes import containers, events, health, zones
from yard.config import get_settings
from yard.infrastructure import database
from yard.infrastructure.event_broadcaster import init_broadcaster
from yard.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        lock_timeout_ms=settings.lock_timeout_ms,
        contention_retry_after_ms=settings.contention_retry_after_ms,
    )
    init_broadcaster(settings.event_queue_size)
    logger.info("Container Yard API started")
    yield
    logger.info("Container Yard API shutting down")
    await manager.dispose()


app = FastAPI(
    title="Container Yard API",
    version="1.0.0",
    description="Container tracking and storage-zone capacity allocation",
    lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes — explicit registration
app.include_router(health.router)
app.include_router(containers.router)
app.include_router(zones.router)
app.include_router(events.router)

register_error_handlers(app)
