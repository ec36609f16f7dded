"""Somni API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map SomniError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database and services initialized on startup via lifespan context manager
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from somni.api.dependencies import build_services
from somni.api.error_handlers import register_error_handlers
from somni.api.routes import health, sleep_sessions, subjects
from somni.config import get_settings
from somni.infrastructure.database import init_db
from somni.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    db = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    app.state.services = build_services(settings, db)
    logger.info("Somni API started")
    yield
    await app.state.services.sleep_calculator.close()
    await db.dispose()
    logger.info("Somni API shutting down")


app = FastAPI(title="Somni API", version=health.API_VERSION, lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(sleep_sessions.router)
app.include_router(subjects.router)

register_error_handlers(app)
