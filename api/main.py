"""Library API: FastAPI entry point.

Registers middleware, exception handlers, routers, and lifecycle hooks.
The overdue-loan notifier is started with the app and stopped on shutdown.
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.errors import register_exception_handlers
from api.middleware import RequestLoggingMiddleware, get_request_id
from core.database import close_db, init_db
from core.observability.logging_setup import setup_logging
from verticals.library.config import get_config
from verticals.library.notifier import build_overdue_job

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS", "http://localhost:3000,http://localhost:3001"
).split(",")
CREATE_TABLES = os.getenv("DB_CREATE_TABLES", "false").lower() == "true"
VERSION = "0.1.0"


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup/shutdown hooks."""
    setup_logging(get_request_id=get_request_id)
    config = get_config()

    if CREATE_TABLES:
        await init_db()

    job = None
    if config.notifier.enabled:
        job = build_overdue_job(config)
        job.start()
    app.state.overdue_job = job

    logger.info("Library API started")
    try:
        yield
    finally:
        if job is not None:
            await job.stop()
        await close_db()
        logger.info("Library API shutting down")


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Library API",
    description="Books, loans, and overdue loan reminders",
    version=VERSION,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request id + access log
app.add_middleware(RequestLoggingMiddleware)

register_exception_handlers(app)

# ---------------------------------------------------------------------------
# Routers: verticals register here
# ---------------------------------------------------------------------------

from verticals.library.router import router as library_router  # noqa: E402

app.include_router(library_router, prefix="/api")


# ---------------------------------------------------------------------------
# Health & root
# ---------------------------------------------------------------------------

@app.get("/health")
async def health():
    return {"status": "healthy", "version": VERSION}


@app.get("/")
async def root():
    return {
        "name": "Library API",
        "version": VERSION,
        "docs": "/docs",
        "verticals": ["library"],
    }
