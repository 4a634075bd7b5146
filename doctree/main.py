"""Main FastAPI application."""

import logging
import re
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import __version__
from .api import activity_router, nodes_router, tags_router, version_router, versions_router
from .core.config import ConfigurationError, Environment, settings
from .core.logging_config import setup_logging
from .database import DATABASE_URL, get_db, init_db, is_postgresql
from .exceptions import DocTreeException
from .middleware.exception_handler import doctree_exception_handler
from .middleware.request_context import RequestContextMiddleware

# Setup logging first
setup_logging(log_level=settings.log_level, log_format=settings.log_format)
logger = logging.getLogger(__name__)


def _mask_url(url: str) -> str:
    """Mask password in database URL for safe logging."""
    return re.sub(r'://([^:]+):([^@]+)@', r'://\1:***@', url)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle for the DocTree API."""
    # --- Security validation ---
    logger.info(f"Environment: {settings.environment.value}")
    try:
        settings.validate_production_config()
    except ConfigurationError as e:
        logger.critical(f"STARTUP BLOCKED: {e}")
        raise SystemExit(1) from e

    if settings.environment == Environment.DEVELOPMENT:
        for problem in settings.insecure_settings():
            logger.warning(f"SECURITY: {problem}")

    # --- Schema ---
    logger.info(f"Connecting to database: {_mask_url(DATABASE_URL)}")
    try:
        init_db()
    except SQLAlchemyError as e:
        logger.critical(f"Database initialisation failed: {e}")
        raise SystemExit(1) from e

    logger.info(
        "DocTree API started | env=%s | db=%s | auth=%s",
        settings.environment.value,
        "PostgreSQL" if is_postgresql() else "SQLite",
        "enabled" if settings.auth_enabled else "disabled",
    )

    yield  # App runs here


# Create FastAPI app
app = FastAPI(
    title="DocTree API",
    description=(
        "REST API for a hierarchical folder/document tree with personal and "
        "organization scopes, manual sibling ordering, soft deletion and "
        "batched content versioning.\n\n"
        "**Authentication:** When `AUTH_ENABLED=true`, the acting user is read "
        "from a `Bearer` token. Queries without a token return empty results; "
        "mutations answer 401. When `AUTH_ENABLED=false` (default), every "
        "request acts as a development user."
    ),
    version=__version__,
    lifespan=lifespan,
)

# Middleware stack (outermost first; CORS wraps request context).
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)
app.add_middleware(RequestContextMiddleware)

# Register exception handlers
app.add_exception_handler(DocTreeException, doctree_exception_handler)

# Include routers
app.include_router(nodes_router)
app.include_router(versions_router)
app.include_router(version_router)
app.include_router(tags_router)
app.include_router(activity_router)


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "name": "DocTree API",
        "version": __version__,
        "status": "running"
    }


_startup_time = time.monotonic()


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Health check endpoint returning database status, uptime, and node count.

    Never raises. Returns degraded status on DB failure so load balancers
    can still probe without receiving 5xx.
    """
    db_status = "ok"
    node_count = 0
    try:
        row = db.execute(text("SELECT COUNT(*) FROM nodes WHERE is_deleted = :deleted"), {"deleted": False}).scalar()
        node_count = row or 0
    except SQLAlchemyError:
        db_status = "error"

    return {
        "status": "healthy" if db_status == "ok" else "degraded",
        "db": db_status,
        "uptime_seconds": round(time.monotonic() - _startup_time),
        "version": __version__,
        "node_count": node_count,
    }
