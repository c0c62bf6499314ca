"""
Apex Back-Office API — Application entry-point.

Initializes the FastAPI application, registers middleware, exception handlers,
routers, and manages the application lifecycle (DB table creation on startup).
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.openapi.docs import get_redoc_html
from sqlalchemy import text
from sqlmodel import SQLModel

import apex_backoffice.models  # noqa: F401  (registers every table on SQLModel.metadata)
from apex_backoffice.api.v1.api import api_router
from apex_backoffice.core.cache import cache
from apex_backoffice.core.config import settings
from apex_backoffice.core.exceptions import add_exception_handlers
from apex_backoffice.core.logging import setup_logging
from apex_backoffice.core.resilience import CONNECTION_ERRORS, db_circuit_breaker, wait_for_database
from apex_backoffice.db.session import AsyncSessionLocal, engine
from apex_backoffice.middleware import RequestIDMiddleware, RequestTimingMiddleware

# ── Initialise production logging (rotating files + JSON structured) ──
setup_logging()
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


async def create_tables() -> None:
    """Create any missing tables."""
    logger.info("Connecting to database…")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Database tables ready")


# ────────────────────────────────────────────────────────────────────────────
# Application lifespan
# ────────────────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Manages startup / shutdown lifecycle events.

    Startup:
      - Creates tables, retrying with exponential backoff.
      - If the database is still unreachable the app starts in degraded
        mode (health check reports ``database: false``).

    Shutdown:
      - Disposes of the connection pool to release DB connections cleanly.
    """
    try:
        await wait_for_database(create_tables, attempts=5, base_delay=2.0, max_delay=30.0)
    except CONNECTION_ERRORS as exc:
        logger.error(
            "Could not connect to database. The application will start in "
            "DEGRADED mode; database-dependent endpoints will fail until it "
            "becomes available. Last error: %s",
            exc,
        )

    yield

    logger.info("Shutting down — disposing connection pool")
    await engine.dispose()


# ────────────────────────────────────────────────────────────────────────────
# FastAPI application instance
# ────────────────────────────────────────────────────────────────────────────

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=API_VERSION,
    description=(
        "Back-office API for Apex: an investor ledger (deposits, withdrawals "
        "and ROI-adjusted balances) plus insurance clients, policy renewals "
        "and ferry bookings."
    ),
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    redoc_url=None,  # Disabled default — custom route below uses a working CDN
    lifespan=lifespan,
)


# ── Custom ReDoc route — default cdn.redoc.ly is blocked by Chrome ORB ──
@app.get("/redoc", include_in_schema=False)
async def custom_redoc_html():
    """Serve ReDoc using the unpkg CDN which has proper CORS headers."""
    return get_redoc_html(
        openapi_url=app.openapi_url or f"{settings.API_V1_STR}/openapi.json",
        title=f"{settings.PROJECT_NAME} — ReDoc",
        redoc_js_url="https://unpkg.com/redoc@latest/bundles/redoc.standalone.js",
    )


# ── Middleware (order matters: outermost = first to execute) ──
app.add_middleware(GZipMiddleware, minimum_size=500)

# Request ID: injects/propagates X-Request-ID and binds it to log records
app.add_middleware(RequestIDMiddleware)

# Request timing: logs duration and adds X-Process-Time header
app.add_middleware(RequestTimingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Global error handlers ──
add_exception_handlers(app)

# ── API routers ──
app.include_router(api_router, prefix=settings.API_V1_STR)


# ── Health check ──


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Liveness / readiness probe with database connectivity check.

    Runs ``SELECT 1`` against the database and reports circuit breaker
    state and cache statistics.
    """
    db_healthy = True
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
    except Exception as exc:
        logger.warning("Health check could not reach the database: %s", exc)
        db_healthy = False

    return {
        "status": "ok" if db_healthy else "degraded",
        "version": API_VERSION,
        "database": db_healthy,
        "circuit_breaker": db_circuit_breaker.snapshot(),
        "cache": cache.describe(),
    }
