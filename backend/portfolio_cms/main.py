"""Main FastAPI application."""

import logging
import re
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from . import models  # noqa: F401  registers tables on Base.metadata
from .api import (
    account_router,
    admin_router,
    auth_router,
    block_router,
    menus_router,
    platform_menus_router,
    portfolio_router,
    public_router,
    sections_router,
)
from .core.config import settings, ConfigurationError, Environment
from .core.logging_config import setup_logging
from .core.seeder import seed_platform
from .database import engine, Base, get_db, SessionLocal, DATABASE_URL
from .exceptions import PortfolioError
from .middleware.exception_handler import (
    integrity_error_handler,
    portfolio_exception_handler,
    unhandled_exception_handler,
)
from .middleware.request_context import RequestContextMiddleware
from .services import audit_service

# Setup logging first
setup_logging(log_level=settings.log_level, log_format=settings.log_format)
logger = logging.getLogger(__name__)

_VERSION = "1.0.0"


def _mask_url(url: str) -> str:
    """Mask password in database URL for safe logging."""
    return re.sub(r'://([^:]+):([^@]+)@', r'://\1:***@', url)


def _validate_database_connection() -> None:
    """Test that the database is reachable. Exits with a clear message on failure."""
    masked = _mask_url(DATABASE_URL)
    logger.info(f"Connecting to database: {masked}")
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        hint = (
            "Check that the directory exists and is writable."
            if DATABASE_URL.startswith("sqlite")
            else "Check DATABASE_URL and that the server is running."
        )
        logger.critical(
            f"Database connection failed.\n"
            f"  DATABASE_URL: {masked}\n"
            f"  {hint}\n"
            f"  Error: {e}"
        )
        raise SystemExit(1) from e
    logger.info("Database connection verified")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle for the portfolio CMS API."""
    # --- Security validation ---
    logger.info(f"Environment: {settings.environment.value}")
    try:
        settings.validate_production_config()
    except ConfigurationError as e:
        logger.critical(f"STARTUP BLOCKED: {e}")
        raise SystemExit(1) from e

    if settings.environment == Environment.DEVELOPMENT and settings.uses_default_secret():
        logger.warning(
            "SECURITY: JWT_SECRET_KEY is the default. "
            "Set a secure key before deploying: openssl rand -hex 32"
        )

    # --- Schema ---
    _validate_database_connection()
    Base.metadata.create_all(bind=engine)

    # --- Seed menus, super admin, portfolio menus ---
    db = SessionLocal()
    try:
        seed_platform(db)
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Seeding failed (non-fatal): {e}")
    finally:
        db.close()

    # --- Purge old audit logs ---
    if settings.audit_retention_days > 0:
        db = SessionLocal()
        try:
            purged = audit_service.purge_old_entries(db, settings.audit_retention_days)
            if purged > 0:
                logger.info(f"Purged {purged} audit log entries older than {settings.audit_retention_days} days")
        except SQLAlchemyError as e:
            logger.warning(f"Audit log purge failed (non-fatal): {e}")
        finally:
            db.close()

    yield


app = FastAPI(
    title="Portfolio CMS API",
    description=(
        "Multi-tenant portfolio CMS. Users edit one portfolio each; a super admin "
        "manages the platform menu catalog, reviews publication requests and can "
        "view any portfolio's admin read-only.\n\n"
        "**Authentication:** a session cookie set by `/api/auth/login`, or the returned "
        "token as `Authorization: Bearer`."
    ),
    version=_VERSION,
    lifespan=lifespan,
)

# Middleware stack, outermost first: CORS wraps request context.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)
app.add_middleware(RequestContextMiddleware)

app.add_exception_handler(PortfolioError, portfolio_exception_handler)
app.add_exception_handler(IntegrityError, integrity_error_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.include_router(auth_router)
app.include_router(account_router)
app.include_router(admin_router)
app.include_router(platform_menus_router)
app.include_router(menus_router)
app.include_router(block_router)
app.include_router(portfolio_router)
app.include_router(sections_router)
app.include_router(public_router)

logger.info(
    "Portfolio CMS API started | env=%s | db=%s | cors=%s",
    settings.environment.value,
    "PostgreSQL" if DATABASE_URL.startswith("postgresql") else "SQLite",
    ",".join(settings.get_cors_origins()),
)


@app.get("/")
def root():
    """Root endpoint."""
    return {"name": "Portfolio CMS API", "version": _VERSION, "status": "running"}


_startup_time = time.monotonic()


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Health check returning database status, uptime and portfolio count.

    Never raises; returns degraded status on DB failure so load balancers
    can still probe without receiving 5xx.
    """
    db_status = "ok"
    portfolio_count = 0
    try:
        portfolio_count = db.execute(text("SELECT COUNT(*) FROM portfolios")).scalar() or 0
    except SQLAlchemyError:
        db_status = "error"

    return {
        "status": "healthy" if db_status == "ok" else "degraded",
        "db": db_status,
        "uptime_seconds": round(time.monotonic() - _startup_time),
        "version": _VERSION,
        "portfolio_count": portfolio_count,
    }
