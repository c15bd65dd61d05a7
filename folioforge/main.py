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
from .api import drafts_router, portfolios_router
from .core.config import settings, ConfigurationError, Environment
from .core.logging_config import setup_logging
from .database import engine, Base, get_db, DATABASE_URL, is_sqlite
from .exceptions import FolioException
from .generation import ContinuationOrchestrator, LiteLLMTextGenerator
from .middleware.exception_handler import folio_exception_handler
from .middleware.request_context import RequestContextMiddleware

# Setup logging first
setup_logging(log_level=settings.log_level, log_format=settings.log_format)
logger = logging.getLogger(__name__)


def _mask_url(url: str) -> str:
    """Mask password in database URL for safe logging."""
    return re.sub(r'://([^:]+):([^@]+)@', r'://\1:***@', url)


def build_orchestrator() -> ContinuationOrchestrator | None:
    """Construct the generation pipeline from settings, or None when disabled."""
    if not settings.is_generation_configured():
        return None
    generator = LiteLLMTextGenerator(
        model=settings.generation_model,
        api_key=settings.generation_api_key,
        api_base=settings.generation_api_base,
        timeout=settings.generation_timeout,
        failure_threshold=settings.circuit_failure_threshold,
        cooldown_seconds=settings.circuit_cooldown_seconds,
    )
    return ContinuationOrchestrator(
        generator,
        max_attempts=settings.continuation_max_attempts,
        retry_delay=settings.continuation_retry_delay,
        max_tokens=settings.generation_max_tokens,
        temperature=settings.generation_temperature,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle for the FolioForge API."""
    # --- Configuration validation ---
    logger.info(f"Environment: {settings.environment.value}")
    try:
        settings.validate_production_config()
    except ConfigurationError as e:
        logger.critical(f"STARTUP BLOCKED: {e}")
        raise SystemExit(1) from e

    if settings.environment == Environment.DEVELOPMENT:
        if not settings.generation_api_key:
            logger.warning(
                "GENERATION_API_KEY is empty. LiteLLM will fall back to the "
                "provider's own environment variable (e.g. ANTHROPIC_API_KEY)."
            )
        origins = settings.get_cors_origins()
        localhost_origins = [o for o in origins if "localhost" in o or "127.0.0.1" in o]
        if localhost_origins:
            logger.warning(
                "CORS allows localhost origins: %s. Remove these for production.",
                localhost_origins,
            )

    # --- Database ---
    logger.info(f"Connecting to database: {_mask_url(DATABASE_URL)}")
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        logger.critical(
            f"Database initialisation failed.\n"
            f"  DATABASE_URL: {_mask_url(DATABASE_URL)}\n"
            f"  Error: {e}"
        )
        raise SystemExit(1) from e

    # --- Generation pipeline ---
    app.state.orchestrator = build_orchestrator()
    if app.state.orchestrator is None:
        logger.warning("GENERATION_MODEL is empty. Generation endpoints will return 503.")

    logger.info(
        "FolioForge API started | env=%s | db=%s | model=%s | max_attempts=%d",
        settings.environment.value,
        "SQLite" if is_sqlite() else "PostgreSQL",
        settings.generation_model or "disabled",
        settings.continuation_max_attempts,
    )

    yield  # App runs here

    app.state.orchestrator = None


# Create FastAPI app
app = FastAPI(
    title="FolioForge API",
    description=(
        "Generates single-page HTML portfolios with a language model. Truncated "
        "model output is detected and continued automatically, up to a fixed "
        "number of attempts; partial results can be resumed or saved as drafts."
    ),
    version=__version__,
    lifespan=lifespan,
)

# Middleware stack
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)
app.add_middleware(RequestContextMiddleware)

# Register exception handlers
app.add_exception_handler(FolioException, folio_exception_handler)

# Include routers
app.include_router(portfolios_router)
app.include_router(drafts_router)


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "name": "FolioForge API",
        "version": __version__,
        "status": "running"
    }


_startup_time = time.monotonic()


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Health check endpoint returning database status, uptime, and generation status.

    Never raises. Returns degraded status on DB failure so load balancers
    can still poll it without receiving 5xx.
    """
    db_status = "ok"
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        db_status = "error"

    return {
        "status": "healthy" if db_status == "ok" else "degraded",
        "db": db_status,
        "uptime_seconds": round(time.monotonic() - _startup_time),
        "version": __version__,
        "generation_configured": settings.is_generation_configured(),
    }
