"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures exception handlers and lifespan events, and
provides the uvicorn entry point.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import psycopg
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from src.adapters.repository.postgres import create_pool, run_migrations
from src.adapters.tokens.jwt_issuer import JwtTokenIssuer
from src.api.errors import register_exception_handlers
from src.api.routes import accounts_router, activities_router
from src.config.settings import get_settings
from src.domain.exceptions import ServiceUnavailableError

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "accounts",
        "description": "Register accounts and log in for a two-hour session token",
    },
    {
        "name": "activities",
        "description": "Create, list and join activities with limited places",
    },
]


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Loads settings (fails fast if the signing secret is missing)
    - Creates database connection pool on startup
    - Runs migrations on startup
    - Closes connection pool on shutdown
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    logger.info("Starting application...")
    logger.info("Connecting to database...")

    pool = create_pool(
        settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
        timeout=settings.db_timeout_seconds,
        statement_timeout_ms=settings.statement_timeout_ms,
    )
    try:
        pool.wait(timeout=settings.db_timeout_seconds)
    except psycopg.OperationalError:
        logger.error("Could not connect to database within %.1fs", settings.db_timeout_seconds)
        pool.close()
        raise

    # Run migrations
    logger.info("Running database migrations...")
    run_migrations(pool)

    # Store process-wide resources in app state for dependency injection
    app.state.settings = settings
    app.state.pool = pool
    app.state.token_issuer = (
        JwtTokenIssuer(settings.jwt_secret) if settings.auth_enabled else None
    )
    if not settings.auth_enabled:
        logger.warning("Authentication disabled: /api/login will answer 503")

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    pool.close()
    logger.info("Database connection pool closed")


def create_app(cors_origins: list[str] | None = None) -> FastAPI:
    """
    Build the application with routes, error handlers and CORS attached.

    Allowed origins default to CORS_ORIGINS from settings.
    """
    if cors_origins is None:
        cors_origins = get_settings().cors_origins
    application = FastAPI(
        title="activity-signup",
        description="Account registration, login and activity signup API",
        version="0.1.0",
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(application)
    application.include_router(accounts_router, prefix="/api")
    application.include_router(activities_router, prefix="/api")
    application.add_api_route("/health", health_check, methods=["GET"])
    return application


def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with database validation.

    Returns 200 OK if application and database are healthy,
    503 if the database cannot be reached.
    """
    pool = request.app.state.pool
    try:
        with pool.connection() as conn:
            conn.execute("SELECT 1")
    except psycopg.OperationalError as e:
        raise ServiceUnavailableError("Base de datos no disponible") from e

    return {"status": "healthy"}


app = create_app()


def run() -> None:
    """Run the API under uvicorn using HOST/PORT from settings."""
    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        "src.api.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
