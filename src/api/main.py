"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures exception handlers and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from src.adapters.repository.memory import InMemoryAccountRepository
from src.adapters.repository.postgres import PostgresAccountRepository, run_migrations
from src.api.auth import router as auth_router
from src.api.dependencies import build_account_service, build_email_sender
from src.api.errors import install_error_handlers
from src.config.settings import DEFAULT_JWT_SECRET, Settings, get_settings

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "auth",
        "description": "Registration, email verification by OTP, and login",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Refuses to start in production with the default JWT secret
    - Creates the account store (database pool + migrations, or in-memory)
    - Wires the account service once from settings
    - Closes the connection pool on shutdown
    """
    settings: Settings = app.state.settings
    logging.basicConfig(level=settings.log_level.upper())

    if settings.production and settings.jwt_secret == DEFAULT_JWT_SECRET:
        logger.critical("JWT_SECRET is the built-in default; refusing to start in production")
        raise RuntimeError("JWT_SECRET must be set when PRODUCTION=true")

    logger.info("Starting application...")

    pool = None
    if settings.account_store == "postgres":
        logger.info("Connecting to database...")
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
            timeout=settings.db_pool_timeout,
            kwargs={"connect_timeout": settings.db_connect_timeout},
            open=True,
        )

        logger.info("Running database migrations...")
        run_migrations(pool)
        repository = PostgresAccountRepository(pool)
    else:
        logger.warning("Using in-memory account store; accounts are lost on restart")
        repository = InMemoryAccountRepository()

    if not settings.production:
        logger.warning("Non-production mode: OTPs are included in API responses")

    app.state.pool = pool
    app.state.account_service = build_account_service(
        settings, repository, build_email_sender(settings)
    )

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create the application with the given (or environment) settings."""
    application = FastAPI(
        title="edu-auth",
        description="Account registration API with email OTP verification and JWT login",
        version="0.1.0",
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )
    application.state.settings = settings or get_settings()

    install_error_handlers(application)
    application.include_router(auth_router, prefix="/api/auth")
    application.add_api_route("/health", health_check, methods=["GET"])

    return application


def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with database validation.

    Returns 200 OK if the application and its database are healthy.
    """
    pool = request.app.state.pool
    if pool is not None:
        with pool.connection() as conn:
            conn.execute("SELECT 1")

    return {"status": "healthy"}


app = create_app()
