"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures exception handlers and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import psycopg
from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from studyauth.adapters.repository.memory import InMemoryIdentityRepository, InMemoryOTPRepository
from studyauth.adapters.repository.postgres import (
    PostgresIdentityRepository,
    PostgresOTPRepository,
    run_migrations,
)
from studyauth.adapters.smtp.console import ConsoleEmailSender
from studyauth.adapters.smtp.sender import SmtpEmailSender
from studyauth.api.errors import install_error_handlers
from studyauth.api.models import ErrorResponse
from studyauth.api.v1 import router as v1_router
from studyauth.config.settings import DEV_JWT_SECRET, Settings, get_settings
from studyauth.domain.exceptions import ServiceUnavailable

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "auth",
        "description": "OTP-gated registration, login and session management",
    },
]


def _build_email_sender(settings: Settings) -> ConsoleEmailSender | SmtpEmailSender:
    if not settings.mail_host:
        logger.info("mail_host not set, mail is logged to the console")
        return ConsoleEmailSender()
    return SmtpEmailSender(
        host=settings.mail_host,
        port=settings.mail_port,
        user=settings.mail_user,
        password=settings.mail_password,
        from_name=settings.mail_from_name,
        timeout=settings.mail_timeout_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates the storage backend (connection pool + migrations, or memory)
    - Chooses the mail adapter
    - Closes the connection pool on shutdown
    """
    settings: Settings = app.state.settings
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    logger.info("Starting application...")
    if settings.jwt_secret == DEV_JWT_SECRET:
        logger.warning("Using the development JWT secret; set JWT_SECRET in production")

    pool = None
    if settings.storage_backend == "memory":
        logger.info("Using in-memory storage")
        app.state.identities = InMemoryIdentityRepository()
        app.state.otps = InMemoryOTPRepository()
    else:
        logger.info("Connecting to database...")
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
            open=True,
            timeout=settings.pool_timeout_seconds,
            kwargs={
                "connect_timeout": settings.connect_timeout_seconds,
                "options": f"-c statement_timeout={settings.statement_timeout_ms}",
            },
        )

        logger.info("Running database migrations...")
        run_migrations(pool)

        app.state.pool = pool
        app.state.identities = PostgresIdentityRepository(pool, timeout=settings.pool_timeout_seconds)
        app.state.otps = PostgresOTPRepository(pool, timeout=settings.pool_timeout_seconds)

    app.state.email_sender = _build_email_sender(settings)

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application around an explicit settings object."""
    app = FastAPI(
        title="studyauth",
        description="Identity and access-control core: OTP-gated registration, "
        "session tokens and role authorization",
        version="0.1.0",
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )
    app.state.settings = settings or get_settings()
    install_error_handlers(app)

    # Include v1 API routes
    app.include_router(v1_router, prefix="/v1")

    @app.get("/health", responses={503: {"model": ErrorResponse, "description": "Store unreachable"}})
    def health_check(request: Request) -> dict[str, str]:
        """
        Health check endpoint with storage validation.

        Returns 200 when the store answers, 503 when the pool times out
        or the connection fails.
        """
        settings: Settings = request.app.state.settings
        pool = getattr(request.app.state, "pool", None)
        if pool is not None:
            try:
                with pool.connection(timeout=settings.pool_timeout_seconds) as conn:
                    conn.execute("SELECT 1")
            except psycopg.OperationalError as exc:
                logger.error("Health check failed: %s", type(exc).__name__)
                raise ServiceUnavailable("health") from None

        return {"status": "healthy"}

    return app


app = create_app()
