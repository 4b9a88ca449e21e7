"""
FastAPI application and configuration.

This module creates the FastAPI application instance,
configures exception handlers, and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from psycopg_pool import ConnectionPool

from nutrisnap.adapters.identity.google import GoogleIdentityProvider
from nutrisnap.adapters.repository import (
    InMemoryAccountRepository,
    InMemoryPendingRegistrationRepository,
    PostgresAccountRepository,
    PostgresPendingRegistrationRepository,
    run_migrations,
)
from nutrisnap.adapters.smtp.console import ConsoleEmailSender
from nutrisnap.adapters.smtp.mailer import SmtpEmailSender
from nutrisnap.api.errors import install_exception_handlers
from nutrisnap.api.routes import router
from nutrisnap.config.settings import Settings, get_settings
from nutrisnap.domain.ports import EmailSender
from nutrisnap.domain.sessions import SessionIssuer

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "auth",
        "description": "Registration with email verification, login and token checks",
    },
    {
        "name": "profile",
        "description": "Profile data and password management (bearer token required)",
    },
]


def create_email_sender(settings: Settings) -> EmailSender:
    if settings.email_backend == "smtp":
        return SmtpEmailSender.from_settings(settings)
    return ConsoleEmailSender()


def configure_services(app: FastAPI, settings: Settings) -> None:
    """Store the stateless collaborators in app state for dependency injection."""
    app.state.email_sender = create_email_sender(settings)
    app.state.session_issuer = SessionIssuer(
        secret_key=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        ttl=timedelta(days=settings.token_ttl_days),
    )
    app.state.identity_provider = GoogleIdentityProvider(
        tokeninfo_url=settings.google_tokeninfo_url,
        client_id=settings.google_client_id,
        timeout_seconds=settings.google_timeout_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates database connection pool and runs migrations on startup
      (or in-memory stores when STORAGE_BACKEND=memory)
    - Wires repositories, email sender, session issuer and identity provider
    - Closes connection pool on shutdown
    """
    settings = get_settings()

    logger.info("Starting application...")
    configure_services(app, settings)

    pool = None
    if settings.storage_backend == "memory":
        logger.warning("Using in-memory storage; data is lost on restart")
        app.state.pending_repository = InMemoryPendingRegistrationRepository(
            ttl_minutes=settings.pending_ttl_minutes
        )
        app.state.account_repository = InMemoryAccountRepository()
    else:
        logger.info("Connecting to database...")
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
        )

        logger.info("Running database migrations...")
        run_migrations(pool)

        app.state.pending_repository = PostgresPendingRegistrationRepository(
            pool, ttl_minutes=settings.pending_ttl_minutes
        )
        app.state.account_repository = PostgresAccountRepository(pool)
    app.state.pool = pool

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed")


app = FastAPI(
    title="nutrisnap",
    description="NutriSnap accounts API - registration with email verification, login and profile",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

install_exception_handlers(app)
app.include_router(router)


def _ping(pool: ConnectionPool) -> None:
    with pool.connection() as conn:
        conn.execute("SELECT 1")


@app.get("/health")
async def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with database validation.

    Returns 200 OK if application and database are healthy.
    Raises exception if database connection fails.
    """
    pool = getattr(request.app.state, "pool", None)
    if pool is not None:
        await run_in_threadpool(_ping, pool)

    return {"status": "healthy"}
