"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
wires the shared resources in the lifespan, and exposes
the home page and health check.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import AsyncExitStack, asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from psycopg_pool import AsyncConnectionPool

from src.adapters.email.console import ConsoleEmailSender
from src.adapters.email.http import HttpEmailClient
from src.adapters.repository.postgres import PostgresUserRepository, run_migrations
from src.adapters.templates.jinja import JinjaTemplateRenderer
from src.api.dependencies import (
    build_page_templates,
    build_password_hasher,
    get_page_templates,
)
from src.api.endpoints import router as api_router
from src.config.settings import Settings, get_settings
from src.domain.credentials import CredentialVerifier
from src.domain.subscriber import SubscriberEmail

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "subscriptions",
        "description": "Subscribe to the newsletter and confirm the subscription",
    },
    {
        "name": "newsletters",
        "description": "Publish an issue to confirmed subscribers (Basic auth)",
    },
    {
        "name": "login",
        "description": "Operator login form",
    },
]


def build_email_sender(settings: Settings) -> HttpEmailClient | ConsoleEmailSender:
    """Create the email sender selected by settings.email_backend."""
    if settings.email_backend == "console":
        return ConsoleEmailSender()
    return HttpEmailClient(
        base_url=settings.email_base_url,
        sender=SubscriberEmail.parse(settings.email_sender),
        authorization_token=settings.email_authorization_token.get_secret_value(),
        timeout=settings.email_timeout_seconds,
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Configuration to use; defaults to get_settings()
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """
        FastAPI lifespan context manager.

        Manages application startup and shutdown:
        - Creates database connection pool and runs migrations on startup
        - Builds the email sender, template renderer and credential verifier
        - Closes the email sender and connection pool on shutdown, or as
          soon as a startup step fails
        """
        logging.basicConfig(level=settings.log_level)

        logger.info("Starting application...")
        logger.info("Connecting to database...")

        pool = AsyncConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
            open=False,
        )
        await pool.open()

        # Everything acquired after the pool opens is released in reverse order
        async with AsyncExitStack() as stack:
            stack.push_async_callback(pool.close)

            logger.info("Running database migrations...")
            await run_migrations(pool)

            email_sender = build_email_sender(settings)
            stack.push_async_callback(email_sender.aclose)
            logger.info("Email backend: %s", settings.email_backend)

            app.state.settings = settings
            app.state.pool = pool
            app.state.email_sender = email_sender
            app.state.renderer = JinjaTemplateRenderer()
            app.state.credential_verifier = CredentialVerifier(
                users=PostgresUserRepository(pool),
                hasher=build_password_hasher(settings),
            )

            logger.info("Application startup complete")

            yield
            logger.info("Shutting down application...")

        logger.info("Database connection pool closed")

    app = FastAPI(
        title="newsletter",
        description="Email newsletter service - double opt-in subscriptions and issue broadcasts",
        version="0.1.0",
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.templates = build_page_templates()

    app.include_router(api_router)

    @app.get("/", response_class=HTMLResponse, include_in_schema=False)
    async def home(
        request: Request,
        templates: Jinja2Templates = Depends(get_page_templates),
    ) -> HTMLResponse:
        return templates.TemplateResponse(request, "home.html")

    @app.get("/health")
    async def health_check(request: Request) -> dict[str, str]:
        """
        Health check endpoint with database validation.

        Returns 200 OK if application and database are healthy.
        Raises exception if database connection fails.
        """
        pool = request.app.state.pool
        async with pool.connection() as conn:
            await conn.execute("SELECT 1")

        return {"status": "healthy"}

    return app


app = create_app()
