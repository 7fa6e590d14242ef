"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
Shared resources are built once in the application lifespan and
stored in app.state; nothing here keeps process-wide state.
"""

from pathlib import Path

from argon2 import PasswordHasher
from fastapi import Request
from fastapi.templating import Jinja2Templates
from psycopg_pool import AsyncConnectionPool

from src.adapters.repository.postgres import (
    PostgresSubscriptionRepository,
    PostgresUserRepository,
)
from src.config.settings import Settings
from src.domain.credentials import CredentialVerifier
from src.domain.newsletter import NewsletterService
from src.domain.ports import EmailSender, TemplateRenderer
from src.domain.subscription import SubscriptionService

PAGE_TEMPLATES_DIR = Path(__file__).parent / "templates"


def get_app_settings(request: Request) -> Settings:
    """Get the settings the application was created with."""
    return request.app.state.settings


def get_pool(request: Request) -> AsyncConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_subscription_repository(request: Request) -> PostgresSubscriptionRepository:
    """Create subscription repository with connection pool from app state."""
    return PostgresSubscriptionRepository(get_pool(request))


def get_user_repository(request: Request) -> PostgresUserRepository:
    """Create user repository with connection pool from app state."""
    return PostgresUserRepository(get_pool(request))


def get_email_sender(request: Request) -> EmailSender:
    """Get the shared email sender (one HTTP client per application)."""
    return request.app.state.email_sender


def get_template_renderer(request: Request) -> TemplateRenderer:
    return request.app.state.renderer


def get_page_templates(request: Request) -> Jinja2Templates:
    """Get the Jinja2 templates for the HTML pages from app state."""
    return request.app.state.templates


def get_subscription_service(request: Request) -> SubscriptionService:
    """
    Create subscription service with injected dependencies.

    Wires together the repository, email sender and renderer for the domain service.
    """
    return SubscriptionService(
        repository=get_subscription_repository(request),
        email_sender=get_email_sender(request),
        renderer=get_template_renderer(request),
        base_url=get_app_settings(request).base_url,
    )


def get_newsletter_service(request: Request) -> NewsletterService:
    """Create newsletter broadcaster with injected dependencies."""
    return NewsletterService(
        repository=get_subscription_repository(request),
        email_sender=get_email_sender(request),
        concurrency=get_app_settings(request).broadcast_concurrency,
    )


def get_credential_verifier(request: Request) -> CredentialVerifier:
    """
    Get the credential verifier from app state.

    The verifier is built once at startup because it precomputes the dummy
    hash used for unknown usernames.
    """
    return request.app.state.credential_verifier


def build_page_templates() -> Jinja2Templates:
    """Create the autoescaping Jinja2 templates for the login and home pages."""
    return Jinja2Templates(directory=str(PAGE_TEMPLATES_DIR))


def build_password_hasher(settings: Settings) -> PasswordHasher:
    """Create the Argon2id hasher from settings."""
    return PasswordHasher(
        time_cost=settings.argon2_time_cost,
        memory_cost=settings.argon2_memory_cost,
        parallelism=settings.argon2_parallelism,
    )
