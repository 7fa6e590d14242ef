"""
Unit tests for the application factory.

No database is needed: the lifespan is only entered with a stand-in pool.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from src.adapters.email.console import ConsoleEmailSender
from src.adapters.email.http import HttpEmailClient
from src.api.dependencies import build_password_hasher
from src.api.main import build_email_sender, create_app
from src.config.settings import Settings


class TestCreateApp:
    """Tests for create_app."""

    def test_settings_are_stored_on_app_state(self) -> None:
        settings = Settings(base_url="https://news.example.com")
        app = create_app(settings)
        assert app.state.settings is settings

    def test_home_page(self) -> None:
        client = TestClient(create_app(Settings()))

        response = client.get("/")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "Welcome to our newsletter!" in response.text

    def test_routes_are_registered(self) -> None:
        paths = {route.path for route in create_app(Settings()).routes}
        assert {
            "/",
            "/health",
            "/login",
            "/newsletters",
            "/subscriptions",
            "/subscriptions/confirm",
        } <= paths


class TestBuildEmailSender:
    """Tests for build_email_sender."""

    def test_console_backend(self) -> None:
        sender = build_email_sender(Settings(email_backend="console"))
        assert isinstance(sender, ConsoleEmailSender)

    async def test_http_backend(self) -> None:
        sender = build_email_sender(
            Settings(
                email_backend="http",
                email_base_url="https://email.example.com",
                email_sender="newsletter@example.com",
                email_authorization_token="server-token",
            )
        )
        assert isinstance(sender, HttpEmailClient)
        assert sender.sender.value == "newsletter@example.com"
        await sender.aclose()


class TestBuildPasswordHasher:
    def test_uses_configured_parameters(self) -> None:
        hasher = build_password_hasher(
            Settings(argon2_time_cost=1, argon2_memory_cost=8, argon2_parallelism=1)
        )
        assert "m=8,t=1,p=1" in hasher.hash("pw")


@pytest.fixture
def pool() -> MagicMock:
    """Stand-in connection pool whose open/close can be awaited."""
    pool = MagicMock()
    pool.open = AsyncMock()
    pool.close = AsyncMock()
    return pool


class TestLifespan:
    """Tests for startup and shutdown of shared resources."""

    def test_failed_migration_closes_the_pool(self, pool: MagicMock) -> None:
        app = create_app(Settings(email_backend="console"))

        with (
            patch("src.api.main.AsyncConnectionPool", return_value=pool),
            patch(
                "src.api.main.run_migrations",
                AsyncMock(side_effect=RuntimeError("migration failed")),
            ),
            pytest.raises(RuntimeError, match="migration failed"),
            TestClient(app),
        ):
            pass

        pool.open.assert_awaited_once()
        pool.close.assert_awaited_once()

    def test_shutdown_closes_sender_and_pool(self, pool: MagicMock) -> None:
        app = create_app(Settings(email_backend="console"))

        with (
            patch("src.api.main.AsyncConnectionPool", return_value=pool),
            patch("src.api.main.run_migrations", AsyncMock()),
        ):
            with TestClient(app):
                sender = app.state.email_sender
                pool.close.assert_not_awaited()

        assert isinstance(sender, ConsoleEmailSender)
        pool.close.assert_awaited_once()
