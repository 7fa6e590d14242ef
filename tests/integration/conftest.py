"""
Shared fixtures for integration tests.

Requires PostgreSQL to be running (DATABASE_URL or the settings default).
Tests are skipped when the database cannot be reached.
"""

from collections.abc import AsyncGenerator, Generator

import psycopg
import pytest
from psycopg_pool import AsyncConnectionPool, PoolTimeout

from src.adapters.repository.postgres import run_migrations
from src.config.settings import get_settings

pytestmark = pytest.mark.integration


@pytest.fixture
async def pool() -> AsyncGenerator[AsyncConnectionPool, None]:
    """Open an async pool on the test database, with migrations applied."""
    settings = get_settings()
    pool = AsyncConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=10,
        open=False,
    )
    try:
        await pool.open(wait=True, timeout=3)
    except PoolTimeout:
        await pool.close()
        pytest.skip("PostgreSQL is not reachable")

    await run_migrations(pool)
    async with pool.connection() as conn:
        await conn.execute("TRUNCATE subscriptions, subscription_tokens, users")

    yield pool
    await pool.close()


@pytest.fixture
def db() -> Generator[psycopg.Connection, None, None]:
    """
    Synchronous autocommit connection for tests that drive the app through TestClient.

    The app runs its own event loop inside TestClient, so these tests set up
    and inspect rows with a plain connection.
    """
    try:
        conn = psycopg.connect(get_settings().database_url, autocommit=True, connect_timeout=3)
    except psycopg.OperationalError:
        pytest.skip("PostgreSQL is not reachable")

    with conn:
        yield conn
