"""
Shared fixtures for adversarial tests.

Provides common test infrastructure for race condition, token guessing and
timing tests. Requires PostgreSQL; tests are skipped when it is unreachable.
"""

from collections.abc import AsyncGenerator

import pytest
from psycopg_pool import AsyncConnectionPool, PoolTimeout

from src.adapters.repository.postgres import PostgresSubscriptionRepository, run_migrations
from src.adapters.templates.jinja import JinjaTemplateRenderer
from src.config.settings import get_settings
from src.domain.subscription import SubscriptionService
from tests.fakes import RecordingEmailSender

# Module-level marker for all adversarial tests
pytestmark = pytest.mark.adversarial


@pytest.fixture
async def pool() -> AsyncGenerator[AsyncConnectionPool, None]:
    """Create connection pool for adversarial tests, on a clean schema."""
    settings = get_settings()
    pool = AsyncConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=20,
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
def repository(pool: AsyncConnectionPool) -> PostgresSubscriptionRepository:
    """Create repository instance for each test."""
    return PostgresSubscriptionRepository(pool)


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def service(
    repository: PostgresSubscriptionRepository, email_sender: RecordingEmailSender
) -> SubscriptionService:
    return SubscriptionService(
        repository=repository,
        email_sender=email_sender,
        renderer=JinjaTemplateRenderer(),
        base_url="http://testserver",
    )
