"""
PostgreSQL repository adapter - Implements the subscription and user ports.

This module provides the PostgreSQL implementation of the domain's
repository ports using psycopg3 (async) with raw SQL.

Concurrency Design - Race-Free Lifecycle Transitions:
----------------------------------------------------
1. **One transaction per request**: transaction() pins one pooled connection
   and one database transaction. Normal exit commits, any exception rolls back,
   and the connection is always returned to the pool.

2. **SELECT ... FOR UPDATE**: get_status locks an existing subscriber row, so two
   concurrent subscribes for a pending email rotate the token one after the other.

3. **UNIQUE(email) backstop**: for a brand-new email there is no row to lock.
   The second concurrent INSERT blocks until the first transaction ends and then
   fails with a unique violation, surfaced as SubscriptionConflict.

4. **Guarded UPDATE**: confirmation only flips rows still in
   'pending_confirmation', making duplicate confirmations a no-op.

All psycopg errors leave this module as StoreError with the driver error chained.
"""

import logging
import uuid
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager
from pathlib import Path
from uuid import UUID

import psycopg
from psycopg import AsyncConnection
from psycopg_pool import AsyncConnectionPool

from src.domain.exceptions import StoreError, SubscriptionConflict, ValidationError
from src.domain.ports import SubscriberRecord, SubscriberStatus
from src.domain.subscriber import ConfirmationToken, NewSubscriber, SubscriberEmail

logger = logging.getLogger(__name__)

# Stored column values for subscriptions.status
PENDING_CONFIRMATION = "pending_confirmation"
CONFIRMED = "confirmed"

_STATUS_FROM_COLUMN = {
    PENDING_CONFIRMATION: SubscriberStatus.PENDING,
    CONFIRMED: SubscriberStatus.CONFIRMED,
}

# src/adapters/repository/postgres.py -> migrations/
MIGRATIONS_DIR = Path(__file__).parent.parent.parent.parent / "migrations"


@contextmanager
def _store_errors(message: str) -> Iterator[None]:
    """Translate driver errors into StoreError."""
    try:
        yield
    except psycopg.Error as e:
        raise StoreError(message) from e


class PostgresSubscriptionTransaction:
    """
    Implements SubscriptionTransaction protocol on one open connection.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Instances are only handed out by PostgresSubscriptionRepository.transaction().
    """

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_status(self, email: SubscriberEmail) -> SubscriberRecord:
        sql = """
            SELECT id, status
            FROM subscriptions
            WHERE email = %s
            FOR UPDATE
        """

        with _store_errors("Failed to read subscriber status"):
            async with self._conn.cursor() as cursor:
                await cursor.execute(sql, (email.value,))
                row = await cursor.fetchone()

        if row is None:
            return SubscriberRecord(status=SubscriberStatus.NON_EXISTING)

        subscriber_id, status = row
        try:
            return SubscriberRecord(status=_STATUS_FROM_COLUMN[status], subscriber_id=subscriber_id)
        except KeyError:
            raise StoreError(f"Unknown subscriber status {status!r} for {subscriber_id}") from None

    async def insert_subscriber(self, new_subscriber: NewSubscriber) -> UUID:
        sql = """
            INSERT INTO subscriptions (id, email, name, subscribed_at, status)
            VALUES (%s, %s, %s, NOW(), %s)
        """
        subscriber_id = uuid.uuid4()

        try:
            await self._conn.execute(
                sql,
                (
                    subscriber_id,
                    new_subscriber.email.value,
                    new_subscriber.name.value,
                    PENDING_CONFIRMATION,
                ),
            )
        except psycopg.errors.UniqueViolation as e:
            # Another transaction inserted the same email after our status read
            raise SubscriptionConflict(f"{new_subscriber.email} was subscribed concurrently") from e
        except psycopg.Error as e:
            raise StoreError("Failed to insert new subscriber") from e

        logger.info("Inserted subscriber %s", subscriber_id)
        return subscriber_id

    async def store_token(self, subscriber_id: UUID, token: ConfirmationToken) -> None:
        sql = """
            INSERT INTO subscription_tokens (subscription_token, subscriber_id)
            VALUES (%s, %s)
        """

        with _store_errors("Failed to store the confirmation token for a new subscriber"):
            await self._conn.execute(sql, (token.value, subscriber_id))

    async def rotate_token(self, subscriber_id: UUID, token: ConfirmationToken) -> None:
        delete_sql = "DELETE FROM subscription_tokens WHERE subscriber_id = %s"
        insert_sql = """
            INSERT INTO subscription_tokens (subscription_token, subscriber_id)
            VALUES (%s, %s)
        """

        with _store_errors("Failed to rotate the confirmation token"):
            async with self._conn.cursor() as cursor:
                await cursor.execute(delete_sql, (subscriber_id,))
                deleted = cursor.rowcount
                if deleted != 1:
                    raise StoreError(
                        f"Token rotation for {subscriber_id} deleted {deleted} rows (expected 1)"
                    )

                await cursor.execute(insert_sql, (token.value, subscriber_id))
                inserted = cursor.rowcount
                if inserted != 1:
                    raise StoreError(
                        f"Token rotation for {subscriber_id} inserted {inserted} rows (expected 1)"
                    )

        logger.info("Rotated confirmation token for subscriber %s", subscriber_id)

    async def get_subscriber_id_by_token(self, token: ConfirmationToken) -> UUID | None:
        sql = """
            SELECT subscriber_id
            FROM subscription_tokens
            WHERE subscription_token = %s
        """

        with _store_errors("Failed to look up the confirmation token"):
            async with self._conn.cursor() as cursor:
                await cursor.execute(sql, (token.value,))
                row = await cursor.fetchone()

        return row[0] if row is not None else None

    async def confirm_subscriber(self, subscriber_id: UUID) -> bool:
        sql = """
            UPDATE subscriptions
            SET status = %s
            WHERE id = %s AND status = %s
        """

        with _store_errors("Failed to mark subscriber as confirmed"):
            async with self._conn.cursor() as cursor:
                await cursor.execute(sql, (CONFIRMED, subscriber_id, PENDING_CONFIRMATION))
                return cursor.rowcount == 1


class PostgresSubscriptionRepository:
    """
    Implements SubscriptionRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: AsyncConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 AsyncConnectionPool for database connections
        """
        self._pool = pool

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[PostgresSubscriptionTransaction]:
        """
        Run a block inside one database transaction.

        Commit happens when the block exits normally. A commit or connection
        failure is raised as StoreError; domain exceptions raised inside the
        block roll back and propagate unchanged.
        """
        try:
            async with self._pool.connection() as conn, conn.transaction():
                yield PostgresSubscriptionTransaction(conn)
        except psycopg.Error as e:
            raise StoreError("Subscription store transaction failed") from e

    async def fetch_confirmed_emails(self) -> list[SubscriberEmail]:
        sql = "SELECT email FROM subscriptions WHERE status = %s"

        with _store_errors("Failed to fetch confirmed subscribers"):
            async with self._pool.connection() as conn, conn.cursor() as cursor:
                await cursor.execute(sql, (CONFIRMED,))
                rows = await cursor.fetchall()

        emails: list[SubscriberEmail] = []
        for (raw_email,) in rows:
            try:
                emails.append(SubscriberEmail.parse(raw_email))
            except ValidationError as e:
                # One corrupt row must not abort the whole broadcast
                logger.warning("Skipping confirmed subscriber with invalid stored email: %s", e)
        return emails


class PostgresUserRepository:
    """Implements UserRepository protocol via psycopg3."""

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool

    async def get_stored_credentials(self, username: str) -> tuple[UUID, str] | None:
        sql = """
            SELECT user_id, password_hash
            FROM users
            WHERE username = %s
        """

        with _store_errors("Failed to perform a query to validate auth credentials"):
            async with self._pool.connection() as conn, conn.cursor() as cursor:
                await cursor.execute(sql, (username,))
                row = await cursor.fetchone()

        if row is None:
            return None
        return row[0], row[1]

    async def add_user(self, username: str, password_hash: str) -> UUID:
        """
        Provision an operator account.

        Args:
            username: Unique login name
            password_hash: PHC-format hash (see CredentialVerifier.hash_password)

        Returns:
            The generated user id
        """
        sql = """
            INSERT INTO users (user_id, username, password_hash)
            VALUES (%s, %s, %s)
        """
        user_id = uuid.uuid4()

        with _store_errors(f"Failed to create user {username!r}"):
            async with self._pool.connection() as conn:
                await conn.execute(sql, (user_id, username, password_hash))

        logger.info("Created user %s (%s)", username, user_id)
        return user_id


async def run_migrations(
    pool: AsyncConnectionPool, migrations_dir: Path = MIGRATIONS_DIR
) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 AsyncConnectionPool instance
        migrations_dir: Directory holding the *.sql files
    """

    if not migrations_dir.exists():
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info("Running %d migration(s)", len(sql_files))

    for sql_file in sql_files:
        logger.info("Executing migration: %s", sql_file.name)
        try:
            sql_content = sql_file.read_text()

            async with pool.connection() as conn:
                await conn.execute(sql_content)
                # Committed when the pool takes the connection back

            logger.info("Migration complete: %s", sql_file.name)
        except Exception as e:
            logger.error("Migration failed: %s - %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
