"""Repository adapters - Database implementations."""

from .postgres import (
    PostgresSubscriptionRepository,
    PostgresSubscriptionTransaction,
    PostgresUserRepository,
    run_migrations,
)

__all__ = [
    "PostgresSubscriptionRepository",
    "PostgresSubscriptionTransaction",
    "PostgresUserRepository",
    "run_migrations",
]
