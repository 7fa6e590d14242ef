"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- In-memory subscription repository with commit/rollback tracking
- Recording email sender
- Low-cost Argon2 hasher (keeps unit tests fast)
"""

import pytest
from argon2 import PasswordHasher

from tests.fakes import FakeSubscriptionRepository, RecordingEmailSender


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def subscription_repository() -> FakeSubscriptionRepository:
    return FakeSubscriptionRepository()


@pytest.fixture
def fast_hasher() -> PasswordHasher:
    """Argon2id hasher with the smallest allowed cost parameters."""
    return PasswordHasher(time_cost=1, memory_cost=8, parallelism=1)
