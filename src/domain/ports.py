"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure, plus the small value types exchanged across them.
Adapters implement these protocols.
"""

from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol
from uuid import UUID

from .subscriber import ConfirmationToken, NewSubscriber, SubscriberEmail


class SubscriberStatus(Enum):
    """
    Subscriber lifecycle states.

    State Transitions (forward-only):
    - NON_EXISTING -> PENDING   (first subscribe)
    - PENDING -> PENDING        (re-subscribe, token rotated)
    - PENDING -> CONFIRMED      (token redeemed)

    Terminal States:
    - CONFIRMED: never regresses, re-subscribing is a conflict

    Only the repository maps these to and from stored column values.
    """

    NON_EXISTING = "non_existing"
    PENDING = "pending"
    CONFIRMED = "confirmed"


@dataclass(frozen=True)
class SubscriberRecord:
    """Current status of an email address, with its subscriber id when one exists."""

    status: SubscriberStatus
    subscriber_id: UUID | None = None


class SubscribeResult(Enum):
    """Result of a successful subscribe call."""

    CREATED = "created"
    TOKEN_ROTATED = "token_rotated"


class ConfirmResult(Enum):
    """
    Result of a confirmation attempt.

    ALREADY_CONFIRMED is a success: duplicate clicks and retries are tolerated.
    """

    CONFIRMED = "confirmed"
    ALREADY_CONFIRMED = "already_confirmed"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class RenderedEmail:
    """HTML and plain-text bodies of an outbound email."""

    html: str
    text: str


@dataclass
class DeliveryReport:
    """Per-recipient outcome of a newsletter broadcast."""

    delivered: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class SubscriptionTransaction(Protocol):
    """Operations available inside one subscription store transaction."""

    async def get_status(self, email: SubscriberEmail) -> SubscriberRecord:
        """
        Read the current status for an email, locking the row if it exists.

        Returns:
            SubscriberRecord with NON_EXISTING status when the email is unknown
        """
        ...

    async def insert_subscriber(self, new_subscriber: NewSubscriber) -> UUID:
        """
        Insert a new subscriber in pending state.

        Raises:
            SubscriptionConflict: If the email was inserted concurrently
        """
        ...

    async def store_token(self, subscriber_id: UUID, token: ConfirmationToken) -> None:
        """Insert the first confirmation token of a subscriber."""
        ...

    async def rotate_token(self, subscriber_id: UUID, token: ConfirmationToken) -> None:
        """
        Replace the live token of a pending subscriber.

        Raises:
            StoreError: If deletion or insertion does not affect exactly one row
        """
        ...

    async def get_subscriber_id_by_token(self, token: ConfirmationToken) -> UUID | None:
        """Return the owner of a token, or None for an unknown token."""
        ...

    async def confirm_subscriber(self, subscriber_id: UUID) -> bool:
        """
        Flip a pending subscriber to confirmed.

        Returns:
            True if the status changed, False if it was already confirmed
        """
        ...


class SubscriptionRepository(Protocol):
    """Port interface for subscriber persistence."""

    def transaction(self) -> AbstractAsyncContextManager[SubscriptionTransaction]:
        """
        Open a transaction on a dedicated pooled connection.

        Leaving the block normally commits, leaving it with an exception rolls
        back. A failed commit raises StoreError.
        """
        ...

    async def fetch_confirmed_emails(self) -> list[SubscriberEmail]:
        """Return all confirmed subscriber emails, skipping rows that no longer parse."""
        ...


class UserRepository(Protocol):
    """Port interface for operator credentials (read-only for the domain)."""

    async def get_stored_credentials(self, username: str) -> tuple[UUID, str] | None:
        """Return (user_id, PHC password hash) for a username, or None."""
        ...


class EmailSender(Protocol):
    """Port interface for email delivery."""

    async def send(self, recipient: SubscriberEmail, subject: str, html: str, text: str) -> None:
        """
        Deliver one email.

        Raises:
            DeliveryError: On any delivery failure, including timeouts
        """
        ...


class TemplateRenderer(Protocol):
    """Port interface for email body rendering."""

    def render_confirmation(self, name: str, link: str) -> RenderedEmail:
        """Render the subscription confirmation email for a subscriber."""
        ...
