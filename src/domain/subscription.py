"""
Subscription domain service - Subscriber lifecycle state machine.

Subscriber State Machine (Forward-Only Transitions)
===================================================

States:
- NON_EXISTING: No row for the email
- PENDING: Row exists, confirmation token issued, email not yet confirmed
- CONFIRMED: Terminal state after a token was redeemed

Valid Transitions:
    NON_EXISTING -> PENDING   (subscribe: insert subscriber + token)
    PENDING -> PENDING        (subscribe again: token rotated)
    PENDING -> CONFIRMED      (confirm with a live token)

Invalid Transitions (never allowed):
    CONFIRMED -> any          (re-subscribing raises SubscriptionConflict)

Send-Before-Commit
==================
The confirmation email is delivered while the subscribe transaction is still
open. Delivery failure rolls the transaction back, so a token is either both
stored and delivered, or neither. Per-email serialization comes from the row
lock taken by get_status and, for brand-new emails, the unique constraint on
the email column.
"""

import logging
from dataclasses import dataclass

from .exceptions import SubscriptionConflict
from .ports import (
    ConfirmResult,
    EmailSender,
    SubscribeResult,
    SubscriberStatus,
    SubscriptionRepository,
    TemplateRenderer,
)
from .subscriber import ConfirmationToken, NewSubscriber

logger = logging.getLogger(__name__)

CONFIRMATION_SUBJECT = "Welcome!"


@dataclass
class SubscriptionService:
    """
    Domain service for subscriptions.

    Orchestrates the subscribe flow (status read, token issue or rotation,
    confirmation email, commit) and token redemption.
    """

    repository: SubscriptionRepository
    email_sender: EmailSender
    renderer: TemplateRenderer
    base_url: str

    async def subscribe(self, new_subscriber: NewSubscriber) -> SubscribeResult:
        """
        Subscribe an email address, or re-issue its token while pending.

        Args:
            new_subscriber: Validated name and email

        Returns:
            CREATED for a new subscriber, TOKEN_ROTATED for a pending one

        Raises:
            SubscriptionConflict: Email already confirmed, or lost an insert race
            DeliveryError: Confirmation email could not be sent (nothing committed)
            StoreError: Database or commit failure
        """
        token = ConfirmationToken.generate()

        async with self.repository.transaction() as tx:
            record = await tx.get_status(new_subscriber.email)
            logger.info("Subscriber status for %s: %s", new_subscriber.email, record.status.name)

            if record.status is SubscriberStatus.CONFIRMED:
                raise SubscriptionConflict(f"{new_subscriber.email} is already confirmed")

            if record.status is SubscriberStatus.NON_EXISTING:
                subscriber_id = await tx.insert_subscriber(new_subscriber)
                await tx.store_token(subscriber_id, token)
                result = SubscribeResult.CREATED
            else:
                await tx.rotate_token(record.subscriber_id, token)
                result = SubscribeResult.TOKEN_ROTATED

            await self.send_confirmation_email(new_subscriber, token)

        logger.info("Subscription for %s committed (%s)", new_subscriber.email, result.value)
        return result

    async def confirm(self, raw_token: str) -> ConfirmResult:
        """
        Redeem a confirmation token.

        Confirming an already confirmed subscriber is a successful no-op.

        Raises:
            ValidationError: Token is malformed
            StoreError: Database failure
        """
        token = ConfirmationToken.parse(raw_token)

        async with self.repository.transaction() as tx:
            subscriber_id = await tx.get_subscriber_id_by_token(token)
            if subscriber_id is None:
                logger.warning("Confirmation attempted with unknown token %r", token)
                return ConfirmResult.NOT_FOUND

            if await tx.confirm_subscriber(subscriber_id):
                logger.info("Subscriber %s confirmed", subscriber_id)
                return ConfirmResult.CONFIRMED

        logger.info("Subscriber %s was already confirmed", subscriber_id)
        return ConfirmResult.ALREADY_CONFIRMED

    async def send_confirmation_email(
        self, new_subscriber: NewSubscriber, token: ConfirmationToken
    ) -> None:
        """Render and deliver the confirmation email carrying the token link."""
        link = self.confirmation_link(token)
        body = self.renderer.render_confirmation(str(new_subscriber.name), link)
        await self.email_sender.send(
            new_subscriber.email, CONFIRMATION_SUBJECT, body.html, body.text
        )

    def confirmation_link(self, token: ConfirmationToken) -> str:
        return f"{self.base_url.rstrip('/')}/subscriptions/confirm?subscription_token={token}"
