"""
Newsletter domain service - Broadcast an issue to confirmed subscribers.

Delivery is best-effort and at-most-once: each recipient gets one attempt,
a failure never rolls back or retries the others, and nothing here is
transactional with the database.
"""

import asyncio
import logging
from dataclasses import dataclass

from .exceptions import BroadcastError, DeliveryError
from .ports import DeliveryReport, EmailSender, SubscriptionRepository
from .subscriber import SubscriberEmail

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NewsletterIssue:
    """Title and bodies of one newsletter issue."""

    title: str
    html: str
    text: str


@dataclass
class NewsletterService:
    """Fans a newsletter issue out to every confirmed subscriber."""

    repository: SubscriptionRepository
    email_sender: EmailSender
    concurrency: int = 4

    async def publish(self, issue: NewsletterIssue) -> DeliveryReport:
        """
        Send an issue to all confirmed subscribers.

        At most ``concurrency`` deliveries are in flight at once.

        Returns:
            DeliveryReport listing every recipient as delivered

        Raises:
            StoreError: Confirmed subscribers could not be fetched
            BroadcastError: At least one recipient failed; carries the report
        """
        recipients = await self.repository.fetch_confirmed_emails()
        logger.info("Publishing %r to %d confirmed subscriber(s)", issue.title, len(recipients))

        report = DeliveryReport()
        semaphore = asyncio.Semaphore(max(1, self.concurrency))

        async def deliver(recipient: SubscriberEmail) -> None:
            async with semaphore:
                try:
                    await self.email_sender.send(recipient, issue.title, issue.html, issue.text)
                except DeliveryError:
                    logger.exception("Failed to deliver newsletter issue to %s", recipient)
                    report.failed.append(str(recipient))
                else:
                    report.delivered.append(str(recipient))

        await asyncio.gather(*(deliver(recipient) for recipient in recipients))

        if report.failed:
            raise BroadcastError(report)
        return report
