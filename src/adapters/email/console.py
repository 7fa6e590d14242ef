"""
Console email sender adapter - Implements EmailSender protocol.

This module provides a console-based implementation of the domain's
email sender port, logging outbound emails for local development.
"""

import logging

from src.domain.subscriber import SubscriberEmail

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    Implements EmailSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - confirmation links show up in the logs.
    """

    async def send(self, recipient: SubscriberEmail, subject: str, html: str, text: str) -> None:
        """
        Log an email instead of delivering it (never fails).

        The plain-text body is logged at INFO level so confirmation links are
        visible in docker-compose logs.
        """
        logger.info("[EMAIL] To: %s Subject: %s\n%s", recipient, subject, text)

    async def aclose(self) -> None:
        pass
