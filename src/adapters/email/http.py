"""
HTTP email delivery adapter - Implements EmailSender protocol.

Relays emails to a Postmark-style delivery API: one JSON POST per message,
authenticated with a server token header. A single httpx.AsyncClient is
shared by all requests so connections are pooled, and every call is bounded
by the configured timeout.
"""

import logging

import httpx

from src.domain.exceptions import DeliveryError
from src.domain.subscriber import SubscriberEmail

logger = logging.getLogger(__name__)

TOKEN_HEADER = "X-Postmark-Server-Token"


class HttpEmailClient:
    """
    Implements EmailSender protocol via an HTTP delivery API.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(
        self,
        base_url: str,
        sender: SubscriberEmail,
        authorization_token: str,
        timeout: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            base_url: Root URL of the delivery service
            sender: Address used in the From field
            authorization_token: Server token for the delivery API
            timeout: Seconds before a delivery call is abandoned
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.sender = sender
        self._authorization_token = authorization_token
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    async def send(self, recipient: SubscriberEmail, subject: str, html: str, text: str) -> None:
        payload = {
            "from": self.sender.value,
            "to": recipient.value,
            "subject": subject,
            "html_body": html,
            "text_body": text,
        }

        try:
            response = await self._client.post(
                "/email",
                json=payload,
                headers={TOKEN_HEADER: self._authorization_token},
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise DeliveryError(f"Timed out delivering email to {recipient}") from e
        except httpx.HTTPStatusError as e:
            raise DeliveryError(
                f"Delivery service answered {e.response.status_code} for {recipient}"
            ) from e
        except httpx.HTTPError as e:
            raise DeliveryError(f"Failed to deliver email to {recipient}") from e

        logger.debug("Delivered %r to %s", subject, recipient)

    async def aclose(self) -> None:
        await self._client.aclose()
