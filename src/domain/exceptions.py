"""
Domain exceptions - Semantic error types for the newsletter service.

This module defines domain-specific exceptions that communicate
business rule violations and infrastructure faults without leaking
driver or framework details. The API layer maps each family to an
HTTP status code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .ports import DeliveryReport


class NewsletterError(Exception):
    """Base class for newsletter domain errors."""

    pass


class ValidationError(NewsletterError):
    """Malformed user input (email, name or token syntax)."""

    pass


class SubscriptionConflict(NewsletterError):
    """Email is already confirmed, or a concurrent subscribe won the insert."""

    pass


class AuthError(NewsletterError):
    """Base class for authentication failures."""

    pass


class InvalidCredentials(AuthError):
    """Wrong password or unknown username - intentionally indistinguishable."""

    pass


class UnexpectedAuthError(AuthError):
    """Malformed stored hash or infrastructure fault during authentication."""

    pass


class InvalidAuthorizationHeader(AuthError):
    """Missing or malformed HTTP Basic Authorization header."""

    pass


class StoreError(NewsletterError):
    """Database, connection or commit fault with no business meaning."""

    pass


class DeliveryError(NewsletterError):
    """Outbound email could not be delivered (HTTP error, timeout, transport)."""

    pass


class BroadcastError(DeliveryError):
    """One or more recipients of a newsletter issue could not be reached."""

    def __init__(self, report: DeliveryReport) -> None:
        self.report = report
        super().__init__(f"Newsletter delivery failed for {len(report.failed)} recipient(s)")
