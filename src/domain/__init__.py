"""
Domain layer - Pure business logic with zero framework imports.

This package contains the subscriber lifecycle state machine, the
confirmation-token protocol, credential verification and newsletter
broadcasting. It defines its own port interfaces for infrastructure
abstraction, ensuring true hexagonal architecture decoupling.
"""

from .credentials import CredentialVerifier, Credentials
from .exceptions import (
    AuthError,
    BroadcastError,
    DeliveryError,
    InvalidAuthorizationHeader,
    InvalidCredentials,
    NewsletterError,
    StoreError,
    SubscriptionConflict,
    UnexpectedAuthError,
    ValidationError,
)
from .newsletter import NewsletterIssue, NewsletterService
from .ports import (
    ConfirmResult,
    DeliveryReport,
    EmailSender,
    RenderedEmail,
    SubscribeResult,
    SubscriberRecord,
    SubscriberStatus,
    SubscriptionRepository,
    SubscriptionTransaction,
    TemplateRenderer,
    UserRepository,
)
from .subscriber import ConfirmationToken, NewSubscriber, SubscriberEmail, SubscriberName
from .subscription import SubscriptionService

__all__ = [
    "AuthError",
    "BroadcastError",
    "ConfirmResult",
    "ConfirmationToken",
    "CredentialVerifier",
    "Credentials",
    "DeliveryError",
    "DeliveryReport",
    "EmailSender",
    "InvalidAuthorizationHeader",
    "InvalidCredentials",
    "NewSubscriber",
    "NewsletterError",
    "NewsletterIssue",
    "NewsletterService",
    "RenderedEmail",
    "StoreError",
    "SubscribeResult",
    "SubscriberEmail",
    "SubscriberName",
    "SubscriberRecord",
    "SubscriberStatus",
    "SubscriptionConflict",
    "SubscriptionRepository",
    "SubscriptionService",
    "SubscriptionTransaction",
    "TemplateRenderer",
    "UnexpectedAuthError",
    "UserRepository",
    "ValidationError",
]
