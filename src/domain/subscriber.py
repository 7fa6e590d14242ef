"""
Identity primitives - Validated value types for subscribers.

Each type is a frozen dataclass built through a ``parse`` smart constructor,
so an instance in hand is always well-formed. Handler and store code never
deals with raw strings for these values.
"""

import secrets
import string
from dataclasses import dataclass

from email_validator import EmailNotValidError, validate_email

from .exceptions import ValidationError

NAME_MAX_LENGTH = 256
FORBIDDEN_NAME_CHARACTERS = frozenset('/()"<>\\{}')

TOKEN_LENGTH = 25
TOKEN_ALPHABET = string.ascii_letters + string.digits


@dataclass(frozen=True)
class SubscriberEmail:
    """Email address that passed a syntactic RFC-shape check."""

    value: str

    @classmethod
    def parse(cls, raw: str) -> "SubscriberEmail":
        """
        Validate an email address.

        No normalization is applied: the stored value is the caller's string.
        Deliverability (DNS) is not checked.

        Raises:
            ValidationError: If the address is not syntactically valid
        """
        try:
            validate_email(raw, check_deliverability=False)
        except EmailNotValidError as e:
            raise ValidationError(f"{raw!r} is not a valid subscriber email") from e
        return cls(raw)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SubscriberName:
    """Display name: non-blank, at most 256 characters, no markup-hostile characters."""

    value: str

    @classmethod
    def parse(cls, raw: str) -> "SubscriberName":
        if not raw.strip():
            raise ValidationError("Subscriber name is empty")
        if len(raw) > NAME_MAX_LENGTH:
            raise ValidationError(f"Subscriber name exceeds {NAME_MAX_LENGTH} characters")
        if any(char in FORBIDDEN_NAME_CHARACTERS for char in raw):
            raise ValidationError("Subscriber name contains forbidden characters")
        return cls(raw)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ConfirmationToken:
    """
    Single-use subscription confirmation token.

    25 alphanumeric characters give roughly 62^25 (~10^45) possible values,
    so collisions are negligible.
    """

    value: str

    @classmethod
    def parse(cls, raw: str) -> "ConfirmationToken":
        if not raw.strip():
            raise ValidationError("Confirmation token is empty")
        if len(raw) != TOKEN_LENGTH:
            raise ValidationError(f"Confirmation token must be {TOKEN_LENGTH} characters")
        if not raw.isalnum():
            raise ValidationError("Confirmation token contains forbidden characters")
        return cls(raw)

    @classmethod
    def generate(cls) -> "ConfirmationToken":
        """Generate a token from the secrets module's CSPRNG."""
        return cls("".join(secrets.choice(TOKEN_ALPHABET) for _ in range(TOKEN_LENGTH)))

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        # Tokens are bearer secrets; keep them out of logs and tracebacks
        return f"ConfirmationToken('{self.value[:4]}...')"


@dataclass(frozen=True)
class NewSubscriber:
    """A validated subscription request."""

    email: SubscriberEmail
    name: SubscriberName

    @classmethod
    def parse(cls, email: str, name: str) -> "NewSubscriber":
        return cls(email=SubscriberEmail.parse(email), name=SubscriberName.parse(name))
