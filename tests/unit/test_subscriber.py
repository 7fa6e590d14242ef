"""
Unit tests for identity primitives.

Tests verify:
- SubscriberName length, blank and forbidden-character rules
- SubscriberEmail syntactic validation without normalization
- ConfirmationToken shape and generation
"""

import pytest

from src.domain.exceptions import ValidationError
from src.domain.subscriber import (
    FORBIDDEN_NAME_CHARACTERS,
    TOKEN_LENGTH,
    ConfirmationToken,
    NewSubscriber,
    SubscriberEmail,
    SubscriberName,
)


class TestSubscriberName:
    """Tests for SubscriberName.parse."""

    def test_256_grapheme_long_name_is_valid(self) -> None:
        """A name of exactly 256 characters is accepted."""
        name = SubscriberName.parse("ё" * 256)
        assert len(name.value) == 256

    def test_name_longer_than_256_is_rejected(self) -> None:
        """A name of 257 characters is rejected."""
        with pytest.raises(ValidationError):
            SubscriberName.parse("a" * 257)

    @pytest.mark.parametrize("raw", ["", " ", "   \t\n"])
    def test_blank_names_are_rejected(self, raw: str) -> None:
        """Empty or whitespace-only names are rejected."""
        with pytest.raises(ValidationError):
            SubscriberName.parse(raw)

    @pytest.mark.parametrize("char", sorted(FORBIDDEN_NAME_CHARACTERS))
    def test_names_containing_forbidden_characters_are_rejected(self, char: str) -> None:
        """Each of / ( ) \" < > \\ { } is rejected anywhere in the name."""
        with pytest.raises(ValidationError):
            SubscriberName.parse(f"ursula{char}le guin")

    def test_valid_name_is_kept_verbatim(self) -> None:
        """Valid names are stored without trimming."""
        assert SubscriberName.parse(" Ursula Le Guin ").value == " Ursula Le Guin "

    def test_forbidden_character_set(self) -> None:
        """The forbidden set is exactly the nine markup-hostile characters."""
        assert FORBIDDEN_NAME_CHARACTERS == frozenset('/()"<>\\{}')


class TestSubscriberEmail:
    """Tests for SubscriberEmail.parse."""

    @pytest.mark.parametrize("raw", ["", "ursuladomain.com", "@domain.com"])
    def test_invalid_emails_are_rejected(self, raw: str) -> None:
        with pytest.raises(ValidationError):
            SubscriberEmail.parse(raw)

    @pytest.mark.parametrize(
        "raw",
        ["ursula@domain.com", "le.guin+news@example.org", "a_b@sub.example.co.uk"],
    )
    def test_valid_emails_are_accepted(self, raw: str) -> None:
        assert SubscriberEmail.parse(raw).value == raw

    def test_email_is_not_normalized(self) -> None:
        """Case is preserved; the stored value is the caller's string."""
        assert str(SubscriberEmail.parse("Ursula@Example.COM")) == "Ursula@Example.COM"


class TestConfirmationToken:
    """Tests for ConfirmationToken parse and generate."""

    def test_generated_token_has_expected_shape(self) -> None:
        token = ConfirmationToken.generate()
        assert len(token.value) == TOKEN_LENGTH
        assert token.value.isascii()
        assert token.value.isalnum()

    def test_generated_tokens_differ(self) -> None:
        tokens = {ConfirmationToken.generate().value for _ in range(50)}
        assert len(tokens) == 50

    def test_generated_token_parses(self) -> None:
        token = ConfirmationToken.generate()
        assert ConfirmationToken.parse(token.value) == token

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            " " * 25,
            "a" * 24,
            "a" * 26,
            "a" * 24 + "-",
            "a" * 12 + " " + "a" * 12,
        ],
    )
    def test_malformed_tokens_are_rejected(self, raw: str) -> None:
        with pytest.raises(ValidationError):
            ConfirmationToken.parse(raw)

    def test_non_ascii_alphanumerics_are_accepted(self) -> None:
        assert ConfirmationToken.parse("a" * 24 + "é").value == "a" * 24 + "é"

    def test_repr_does_not_leak_the_token(self) -> None:
        token = ConfirmationToken.parse("abcdEFGH1234abcdEFGH1234x")
        assert "abcdEFGH1234abcdEFGH1234x" not in repr(token)
        assert repr(token).startswith("ConfirmationToken('abcd")

    def test_str_is_the_raw_token(self) -> None:
        assert str(ConfirmationToken.parse("Z" * 25)) == "Z" * 25


class TestNewSubscriber:
    """Tests for NewSubscriber.parse."""

    def test_parses_both_fields(self) -> None:
        subscriber = NewSubscriber.parse(email="ursula@domain.com", name="Ursula")
        assert subscriber.email == SubscriberEmail("ursula@domain.com")
        assert subscriber.name == SubscriberName("Ursula")

    def test_invalid_email_raises(self) -> None:
        with pytest.raises(ValidationError):
            NewSubscriber.parse(email="not-an-email", name="Ursula")

    def test_invalid_name_raises(self) -> None:
        with pytest.raises(ValidationError):
            NewSubscriber.parse(email="ursula@domain.com", name="<script>")
