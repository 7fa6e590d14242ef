"""
Unit tests for HTTP Basic authentication parsing.

Tests verify every malformed header is rejected with InvalidAuthorizationHeader
and that only the first ':' separates username from password.
"""

from base64 import b64encode

import pytest

from src.api.security import BASIC_CHALLENGE, parse_basic_auth
from src.domain.exceptions import AuthError, InvalidAuthorizationHeader


def basic(raw: bytes) -> str:
    return "Basic " + b64encode(raw).decode()


class TestParseBasicAuth:
    """Tests for parse_basic_auth."""

    def test_valid_header(self) -> None:
        credentials = parse_basic_auth(basic(b"alice:secret"))
        assert credentials.username == "alice"
        assert credentials.password == "secret"

    def test_splits_on_first_colon_only(self) -> None:
        credentials = parse_basic_auth(basic(b"alice:secret:word"))
        assert credentials.username == "alice"
        assert credentials.password == "secret:word"

    def test_empty_password_is_allowed(self) -> None:
        credentials = parse_basic_auth(basic(b"alice:"))
        assert credentials.password == ""

    def test_utf8_credentials(self) -> None:
        credentials = parse_basic_auth(basic("jürgen:pässword".encode()))
        assert credentials.username == "jürgen"
        assert credentials.password == "pässword"

    def test_missing_header(self) -> None:
        with pytest.raises(InvalidAuthorizationHeader, match="missing"):
            parse_basic_auth(None)

    @pytest.mark.parametrize("header", ["Bearer abc.def", "basic YWxpY2U6c2VjcmV0", "Digest x"])
    def test_wrong_scheme(self, header: str) -> None:
        with pytest.raises(InvalidAuthorizationHeader, match="scheme"):
            parse_basic_auth(header)

    def test_malformed_base64(self) -> None:
        with pytest.raises(InvalidAuthorizationHeader, match="base64"):
            parse_basic_auth("Basic not*base64!")

    def test_non_ascii_base64_segment(self) -> None:
        with pytest.raises(InvalidAuthorizationHeader, match="base64"):
            parse_basic_auth("Basic éééé")

    def test_invalid_utf8(self) -> None:
        with pytest.raises(InvalidAuthorizationHeader, match="UTF-8"):
            parse_basic_auth(basic(b"\xff\xfe:\xff"))

    def test_missing_separator(self) -> None:
        with pytest.raises(InvalidAuthorizationHeader, match="password"):
            parse_basic_auth(basic(b"alice"))

    def test_is_an_auth_error(self) -> None:
        with pytest.raises(AuthError):
            parse_basic_auth(None)


class TestBasicChallenge:
    def test_challenge_names_publish_realm(self) -> None:
        assert BASIC_CHALLENGE == {"WWW-Authenticate": 'Basic realm="publish"'}
