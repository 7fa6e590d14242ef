"""
HTTP Basic authentication - Authorization header decoding.

Every way a header can be wrong (missing, other scheme, bad base64, bad
UTF-8, no ':' separator) raises InvalidAuthorizationHeader with its own
message for the logs. Clients only ever see a 401 with a Basic challenge.
"""

import base64
import logging

from fastapi import HTTPException, Request, Security, status
from fastapi.security import HTTPBasic

from src.domain.credentials import Credentials
from src.domain.exceptions import InvalidAuthorizationHeader

logger = logging.getLogger(__name__)

PUBLISH_REALM = "publish"
BASIC_CHALLENGE = {"WWW-Authenticate": f'Basic realm="{PUBLISH_REALM}"'}


class BasicAuthorizationHeader(HTTPBasic):
    """
    HTTP BASIC AUTH security scheme for OpenAPI documentation.

    Hands the raw Authorization header to parse_basic_auth instead of
    decoding it, so every malformed header gets the same 401 and log line.
    """

    async def __call__(self, request: Request) -> str | None:
        return request.headers.get("Authorization")


publish_basic_auth = BasicAuthorizationHeader(realm=PUBLISH_REALM, auto_error=False)


def parse_basic_auth(header_value: str | None) -> Credentials:
    """
    Decode an ``Authorization: Basic`` header value into credentials.

    The decoded ``username:password`` string is split on the first ':' only,
    so passwords may contain ':'.

    Raises:
        InvalidAuthorizationHeader: For any missing or malformed header
    """
    if header_value is None:
        raise InvalidAuthorizationHeader("The 'Authorization' header was missing")

    scheme, _, encoded_segment = header_value.partition(" ")
    if scheme != "Basic":
        raise InvalidAuthorizationHeader("The authorization scheme was not 'Basic'")

    try:
        decoded_bytes = base64.b64decode(encoded_segment.strip(), validate=True)
    except ValueError as e:
        raise InvalidAuthorizationHeader("Failed to base64-decode 'Basic' credentials") from e

    try:
        decoded_credentials = decoded_bytes.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidAuthorizationHeader("The decoded credential string is not valid UTF-8") from e

    username, separator, password = decoded_credentials.partition(":")
    if not separator:
        raise InvalidAuthorizationHeader("A password must be provided in 'Basic' auth")

    return Credentials(username=username, password=password)


def get_publisher_credentials(
    authorization: str | None = Security(publish_basic_auth),
) -> Credentials:
    """
    FastAPI dependency extracting Basic credentials for the publish endpoint.

    Raises:
        HTTPException: 401 with ``WWW-Authenticate: Basic realm="publish"``
    """
    try:
        return parse_basic_auth(authorization)
    except InvalidAuthorizationHeader as e:
        logger.warning("Rejected publish request: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication failed",
            headers=BASIC_CHALLENGE,
        ) from None
