"""
Newsletter routes.

- POST /newsletters - Broadcast an issue to confirmed subscribers (Basic auth)
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from src.api.dependencies import get_credential_verifier, get_newsletter_service
from src.api.models import ErrorResponse, PublishNewsletterRequest, PublishResponse
from src.api.security import BASIC_CHALLENGE, get_publisher_credentials
from src.domain.credentials import CredentialVerifier, Credentials
from src.domain.exceptions import (
    BroadcastError,
    DeliveryError,
    InvalidCredentials,
    StoreError,
    UnexpectedAuthError,
)
from src.domain.newsletter import NewsletterIssue, NewsletterService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["newsletters"])


@router.post(
    "/newsletters",
    response_model=PublishResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Missing or invalid credentials"},
        422: {"description": "Malformed body"},
        500: {"model": ErrorResponse, "description": "Internal error or failed delivery"},
    },
    summary="Publish a newsletter issue",
    description="Send an issue to every confirmed subscriber. "
    "Credentials (username:password) are provided via HTTP BASIC AUTH header.",
)
async def publish_newsletter(
    request_data: PublishNewsletterRequest,
    credentials: Credentials = Depends(get_publisher_credentials),
    verifier: CredentialVerifier = Depends(get_credential_verifier),
    service: NewsletterService = Depends(get_newsletter_service),
) -> PublishResponse:
    """
    Publish a newsletter issue.

    - **title**: Subject line
    - **content.html** / **content.text**: Email bodies
    """
    try:
        user_id = await verifier.validate_credentials(credentials)
    except InvalidCredentials:
        # Same response for unknown user and wrong password
        logger.warning("Invalid publish credentials for %r", credentials.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication failed",
            headers=BASIC_CHALLENGE,
        ) from None
    except UnexpectedAuthError:
        logger.exception("Failed to validate publish credentials for %r", credentials.username)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from None

    logger.info("User %s (%s) publishing %r", credentials.username, user_id, request_data.title)

    issue = NewsletterIssue(
        title=request_data.title,
        html=request_data.content.html,
        text=request_data.content.text,
    )

    try:
        report = await service.publish(issue)
    except BroadcastError as e:
        logger.error(
            "Newsletter %r reached %d subscriber(s), failed for: %s",
            issue.title,
            len(e.report.delivered),
            ", ".join(e.report.failed),
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Newsletter delivery failed",
        ) from None
    except (StoreError, DeliveryError):
        logger.exception("Failed to publish newsletter %r", issue.title)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from None

    return PublishResponse(message="Newsletter published", recipients=len(report.delivered))
