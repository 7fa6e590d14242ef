"""
Subscription routes.

- POST /subscriptions - Subscribe (or re-issue a pending confirmation)
- GET /subscriptions/confirm - Redeem a confirmation token
"""

import logging
from dataclasses import dataclass

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.exceptions import RequestValidationError

from src.api.dependencies import get_subscription_service
from src.api.models import ConfirmResponse, ErrorResponse, SubscribeResponse
from src.domain.exceptions import (
    DeliveryError,
    StoreError,
    SubscriptionConflict,
    ValidationError,
)
from src.domain.ports import ConfirmResult
from src.domain.subscriber import NewSubscriber
from src.domain.subscription import SubscriptionService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["subscriptions"])

SUBSCRIPTION_FORM_SCHEMA = {
    "type": "object",
    "required": ["name", "email"],
    "properties": {
        "name": {"type": "string", "title": "Name", "maxLength": 256},
        "email": {"type": "string", "title": "Email", "format": "email"},
    },
}


@dataclass(frozen=True)
class SubscriptionForm:
    """Raw subscription form values, possibly empty."""

    name: str
    email: str


async def read_subscription_form(request: Request) -> SubscriptionForm:
    """
    Read the url-encoded subscription form.

    FastAPI's Form() treats ``name=`` as an absent field. Here only an absent
    key is a 422; an empty value is passed on so validation answers 400.

    Raises:
        RequestValidationError: If ``name`` or ``email`` is absent
    """
    form = await request.form()
    missing = [field for field in ("name", "email") if not isinstance(form.get(field), str)]
    if missing:
        raise RequestValidationError(
            [
                {"type": "missing", "loc": ("body", field), "msg": "Field required", "input": None}
                for field in missing
            ]
        )
    return SubscriptionForm(name=form["name"], email=form["email"])


@router.post(
    "/subscriptions",
    response_model=SubscribeResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid name or email"},
        409: {"model": ErrorResponse, "description": "Email already confirmed"},
        422: {"description": "Missing form fields"},
        500: {"model": ErrorResponse, "description": "Internal error"},
    },
    summary="Subscribe to the newsletter",
    description="Submit a name and email address. A confirmation link is emailed "
    "to the address; submitting again while unconfirmed sends a fresh link.",
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "application/x-www-form-urlencoded": {"schema": SUBSCRIPTION_FORM_SCHEMA}
            },
        }
    },
)
async def subscribe(
    form: SubscriptionForm = Depends(read_subscription_form),
    service: SubscriptionService = Depends(get_subscription_service),
) -> SubscribeResponse:
    """
    Subscribe a visitor and send the confirmation email.

    - **name**: Display name (max 256 characters)
    - **email**: Address to subscribe
    """
    try:
        new_subscriber = NewSubscriber.parse(email=form.email, name=form.name)
    except ValidationError as e:
        logger.warning("Rejected subscription request: %s", e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None

    logger.info("Adding %r <%s> as a new subscriber", form.name, form.email)

    try:
        await service.subscribe(new_subscriber)
    except SubscriptionConflict as e:
        logger.warning("Subscription conflict: %s", e)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Subscription failed",
        ) from None
    except (StoreError, DeliveryError):
        logger.exception("Failed to subscribe %s", form.email)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from None

    return SubscribeResponse(message="Confirmation email sent")


@router.get(
    "/subscriptions/confirm",
    response_model=ConfirmResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing or malformed token"},
        404: {"model": ErrorResponse, "description": "Unknown token"},
        500: {"model": ErrorResponse, "description": "Internal error"},
    },
    summary="Confirm a pending subscription",
    description="Redeem the token from the confirmation email. "
    "Confirming twice is harmless.",
)
async def confirm(
    subscription_token: str | None = Query(default=None),
    service: SubscriptionService = Depends(get_subscription_service),
) -> ConfirmResponse:
    """Mark the subscriber owning the token as confirmed."""
    if subscription_token is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing subscription token",
        )

    try:
        result = await service.confirm(subscription_token)
    except ValidationError as e:
        logger.warning("Rejected confirmation request: %s", e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    except StoreError:
        logger.exception("Failed to confirm subscription")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from None

    if result is ConfirmResult.NOT_FOUND:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown token")

    return ConfirmResponse(message="Subscription confirmed")
