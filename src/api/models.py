"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Syntactic validation of names, emails and tokens happens in the domain
primitives, not here, so it stays a 400 rather than a 422.
"""

from pydantic import BaseModel, Field


class NewsletterContent(BaseModel):
    """Bodies of a newsletter issue."""

    html: str = Field(..., description="HTML body")
    text: str = Field(..., description="Plain-text body")


class PublishNewsletterRequest(BaseModel):
    """Request model for publishing a newsletter issue."""

    title: str = Field(..., description="Email subject of the issue")
    content: NewsletterContent


class SubscribeResponse(BaseModel):
    """Response model for a successful subscription request."""

    message: str


class ConfirmResponse(BaseModel):
    """Response model for a successful confirmation."""

    message: str


class PublishResponse(BaseModel):
    """Response model for a successful newsletter broadcast."""

    message: str
    recipients: int


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
