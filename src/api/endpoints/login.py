"""
Login routes.

- GET /login - HTML login form, optionally showing an error message
- POST /login - Check credentials and redirect (303)
"""

import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from src.api.dependencies import get_credential_verifier, get_page_templates
from src.domain.credentials import CredentialVerifier, Credentials
from src.domain.exceptions import InvalidCredentials, UnexpectedAuthError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["login"])


def _login_error_redirect(message: str) -> RedirectResponse:
    return RedirectResponse(
        url=f"/login?{urlencode({'error': message})}",
        status_code=status.HTTP_303_SEE_OTHER,
    )


@router.get("/login", response_class=HTMLResponse, summary="Login form")
async def login_form(
    request: Request,
    error: str | None = None,
    templates: Jinja2Templates = Depends(get_page_templates),
) -> HTMLResponse:
    return templates.TemplateResponse(request, "login.html", {"error": error})


@router.post(
    "/login",
    response_class=RedirectResponse,
    status_code=status.HTTP_303_SEE_OTHER,
    summary="Log in",
    description="Redirects to / on success, back to /login with an error message otherwise.",
)
async def login(
    username: str = Form(...),
    password: str = Form(...),
    verifier: CredentialVerifier = Depends(get_credential_verifier),
) -> RedirectResponse:
    credentials = Credentials(username=username, password=password)

    try:
        user_id = await verifier.validate_credentials(credentials)
    except InvalidCredentials:
        logger.warning("Failed login for %r", username)
        return _login_error_redirect("Authentication failed")
    except UnexpectedAuthError:
        logger.exception("Failed to validate login credentials for %r", username)
        return _login_error_redirect("Something went wrong")

    logger.info("User %s (%s) logged in", username, user_id)
    return RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)
