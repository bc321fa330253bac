"""
Anti-forgery (request verification) tokens for HTML form posts.

A token is kept in the signed session cookie and echoed back by forms as a
hidden input. Requires SessionMiddleware.
"""
import hmac
import secrets

from fastapi import HTTPException, Request, status

from .structured_logging import security_logger

TOKEN_FIELD_NAME = "__RequestVerificationToken"
SESSION_KEY = "antiforgery_token"


def issue_antiforgery_token(request: Request) -> str:
    """Return the session's verification token, creating one if needed."""
    token = request.session.get(SESSION_KEY)
    if not token:
        token = secrets.token_urlsafe(32)
        request.session[SESSION_KEY] = token
    return token


async def validate_antiforgery_token(request: Request) -> None:
    """FastAPI dependency rejecting form posts without the session's token."""
    expected = request.session.get(SESSION_KEY)
    form = await request.form()
    submitted = form.get(TOKEN_FIELD_NAME)

    if not expected or not isinstance(submitted, str) or not hmac.compare_digest(expected, submitted):
        security_logger.log_antiforgery_failure(
            path=request.url.path,
            ip_address=request.client.host if request.client else None,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid request verification token",
        )
