from typing import Optional

from fastapi import Request, Depends, HTTPException

from portal.features.core.config import get_settings
from portal.middleware.request_context import parse_portal_id, portal_ctx_var


def get_current_portal() -> Optional[int]:
    """Return the portal id from the request ContextVar (set by middleware).

    Returns None if no portal is set.
    """
    return portal_ctx_var.get(None)


async def portal_from_token_dependency(request: Request) -> Optional[int]:
    """Portal carried by a verified identity token, if any."""
    from portal.features.auth.dependencies import get_current_user_token, security

    credentials = await security(request)
    token_data = await get_current_user_token(request, credentials)
    if token_data:
        return token_data.portal_id
    return None


async def portal_dependency(
    request: Request, token_portal: Optional[int] = Depends(portal_from_token_dependency)
) -> int:
    """FastAPI dependency that resolves the current portal.

    Precedence:
      1. portal from verified token
      2. X-Portal-ID header
      3. portal ContextVar (middleware)
      4. fallback: DEFAULT_PORTAL_ID

    A host identity (token portal None) may address any portal.
    If both token and header name a portal and they disagree, raise 403.
    """
    header_portal = parse_portal_id(request.headers.get("x-portal-id"))
    if token_portal is not None and header_portal is not None and token_portal != header_portal:
        raise HTTPException(
            status_code=403,
            detail="Portal mismatch between auth token and X-Portal-ID header",
        )

    for candidate in (token_portal, header_portal, get_current_portal()):
        if candidate is not None:
            return candidate
    return get_settings().DEFAULT_PORTAL_ID
