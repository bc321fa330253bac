"""
Authentication dependencies for FastAPI dependency injection.
"""
from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from .jwt_utils import JWTUtils, TokenData

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


async def get_current_user_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[TokenData]:
    """Extract and validate JWT token from Authorization header or cookies."""
    token = None

    if credentials:
        token = credentials.credentials
    elif request.cookies.get("access_token"):
        token = request.cookies.get("access_token")

    if not token:
        return None

    return JWTUtils.verify_token(token)


async def get_optional_current_user(
    token_data: Optional[TokenData] = Depends(get_current_user_token),
) -> Optional[TokenData]:
    """Current identity, or None for anonymous visitors."""
    return token_data

