"""
JWT token utilities for portal identities.

Authentication itself (login, passwords) belongs to the hosting platform; this
module only issues and verifies the access tokens it hands out.
"""
import structlog
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError

from portal.features.core.config import get_settings

logger = structlog.get_logger(__name__)

ALLOWED_ALGORITHMS = ["HS256", "HS384", "HS512"]


class TokenData(BaseModel):
    """JWT token payload structure.

    portal_id is None for host (super user) identities.
    """
    user_id: str
    portal_id: Optional[int] = None
    role: str
    email: str
    name: Optional[str] = None


class JWTUtils:
    """JWT token creation and validation utilities."""

    @staticmethod
    def _get_secret_key() -> str:
        secret = get_settings().JWT_SECRET_KEY
        if not secret:
            raise ValueError("JWT_SECRET_KEY environment variable is required")
        if len(secret) < 32:
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters long")
        return secret

    @staticmethod
    def _get_algorithm() -> str:
        algorithm = get_settings().JWT_ALGORITHM
        if algorithm not in ALLOWED_ALGORITHMS:
            raise ValueError(f"JWT_ALGORITHM '{algorithm}' is not supported. Use one of: {ALLOWED_ALGORITHMS}")
        return algorithm

    @staticmethod
    def create_access_token(
        user_id: str,
        portal_id: Optional[int],
        role: str,
        email: str,
        name: Optional[str] = None,
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """Create JWT access token with user and portal information."""
        if expires_delta is None:
            expires_delta = timedelta(minutes=get_settings().JWT_EXPIRE_MINUTES)

        now = datetime.now(timezone.utc)
        payload = {
            "user_id": user_id,
            "portal_id": portal_id,
            "role": role,
            "email": email,
            "name": name,
            "exp": now + expires_delta,
            "iat": now,
            "type": "access"
        }

        return jwt.encode(
            payload,
            JWTUtils._get_secret_key(),
            algorithm=JWTUtils._get_algorithm()
        )

    @staticmethod
    def verify_token(token: str) -> Optional[TokenData]:
        """Verify and decode a JWT access token; None when invalid or expired."""
        try:
            payload = jwt.decode(
                token,
                JWTUtils._get_secret_key(),
                algorithms=[JWTUtils._get_algorithm()]
            )

            if payload.get("type") != "access":
                return None

            return TokenData(
                user_id=payload["user_id"],
                portal_id=payload.get("portal_id"),
                role=payload["role"],
                email=payload["email"],
                name=payload.get("name"),
            )
        except (JWTError, ValidationError, KeyError) as e:
            logger.info("Rejected access token", error=str(e))
            return None
