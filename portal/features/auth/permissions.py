"""
Security access levels for module actions and routes.
"""
from enum import IntEnum
from typing import Optional

from .jwt_utils import TokenData


class SecurityAccessLevel(IntEnum):
    """Ordered access levels; a higher level implies every lower one."""
    ANONYMOUS = 0
    VIEW = 1
    EDIT = 2
    ADMIN = 3
    HOST = 4


ROLE_ACCESS_LEVELS = {
    "registered": SecurityAccessLevel.VIEW,
    "user": SecurityAccessLevel.VIEW,
    "editor": SecurityAccessLevel.EDIT,
    "admin": SecurityAccessLevel.ADMIN,
    "host": SecurityAccessLevel.HOST,
}


def access_level_for(user: Optional[TokenData]) -> SecurityAccessLevel:
    """Portal-wide access level granted by a user's role."""
    if user is None:
        return SecurityAccessLevel.ANONYMOUS
    return ROLE_ACCESS_LEVELS.get(user.role, SecurityAccessLevel.VIEW)


def is_host(user: Optional[TokenData]) -> bool:
    return access_level_for(user) == SecurityAccessLevel.HOST
