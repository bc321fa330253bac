"""Dependency helpers for module services and module context."""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from portal.deps.portal import portal_dependency
from portal.features.auth.dependencies import get_optional_current_user
from portal.features.auth.jwt_utils import TokenData
from portal.features.auth.permissions import SecurityAccessLevel
from portal.features.core.config import Settings, get_settings
from portal.features.core.database import get_db
from portal.features.core.structured_logging import security_logger

from .models import Module
from .services import ModuleService, ModulePermissionService


@dataclass
class PortalSettings:
    portal_id: int
    home_directory: str

    @classmethod
    def for_portal(cls, portal_id: int, settings: Settings) -> "PortalSettings":
        return cls(portal_id=portal_id, home_directory=settings.portal_home_directory(portal_id))


@dataclass
class ModuleContext:
    """The module a request addresses, with its portal and caller."""

    module: Module
    portal: PortalSettings
    user: Optional[TokenData]


async def get_module_service(
    session: AsyncSession = Depends(get_db),
    portal_id: int = Depends(portal_dependency),
) -> ModuleService:
    """Provide a ModuleService scoped to the current portal."""
    return ModuleService(session, portal_id)


async def get_module_permission_service(
    session: AsyncSession = Depends(get_db),
) -> ModulePermissionService:
    return ModulePermissionService(session)


async def get_module_context(
    module_id: str,
    portal_id: int = Depends(portal_dependency),
    module_service: ModuleService = Depends(get_module_service),
    user: Optional[TokenData] = Depends(get_optional_current_user),
) -> ModuleContext:
    """Resolve the addressed module; 404 when missing or placed in another portal."""
    module = await module_service.get_module(module_id)
    if module is None or module.portal_id != portal_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Module not found")
    return ModuleContext(
        module=module,
        portal=PortalSettings.for_portal(portal_id, get_settings()),
        user=user,
    )


def require_module_access(access_level: SecurityAccessLevel, permission_key: str):
    """Build a dependency enforcing an access level on the addressed module."""

    async def _require(
        request: Request,
        context: ModuleContext = Depends(get_module_context),
        permission_service: ModulePermissionService = Depends(get_module_permission_service),
    ) -> ModuleContext:
        if await permission_service.has_module_access(access_level, permission_key, context.module, context.user):
            return context

        if context.user is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Not authenticated",
                headers={"WWW-Authenticate": "Bearer"},
            )
        security_logger.log_access_violation(
            resource=request.url.path,
            action=permission_key,
            user_id=context.user.user_id,
            portal_id=context.portal.portal_id,
        )
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient module permissions")

    return _require
