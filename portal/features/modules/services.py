"""
Module and module permission services.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.features.auth.jwt_utils import TokenData
from portal.features.auth.permissions import SecurityAccessLevel, access_level_for
from portal.features.core.audit_mixin import AuditContext
from portal.features.core.base_service import BaseService, PortalScopedCRUDService

from .models import Module, ModulePermission
from .schemas import ModuleCreate, ModuleSettingsUpdate


class ModuleService(PortalScopedCRUDService[Module]):
    """Look up and configure module instances of one portal."""

    def __init__(self, db_session: AsyncSession, portal_id: Optional[int]):
        super().__init__(db_session, portal_id, Module)

    async def get_module(self, module_id: str) -> Optional[Module]:
        return await self.get_by_id(module_id)

    async def get_module_by_definition(self, portal_id: int, definition_name: str) -> Optional[Module]:
        """First module of the given definition placed in the portal."""
        stmt = (
            select(Module)
            .where(Module.portal_id == portal_id, Module.definition_name == definition_name)
            .order_by(Module.created_at, Module.id)
            .limit(1)
        )
        return (await self.db.execute(stmt)).scalar_one_or_none()

    async def create_module(self, payload: ModuleCreate, user=None, portal_id: Optional[int] = None) -> Module:
        resolved_portal = self.portal_id if self.portal_id is not None else portal_id
        if resolved_portal is None:
            raise ValueError("Portal context is required to create a module.")
        try:
            module = Module(portal_id=resolved_portal, **payload.model_dump())
            audit = AuditContext.from_user(user)
            module.set_created_by(audit.user_email, audit.user_name)
            self.db.add(module)
            await self.db.flush()
            self.log_operation("create_module", f"{payload.definition_name} on tab {payload.tab_id}")
            return module
        except Exception as exc:
            await self.handle_service_error("create_module", exc)

    async def update_settings(self, module: Module, payload: ModuleSettingsUpdate, user=None) -> Module:
        try:
            for key, value in payload.model_dump(exclude_unset=True).items():
                setattr(module, key, value)
            audit = AuditContext.from_user(user)
            module.set_updated_by(audit.user_email, audit.user_name)
            await self.db.flush()
            self.log_operation("update_settings", f"module {module.id}")
            return module
        except Exception as exc:
            await self.handle_service_error("update_settings", exc, module.id)


class ModulePermissionService(BaseService[ModulePermission]):
    """Decide whether an identity may act on a module."""

    def __init__(self, db_session: AsyncSession):
        super().__init__(db_session, portal_id=None)

    async def grant(self, module: Module, role_name: str, permission_key: str) -> ModulePermission:
        try:
            permission = ModulePermission(
                module_id=module.id,
                role_name=role_name,
                permission_key=permission_key.upper(),
                allowed=True,
            )
            self.db.add(permission)
            await self.db.flush()
            self.log_operation("grant", f"{permission_key} on {module.id} to {role_name}")
            return permission
        except Exception as exc:
            await self.handle_service_error("grant", exc, module.id)

    async def has_module_access(
        self,
        access_level: SecurityAccessLevel,
        permission_key: str,
        module: Module,
        user: Optional[TokenData],
    ) -> bool:
        """
        True when the identity reaches access_level on the module.

        Host identities pass everywhere; identities of another portal never
        pass. Within the portal the role's own level counts first, then an
        explicit grant of permission_key (an EDIT grant also covers VIEW).
        ADMIN and HOST levels cannot be granted per module.
        """
        if access_level <= SecurityAccessLevel.ANONYMOUS:
            return True

        if user is not None:
            if user.portal_id is not None and user.portal_id != module.portal_id:
                return False
            if access_level_for(user) >= access_level:
                return True

        if access_level > SecurityAccessLevel.EDIT:
            return False

        keys = {permission_key.upper()}
        if "VIEW" in keys:
            keys.add("EDIT")

        role_name = user.role if user is not None else "anonymous"
        stmt = select(ModulePermission.id).where(
            ModulePermission.module_id == module.id,
            ModulePermission.role_name == role_name,
            ModulePermission.permission_key.in_(keys),
            ModulePermission.allowed.is_(True),
        ).limit(1)
        return (await self.db.execute(stmt)).first() is not None
