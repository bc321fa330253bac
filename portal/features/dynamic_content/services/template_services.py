"""
Content template lookups.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from portal.features.core.audit_mixin import AuditContext
from portal.features.core.base_service import PortalScopedCRUDService

from ..models import ContentTemplateRecord
from ..schemas import ContentTemplateCreate


class ContentTemplateService(PortalScopedCRUDService[ContentTemplateRecord]):
    """Find the templates a portal may use, optionally including host templates."""

    def __init__(self, db_session: AsyncSession, portal_id: Optional[int]):
        super().__init__(db_session, portal_id, ContentTemplateRecord)

    @staticmethod
    def _scope_filter(portal_id: Optional[int], include_host: bool):
        if portal_id is None:
            return ContentTemplateRecord.portal_id.is_(None)
        if include_host:
            return or_(
                ContentTemplateRecord.portal_id == portal_id,
                ContentTemplateRecord.portal_id.is_(None),
            )
        return ContentTemplateRecord.portal_id == portal_id

    async def get_content_template(
        self, template_id: Optional[str], portal_id: Optional[int], include_host: bool = True
    ) -> Optional[ContentTemplateRecord]:
        if template_id is None:
            return None
        stmt = select(ContentTemplateRecord).where(
            ContentTemplateRecord.id == template_id,
            self._scope_filter(portal_id, include_host),
        )
        return (await self.db.execute(stmt)).scalar_one_or_none()

    async def get_content_templates(
        self, portal_id: Optional[int], include_host: bool = True
    ) -> List[ContentTemplateRecord]:
        stmt = (
            select(ContentTemplateRecord)
            .where(self._scope_filter(portal_id, include_host))
            .order_by(ContentTemplateRecord.name)
        )
        return list((await self.db.execute(stmt)).scalars().all())

    async def create_content_template(self, payload: ContentTemplateCreate, user=None) -> ContentTemplateRecord:
        try:
            record = ContentTemplateRecord(**payload.model_dump())
            audit = AuditContext.from_user(user)
            record.set_created_by(audit.user_email, audit.user_name)
            self.db.add(record)
            await self.db.flush()
            self.log_operation("create_content_template", payload.name)
            return record
        except Exception as exc:
            await self.handle_service_error("create_content_template", exc)
