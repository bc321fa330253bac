"""
Content item persistence: stores a content tree as JSON against its module.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.features.core.audit_mixin import AuditContext
from portal.features.core.base_service import PortalScopedCRUDService

from ..content import ContentItem, ContentPart
from ..exceptions import ContentDefinitionError
from ..models import ContentItemRecord
from .content_type_services import ContentTypeService


class ContentItemService(PortalScopedCRUDService[ContentItemRecord]):
    """Load, create and update content items for modules of one portal."""

    def __init__(
        self,
        db_session: AsyncSession,
        portal_id: Optional[int],
        content_type_service: ContentTypeService,
    ):
        super().__init__(db_session, portal_id, ContentItemRecord)
        self.content_type_service = content_type_service

    def _portal_id_for_create(self, portal_id: Optional[int]) -> int:
        resolved = self.portal_id if self.portal_id is not None else portal_id
        if resolved is None:
            raise ValueError("Portal context is required to create a content item.")
        return resolved

    async def get_record_by_module(self, module_id: str) -> Optional[ContentItemRecord]:
        stmt = select(ContentItemRecord).where(ContentItemRecord.module_id == module_id)
        portal_filter = self.create_portal_filter(ContentItemRecord)
        if portal_filter is not True:
            stmt = stmt.where(portal_filter)
        stmt = stmt.order_by(ContentItemRecord.created_at).limit(1)
        return (await self.db.execute(stmt)).scalar_one_or_none()

    async def get_by_module(self, module_id: str) -> Optional[ContentItem]:
        """The module's content item with its tree loaded, or None."""
        record = await self.get_record_by_module(module_id)
        if record is None:
            return None
        return await self.to_content_item(record)

    async def to_content_item(self, record: ContentItemRecord) -> ContentItem:
        content_type = await self.content_type_service.load_content_type(record.content_type_id)
        if content_type is None:
            raise ContentDefinitionError(
                f"Content item {record.id} uses missing content type '{record.content_type_id}'"
            )
        part = ContentPart.from_content_type(content_type).load(record.content)
        return ContentItem(
            content=part,
            module_id=record.module_id,
            portal_id=record.portal_id,
            content_type_id=record.content_type_id,
            id=record.id,
        )

    async def create_content_item(
        self,
        module_id: str,
        content_type_id: str,
        user=None,
        portal_id: Optional[int] = None,
    ) -> ContentItem:
        """Create and flush a content item holding the content type's defaults."""
        content_type = await self.content_type_service.load_content_type(content_type_id)
        if content_type is None:
            raise ValueError(f"Unknown content type '{content_type_id}'")

        part = ContentPart.from_content_type(content_type)
        try:
            record = ContentItemRecord(
                portal_id=self._portal_id_for_create(portal_id),
                module_id=module_id,
                content_type_id=content_type_id,
                content=part.to_dict(),
            )
            audit = AuditContext.from_user(user)
            record.set_created_by(audit.user_email, audit.user_name)
            self.db.add(record)
            await self.db.flush()
        except Exception as exc:
            await self.handle_service_error("create_content_item", exc)

        self.log_operation("create_content_item", f"module {module_id}, type {content_type.name}")
        return ContentItem(
            content=part,
            module_id=module_id,
            portal_id=record.portal_id,
            content_type_id=content_type_id,
            id=record.id,
        )

    async def update_content_item(self, item: ContentItem, user=None) -> ContentItemRecord:
        """Persist the item's current tree."""
        if item.id is None:
            raise ValueError("Only stored content items can be updated.")

        record = await self.get_by_id(item.id)
        if record is None:
            raise ValueError(f"Content item '{item.id}' not found")

        try:
            record.content = item.content.to_dict()
            audit = AuditContext.from_user(user)
            record.set_updated_by(audit.user_email, audit.user_name)
            await self.db.flush()
        except Exception as exc:
            await self.handle_service_error("update_content_item", exc, item.id)

        self.log_operation("update_content_item", f"item {item.id}")
        return record
