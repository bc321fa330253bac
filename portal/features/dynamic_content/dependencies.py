"""Dependency helpers for content-definition services."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from portal.deps.portal import portal_dependency
from portal.features.core.database import get_db

from .services import (
    ContentTypeService,
    ContentItemService,
    ContentTemplateService,
)


async def get_content_type_service(
    session: AsyncSession = Depends(get_db),
    portal_id: int = Depends(portal_dependency),
) -> ContentTypeService:
    """Provide a ContentTypeService scoped to the current portal."""
    return ContentTypeService(session, portal_id)


async def get_content_item_service(
    session: AsyncSession = Depends(get_db),
    portal_id: int = Depends(portal_dependency),
    content_type_service: ContentTypeService = Depends(get_content_type_service),
) -> ContentItemService:
    """Provide a ContentItemService scoped to the current portal."""
    return ContentItemService(session, portal_id, content_type_service)


async def get_content_template_service(
    session: AsyncSession = Depends(get_db),
    portal_id: int = Depends(portal_dependency),
) -> ContentTemplateService:
    """Provide a ContentTemplateService scoped to the current portal."""
    return ContentTemplateService(session, portal_id)
