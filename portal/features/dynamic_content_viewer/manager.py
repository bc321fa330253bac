"""
Viewer manager: the content-source operations the viewer routes rely on.

Collaborators are injected per request; see dependencies.get_viewer_manager.
"""

from __future__ import annotations

from typing import Optional

import structlog

from portal.features.dynamic_content.content import ContentItem, ContentPart
from portal.features.dynamic_content.services import ContentItemService, ContentTypeService
from portal.features.modules.models import Module
from portal.features.modules.services import ModuleService

logger = structlog.get_logger(__name__)


class DynamicContentViewerManager:
    def __init__(
        self,
        module_service: ModuleService,
        content_type_service: ContentTypeService,
        content_item_service: ContentItemService,
    ):
        self.module_service = module_service
        self.content_type_service = content_type_service
        self.content_item_service = content_item_service

    def get_content_type_id(self, module: Module) -> Optional[str]:
        return module.content_type_id or None

    def get_view_template_id(self, module: Module) -> Optional[str]:
        return module.view_template_id or None

    def get_edit_template_id(self, module: Module) -> Optional[str]:
        return module.edit_template_id or None

    async def get_content_item(self, module: Module) -> Optional[ContentItem]:
        return await self.content_item_service.get_by_module(module.id)

    async def get_or_create_content_item(self, module: Module, content_type_id: str) -> ContentItem:
        """Return the module's item, creating one of content_type_id when it has none."""
        item = await self.get_content_item(module)
        if item is not None:
            return item

        logger.info("Creating content item for module", module_id=module.id, content_type_id=content_type_id)
        return await self.content_item_service.create_content_item(
            module.id, content_type_id, portal_id=module.portal_id
        )

    def create_default_content_item(self, module: Module) -> ContentItem:
        """An unsaved item with an empty root part, for modules not set up yet."""
        return ContentItem(content=ContentPart(), module_id=module.id, portal_id=module.portal_id)

    async def update_content_item(self, item: ContentItem, user=None) -> None:
        await self.content_item_service.update_content_item(item, user=user)
