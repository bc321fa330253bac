"""Dependency helpers for the dynamic content viewer."""

from fastapi import Depends

from portal.features.core.config import Settings, get_settings
from portal.features.dynamic_content.dependencies import (
    get_content_item_service,
    get_content_template_service,
    get_content_type_service,
)
from portal.features.dynamic_content.services import (
    ContentItemService,
    ContentTemplateService,
    ContentTypeService,
)
from portal.features.files.dependencies import get_file_service
from portal.features.files.services import FileService
from portal.features.modules.dependencies import get_module_service
from portal.features.modules.services import ModuleService

from .manager import DynamicContentViewerManager
from .template_resolver import TemplateResolver


async def get_viewer_manager(
    module_service: ModuleService = Depends(get_module_service),
    content_type_service: ContentTypeService = Depends(get_content_type_service),
    content_item_service: ContentItemService = Depends(get_content_item_service),
) -> DynamicContentViewerManager:
    """Provide a DynamicContentViewerManager for the current request."""
    return DynamicContentViewerManager(module_service, content_type_service, content_item_service)


async def get_template_resolver(
    template_service: ContentTemplateService = Depends(get_content_template_service),
    file_service: FileService = Depends(get_file_service),
    settings: Settings = Depends(get_settings),
) -> TemplateResolver:
    return TemplateResolver(template_service, file_service, settings)
