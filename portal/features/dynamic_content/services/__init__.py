from .content_type_services import DataTypeService, ContentTypeService
from .content_item_services import ContentItemService
from .template_services import ContentTemplateService

__all__ = [
    "DataTypeService",
    "ContentTypeService",
    "ContentItemService",
    "ContentTemplateService",
]
