"""
Template selection for the viewer.

Content templates point at files in the portal file store. Portal files live
under the portal's home directory, host files under the shared host path;
both are addressed relative to FILE_STORE_ROOT, which is on the Jinja search
path.
"""

from __future__ import annotations

from typing import Optional

import structlog

from portal.features.core.config import Settings
from portal.features.dynamic_content.models import ContentTemplateRecord
from portal.features.dynamic_content.services import ContentTemplateService
from portal.features.files.services import FileService
from portal.features.modules.models import Module

logger = structlog.get_logger(__name__)

AUTO_GENERATED_VIEW_TEMPLATE = "dynamic_content_viewer/auto_generated_view.html"
AUTO_GENERATED_EDIT_TEMPLATE = "dynamic_content_viewer/auto_generated_edit.html"
GETTING_STARTED_PAGE = "dynamic_content_viewer/getting_started.html"


class TemplateResolver:
    def __init__(self, template_service: ContentTemplateService, file_service: FileService, settings: Settings):
        self.template_service = template_service
        self.file_service = file_service
        self.settings = settings

    async def get_template_name(self, template: Optional[ContentTemplateRecord]) -> str:
        """Store-relative path of the template's file, or "" when either is missing."""
        if template is None:
            return ""

        file = await self.file_service.get_file(template.template_file_id)
        if file is None:
            logger.warning("Content template has no file", template_id=template.id, name=template.name)
            return ""

        if file.is_host_file:
            base = self.settings.HOST_PATH
        else:
            base = self.settings.portal_home_directory(file.portal_id)
        return base + file.relative_path

    async def resolve_view_template(
        self,
        module: Module,
        portal_id: int,
        content_type_id: Optional[str],
        view_template_id: Optional[str],
    ) -> str:
        """
        Name of the template the module renders with.

        An explicit view template wins; a module with a content type but no
        template uses the auto-generated view; otherwise the portal's (or the
        host's) "Getting Started" template. "" when nothing applies.
        """
        if view_template_id:
            template = await self.template_service.get_content_template(view_template_id, portal_id, True)
            return await self.get_template_name(template)

        if content_type_id:
            return AUTO_GENERATED_VIEW_TEMPLATE

        name = self.settings.GETTING_STARTED_TEMPLATE
        matches = [
            template
            for template in await self.template_service.get_content_templates(portal_id, True)
            if template.name == name
        ]
        if len(matches) != 1:
            logger.debug("No single getting started template", module_id=module.id, matches=len(matches))
            return ""
        return await self.get_template_name(matches[0])

    async def resolve_edit_template(self, portal_id: int, edit_template_id: Optional[str]) -> str:
        if edit_template_id:
            template = await self.template_service.get_content_template(edit_template_id, portal_id, True)
            name = await self.get_template_name(template)
            if name:
                return name
        return AUTO_GENERATED_EDIT_TEMPLATE
