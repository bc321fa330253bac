"""Module settings: which content type and templates the viewer uses."""

from portal.features.core.route_imports import (
    APIRouter,
    AsyncSession,
    Depends,
    HTTPException,
    commit_transaction,
    get_db,
    status,
)
from portal.features.auth.permissions import SecurityAccessLevel
from portal.features.dynamic_content.dependencies import (
    get_content_template_service,
    get_content_type_service,
)
from portal.features.dynamic_content.services import ContentTemplateService, ContentTypeService
from portal.features.modules.dependencies import ModuleContext, get_module_service, require_module_access
from portal.features.modules.schemas import ModuleResponse, ModuleSettingsUpdate
from portal.features.modules.services import ModuleService

router = APIRouter()

require_admin = require_module_access(SecurityAccessLevel.ADMIN, "ADMIN")


@router.put("/{module_id}/settings", response_model=ModuleResponse)
async def update_viewer_settings(
    payload: ModuleSettingsUpdate,
    context: ModuleContext = Depends(require_admin),
    module_service: ModuleService = Depends(get_module_service),
    content_type_service: ContentTypeService = Depends(get_content_type_service),
    template_service: ContentTemplateService = Depends(get_content_template_service),
    db: AsyncSession = Depends(get_db),
):
    portal_id = context.portal.portal_id

    if payload.content_type_id and await content_type_service.load_content_type(payload.content_type_id) is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown content type")

    for template_id in (payload.view_template_id, payload.edit_template_id):
        if template_id and await template_service.get_content_template(template_id, portal_id, True) is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown content template")

    module = await module_service.update_settings(context.module, payload, user=context.user)
    await commit_transaction(db, "update module settings")
    return ModuleResponse.model_validate(module)


__all__ = ["router"]
