"""Index view and action menu of a dynamic content viewer module."""

from typing import List

from portal.features.core.route_imports import (
    APIRouter,
    AsyncSession,
    Depends,
    HTMLResponse,
    JSONResponse,
    Request,
    commit_transaction,
    get_db,
    get_logger,
    templates,
)
from portal.features.auth.permissions import SecurityAccessLevel
from portal.features.core.config import Settings, get_settings
from portal.features.modules.dependencies import (
    ModuleContext,
    get_module_context,
    get_module_permission_service,
    get_module_service,
)
from portal.features.modules.services import ModulePermissionService, ModuleService

from ..actions import ModuleAction, get_index_actions
from ..dependencies import get_template_resolver, get_viewer_manager
from ..manager import DynamicContentViewerManager
from ..template_resolver import GETTING_STARTED_PAGE, TemplateResolver

router = APIRouter()
logger = get_logger(__name__)


async def visible_index_actions(
    context: ModuleContext,
    manager: DynamicContentViewerManager,
    module_service: ModuleService,
    permission_service: ModulePermissionService,
    settings: Settings,
) -> List[ModuleAction]:
    """Index actions the caller is allowed to use on this module."""
    module = context.module
    manager_module = await module_service.get_module_by_definition(
        context.portal.portal_id, settings.CONTENT_MANAGER_DEFINITION
    )
    can_edit_manager = False
    if manager_module is not None:
        can_edit_manager = await permission_service.has_module_access(
            SecurityAccessLevel.EDIT, "EDIT", manager_module, context.user
        )

    actions = get_index_actions(
        module,
        manager.get_content_type_id(module),
        manager_module,
        can_edit_manager,
    )

    visible = []
    for action in actions:
        if not action.visible:
            continue
        if await permission_service.has_module_access(action.secure, "EDIT", module, context.user):
            visible.append(action)
    return visible


@router.get("/{module_id}", response_class=HTMLResponse)
async def viewer_index(
    request: Request,
    context: ModuleContext = Depends(get_module_context),
    manager: DynamicContentViewerManager = Depends(get_viewer_manager),
    resolver: TemplateResolver = Depends(get_template_resolver),
    module_service: ModuleService = Depends(get_module_service),
    permission_service: ModulePermissionService = Depends(get_module_permission_service),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
):
    module = context.module
    content_type_id = manager.get_content_type_id(module)
    template_name = await resolver.resolve_view_template(
        module,
        context.portal.portal_id,
        content_type_id,
        manager.get_view_template_id(module),
    )

    actions = await visible_index_actions(context, manager, module_service, permission_service, settings)

    if not template_name:
        return templates.TemplateResponse(
            request,
            GETTING_STARTED_PAGE,
            {"module": module, "actions": actions},
        )

    if content_type_id:
        item = await manager.get_or_create_content_item(module, content_type_id)
        await commit_transaction(db, "create content item")
    else:
        item = manager.create_default_content_item(module)

    logger.debug("Rendering module", module_id=module.id, template=template_name)
    return templates.TemplateResponse(
        request,
        "dynamic_content_viewer/viewer.html",
        {
            "module": module,
            "item": item,
            "template_name": template_name,
            "actions": actions,
        },
    )


@router.get("/{module_id}/actions")
async def viewer_actions(
    context: ModuleContext = Depends(get_module_context),
    manager: DynamicContentViewerManager = Depends(get_viewer_manager),
    module_service: ModuleService = Depends(get_module_service),
    permission_service: ModulePermissionService = Depends(get_module_permission_service),
    settings: Settings = Depends(get_settings),
):
    actions = await visible_index_actions(context, manager, module_service, permission_service, settings)
    return JSONResponse(content=[action.to_dict() for action in actions])


__all__ = ["router", "visible_index_actions"]
