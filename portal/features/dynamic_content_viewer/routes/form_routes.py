"""Edit form of a dynamic content viewer module."""

from portal.features.core.route_imports import (
    APIRouter,
    AsyncSession,
    Depends,
    FormHandler,
    HTMLResponse,
    RedirectResponse,
    Request,
    commit_transaction,
    get_db,
    get_logger,
    status,
    templates,
)
from portal.features.auth.permissions import SecurityAccessLevel
from portal.features.core.antiforgery import (
    TOKEN_FIELD_NAME,
    issue_antiforgery_token,
    validate_antiforgery_token,
)
from portal.features.core.config import Settings, get_settings
from portal.features.core.structured_logging import audit_logger, log_performance
from portal.features.modules.dependencies import ModuleContext, require_module_access
from portal.features.modules.urls import view_url

from ..dependencies import get_template_resolver, get_viewer_manager
from ..exceptions import FieldCoercionError
from ..manager import DynamicContentViewerManager
from ..materializer import process_fields
from ..template_resolver import TemplateResolver

router = APIRouter()
logger = get_logger(__name__)

require_edit = require_module_access(SecurityAccessLevel.EDIT, "EDIT")


@router.get("/{module_id}/edit", response_class=HTMLResponse)
async def viewer_edit_form(
    request: Request,
    context: ModuleContext = Depends(require_edit),
    manager: DynamicContentViewerManager = Depends(get_viewer_manager),
    resolver: TemplateResolver = Depends(get_template_resolver),
):
    module = context.module
    template_name = await resolver.resolve_edit_template(
        context.portal.portal_id, manager.get_edit_template_id(module)
    )
    item = await manager.get_content_item(module)

    return templates.TemplateResponse(
        request,
        "dynamic_content_viewer/edit.html",
        {
            "module": module,
            "item": item,
            "template_name": template_name,
            "token_field_name": TOKEN_FIELD_NAME,
            "antiforgery_token": issue_antiforgery_token(request),
            "cancel_url": view_url(module),
        },
    )


@router.post("/{module_id}/edit")
async def viewer_edit_submit(
    request: Request,
    context: ModuleContext = Depends(require_edit),
    _: None = Depends(validate_antiforgery_token),
    manager: DynamicContentViewerManager = Depends(get_viewer_manager),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
):
    module = context.module
    redirect = RedirectResponse(url=view_url(module), status_code=status.HTTP_303_SEE_OTHER)

    item = await manager.get_content_item(module)
    if item is None:
        logger.info("No content item to edit", module_id=module.id)
        return redirect

    form_handler = FormHandler(request)
    await form_handler.parse_form()

    try:
        with log_performance("materialize_fields", module_id=module.id):
            process_fields(item.content, form_handler.raw_form, strict=settings.STRICT_FORM_BINDING)
    except FieldCoercionError as exc:
        form_handler.merge_errors(exc.field_errors)
        return form_handler.create_error_response()

    await manager.update_content_item(item, user=context.user)
    await commit_transaction(db, "update content item")

    audit_logger.log_user_action(
        action="update_content_item",
        user_id=context.user.user_id if context.user else "anonymous",
        resource=f"module:{module.id}",
        details={"content_item_id": item.id},
        portal_id=context.portal.portal_id,
    )
    return redirect


__all__ = ["router"]
