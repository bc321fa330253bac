"""Route aggregation for the dynamic content viewer."""

from fastapi import APIRouter

from .viewer_routes import router as viewer_router
from .form_routes import router as form_router
from .settings_routes import router as settings_router

router = APIRouter(tags=["Dynamic Content Viewer"])

router.include_router(viewer_router)
router.include_router(form_router)
router.include_router(settings_router)

__all__ = ["router"]
