"""
Pydantic schemas for modules.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, constr


class ModuleCreate(BaseModel):
    tab_id: int
    definition_name: constr(strip_whitespace=True, min_length=1, max_length=255)
    title: Optional[constr(strip_whitespace=True, max_length=255)] = None
    content_type_id: Optional[str] = None
    view_template_id: Optional[str] = None
    edit_template_id: Optional[str] = None


class ModuleSettingsUpdate(BaseModel):
    """Viewer settings; only fields present in the request are changed."""

    content_type_id: Optional[str] = None
    view_template_id: Optional[str] = None
    edit_template_id: Optional[str] = None


class ModuleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    portal_id: int
    tab_id: int
    definition_name: str
    title: Optional[str] = None
    content_type_id: Optional[str] = None
    view_template_id: Optional[str] = None
    edit_template_id: Optional[str] = None
