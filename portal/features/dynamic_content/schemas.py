"""
Pydantic schemas for defining content types, data types and templates.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, constr, model_validator

from .content import UnderlyingDataType


class DataTypeCreate(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=100)
    underlying_data_type: UnderlyingDataType = UnderlyingDataType.STRING
    portal_id: Optional[int] = None


class FieldDefinitionCreate(BaseModel):
    """A field is either scalar (data_type_id) or a reference (reference_content_type_id)."""

    name: constr(strip_whitespace=True, min_length=1, max_length=100, pattern=r"^[^/]+$")
    label: Optional[constr(strip_whitespace=True, max_length=255)] = None
    data_type_id: Optional[str] = None
    reference_content_type_id: Optional[str] = None

    @model_validator(mode="after")
    def _one_target(self):
        if (self.data_type_id is None) == (self.reference_content_type_id is None):
            raise ValueError("Provide exactly one of data_type_id or reference_content_type_id")
        return self


class ContentTypeCreate(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=255)
    description: Optional[str] = None
    portal_id: Optional[int] = None
    fields: List[FieldDefinitionCreate] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_field_names(self):
        names = [field.name for field in self.fields]
        if len(names) != len(set(names)):
            raise ValueError("Field names must be unique within a content type")
        return self


class ContentTemplateCreate(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=255)
    content_type_id: Optional[str] = None
    template_file_id: Optional[str] = None
    is_edit_template: bool = False
    portal_id: Optional[int] = None
