"""
Database models for the content-definition subsystem.

Rows with a NULL portal_id are host-wide and visible to every portal.
"""

from __future__ import annotations

import uuid
from typing import Any, Dict

from sqlalchemy import (
    Column,
    String,
    Text,
    Index,
    ForeignKey,
    Boolean,
    Integer,
    JSON,
)

from portal.features.core.database import Base
from portal.features.core.audit_mixin import AuditMixin


def _uuid() -> str:
    return str(uuid.uuid4())


class DataTypeRecord(Base):
    """Named scalar data type (e.g. "Rich Text" stored as a string)."""

    __tablename__ = "dc_data_types"

    id = Column(String(36), primary_key=True, default=_uuid)
    portal_id = Column(Integer, nullable=True, index=True)
    name = Column(String(100), nullable=False)
    underlying_data_type = Column(String(20), nullable=False, default="string")

    __table_args__ = (
        Index("ix_dc_data_types_portal_name", "portal_id", "name"),
    )

    def __repr__(self) -> str:
        return f"<DataTypeRecord id={self.id} name={self.name}>"


class ContentTypeRecord(Base, AuditMixin):
    """Structured content type; its fields live in dc_field_definitions."""

    __tablename__ = "dc_content_types"

    id = Column(String(36), primary_key=True, default=_uuid)
    portal_id = Column(Integer, nullable=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    __table_args__ = (
        Index("ix_dc_content_types_portal_name", "portal_id", "name"),
    )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "portal_id": self.portal_id,
            "name": self.name,
            "description": self.description,
        }
        data.update(self.get_audit_info())
        return data

    def __repr__(self) -> str:
        return f"<ContentTypeRecord id={self.id} name={self.name}>"


class FieldDefinitionRecord(Base):
    """One field of a content type: a scalar data type or a referenced content type."""

    __tablename__ = "dc_field_definitions"

    id = Column(String(36), primary_key=True, default=_uuid)
    content_type_id = Column(String(36), ForeignKey("dc_content_types.id", ondelete="CASCADE"), nullable=False, index=True)
    sort_order = Column(Integer, nullable=False, default=0)
    name = Column(String(100), nullable=False)
    label = Column(String(255), nullable=True)
    data_type_id = Column(String(36), ForeignKey("dc_data_types.id"), nullable=True)
    reference_content_type_id = Column(String(36), ForeignKey("dc_content_types.id"), nullable=True)

    __table_args__ = (
        Index("ix_dc_field_definitions_type_name_unique", "content_type_id", "name", unique=True),
    )

    @property
    def is_reference_type(self) -> bool:
        return self.reference_content_type_id is not None

    def __repr__(self) -> str:
        return f"<FieldDefinitionRecord id={self.id} name={self.name}>"


class ContentItemRecord(Base, AuditMixin):
    """Stored content item: the JSON form of its content tree."""

    __tablename__ = "dc_content_items"

    id = Column(String(36), primary_key=True, default=_uuid)
    portal_id = Column(Integer, nullable=False, index=True)
    module_id = Column(String(36), ForeignKey("portal_modules.id", ondelete="CASCADE"), nullable=False, index=True)
    content_type_id = Column(String(36), ForeignKey("dc_content_types.id"), nullable=False)
    content = Column(JSON, nullable=False, default=dict)

    __table_args__ = (
        Index("ix_dc_content_items_module", "portal_id", "module_id"),
    )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "portal_id": self.portal_id,
            "module_id": self.module_id,
            "content_type_id": self.content_type_id,
            "content": self.content or {},
        }
        data.update(self.get_audit_info())
        return data

    def __repr__(self) -> str:
        return f"<ContentItemRecord id={self.id} module={self.module_id}>"


class ContentTemplateRecord(Base, AuditMixin):
    """A Jinja template file registered for rendering or editing content."""

    __tablename__ = "dc_content_templates"

    id = Column(String(36), primary_key=True, default=_uuid)
    portal_id = Column(Integer, nullable=True, index=True)
    content_type_id = Column(String(36), ForeignKey("dc_content_types.id"), nullable=True, index=True)
    name = Column(String(255), nullable=False)
    template_file_id = Column(String(36), ForeignKey("portal_files.id"), nullable=True)
    is_edit_template = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("ix_dc_content_templates_portal_name", "portal_id", "name"),
    )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "portal_id": self.portal_id,
            "content_type_id": self.content_type_id,
            "name": self.name,
            "template_file_id": self.template_file_id,
            "is_edit_template": self.is_edit_template,
        }
        data.update(self.get_audit_info())
        return data

    def __repr__(self) -> str:
        return f"<ContentTemplateRecord id={self.id} name={self.name}>"
