"""
Database models for module instances.

A module is one placement of a feature (identified by its definition name) on
a page (tab) of a portal. The dynamic content viewer keeps its settings
(content type, view template, edit template) on the module row.
"""

import uuid
from typing import Any, Dict

from sqlalchemy import Column, String, Integer, Boolean, ForeignKey, Index

from portal.features.core.database import Base
from portal.features.core.audit_mixin import AuditMixin


class Module(Base, AuditMixin):
    __tablename__ = "portal_modules"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    portal_id = Column(Integer, nullable=False, index=True)
    tab_id = Column(Integer, nullable=False)
    definition_name = Column(String(255), nullable=False)
    title = Column(String(255), nullable=True)

    content_type_id = Column(String(36), nullable=True)
    view_template_id = Column(String(36), nullable=True)
    edit_template_id = Column(String(36), nullable=True)

    __table_args__ = (
        Index("ix_portal_modules_portal_definition", "portal_id", "definition_name"),
    )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "portal_id": self.portal_id,
            "tab_id": self.tab_id,
            "definition_name": self.definition_name,
            "title": self.title,
            "content_type_id": self.content_type_id,
            "view_template_id": self.view_template_id,
            "edit_template_id": self.edit_template_id,
        }
        data.update(self.get_audit_info())
        return data

    def __repr__(self) -> str:
        return f"<Module id={self.id} portal={self.portal_id} definition={self.definition_name}>"


class ModulePermission(Base):
    """Grants a role a permission key (VIEW / EDIT) on one module."""

    __tablename__ = "portal_module_permissions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    module_id = Column(String(36), ForeignKey("portal_modules.id", ondelete="CASCADE"), nullable=False, index=True)
    role_name = Column(String(50), nullable=False)
    permission_key = Column(String(20), nullable=False)
    allowed = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        Index("ix_portal_module_permissions_unique", "module_id", "role_name", "permission_key", unique=True),
    )

    def __repr__(self) -> str:
        return f"<ModulePermission module={self.module_id} role={self.role_name} key={self.permission_key}>"
