"""
Audit columns shared by editable portal records.
"""

from typing import Any, Dict, Optional

from sqlalchemy import Column, DateTime, String
from sqlalchemy.sql import func


class AuditMixin:
    """Who created and last changed a record, stored as readable email/name pairs."""

    created_by_email = Column(String(255), nullable=True, index=True)
    created_by_name = Column(String(255), nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False, index=True)

    updated_by_email = Column(String(255), nullable=True, index=True)
    updated_by_name = Column(String(255), nullable=True)
    updated_at = Column(DateTime, onupdate=func.now(), server_default=func.now())

    def get_audit_info(self) -> Dict[str, Any]:
        def stamp(value):
            return value.isoformat() if value else None

        return {
            "created_by": {"email": self.created_by_email, "name": self.created_by_name,
                           "timestamp": stamp(self.created_at)},
            "updated_by": {"email": self.updated_by_email, "name": self.updated_by_name,
                           "timestamp": stamp(self.updated_at)},
        }

    def set_created_by(self, user_email: str, user_name: str):
        self.created_by_email = user_email
        self.created_by_name = user_name
        self.set_updated_by(user_email, user_name)

    def set_updated_by(self, user_email: str, user_name: str):
        self.updated_by_email = user_email
        self.updated_by_name = user_name


class AuditContext:
    """The identity an audited change is attributed to."""

    SYSTEM_EMAIL = "system"

    def __init__(self, user_email: str, user_name: str, user_id: Optional[str] = None):
        self.user_email = user_email
        self.user_name = user_name
        self.user_id = user_id

    @classmethod
    def from_user(cls, user) -> "AuditContext":
        """
        Build the context from a token identity (or anything with email/name).

        No identity means the change was made by the system: seeding, or an
        anonymous visit that created a module's first content item.
        """
        if user is None:
            return cls.system()
        return cls(
            user_email=user.email,
            user_name=getattr(user, "name", None) or user.email,
            user_id=getattr(user, "user_id", None),
        )

    @classmethod
    def system(cls) -> "AuditContext":
        return cls(cls.SYSTEM_EMAIL, "System", "system")

    def __str__(self) -> str:
        return f"{self.user_name} ({self.user_email})"
