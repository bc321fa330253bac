"""
File records for the portal file system.

A file with a portal_id lives under that portal's home directory; a file
without one lives under the host directory.
"""

import uuid
from typing import Any, Dict

from sqlalchemy import Column, String, Integer, Index

from portal.features.core.database import Base


class FileRecord(Base):
    __tablename__ = "portal_files"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    portal_id = Column(Integer, nullable=True, index=True)
    folder = Column(String(500), nullable=False, default="")
    file_name = Column(String(255), nullable=False)

    __table_args__ = (
        Index("ix_portal_files_portal_path_unique", "portal_id", "folder", "file_name", unique=True),
    )

    @property
    def is_host_file(self) -> bool:
        return self.portal_id is None

    @property
    def relative_path(self) -> str:
        folder = self.folder or ""
        if folder and not folder.endswith("/"):
            folder += "/"
        return folder + self.file_name

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "portal_id": self.portal_id,
            "folder": self.folder,
            "file_name": self.file_name,
            "relative_path": self.relative_path,
        }

    def __repr__(self) -> str:
        return f"<FileRecord id={self.id} path={self.relative_path}>"
