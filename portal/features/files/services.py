"""
File lookup service.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from portal.features.core.base_service import BaseService

from .models import FileRecord


class FileService(BaseService[FileRecord]):
    """Resolve file records by id across portal and host scopes."""

    def __init__(self, db_session: AsyncSession):
        super().__init__(db_session, portal_id=None)

    async def get_file(self, file_id: Optional[str]) -> Optional[FileRecord]:
        if file_id is None:
            return None
        return await self.get_by_id(FileRecord, file_id)

    async def create_file(self, file_name: str, folder: str = "", portal_id: Optional[int] = None) -> FileRecord:
        try:
            record = FileRecord(portal_id=portal_id, folder=folder, file_name=file_name)
            self.db.add(record)
            await self.db.flush()
            self.log_operation("create_file", record.relative_path)
            return record
        except Exception as exc:
            await self.handle_service_error("create_file", exc)
