"""Dependency helpers for file services."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from portal.features.core.database import get_db

from .services import FileService


async def get_file_service(session: AsyncSession = Depends(get_db)) -> FileService:
    """Provide a FileService (files are addressed by id across portals)."""
    return FileService(session)
