"""
Database configuration and session management.
"""
import os
import importlib
import structlog
from pathlib import Path
from typing import AsyncGenerator, Any, Dict
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

logger = structlog.get_logger(__name__)

# --- Base class for all models ---
class Base(DeclarativeBase):
    """Base class for all models."""
    pass

from .config import get_settings

settings = get_settings()
DATABASE_URL = settings.DATABASE_URL

# Ensure async driver in PostgreSQL URLs
if DATABASE_URL.startswith('postgresql://'):
    DATABASE_URL = DATABASE_URL.replace('postgresql://', 'postgresql+asyncpg://', 1)


def _discover_and_import_models():
    """
    Discover and import every slice's models.py so relationships and
    metadata are complete before the first query or create_all().
    """
    package_dir = Path(__file__).parent.parent.parent  # core -> features -> portal
    features_dir = package_dir / "features"

    models_imported = []

    if not features_dir.exists():
        logger.warning("Features directory not found", path=str(features_dir))
        return models_imported

    excluded_dirs = {'routes', 'templates', 'static', 'tests', '__pycache__'}

    for models_file in sorted(features_dir.rglob("models.py")):
        if any(excluded_dir in models_file.parts for excluded_dir in excluded_dirs):
            continue

        relative_path = models_file.relative_to(package_dir)
        module_name = "portal." + str(relative_path.with_suffix("")).replace(os.sep, ".")
        importlib.import_module(module_name)
        models_imported.append(module_name)

    logger.debug("Imported model modules", count=len(models_imported), modules=models_imported)
    return models_imported


def engine_options(database_url: str) -> Dict[str, Any]:
    """Pool options for the given URL; SQLite runs on a single shared connection."""
    if database_url.startswith("sqlite"):
        return {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    return {
        "pool_size": 5,
        "max_overflow": 10,
        "pool_timeout": 30,
        "pool_recycle": 1800,
    }


_discover_and_import_models()

engine = create_async_engine(
    DATABASE_URL,
    echo=False,
    future=True,
    **engine_options(DATABASE_URL),
)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Get a database session as a dependency.

    Yields:
        AsyncSession: Database session
    """
    async with async_session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def create_tables() -> None:
    """Create all tables registered on Base.metadata."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database tables created successfully")
