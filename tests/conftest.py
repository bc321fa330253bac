"""
Global pytest configuration and fixtures.

Environment is set before the application is imported: tests run against
TEST_DATABASE_URL (in-memory SQLite by default) and a temporary file store.
"""

import os
import tempfile
from dataclasses import dataclass
from typing import AsyncGenerator, Dict, Optional

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite://")

os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-with-at-least-32-chars")
os.environ.setdefault("SESSION_SECRET_KEY", "test-session-secret")
os.environ.setdefault("FILE_STORE_ROOT", tempfile.mkdtemp(prefix="portal-files-"))
os.environ.setdefault("LOG_LEVEL", "WARNING")

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from portal.features.core.database import Base, engine_options, get_db  # noqa: E402
from portal.features.auth.jwt_utils import JWTUtils  # noqa: E402
from portal.main import app  # noqa: E402

from portal.features.dynamic_content.content import UnderlyingDataType  # noqa: E402
from portal.features.dynamic_content.schemas import (  # noqa: E402
    ContentTypeCreate,
    DataTypeCreate,
    FieldDefinitionCreate,
)
from portal.features.dynamic_content.services import ContentTypeService, DataTypeService  # noqa: E402
from portal.features.modules.models import Module  # noqa: E402
from portal.features.modules.schemas import ModuleCreate  # noqa: E402
from portal.features.modules.services import ModuleService  # noqa: E402

PORTAL_ID = 0
OTHER_PORTAL_ID = 7

DATA_TYPES = [
    ("Boolean", UnderlyingDataType.BOOLEAN),
    ("Integer", UnderlyingDataType.INTEGER),
    ("Float", UnderlyingDataType.FLOAT),
    ("String", UnderlyingDataType.STRING),
    ("Rich Text", UnderlyingDataType.STRING),
    ("Markdown", UnderlyingDataType.STRING),
]


@dataclass
class ContentFixtures:
    data_type_ids: Dict[str, str]
    address_type_id: str
    article_type_id: str
    article_module: Module
    empty_module: Module


async def build_content_fixtures(session: AsyncSession, portal_id: int) -> ContentFixtures:
    data_type_service = DataTypeService(session, None)
    data_type_ids = {}
    for name, underlying in DATA_TYPES:
        record = await data_type_service.create_data_type(DataTypeCreate(name=name, underlying_data_type=underlying))
        data_type_ids[name] = record.id

    content_type_service = ContentTypeService(session, None)
    address = await content_type_service.create_content_type(
        ContentTypeCreate(
            name="Address",
            fields=[
                FieldDefinitionCreate(name="Street", data_type_id=data_type_ids["String"]),
                FieldDefinitionCreate(name="City", data_type_id=data_type_ids["String"]),
            ],
        )
    )
    article = await content_type_service.create_content_type(
        ContentTypeCreate(
            name="Article",
            fields=[
                FieldDefinitionCreate(name="Title", data_type_id=data_type_ids["String"]),
                FieldDefinitionCreate(name="Body", data_type_id=data_type_ids["Rich Text"]),
                FieldDefinitionCreate(name="Summary", data_type_id=data_type_ids["Markdown"]),
                FieldDefinitionCreate(name="Featured", data_type_id=data_type_ids["Boolean"]),
                FieldDefinitionCreate(name="Views", data_type_id=data_type_ids["Integer"]),
                FieldDefinitionCreate(name="Rating", data_type_id=data_type_ids["Float"]),
                FieldDefinitionCreate(name="Location", reference_content_type_id=address.id),
            ],
        )
    )

    module_service = ModuleService(session, portal_id)
    article_module = await module_service.create_module(
        ModuleCreate(tab_id=1, definition_name="Dnn.DynamicContentViewer", title="Article",
                     content_type_id=article.id)
    )
    empty_module = await module_service.create_module(
        ModuleCreate(tab_id=1, definition_name="Dnn.DynamicContentViewer", title="Empty")
    )

    return ContentFixtures(
        data_type_ids=data_type_ids,
        address_type_id=address.id,
        article_type_id=article.id,
        article_module=article_module,
        empty_module=empty_module,
    )


@pytest_asyncio.fixture(scope="function")
async def test_db_engine():
    """Create a test database engine with all tables."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, future=True, **engine_options(TEST_DATABASE_URL))

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_db_session(test_db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session = async_sessionmaker(test_db_engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def test_client(test_db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database dependency override."""

    async def override_get_db():
        yield test_db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://testserver",
    ) as client:
        yield client

    app.dependency_overrides.pop(get_db, None)


@pytest_asyncio.fixture(scope="function")
async def content(test_db_session: AsyncSession) -> ContentFixtures:
    """Data types, an Article type with a nested Address, and viewer modules."""
    fixtures = await build_content_fixtures(test_db_session, PORTAL_ID)
    await test_db_session.commit()
    return fixtures


def make_token(role: str = "editor", portal_id: Optional[int] = PORTAL_ID, user_id: str = "user-1") -> str:
    return JWTUtils.create_access_token(
        user_id=user_id,
        portal_id=portal_id,
        role=role,
        email=f"{user_id}@portal.example",
        name=f"Test {role.title()}",
    )


def auth_headers(role: str = "editor", portal_id: Optional[int] = PORTAL_ID, user_id: str = "user-1") -> dict:
    return {"Authorization": f"Bearer {make_token(role, portal_id, user_id)}"}


@pytest.fixture
def headers_for():
    """Factory for Authorization headers: headers_for(role, portal_id=..., user_id=...)."""
    return auth_headers


@pytest.fixture
def editor_headers() -> dict:
    return auth_headers("editor")


@pytest.fixture
def admin_headers() -> dict:
    return auth_headers("admin")


@pytest.fixture
def viewer_headers() -> dict:
    return auth_headers("registered", user_id="user-2")
