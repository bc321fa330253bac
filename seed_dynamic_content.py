"""Seed script to populate starter data for the dynamic content viewer."""

import asyncio
import sys
from pathlib import Path
from types import SimpleNamespace

from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

# Ensure project root is on the path
sys.path.insert(0, str(Path(__file__).parent))

from portal.features.core.config import get_settings  # noqa: E402
from portal.features.core.database import DATABASE_URL, engine_options  # noqa: E402
from portal.features.dynamic_content.content import UnderlyingDataType  # noqa: E402
from portal.features.dynamic_content.models import (  # noqa: E402
    ContentTemplateRecord,
    ContentTypeRecord,
    DataTypeRecord,
)
from portal.features.dynamic_content.schemas import (  # noqa: E402
    ContentTemplateCreate,
    ContentTypeCreate,
    DataTypeCreate,
    FieldDefinitionCreate,
)
from portal.features.dynamic_content.services import (  # noqa: E402
    ContentTemplateService,
    ContentTypeService,
    DataTypeService,
)
from portal.features.files.models import FileRecord  # noqa: E402
from portal.features.files.services import FileService  # noqa: E402
from portal.features.modules.models import Module  # noqa: E402
from portal.features.modules.schemas import ModuleCreate  # noqa: E402
from portal.features.modules.services import ModuleService  # noqa: E402

PORTAL_ID = 0
ACTOR = SimpleNamespace(email="host@portal.example", name="Host Administrator")

DATA_TYPES = [
    ("Boolean", UnderlyingDataType.BOOLEAN),
    ("Integer", UnderlyingDataType.INTEGER),
    ("Float", UnderlyingDataType.FLOAT),
    ("String", UnderlyingDataType.STRING),
    ("Date", UnderlyingDataType.DATE_TIME),
    ("Rich Text", UnderlyingDataType.STRING),
    ("Markdown", UnderlyingDataType.STRING),
]

GETTING_STARTED_HTML = """<div class="dc-getting-started">
  <h3>Welcome</h3>
  <p>Pick a content type for this module to start adding content.</p>
</div>
"""


async def _seed_data_types(session) -> dict:
    service = DataTypeService(session, None)
    data_types = {}
    for name, underlying in DATA_TYPES:
        existing = (
            await session.execute(
                select(DataTypeRecord).where(DataTypeRecord.name == name, DataTypeRecord.portal_id.is_(None))
            )
        ).scalar_one_or_none()
        if existing is None:
            existing = await service.create_data_type(DataTypeCreate(name=name, underlying_data_type=underlying))
        data_types[name] = existing.id
    return data_types


async def _content_type(session, service: ContentTypeService, payload: ContentTypeCreate) -> str:
    existing = (
        await session.execute(
            select(ContentTypeRecord).where(
                ContentTypeRecord.name == payload.name,
                ContentTypeRecord.portal_id.is_(None),
            )
        )
    ).scalar_one_or_none()
    if existing is not None:
        return existing.id
    return (await service.create_content_type(payload, ACTOR)).id


async def _seed_content_types(session, data_types: dict) -> str:
    service = ContentTypeService(session, None)
    address_id = await _content_type(
        session,
        service,
        ContentTypeCreate(
            name="Address",
            fields=[
                FieldDefinitionCreate(name="Street", data_type_id=data_types["String"]),
                FieldDefinitionCreate(name="City", data_type_id=data_types["String"]),
                FieldDefinitionCreate(name="PostalCode", label="Postal Code", data_type_id=data_types["String"]),
            ],
        ),
    )
    return await _content_type(
        session,
        service,
        ContentTypeCreate(
            name="Article",
            description="A titled article with a body, a summary and a location.",
            fields=[
                FieldDefinitionCreate(name="Title", data_type_id=data_types["String"]),
                FieldDefinitionCreate(name="Body", data_type_id=data_types["Rich Text"]),
                FieldDefinitionCreate(name="Summary", data_type_id=data_types["Markdown"]),
                FieldDefinitionCreate(name="Featured", data_type_id=data_types["Boolean"]),
                FieldDefinitionCreate(name="ReadingMinutes", label="Reading Time", data_type_id=data_types["Integer"]),
                FieldDefinitionCreate(name="Rating", data_type_id=data_types["Float"]),
                FieldDefinitionCreate(name="Location", reference_content_type_id=address_id),
            ],
        ),
    )


async def _seed_getting_started(session) -> None:
    settings = get_settings()
    folder, file_name = "Templates/", "Getting Started.html"

    path = Path(settings.FILE_STORE_ROOT) / settings.HOST_PATH / folder / file_name
    path.parent.mkdir(parents=True, exist_ok=True)
    if not path.exists():
        path.write_text(GETTING_STARTED_HTML, encoding="utf-8")

    file = (
        await session.execute(
            select(FileRecord).where(
                FileRecord.portal_id.is_(None),
                FileRecord.folder == folder,
                FileRecord.file_name == file_name,
            )
        )
    ).scalar_one_or_none()
    if file is None:
        file = await FileService(session).create_file(file_name, folder=folder)

    existing = (
        await session.execute(
            select(ContentTemplateRecord).where(
                ContentTemplateRecord.name == settings.GETTING_STARTED_TEMPLATE,
                ContentTemplateRecord.portal_id.is_(None),
            )
        )
    ).scalar_one_or_none()
    if existing is None:
        await ContentTemplateService(session, None).create_content_template(
            ContentTemplateCreate(name=settings.GETTING_STARTED_TEMPLATE, template_file_id=file.id),
            ACTOR,
        )


async def _seed_modules(session, article_type_id: str) -> list[str]:
    service = ModuleService(session, PORTAL_ID)
    payloads = [
        ModuleCreate(tab_id=1, definition_name="Dnn.DynamicContentViewer", title="Featured Article",
                     content_type_id=article_type_id),
        ModuleCreate(tab_id=1, definition_name="Dnn.DynamicContentViewer", title="New Module"),
        ModuleCreate(tab_id=2, definition_name=get_settings().CONTENT_MANAGER_DEFINITION, title="Content Manager"),
    ]
    created = []
    for payload in payloads:
        existing = (
            await session.execute(
                select(Module).where(Module.portal_id == PORTAL_ID, Module.title == payload.title)
            )
        ).scalar_one_or_none()
        if existing is None:
            existing = await service.create_module(payload, ACTOR)
        created.append(existing.id)
    return created


async def seed():
    engine = create_async_engine(DATABASE_URL, echo=False, **engine_options(DATABASE_URL))
    async_session = async_sessionmaker(engine, expire_on_commit=False)

    async with async_session() as session:
        data_types = await _seed_data_types(session)
        article_type_id = await _seed_content_types(session, data_types)
        await _seed_getting_started(session)
        module_ids = await _seed_modules(session, article_type_id)

        await session.commit()

        print("Dynamic content seed complete:")
        print(f"  Data types:   {len(data_types)}")
        print(f"  Article type: {article_type_id}")
        for module_id in module_ids:
            print(f"  Module:       /modules/{module_id}")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
