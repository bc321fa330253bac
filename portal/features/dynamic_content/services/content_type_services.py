"""
Data type and content type services.

ContentTypeService.load_content_type turns the relational definition into the
immutable ContentType tree used by content parts.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.features.core.audit_mixin import AuditContext
from portal.features.core.base_service import BaseService, PortalScopedCRUDService

from ..content import ContentType, DataType, FieldDefinition, UnderlyingDataType
from ..exceptions import ContentDefinitionError
from ..models import ContentTypeRecord, DataTypeRecord, FieldDefinitionRecord
from ..schemas import ContentTypeCreate, DataTypeCreate


class DataTypeService(PortalScopedCRUDService[DataTypeRecord]):
    """Manage named scalar data types."""

    def __init__(self, db_session: AsyncSession, portal_id: Optional[int]):
        super().__init__(db_session, portal_id, DataTypeRecord)

    async def create_data_type(self, payload: DataTypeCreate) -> DataTypeRecord:
        try:
            record = DataTypeRecord(
                portal_id=payload.portal_id,
                name=payload.name,
                underlying_data_type=payload.underlying_data_type.value,
            )
            self.db.add(record)
            await self.db.flush()
            self.log_operation("create_data_type", payload.name)
            return record
        except Exception as exc:
            await self.handle_service_error("create_data_type", exc)


class ContentTypeService(PortalScopedCRUDService[ContentTypeRecord]):
    """Manage content types and build their in-memory definitions."""

    def __init__(self, db_session: AsyncSession, portal_id: Optional[int]):
        super().__init__(db_session, portal_id, ContentTypeRecord)

    async def list_content_types(self) -> List[ContentTypeRecord]:
        stmt = select(ContentTypeRecord)
        portal_filter = self.create_portal_filter(ContentTypeRecord, include_host=True)
        if portal_filter is not True:
            stmt = stmt.where(portal_filter)
        stmt = stmt.order_by(ContentTypeRecord.name)
        return list((await self.db.execute(stmt)).scalars().all())

    async def create_content_type(self, payload: ContentTypeCreate, user=None) -> ContentTypeRecord:
        """Create a content type and its field definitions in declaration order."""
        for field in payload.fields:
            if field.data_type_id is not None:
                if await self._get_visible(DataTypeRecord, field.data_type_id) is None:
                    raise ValueError(f"Unknown data type '{field.data_type_id}' for field '{field.name}'")
            elif await self._get_visible(ContentTypeRecord, field.reference_content_type_id) is None:
                raise ValueError(
                    f"Unknown content type '{field.reference_content_type_id}' for field '{field.name}'"
                )

        try:
            record = ContentTypeRecord(
                portal_id=payload.portal_id,
                name=payload.name,
                description=payload.description,
            )
            audit = AuditContext.from_user(user)
            record.set_created_by(audit.user_email, audit.user_name)
            self.db.add(record)
            await self.db.flush()

            for position, field in enumerate(payload.fields):
                self.db.add(
                    FieldDefinitionRecord(
                        content_type_id=record.id,
                        sort_order=position,
                        name=field.name,
                        label=field.label,
                        data_type_id=field.data_type_id,
                        reference_content_type_id=field.reference_content_type_id,
                    )
                )
            await self.db.flush()

            self.log_operation("create_content_type", f"{payload.name} ({len(payload.fields)} fields)")
            return record
        except Exception as exc:
            await self.handle_service_error("create_content_type", exc)

    async def load_content_type(self, content_type_id: Optional[str]) -> Optional[ContentType]:
        """
        Load a content type with its field definitions, following references.

        Returns None when the type does not exist (or is not visible to the
        portal). A reference to a missing type, or a type that (indirectly)
        contains itself, raises ContentDefinitionError.
        """
        if content_type_id is None:
            return None
        if await self._get_visible(ContentTypeRecord, content_type_id) is None:
            return None
        return await self._build(content_type_id, (), {})

    async def _get_visible(self, model_class, item_id: str):
        return await BaseService.get_by_id(self, model_class, item_id, include_host=True)

    async def _build(
        self,
        content_type_id: str,
        ancestors: Tuple[str, ...],
        built: Dict[str, ContentType],
    ) -> ContentType:
        if content_type_id in ancestors:
            chain = " -> ".join(ancestors + (content_type_id,))
            raise ContentDefinitionError(f"Content type reference cycle: {chain}")
        if content_type_id in built:
            return built[content_type_id]

        record = await self._get_visible(ContentTypeRecord, content_type_id)
        if record is None:
            raise ContentDefinitionError(f"Referenced content type '{content_type_id}' does not exist")

        field_records = list(
            (
                await self.db.execute(
                    select(FieldDefinitionRecord)
                    .where(FieldDefinitionRecord.content_type_id == content_type_id)
                    .order_by(FieldDefinitionRecord.sort_order, FieldDefinitionRecord.name)
                )
            ).scalars().all()
        )
        data_types = await self._data_types_for(field_records)

        definitions = []
        for field_record in field_records:
            if field_record.is_reference_type:
                nested = await self._build(
                    field_record.reference_content_type_id,
                    ancestors + (content_type_id,),
                    built,
                )
                definitions.append(
                    FieldDefinition(
                        name=field_record.name,
                        content_type=nested,
                        label=field_record.label or "",
                        id=field_record.id,
                    )
                )
                continue

            data_type = data_types.get(field_record.data_type_id)
            if data_type is None:
                raise ContentDefinitionError(
                    f"Field '{field_record.name}' references missing data type '{field_record.data_type_id}'"
                )
            definitions.append(
                FieldDefinition(
                    name=field_record.name,
                    data_type=data_type,
                    label=field_record.label or "",
                    id=field_record.id,
                )
            )

        content_type = ContentType(name=record.name, field_definitions=tuple(definitions), id=record.id)
        built[content_type_id] = content_type
        return content_type

    async def _data_types_for(self, field_records: List[FieldDefinitionRecord]) -> Dict[str, DataType]:
        ids = {record.data_type_id for record in field_records if record.data_type_id}
        if not ids:
            return {}
        rows = (await self.db.execute(select(DataTypeRecord).where(DataTypeRecord.id.in_(ids)))).scalars().all()
        data_types = {}
        for row in rows:
            try:
                underlying = UnderlyingDataType(row.underlying_data_type)
            except ValueError as exc:
                raise ContentDefinitionError(
                    f"Data type '{row.name}' has unknown underlying type '{row.underlying_data_type}'"
                ) from exc
            data_types[row.id] = DataType(name=row.name, underlying_data_type=underlying, id=row.id)
        return data_types
