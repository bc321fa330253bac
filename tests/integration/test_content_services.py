"""Integration tests for the content-definition, file and module services."""

import pytest

from portal.features.auth.jwt_utils import TokenData
from portal.features.auth.permissions import SecurityAccessLevel
from portal.features.dynamic_content.content import ContentPart, FieldKind
from portal.features.dynamic_content.exceptions import ContentDefinitionError
from portal.features.dynamic_content.models import FieldDefinitionRecord
from portal.features.dynamic_content.schemas import ContentTemplateCreate, ContentTypeCreate, FieldDefinitionCreate
from portal.features.dynamic_content.services import (
    ContentItemService,
    ContentTemplateService,
    ContentTypeService,
)
from portal.features.files.services import FileService
from portal.features.modules.schemas import ModuleCreate, ModuleSettingsUpdate
from portal.features.modules.services import ModulePermissionService, ModuleService


def user(role: str, portal_id=0) -> TokenData:
    return TokenData(user_id=f"{role}-1", portal_id=portal_id, role=role, email=f"{role}@portal.example")


class TestContentTypeService:
    @pytest.mark.asyncio
    async def test_load_builds_nested_definitions_in_order(self, test_db_session, content):
        service = ContentTypeService(test_db_session, 0)

        article = await service.load_content_type(content.article_type_id)

        assert [definition.name for definition in article.field_definitions] == [
            "Title", "Body", "Summary", "Featured", "Views", "Rating", "Location",
        ]
        assert article.get_field_definition("Body").kind is FieldKind.RICH_TEXT
        location = article.get_field_definition("Location")
        assert location.is_reference_type
        assert [definition.name for definition in location.content_type.field_definitions] == ["Street", "City"]

    @pytest.mark.asyncio
    async def test_missing_type_is_none(self, test_db_session, content):
        service = ContentTypeService(test_db_session, 0)
        assert await service.load_content_type("missing") is None
        assert await service.load_content_type(None) is None

    @pytest.mark.asyncio
    async def test_other_portal_types_are_invisible(self, test_db_session, content):
        private = await ContentTypeService(test_db_session, 7).create_content_type(
            ContentTypeCreate(
                name="Private",
                portal_id=7,
                fields=[FieldDefinitionCreate(name="Secret", data_type_id=content.data_type_ids["String"])],
            )
        )

        assert await ContentTypeService(test_db_session, 0).load_content_type(private.id) is None
        assert await ContentTypeService(test_db_session, 7).load_content_type(private.id) is not None

    @pytest.mark.asyncio
    async def test_reference_cycle_is_a_definition_error(self, test_db_session, content):
        service = ContentTypeService(test_db_session, 0)
        node = await service.create_content_type(ContentTypeCreate(name="Node"))
        test_db_session.add(
            FieldDefinitionRecord(content_type_id=node.id, sort_order=0, name="Next", reference_content_type_id=node.id)
        )
        await test_db_session.flush()

        with pytest.raises(ContentDefinitionError):
            await service.load_content_type(node.id)

    @pytest.mark.asyncio
    async def test_unknown_data_type_is_rejected(self, test_db_session, content):
        with pytest.raises(ValueError):
            await ContentTypeService(test_db_session, 0).create_content_type(
                ContentTypeCreate(name="Broken", fields=[FieldDefinitionCreate(name="X", data_type_id="missing")])
            )

    @pytest.mark.asyncio
    async def test_list_includes_host_types(self, test_db_session, content):
        names = [record.name for record in await ContentTypeService(test_db_session, 0).list_content_types()]
        assert names == ["Address", "Article"]


class TestContentItemService:
    @pytest.mark.asyncio
    async def test_create_update_and_reload(self, test_db_session, content):
        service = ContentItemService(test_db_session, 0, ContentTypeService(test_db_session, 0))
        module = content.article_module

        item = await service.create_content_item(module.id, content.article_type_id)
        assert not item.is_new
        assert item.content["Views"].value == 0

        item.content["Views"].value = 5
        item.content["Location"].value["City"].value = "Springfield"
        await service.update_content_item(item)

        reloaded = await service.get_by_module(module.id)
        assert reloaded.id == item.id
        assert reloaded.content["Views"].value == 5
        assert reloaded.content["Location"].value["City"].value == "Springfield"

    @pytest.mark.asyncio
    async def test_items_are_portal_scoped(self, test_db_session, content):
        types = ContentTypeService(test_db_session, 0)
        await ContentItemService(test_db_session, 0, types).create_content_item(
            content.article_module.id, content.article_type_id
        )

        other = ContentItemService(test_db_session, 7, ContentTypeService(test_db_session, 7))
        assert await other.get_by_module(content.article_module.id) is None

    @pytest.mark.asyncio
    async def test_unsaved_item_cannot_be_updated(self, test_db_session, content):
        from portal.features.dynamic_content.content import ContentItem

        service = ContentItemService(test_db_session, 0, ContentTypeService(test_db_session, 0))
        with pytest.raises(ValueError):
            await service.update_content_item(ContentItem(content=ContentPart()))


class TestTemplateAndFileServices:
    @pytest.mark.asyncio
    async def test_include_host_controls_host_templates(self, test_db_session, content):
        files = FileService(test_db_session)
        host_file = await files.create_file("Host.html", folder="Templates")
        portal_file = await files.create_file("Portal.html", folder="Templates/", portal_id=0)

        templates = ContentTemplateService(test_db_session, 0)
        host = await templates.create_content_template(ContentTemplateCreate(name="Host", template_file_id=host_file.id))
        own = await templates.create_content_template(
            ContentTemplateCreate(name="Own", template_file_id=portal_file.id, portal_id=0)
        )

        assert [t.name for t in await templates.get_content_templates(0, True)] == ["Host", "Own"]
        assert [t.name for t in await templates.get_content_templates(0, False)] == ["Own"]
        assert await templates.get_content_template(host.id, 0, False) is None
        assert (await templates.get_content_template(host.id, 0, True)).id == host.id
        assert (await templates.get_content_template(own.id, 0)).id == own.id
        assert await templates.get_content_template(own.id, 7) is None

    @pytest.mark.asyncio
    async def test_file_relative_path(self, test_db_session, content):
        files = FileService(test_db_session)
        record = await files.create_file("Article.html", folder="Templates")

        loaded = await files.get_file(record.id)
        assert loaded.relative_path == "Templates/Article.html"
        assert loaded.is_host_file
        assert await files.get_file(None) is None


class TestModuleServices:
    @pytest.mark.asyncio
    async def test_get_module_by_definition(self, test_db_session, content):
        service = ModuleService(test_db_session, 0)
        assert await service.get_module_by_definition(0, "Dnn.DynamicContentManager") is None

        manager = await service.create_module(ModuleCreate(tab_id=3, definition_name="Dnn.DynamicContentManager"))

        assert (await service.get_module_by_definition(0, "Dnn.DynamicContentManager")).id == manager.id
        assert await service.get_module_by_definition(7, "Dnn.DynamicContentManager") is None

    @pytest.mark.asyncio
    async def test_update_settings_changes_only_given_fields(self, test_db_session, content):
        service = ModuleService(test_db_session, 0)
        module = content.article_module

        await service.update_settings(module, ModuleSettingsUpdate(view_template_id="tpl-1"), user=user("admin"))

        assert module.view_template_id == "tpl-1"
        assert module.content_type_id == content.article_type_id
        assert module.updated_by_email == "admin@portal.example"

    @pytest.mark.asyncio
    async def test_get_module_is_portal_scoped(self, test_db_session, content):
        assert await ModuleService(test_db_session, 7).get_module(content.article_module.id) is None
        assert await ModuleService(test_db_session, 0).get_module(content.article_module.id) is not None


class TestModuleAccess:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "role, level, expected",
        [
            ("registered", SecurityAccessLevel.VIEW, True),
            ("registered", SecurityAccessLevel.EDIT, False),
            ("editor", SecurityAccessLevel.EDIT, True),
            ("editor", SecurityAccessLevel.ADMIN, False),
            ("admin", SecurityAccessLevel.ADMIN, True),
            ("admin", SecurityAccessLevel.HOST, False),
        ],
    )
    async def test_role_levels(self, test_db_session, content, role, level, expected):
        service = ModulePermissionService(test_db_session)
        assert await service.has_module_access(level, "EDIT", content.article_module, user(role)) is expected

    @pytest.mark.asyncio
    async def test_host_passes_everywhere(self, test_db_session, content):
        service = ModulePermissionService(test_db_session)
        host = user("host", portal_id=None)
        assert await service.has_module_access(SecurityAccessLevel.HOST, "EDIT", content.article_module, host)

    @pytest.mark.asyncio
    async def test_other_portal_identity_is_denied(self, test_db_session, content):
        service = ModulePermissionService(test_db_session)
        outsider = user("admin", portal_id=7)
        assert not await service.has_module_access(SecurityAccessLevel.VIEW, "VIEW", content.article_module, outsider)

    @pytest.mark.asyncio
    async def test_anonymous_needs_a_grant(self, test_db_session, content):
        service = ModulePermissionService(test_db_session)
        module = content.article_module

        assert await service.has_module_access(SecurityAccessLevel.ANONYMOUS, "VIEW", module, None)
        assert not await service.has_module_access(SecurityAccessLevel.VIEW, "VIEW", module, None)

        await service.grant(module, "anonymous", "VIEW")

        assert await service.has_module_access(SecurityAccessLevel.VIEW, "VIEW", module, None)
        assert not await service.has_module_access(SecurityAccessLevel.EDIT, "EDIT", module, None)

    @pytest.mark.asyncio
    async def test_edit_grant_implies_view(self, test_db_session, content):
        service = ModulePermissionService(test_db_session)
        module = content.article_module
        await service.grant(module, "anonymous", "edit")

        assert await service.has_module_access(SecurityAccessLevel.VIEW, "VIEW", module, None)
        assert await service.has_module_access(SecurityAccessLevel.EDIT, "EDIT", module, None)

    @pytest.mark.asyncio
    async def test_grants_never_reach_admin(self, test_db_session, content):
        service = ModulePermissionService(test_db_session)
        module = content.article_module
        await service.grant(module, "registered", "EDIT")

        assert not await service.has_module_access(SecurityAccessLevel.ADMIN, "ADMIN", module, user("registered"))
