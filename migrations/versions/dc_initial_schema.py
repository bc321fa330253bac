"""Create module, file and dynamic content tables.

Revision ID: dc_initial_schema
Revises:
Create Date: 2026-10-16
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "dc_initial_schema"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _audit_columns():
    return [
        sa.Column("created_by_email", sa.String(length=255), nullable=True),
        sa.Column("created_by_name", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_by_email", sa.String(length=255), nullable=True),
        sa.Column("updated_by_name", sa.String(length=255), nullable=True),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "portal_files",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("portal_id", sa.Integer(), nullable=True),
        sa.Column("folder", sa.String(length=500), nullable=False, server_default=""),
        sa.Column("file_name", sa.String(length=255), nullable=False),
    )
    op.create_index("ix_portal_files_portal_id", "portal_files", ["portal_id"])
    op.create_index(
        "ix_portal_files_portal_path_unique", "portal_files", ["portal_id", "folder", "file_name"], unique=True
    )

    op.create_table(
        "portal_modules",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("portal_id", sa.Integer(), nullable=False),
        sa.Column("tab_id", sa.Integer(), nullable=False),
        sa.Column("definition_name", sa.String(length=255), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=True),
        sa.Column("content_type_id", sa.String(length=36), nullable=True),
        sa.Column("view_template_id", sa.String(length=36), nullable=True),
        sa.Column("edit_template_id", sa.String(length=36), nullable=True),
        *_audit_columns(),
    )
    op.create_index("ix_portal_modules_portal_id", "portal_modules", ["portal_id"])
    op.create_index("ix_portal_modules_portal_definition", "portal_modules", ["portal_id", "definition_name"])

    op.create_table(
        "portal_module_permissions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "module_id",
            sa.String(length=36),
            sa.ForeignKey("portal_modules.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("role_name", sa.String(length=50), nullable=False),
        sa.Column("permission_key", sa.String(length=20), nullable=False),
        sa.Column("allowed", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index("ix_portal_module_permissions_module_id", "portal_module_permissions", ["module_id"])
    op.create_index(
        "ix_portal_module_permissions_unique",
        "portal_module_permissions",
        ["module_id", "role_name", "permission_key"],
        unique=True,
    )

    op.create_table(
        "dc_data_types",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("portal_id", sa.Integer(), nullable=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("underlying_data_type", sa.String(length=20), nullable=False, server_default="string"),
    )
    op.create_index("ix_dc_data_types_portal_id", "dc_data_types", ["portal_id"])
    op.create_index("ix_dc_data_types_portal_name", "dc_data_types", ["portal_id", "name"])

    op.create_table(
        "dc_content_types",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("portal_id", sa.Integer(), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_audit_columns(),
    )
    op.create_index("ix_dc_content_types_portal_id", "dc_content_types", ["portal_id"])
    op.create_index("ix_dc_content_types_portal_name", "dc_content_types", ["portal_id", "name"])

    op.create_table(
        "dc_field_definitions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "content_type_id",
            sa.String(length=36),
            sa.ForeignKey("dc_content_types.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("label", sa.String(length=255), nullable=True),
        sa.Column("data_type_id", sa.String(length=36), sa.ForeignKey("dc_data_types.id"), nullable=True),
        sa.Column(
            "reference_content_type_id",
            sa.String(length=36),
            sa.ForeignKey("dc_content_types.id"),
            nullable=True,
        ),
    )
    op.create_index("ix_dc_field_definitions_content_type_id", "dc_field_definitions", ["content_type_id"])
    op.create_index(
        "ix_dc_field_definitions_type_name_unique",
        "dc_field_definitions",
        ["content_type_id", "name"],
        unique=True,
    )

    op.create_table(
        "dc_content_items",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("portal_id", sa.Integer(), nullable=False),
        sa.Column(
            "module_id",
            sa.String(length=36),
            sa.ForeignKey("portal_modules.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("content_type_id", sa.String(length=36), sa.ForeignKey("dc_content_types.id"), nullable=False),
        sa.Column("content", sa.JSON(), nullable=False),
        *_audit_columns(),
    )
    op.create_index("ix_dc_content_items_portal_id", "dc_content_items", ["portal_id"])
    op.create_index("ix_dc_content_items_module_id", "dc_content_items", ["module_id"])
    op.create_index("ix_dc_content_items_module", "dc_content_items", ["portal_id", "module_id"])

    op.create_table(
        "dc_content_templates",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("portal_id", sa.Integer(), nullable=True),
        sa.Column("content_type_id", sa.String(length=36), sa.ForeignKey("dc_content_types.id"), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("template_file_id", sa.String(length=36), sa.ForeignKey("portal_files.id"), nullable=True),
        sa.Column("is_edit_template", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_audit_columns(),
    )
    op.create_index("ix_dc_content_templates_portal_id", "dc_content_templates", ["portal_id"])
    op.create_index("ix_dc_content_templates_content_type_id", "dc_content_templates", ["content_type_id"])
    op.create_index("ix_dc_content_templates_portal_name", "dc_content_templates", ["portal_id", "name"])


def downgrade() -> None:
    op.drop_table("dc_content_templates")
    op.drop_table("dc_content_items")
    op.drop_table("dc_field_definitions")
    op.drop_table("dc_content_types")
    op.drop_table("dc_data_types")
    op.drop_table("portal_module_permissions")
    op.drop_table("portal_modules")
    op.drop_table("portal_files")
