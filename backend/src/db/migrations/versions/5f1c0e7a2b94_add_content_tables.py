"""
Add content, upload, core store and permission tables.

Revision ID: 5f1c0e7a2b94
Revises:
Create Date: 2026-10-17 10:02:41.118203
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "5f1c0e7a2b94"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "entries",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("document_id", sa.String(length=24), nullable=False),
        sa.Column("content_type", sa.String(length=100), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=True),
        sa.Column(
            "data",
            sa.JSON().with_variant(postgresql.JSONB(), "postgresql"),
            nullable=False,
        ),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("content_type", "slug", name="uq_entries_content_type_slug"),
    )
    op.create_index(op.f("ix_entries_document_id"), "entries", ["document_id"], unique=False)
    op.create_index("ix_entries_content_type", "entries", ["content_type"], unique=False)

    op.create_table(
        "entry_relations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("parent_id", sa.Integer(), nullable=False),
        sa.Column("attribute", sa.String(length=100), nullable=False),
        sa.Column("child_id", sa.Integer(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["parent_id"], ["entries.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["child_id"], ["entries.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("parent_id", "attribute", "child_id", name="uq_entry_relation"),
    )
    op.create_index(
        op.f("ix_entry_relations_child_id"), "entry_relations", ["child_id"], unique=False,
    )
    op.create_index(
        "ix_entry_relations_parent", "entry_relations", ["parent_id", "attribute"], unique=False,
    )

    op.create_table(
        "files",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("document_id", sa.String(length=24), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("alternative_text", sa.Text(), nullable=True),
        sa.Column("caption", sa.Text(), nullable=True),
        sa.Column("hash", sa.String(length=255), nullable=False),
        sa.Column("ext", sa.String(length=20), nullable=True),
        sa.Column("mime", sa.String(length=255), nullable=False),
        sa.Column(
            "size",
            sa.Numeric(precision=10, scale=2),
            nullable=False,
            comment="Size in kilobytes",
        ),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("provider", sa.String(length=50), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_files_document_id"), "files", ["document_id"], unique=False)
    op.create_index(op.f("ix_files_name"), "files", ["name"], unique=False)

    op.create_table(
        "core_store_settings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("key", sa.String(length=255), nullable=False),
        sa.Column("value", sa.Text(), nullable=True),
        sa.Column(
            "type",
            sa.String(length=50),
            nullable=True,
            comment="Python type name of the decoded value",
        ),
        sa.Column("environment", sa.String(length=50), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("key", "environment", name="uq_core_store_key_environment"),
    )

    op.create_table(
        "roles",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("type", sa.String(length=50), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("type"),
    )

    op.create_table(
        "permissions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("action", sa.String(length=255), nullable=False),
        sa.Column("role_id", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["role_id"], ["roles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("action", "role_id", name="uq_permissions_action_role"),
    )
    op.create_index(op.f("ix_permissions_role_id"), "permissions", ["role_id"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f("ix_permissions_role_id"), table_name="permissions")
    op.drop_table("permissions")
    op.drop_table("roles")
    op.drop_table("core_store_settings")
    op.drop_index(op.f("ix_files_name"), table_name="files")
    op.drop_index(op.f("ix_files_document_id"), table_name="files")
    op.drop_table("files")
    op.drop_index("ix_entry_relations_parent", table_name="entry_relations")
    op.drop_index(op.f("ix_entry_relations_child_id"), table_name="entry_relations")
    op.drop_table("entry_relations")
    op.drop_index("ix_entries_content_type", table_name="entries")
    op.drop_index(op.f("ix_entries_document_id"), table_name="entries")
    op.drop_table("entries")
