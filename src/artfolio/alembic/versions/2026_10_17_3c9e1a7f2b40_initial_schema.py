"""initial_schema

Revision ID: 3c9e1a7f2b40
Revises:
Create Date: 2026-10-17 10:12:03.418227

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3c9e1a7f2b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("display_name", sa.String(length=255), nullable=True),
        sa.Column("slug", sa.String(length=64), nullable=True),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="artist"),
        sa.Column("profile_image_url", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index(op.f("ix_users_slug"), "users", ["slug"], unique=True)

    op.create_table(
        "galleries",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("owner_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("slug", sa.String(length=128), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("featured_item_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("view_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("id"),
        sa.UniqueConstraint("owner_id", "slug", name="galleries_owner_id_slug_key"),
    )
    op.create_index(op.f("ix_galleries_owner_id"), "galleries", ["owner_id"], unique=False)

    op.create_table(
        "gallery_items",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("gallery_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("image_url", sa.String(), nullable=False),
        sa.Column("object_key", sa.String(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("alt_text", sa.Text(), nullable=True),
        sa.Column("tags", sa.Text(), nullable=True),
        sa.Column("position", sa.Integer(), nullable=True),
        sa.Column("artist_name", sa.String(), nullable=True),
        sa.Column("artist_portfolio_slug", sa.String(length=64), nullable=True),
        sa.Column("artist_external_url", sa.String(), nullable=True),
        sa.Column("is_original_work", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["gallery_id"], ["galleries.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_gallery_items_gallery_id"), "gallery_items", ["gallery_id"], unique=False)

    # galleries <-> gallery_items reference each other, so this FK comes last
    op.create_foreign_key(
        "galleries_featured_item_id_fkey",
        "galleries",
        "gallery_items",
        ["featured_item_id"],
        ["id"],
        ondelete="SET NULL",
    )

    op.create_table(
        "artist_invitations",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("token", sa.String(length=128), nullable=False),
        sa.Column("status", sa.Enum("PENDING", "ACCEPTED", "EXPIRED", "CANCELLED", name="invitation_status", native_enum=False, length=16), nullable=False),
        sa.Column("custom_message", sa.Text(), nullable=True),
        sa.Column("invited_by_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("accepted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["invited_by_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("token"),
    )
    op.create_index(op.f("ix_artist_invitations_email"), "artist_invitations", ["email"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f("ix_artist_invitations_email"), table_name="artist_invitations")
    op.drop_table("artist_invitations")
    op.drop_constraint("galleries_featured_item_id_fkey", "galleries", type_="foreignkey")
    op.drop_index(op.f("ix_gallery_items_gallery_id"), table_name="gallery_items")
    op.drop_table("gallery_items")
    op.drop_index(op.f("ix_galleries_owner_id"), table_name="galleries")
    op.drop_table("galleries")
    op.drop_index(op.f("ix_users_slug"), table_name="users")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")
