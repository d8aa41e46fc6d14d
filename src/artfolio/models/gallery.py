import uuid
from datetime import UTC, datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import mapped_column, relationship

from artfolio.db import Base


class Gallery(Base):
    __tablename__ = "galleries"
    __table_args__ = (UniqueConstraint("owner_id", "slug", name="galleries_owner_id_slug_key"),)

    id = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, unique=True, nullable=False)
    owner_id = mapped_column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = mapped_column(String, nullable=False)
    # Unique per owner, see galleries_owner_id_slug_key
    slug = mapped_column(String(128), nullable=False)
    is_public = mapped_column(Boolean, nullable=False, default=True)
    description = mapped_column(Text, nullable=True)
    featured_item_id = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("gallery_items.id", ondelete="SET NULL", use_alter=True, name="galleries_featured_item_id_fkey"),
        nullable=True,
    )
    view_count = mapped_column(Integer, nullable=False, default=0)
    created_at = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)
    updated_at = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC), nullable=False)

    owner = relationship("User", back_populates="galleries")
    items = relationship(
        "GalleryItem",
        back_populates="gallery",
        foreign_keys="GalleryItem.gallery_id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    featured_item = relationship("GalleryItem", foreign_keys=[featured_item_id], post_update=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.slug})"


class GalleryItem(Base):
    __tablename__ = "gallery_items"

    id = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    gallery_id = mapped_column(UUID(as_uuid=True), ForeignKey("galleries.id", ondelete="CASCADE"), nullable=False, index=True)
    title = mapped_column(String, nullable=False)
    image_url = mapped_column(String, nullable=False)
    # Storage key (users/{owner_id}/...), NULL for items that point at an external URL
    object_key = mapped_column(String, nullable=True)
    description = mapped_column(Text, nullable=True)
    alt_text = mapped_column(Text, nullable=True)
    # JSON-encoded list of strings
    tags = mapped_column(Text, nullable=True)
    position = mapped_column(Integer, nullable=True)
    artist_name = mapped_column(String, nullable=True)
    artist_portfolio_slug = mapped_column(String(64), nullable=True)
    artist_external_url = mapped_column(String, nullable=True)
    is_original_work = mapped_column(Boolean, nullable=False, default=True)
    created_at = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)

    gallery = relationship(Gallery, back_populates="items", foreign_keys=[gallery_id])

    def __str__(self) -> str:
        return self.title
