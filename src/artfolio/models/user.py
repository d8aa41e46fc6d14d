import enum
import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import mapped_column, relationship

from artfolio.db import Base


class UserRole(enum.StrEnum):
    ARTIST = "artist"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


class User(Base):
    __tablename__ = "users"

    id = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, unique=True, nullable=False)
    email = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash = mapped_column(String(255), nullable=False)
    display_name = mapped_column(String(255), nullable=True)
    # Public artist URL segment, e.g. /{slug}/{gallery_slug}
    slug = mapped_column(String(64), unique=True, nullable=True, index=True)
    role = mapped_column(String(20), nullable=False, default=UserRole.ARTIST.value)
    profile_image_url = mapped_column(String, nullable=True)
    # SHA-256 of the emailed reset token, cleared once the password changes
    password_reset_token_hash = mapped_column(String(64), nullable=True)
    password_reset_expires_at = mapped_column(DateTime(timezone=True), nullable=True)
    created_at = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)

    galleries = relationship("Gallery", back_populates="owner", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def is_admin(self) -> bool:
        return self.role in (UserRole.ADMIN.value, UserRole.SUPERADMIN.value)

    @property
    def is_superadmin(self) -> bool:
        return self.role == UserRole.SUPERADMIN.value

    @property
    def password_reset_expired(self) -> bool:
        expires_at = self.password_reset_expires_at
        if expires_at is None:
            return True
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        return expires_at < datetime.now(UTC)

    def __str__(self) -> str:
        return self.email
