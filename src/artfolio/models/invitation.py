import enum
import math
import secrets
import uuid
from datetime import UTC, datetime, timedelta

from sqlalchemy import DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import mapped_column, relationship

from artfolio.db import Base

INVITATION_TTL = timedelta(days=7)


class InvitationStatus(enum.StrEnum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"


def generate_invitation_token() -> str:
    return secrets.token_urlsafe(32)


def default_invitation_expiry() -> datetime:
    return datetime.now(UTC) + INVITATION_TTL


class ArtistInvitation(Base):
    __tablename__ = "artist_invitations"

    id = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = mapped_column(String(255), nullable=False, index=True)
    token = mapped_column(String(128), unique=True, nullable=False, default=generate_invitation_token)
    status = mapped_column(
        Enum(InvitationStatus, name="invitation_status", native_enum=False, length=16),
        nullable=False,
        default=InvitationStatus.PENDING,
    )
    custom_message = mapped_column(Text, nullable=True)
    invited_by_id = mapped_column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    expires_at = mapped_column(DateTime(timezone=True), nullable=False, default=default_invitation_expiry)
    accepted_at = mapped_column(DateTime(timezone=True), nullable=True)
    created_at = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)

    invited_by = relationship("User")

    @property
    def expires_at_utc(self) -> datetime:
        # SQLite drops tzinfo on round-trip
        if self.expires_at.tzinfo is None:
            return self.expires_at.replace(tzinfo=UTC)
        return self.expires_at

    @property
    def is_expired(self) -> bool:
        return self.expires_at_utc < datetime.now(UTC)

    @property
    def days_remaining(self) -> int:
        seconds = (self.expires_at_utc - datetime.now(UTC)).total_seconds()
        return max(0, math.ceil(seconds / 86400))

    def __str__(self) -> str:
        return f"{self.email} [{self.status}]"
