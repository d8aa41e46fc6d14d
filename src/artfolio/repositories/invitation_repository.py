import uuid
from datetime import UTC, datetime

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from artfolio.models.invitation import ArtistInvitation, InvitationStatus, default_invitation_expiry, generate_invitation_token
from artfolio.repositories.base_repository import BaseRepository


class InvitationRepository(BaseRepository):
    def create_invitation(self, email: str, invited_by_id: uuid.UUID | None, custom_message: str | None = None) -> ArtistInvitation:
        invitation = ArtistInvitation(
            email=email,
            invited_by_id=invited_by_id,
            custom_message=custom_message,
            token=generate_invitation_token(),
            status=InvitationStatus.PENDING,
            expires_at=default_invitation_expiry(),
        )
        return self.save(invitation)

    def get_invitation_by_id(self, invitation_id: uuid.UUID) -> ArtistInvitation | None:
        stmt = select(ArtistInvitation).where(ArtistInvitation.id == invitation_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_invitation_by_token(self, token: str) -> ArtistInvitation | None:
        stmt = select(ArtistInvitation).where(ArtistInvitation.token == token).options(selectinload(ArtistInvitation.invited_by))
        return self.db.execute(stmt).scalar_one_or_none()

    def get_pending_invitation_for_email(self, email: str) -> ArtistInvitation | None:
        stmt = (
            select(ArtistInvitation)
            .where(func.lower(ArtistInvitation.email) == email.lower(), ArtistInvitation.status == InvitationStatus.PENDING)
            .order_by(ArtistInvitation.created_at.desc())
            .limit(1)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_pending_invitations(self, limit: int | None = None) -> list[ArtistInvitation]:
        stmt = (
            select(ArtistInvitation)
            .where(ArtistInvitation.status == InvitationStatus.PENDING)
            .options(selectinload(ArtistInvitation.invited_by))
            .order_by(ArtistInvitation.created_at.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.db.execute(stmt).scalars().all())

    def set_status(self, invitation: ArtistInvitation, status: InvitationStatus) -> ArtistInvitation:
        invitation.status = status
        if status == InvitationStatus.ACCEPTED:
            invitation.accepted_at = datetime.now(UTC)
        return self.save(invitation)

    def renew(self, invitation: ArtistInvitation) -> ArtistInvitation:
        """Push the expiry out by a full TTL and make the invitation pending again."""
        invitation.expires_at = default_invitation_expiry()
        invitation.status = InvitationStatus.PENDING
        return self.save(invitation)

    def count_by_status(self) -> dict[InvitationStatus, int]:
        stmt = select(ArtistInvitation.status, func.count()).group_by(ArtistInvitation.status)
        return {status: count for status, count in self.db.execute(stmt).all()}

    def count_expired_pending(self) -> int:
        stmt = select(func.count()).select_from(ArtistInvitation).where(ArtistInvitation.status == InvitationStatus.PENDING, ArtistInvitation.expires_at < datetime.now(UTC))
        return self.db.execute(stmt).scalar_one()
