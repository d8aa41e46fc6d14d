import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status

from artfolio.auth_utils import require_superadmin
from artfolio.dependencies import get_email_client, get_gallery_repository, get_invitation_repository, get_user_repository
from artfolio.email_service import EmailClient, invitation_link, send_invitation_copy, send_invitation_email
from artfolio.models.invitation import ArtistInvitation, InvitationStatus
from artfolio.models.user import User, UserRole
from artfolio.repositories.gallery_repository import GalleryRepository
from artfolio.repositories.invitation_repository import InvitationRepository
from artfolio.repositories.user_repository import UserRepository
from artfolio.schemas.invitation import InvitationCreateRequest, InvitationListResponse, InvitationResponse, InvitationSendResponse
from artfolio.schemas.stats import AdminStatsResponse, ContentCounts, InvitationCounts, RecentInvitation, UserCounts

router = APIRouter(prefix="/api/admin", tags=["admin"])
logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 5


def inviter_email(invitation: ArtistInvitation) -> str:
    return invitation.invited_by.email if invitation.invited_by else "Unknown"


def invitation_response(invitation: ArtistInvitation, email_client: EmailClient) -> InvitationResponse:
    return InvitationResponse(
        id=invitation.id,
        email=invitation.email,
        status=str(invitation.status),
        custom_message=invitation.custom_message,
        invited_by=inviter_email(invitation),
        created_at=invitation.created_at,
        expires_at=invitation.expires_at_utc,
        is_expired=invitation.is_expired,
        days_remaining=invitation.days_remaining,
        invite_link=invitation_link(email_client.settings, invitation.token),
    )


def get_open_invitation(invitation_id: uuid.UUID, repo: InvitationRepository, allowed=(InvitationStatus.PENDING,)) -> ArtistInvitation:
    invitation = repo.get_invitation_by_id(invitation_id)
    if not invitation:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invitation not found")
    if invitation.status not in allowed:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invitation is {invitation.status.lower()}")
    return invitation


@router.get("/stats", response_model=AdminStatsResponse)
def get_admin_stats(
    users: UserRepository = Depends(get_user_repository),
    galleries: GalleryRepository = Depends(get_gallery_repository),
    invitations: InvitationRepository = Depends(get_invitation_repository),
    _: User = Depends(require_superadmin),
):
    roles = users.count_users_by_role()
    by_status = invitations.count_by_status()
    pending = by_status.get(InvitationStatus.PENDING, 0)
    expired = invitations.count_expired_pending()

    return AdminStatsResponse(
        users=UserCounts(
            total=sum(roles.values()),
            artists=roles.get(UserRole.ARTIST.value, 0),
            admins=roles.get(UserRole.ADMIN.value, 0),
            superadmins=roles.get(UserRole.SUPERADMIN.value, 0),
        ),
        invitations=InvitationCounts(
            total=sum(by_status.values()),
            pending=pending,
            expired=expired,
            active=pending - expired,
            accepted=by_status.get(InvitationStatus.ACCEPTED, 0),
            cancelled=by_status.get(InvitationStatus.CANCELLED, 0),
        ),
        content=ContentCounts(galleries=galleries.count_galleries(), items=galleries.count_items()),
        recent_activity=[
            RecentInvitation(
                id=invitation.id,
                email=invitation.email,
                invited_by=inviter_email(invitation),
                created_at=invitation.created_at,
                expires_at=invitation.expires_at_utc,
                is_expired=invitation.is_expired,
            )
            for invitation in invitations.get_pending_invitations(limit=RECENT_ACTIVITY_LIMIT)
        ],
    )


@router.get("/invitations", response_model=InvitationListResponse)
def list_invitations(
    repo: InvitationRepository = Depends(get_invitation_repository),
    email_client: EmailClient = Depends(get_email_client),
    _: User = Depends(require_superadmin),
):
    invitations = [invitation_response(invitation, email_client) for invitation in repo.get_pending_invitations()]
    return InvitationListResponse(invitations=invitations, total=len(invitations))


@router.post("/invitations", response_model=InvitationSendResponse, status_code=status.HTTP_201_CREATED)
async def create_invitation(
    request: InvitationCreateRequest,
    repo: InvitationRepository = Depends(get_invitation_repository),
    users: UserRepository = Depends(get_user_repository),
    email_client: EmailClient = Depends(get_email_client),
    current_user: User = Depends(require_superadmin),
):
    email = request.email.lower()
    if users.get_user_by_email(email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User with this email already exists")
    if repo.get_pending_invitation_for_email(email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Pending invitation already exists for this email")

    custom_message = (request.custom_message or "").strip() or None
    invitation = repo.create_invitation(email, current_user.id, custom_message)
    logger.info(f"Invitation {invitation.id} created for {email} by {current_user.id}")

    result = await send_invitation_email(email_client, email=invitation.email, token=invitation.token, custom_message=custom_message)
    if not result.success:
        logger.warning(f"Invitation {invitation.id} created but email was not sent: {result.detail}")

    copy = await send_invitation_copy(email_client, email=invitation.email, token=invitation.token, custom_message=custom_message)
    if copy is not None and not copy.success:
        logger.warning(f"Superadmin copy of invitation {invitation.id} was not sent: {copy.detail}")

    return InvitationSendResponse(
        invitation=invitation_response(invitation, email_client),
        email_sent=result.success,
        email_detail=result.detail,
        copy_email_sent=copy.success if copy is not None else None,
    )


@router.post("/invitations/{invitation_id}/resend", response_model=InvitationSendResponse)
async def resend_invitation(
    invitation_id: uuid.UUID,
    repo: InvitationRepository = Depends(get_invitation_repository),
    email_client: EmailClient = Depends(get_email_client),
    _: User = Depends(require_superadmin),
):
    invitation = get_open_invitation(invitation_id, repo, allowed=(InvitationStatus.PENDING, InvitationStatus.EXPIRED))
    invitation = repo.renew(invitation)

    result = await send_invitation_email(email_client, email=invitation.email, token=invitation.token, custom_message=invitation.custom_message, is_resend=True)
    if not result.success:
        logger.warning(f"Invitation {invitation.id} renewed but email was not sent: {result.detail}")

    return InvitationSendResponse(invitation=invitation_response(invitation, email_client), email_sent=result.success, email_detail=result.detail)


@router.delete("/invitations/{invitation_id}", status_code=status.HTTP_200_OK)
def cancel_invitation(
    invitation_id: uuid.UUID,
    repo: InvitationRepository = Depends(get_invitation_repository),
    _: User = Depends(require_superadmin),
):
    invitation = get_open_invitation(invitation_id, repo)
    repo.set_status(invitation, InvitationStatus.CANCELLED)
    logger.info(f"Invitation {invitation_id} cancelled")
    return {"success": True, "message": "Invitation cancelled successfully"}
