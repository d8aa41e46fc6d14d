import logging
import re

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError

from artfolio.api.auth import hash_password, role_for_email, token_pair
from artfolio.dependencies import get_invitation_repository, get_user_repository
from artfolio.models.invitation import ArtistInvitation, InvitationStatus
from artfolio.repositories.invitation_repository import InvitationRepository
from artfolio.repositories.user_repository import UserRepository
from artfolio.schemas.auth import LoginResponse
from artfolio.schemas.invitation import InvitationValidationResponse, SignupCompleteRequest, SlugCheckResponse
from artfolio.slugs import artist_slug_problem

router = APIRouter(prefix="/api/signup", tags=["signup"])
logger = logging.getLogger(__name__)

PASSWORD_RULES = (
    (re.compile(r".{8,}"), "Password must be at least 8 characters long"),
    (re.compile(r"[a-z]"), "Password must contain at least one lowercase letter"),
    (re.compile(r"[A-Z]"), "Password must contain at least one uppercase letter"),
    (re.compile(r"\d"), "Password must contain at least one number"),
)


def password_problem(password: str) -> str | None:
    for pattern, message in PASSWORD_RULES:
        if not pattern.search(password):
            return message
    return None


def usable_invitation(repo: InvitationRepository, token: str) -> ArtistInvitation:
    """Return the pending, unexpired invitation for ``token``.

    A pending invitation found past its expiry is marked EXPIRED on the way out.
    """
    invitation = repo.get_invitation_by_token(token)
    if not invitation:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invitation not found")
    if invitation.status != InvitationStatus.PENDING:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invitation already used or invalid")
    if invitation.is_expired:
        repo.set_status(invitation, InvitationStatus.EXPIRED)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invitation has expired")
    return invitation


@router.get("/validate-invitation", response_model=InvitationValidationResponse)
def validate_invitation(
    token: str = Query(..., min_length=1),
    repo: InvitationRepository = Depends(get_invitation_repository),
):
    invitation = usable_invitation(repo, token)
    inviter = invitation.invited_by
    return InvitationValidationResponse(
        id=invitation.id,
        email=invitation.email,
        custom_message=invitation.custom_message,
        inviter_name=(inviter.display_name or inviter.email) if inviter else "The team",
        expires_at=invitation.expires_at_utc,
        status=str(invitation.status),
    )


@router.get("/check-slug", response_model=SlugCheckResponse)
def check_slug(
    slug: str = Query(""),
    users: UserRepository = Depends(get_user_repository),
):
    slug = slug.strip().lower()
    problem = artist_slug_problem(slug)
    if problem:
        return SlugCheckResponse(slug=slug, available=False, reason=problem)
    if users.get_user_by_slug(slug):
        return SlugCheckResponse(slug=slug, available=False, reason="Artist URL is already taken")
    return SlugCheckResponse(slug=slug, available=True)


@router.post("/complete", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
def complete_signup(
    request: SignupCompleteRequest,
    invitations: InvitationRepository = Depends(get_invitation_repository),
    users: UserRepository = Depends(get_user_repository),
):
    problem = password_problem(request.password)
    if problem:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=problem)

    slug = request.slug.strip().lower()
    problem = artist_slug_problem(slug)
    if problem:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=problem)

    invitation = usable_invitation(invitations, request.token)
    if invitation.email.lower() != request.email.lower():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email does not match the invitation")
    if users.get_user_by_slug(slug):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Artist URL is no longer available")
    if users.get_user_by_email(request.email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="An account with this email already exists")

    try:
        user = users.create_user(
            request.email,
            hash_password(request.password),
            display_name=request.display_name.strip(),
            slug=slug,
            role=role_for_email(request.email),
        )
    except IntegrityError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email or artist URL already in use") from err

    invitations.set_status(invitation, InvitationStatus.ACCEPTED)
    logger.info(f"Invitation {invitation.id} accepted, artist {user.id} created with slug {slug}")
    return LoginResponse(id=str(user.id), email=user.email, tokens=token_pair(str(user.id)))
